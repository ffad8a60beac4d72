from .clipboard import ClipboardMixin
from .component import ComponentMixin

__all__ = ["ClipboardMixin", "ComponentMixin"]
