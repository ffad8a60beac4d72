"""Modal screens for vimongo."""

from .confirm import ConfirmScreen
from .connector import ConnectorScreen
from .document_view import DocumentViewScreen
from .help import HelpScreen
from .history import HistoryScreen
from .input_prompt import InputPromptScreen
from .message import ErrorScreen, MessageScreen
from .peeker import PeekerScreen

__all__ = [
    "ConfirmScreen",
    "ConnectorScreen",
    "DocumentViewScreen",
    "ErrorScreen",
    "HelpScreen",
    "HistoryScreen",
    "InputPromptScreen",
    "MessageScreen",
    "PeekerScreen",
]
