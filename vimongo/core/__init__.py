"""Core, UI-agnostic orchestration for vimongo."""

from .component import Component, ComponentProtocol
from .dispatch import KeyResolver
from .events import EventBus, EventMessage, EventQueue, EventType
from .focus_stack import FocusStack
from .keymap import GLOBAL, Key, KeyBindings, OrderedKeys, normalize_key
from .keymap_manager import KeymapManager

__all__ = [
    "GLOBAL",
    "Component",
    "ComponentProtocol",
    "EventBus",
    "EventMessage",
    "EventQueue",
    "EventType",
    "FocusStack",
    "Key",
    "KeyBindings",
    "KeyResolver",
    "KeymapManager",
    "OrderedKeys",
    "normalize_key",
]
