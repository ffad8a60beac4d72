"""Widgets of the main view."""

from .content import ContentPanel
from .database_tree import DatabaseTree, FilterInput, Sidebar
from .header import Header
from .input_bar import InputBar, QueryBar, SortBar

__all__ = [
    "ContentPanel",
    "DatabaseTree",
    "FilterInput",
    "Header",
    "InputBar",
    "QueryBar",
    "SortBar",
    "Sidebar",
]
