"""Editing documents in the user's external editor."""

from .editor import ExternalEditor
from .pipeline import (
    ChangeDetection,
    DocumentEditPipeline,
    EditAction,
    EditOutcome,
    EditSession,
    EditState,
)

__all__ = [
    "ChangeDetection",
    "DocumentEditPipeline",
    "EditAction",
    "EditOutcome",
    "EditSession",
    "EditState",
    "ExternalEditor",
]
