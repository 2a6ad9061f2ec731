"""Data models for the GUI application."""

from .state import EditorState

__all__ = ["EditorState"]
