"""Path editor GUI (PySide6 + pyqtgraph)."""

from pathlib import Path
from typing import Optional


def run(initial_config: Optional[Path] = None) -> None:
    """Launch the editor; Qt is imported only when the window is opened."""
    from .app import run as _run

    _run(initial_config)


__all__ = ["run"]
