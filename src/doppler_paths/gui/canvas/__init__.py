"""Canvas components for path editing and preview.

``PreviewController`` needs Qt and is imported from its own module.
"""

from .handle_manager import HANDLE_COLORS, HandleManager
from .trajectory_renderer import TrajectoryRenderer

__all__ = ["HANDLE_COLORS", "HandleManager", "TrajectoryRenderer"]
