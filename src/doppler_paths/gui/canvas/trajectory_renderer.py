"""Pure computational logic for the curves drawn on the editor canvases."""

from __future__ import annotations

from typing import List, Tuple

import numpy as np

from ...config import AnyPath, BezierPath, ParabolaPath, StraightPath
from ...core.projector import ProjectedTrajectory, fit_trajectory
from ...core.trajectory import StraightLineGeometry, sample_parabola_profile, sample_path
from ...core.transform import CanvasTransform, Point2D


Segment = Tuple[Point2D, Point2D]


class TrajectoryRenderer:
    """Renders path curves for visualization.

    This class provides pure computational logic for generating the drawn
    curves without any UI dependencies, making it fully testable.
    """

    @staticmethod
    def editor_curve(params: AnyPath, transform: CanvasTransform) -> np.ndarray:
        """Canvas points of the path as drawn on the drag canvas.

        Args:
            params: Path parameters
            transform: Drag canvas transform (editor zoom)

        Returns:
            ``(N, 2)`` array of canvas pixel positions
        """
        if isinstance(params, StraightPath):
            geometry = StraightLineGeometry.from_params(params)
            world = np.array([geometry.start, geometry.end], dtype=np.float64)
        elif isinstance(params, ParabolaPath):
            world = sample_parabola_profile(params)
        else:
            world = sample_path(params)
        return transform.points_to_canvas(world)

    @staticmethod
    def guide_lines(params: AnyPath, transform: CanvasTransform) -> List[Segment]:
        """Dashed helper segments: observer to closest point, or the Bézier control polygon."""
        if isinstance(params, StraightPath):
            geometry = StraightLineGeometry.from_params(params)
            return [(transform.to_canvas(0.0, 0.0), transform.to_canvas(*geometry.closest))]
        if isinstance(params, BezierPath):
            points = [transform.to_canvas(*p) for p in params.control_points]
            return list(zip(points[:-1], points[1:]))
        return []

    @staticmethod
    def preview(params: AnyPath, width_px: float, height_px: float) -> ProjectedTrajectory:
        """Autoscaled projection used by the preview and playback view."""
        return fit_trajectory(sample_path(params), width_px, height_px)
