"""Autoscaling projection of sampled trajectories onto a preview canvas."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .transform import Point2D, finite_points

logger = logging.getLogger(__name__)


CANVAS_PADDING = 40.0
MAX_AUTOSCALE = 4.0
# Smallest extent (world meters) used when the bounding box collapses.
MIN_EXTENT = 1.0


@dataclass(frozen=True)
class ProjectedTrajectory:
    """Render-ready trajectory.

    Attributes:
        canvas_points: ``(N, 2)`` canvas pixel positions, Y-down
        observer: Canvas position of the world origin
        scale: Effective pixels per meter
        bounds: World bounding box ``(min_x, min_y, max_x, max_y)``, origin included
        closest_index: Sample index closest to the observer
    """

    canvas_points: np.ndarray
    observer: Point2D
    scale: float
    bounds: Tuple[float, float, float, float]
    closest_index: int

    def __len__(self) -> int:
        return int(self.canvas_points.shape[0])

    def point(self, index: int) -> Point2D:
        x, y = self.canvas_points[index]
        return Point2D(float(x), float(y))

    def distance_m(self, index: int) -> float:
        """World distance from the observer to sample ``index``."""
        if len(self) == 0:
            return 0.0
        x, y = self.canvas_points[index]
        return float(np.hypot(x - self.observer.x, y - self.observer.y)) / self.scale


def closest_approach_index(canvas_points: np.ndarray, observer: Point2D) -> int:
    """Index of the sample nearest ``observer``; the first one wins ties."""
    points = np.asarray(canvas_points, dtype=np.float64).reshape(-1, 2)
    if points.shape[0] == 0:
        return 0
    distances = np.hypot(points[:, 0] - observer.x, points[:, 1] - observer.y)
    return int(np.argmin(distances))


def fit_trajectory(
    points: np.ndarray,
    width_px: float,
    height_px: float,
    padding: float = CANVAS_PADDING,
    max_scale: float = MAX_AUTOSCALE,
) -> ProjectedTrajectory:
    """
    Fit world points and the observer into a canvas.

    Parameters
    ----------
    points:
        ``(N, 2)`` world-space samples.
    width_px, height_px:
        Canvas size in pixels.
    padding:
        Margin kept free on every side of the canvas.
    max_scale:
        Upper bound on the zoom, so short paths are not blown up.

    Returns
    -------
    ProjectedTrajectory
        Canvas points, observer position, effective scale and the
        closest-approach index.
    """
    world = finite_points(np.asarray(points, dtype=np.float64).reshape(-1, 2))

    # The observer at the origin always belongs to the box.
    min_x = min(0.0, float(world[:, 0].min())) if world.size else 0.0
    max_x = max(0.0, float(world[:, 0].max())) if world.size else 0.0
    min_y = min(0.0, float(world[:, 1].min())) if world.size else 0.0
    max_y = max(0.0, float(world[:, 1].max())) if world.size else 0.0

    data_width = (max_x - min_x) or MIN_EXTENT
    data_height = (max_y - min_y) or MIN_EXTENT

    usable_width = max(width_px - 2 * padding, 1.0)
    usable_height = max(height_px - 2 * padding, 1.0)
    scale = min(usable_width / data_width, usable_height / data_height, max_scale)

    center_x, center_y = width_px / 2.0, height_px / 2.0
    data_center_x = (min_x + max_x) / 2.0
    data_center_y = (min_y + max_y) / 2.0

    canvas = np.empty_like(world)
    canvas[:, 0] = center_x + (world[:, 0] - data_center_x) * scale
    canvas[:, 1] = center_y - (world[:, 1] - data_center_y) * scale
    observer = Point2D(center_x - data_center_x * scale, center_y + data_center_y * scale)

    closest = closest_approach_index(canvas, observer)
    logger.debug("Autoscale %.4f px/m, closest approach at sample %d", scale, closest)
    return ProjectedTrajectory(
        canvas_points=canvas,
        observer=observer,
        scale=float(scale),
        bounds=(min_x, min_y, max_x, max_y),
        closest_index=closest,
    )
