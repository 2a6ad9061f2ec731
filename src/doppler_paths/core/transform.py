"""World/canvas coordinate helpers for the path editor.

World space is metric and Y-up with the observer at the origin. Canvas space
is in pixels and Y-down, so every conversion flips the vertical axis.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Tuple

import numpy as np


# Zoom range offered by the editor slider (pixels per world meter).
ZOOM_RANGE: Tuple[float, float] = (0.1, 15.0)
DEFAULT_ZOOM = 5.0

# Largest world coordinate (meters) the geometry engine hands out.
WORLD_LIMIT_M = 1e9


class Point2D(NamedTuple):
    """A 2D point (or vector) in world meters or canvas pixels."""

    x: float
    y: float


@dataclass(frozen=True)
class CanvasTransform:
    """
    Stateless mapping between world coordinates and canvas pixels.

    Parameters
    ----------
    scale:
        Pixels per world meter. Must be positive.
    center:
        Canvas pixel position of the world origin.
    """

    scale: float
    center: Point2D

    def __post_init__(self) -> None:
        if not self.scale > 0:
            raise ValueError(f"Canvas scale must be positive, got {self.scale!r}")

    def to_canvas(self, x: float, y: float) -> Point2D:
        cx, cy = self.center
        return Point2D(cx + x * self.scale, cy - y * self.scale)

    def to_world(self, px: float, py: float) -> Point2D:
        cx, cy = self.center
        return Point2D((px - cx) / self.scale, (cy - py) / self.scale)

    def delta_to_world(self, dx_px: float, dy_px: float) -> Point2D:
        """Convert a screen-space drag delta into a world-space delta."""
        return Point2D(dx_px / self.scale, -dy_px / self.scale)

    def points_to_canvas(self, points: np.ndarray) -> np.ndarray:
        """Vectorised ``to_canvas`` for an ``(N, 2)`` array of world points."""
        world = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        canvas = np.empty_like(world)
        canvas[:, 0] = self.center.x + world[:, 0] * self.scale
        canvas[:, 1] = self.center.y - world[:, 1] * self.scale
        return canvas


def finite_points(points: np.ndarray, limit: float = WORLD_LIMIT_M) -> np.ndarray:
    """Replace NaN with 0 and clip every coordinate into ``[-limit, limit]``."""
    world = np.asarray(points, dtype=np.float64)
    return np.clip(np.nan_to_num(world, nan=0.0, posinf=limit, neginf=-limit), -limit, limit)


def clamp_zoom(value: float) -> float:
    low, high = ZOOM_RANGE
    return max(low, min(high, float(value)))


@dataclass
class CanvasState:
    """Size and zoom of an editing canvas.

    Attributes:
        width_px: Canvas width in pixels
        height_px: Canvas height in pixels
        scale: Zoom in pixels per meter, kept inside ``ZOOM_RANGE``

    The zoom is only changed through ``set_zoom``; the autoscaled preview
    computes its own scale and never writes it back here.
    """

    width_px: float = 640.0
    height_px: float = 400.0
    scale: float = DEFAULT_ZOOM

    def __post_init__(self) -> None:
        self.scale = clamp_zoom(self.scale)

    @property
    def center(self) -> Point2D:
        return Point2D(self.width_px / 2.0, self.height_px / 2.0)

    def set_zoom(self, value: float) -> float:
        self.scale = clamp_zoom(value)
        return self.scale

    def resize(self, width_px: float, height_px: float) -> None:
        self.width_px = max(1.0, float(width_px))
        self.height_px = max(1.0, float(height_px))

    def transform(self) -> CanvasTransform:
        """Snapshot the current zoom and center into a transform for one frame."""
        return CanvasTransform(scale=self.scale, center=self.center)
