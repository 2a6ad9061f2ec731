"""Trajectory sampling utilities.

This module converts path parameters into an ordered array of world-space
points for preview and playback. Every call rebuilds the full sample set.

Straight and parabola paths are sampled over the time window
``[-duration/2, duration/2]`` so the window midpoint is the moment the
source crosses the Y axis. The Bézier family is sampled over ``t ∈ [0, 1]``
and ignores speed and duration.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from functools import singledispatch
from typing import Dict, Tuple

import numpy as np

from ..config import BezierPath, ParabolaPath, StraightPath
from .transform import Point2D, finite_points

logger = logging.getLogger(__name__)


SAMPLE_COUNT = 100

# Fixed profile drawn by the parabola drag canvas.
PARABOLA_PROFILE_SAMPLES = 160
PARABOLA_PROFILE_SPAN = 40.0


# ---------------------------------------------------------------------------
# Path Metadata
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PathMetadata:
    """UI hints for a path family.

    Attributes
    ----------
    label : str
        Human-readable name of the family.
    description : str
        One-line description shown next to the family selector.
    handles : Tuple[str, ...]
        Draggable handle ids in drawing order.
    handle_labels : Dict[str, str]
        Short labels per handle.
    """
    label: str
    description: str = ""
    handles: Tuple[str, ...] = ()
    handle_labels: Dict[str, str] = field(default_factory=dict)


_path_metadata: Dict[str, PathMetadata] = {
    "straight": PathMetadata(
        label="Straight line",
        description="Constant-velocity pass-by at closest distance h",
        handles=("distance", "angle"),
        handle_labels={"distance": "Distance", "angle": "Angle"},
    ),
    "parabola": PathMetadata(
        label="Parabola",
        description="Curved pass-by y = a·x² + h",
        handles=("vertex",),
        handle_labels={"vertex": "Vertex"},
    ),
    "bezier": PathMetadata(
        label="Bézier curve",
        description="Free-form cubic Bézier path",
        handles=("p0", "p1", "p2", "p3"),
        handle_labels={"p0": "P1", "p1": "P2", "p2": "P3", "p3": "P4"},
    ),
}


def get_path_metadata(family: str) -> PathMetadata:
    """
    Get UI metadata for a path family.

    Parameters
    ----------
    family : str
        The path family name.

    Returns
    -------
    PathMetadata
        Metadata for the family. Unknown families get a bare label.
    """
    if family in _path_metadata:
        return _path_metadata[family]
    return PathMetadata(label=family)


# ---------------------------------------------------------------------------
# Straight-line geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StraightLineGeometry:
    """Derived points of a straight path, shared by the drag canvas and mappers."""

    closest: Point2D
    direction: Point2D
    normal: Point2D
    start: Point2D
    end: Point2D

    @classmethod
    def from_params(cls, params: StraightPath) -> "StraightLineGeometry":
        theta = params.angle_rad
        sin_t, cos_t = math.sin(theta), math.cos(theta)
        closest = Point2D(params.h * sin_t, params.h * cos_t)
        extent = params.speed * params.duration / 2.0
        start = Point2D(closest.x - cos_t * extent, closest.y - sin_t * extent)
        end = Point2D(closest.x + cos_t * extent, closest.y + sin_t * extent)
        return cls(
            closest=closest,
            direction=Point2D(cos_t, sin_t),
            normal=Point2D(sin_t, cos_t),
            start=start,
            end=end,
        )


# ---------------------------------------------------------------------------
# Samplers
# ---------------------------------------------------------------------------


def _time_window(duration: float, samples: int) -> np.ndarray:
    if samples == 1:
        return np.zeros(1, dtype=np.float64)
    half = duration / 2.0
    return np.linspace(-half, half, num=samples, endpoint=True)


def _unit_window(samples: int) -> np.ndarray:
    if samples == 1:
        return np.zeros(1, dtype=np.float64)
    return np.linspace(0.0, 1.0, num=samples, endpoint=True)


@singledispatch
def _sample(params, samples: int) -> np.ndarray:
    raise TypeError(f"Unsupported path parameters: {type(params).__name__}")


@_sample.register(StraightPath)
def _sample_straight(params: StraightPath, samples: int) -> np.ndarray:
    theta = params.angle_rad
    t_values = _time_window(params.duration, samples)
    travelled = params.speed * t_values
    positions = np.empty((samples, 2), dtype=np.float64)
    positions[:, 0] = travelled * math.cos(theta)
    positions[:, 1] = params.h + travelled * math.sin(theta)
    return positions


@_sample.register(ParabolaPath)
def _sample_parabola(params: ParabolaPath, samples: int) -> np.ndarray:
    t_values = _time_window(params.duration, samples)
    x = params.speed * t_values
    positions = np.empty((samples, 2), dtype=np.float64)
    positions[:, 0] = x
    positions[:, 1] = params.a * x ** 2 + params.h
    return positions


@_sample.register(BezierPath)
def _sample_bezier(params: BezierPath, samples: int) -> np.ndarray:
    p0, p1, p2, p3 = (np.array(point, dtype=np.float64) for point in params.control_points)
    t_values = _unit_window(samples)[:, None]
    one_minus_t = 1 - t_values
    positions = (
        one_minus_t ** 3 * p0
        + 3 * one_minus_t ** 2 * t_values * p1
        + 3 * one_minus_t * t_values ** 2 * p2
        + t_values ** 3 * p3
    )
    return positions


def sample_path(params, samples: int = SAMPLE_COUNT) -> np.ndarray:
    """
    Sample a path into world-space points.

    Parameters
    ----------
    params : StraightPath | ParabolaPath | BezierPath
        Path parameters.
    samples : int
        Number of points. Values below one are raised to one, which yields
        the window midpoint (or ``P0`` for Bézier paths). Coordinates that
        overflow are clipped to ``WORLD_LIMIT_M``.

    Returns
    -------
    np.ndarray
        Array of shape ``(samples, 2)`` with ``(x, y)`` in meters.
    """
    count = max(1, int(samples))
    if count != samples:
        logger.debug("Sample count %s raised to %d", samples, count)
    with np.errstate(over="ignore", invalid="ignore"):
        positions = _sample(params, count)
    return finite_points(positions)


def sample_parabola_profile(
    params: ParabolaPath,
    span: float = PARABOLA_PROFILE_SPAN,
    samples: int = PARABOLA_PROFILE_SAMPLES,
) -> np.ndarray:
    """Sample ``y = a·x² + h`` over ``x ∈ [-span, span]`` for the drag canvas."""
    x = np.linspace(-span, span, num=max(2, int(samples)), endpoint=True)
    return np.column_stack((x, params.a * x ** 2 + params.h))
