"""Playback position to trajectory sample mapping."""

from __future__ import annotations

import math

from ..config import coerce_float
from .projector import ProjectedTrajectory


def playback_progress(position_s: float, duration_s: float) -> float:
    """Normalised transport position in ``[0, 1]``; zero for an unknown duration."""
    duration = coerce_float(duration_s, 0.0)
    if duration <= 0:
        return 0.0
    position = coerce_float(position_s, 0.0)
    return max(0.0, min(1.0, position / duration))


def progress_to_index(progress: float, sample_count: int) -> int:
    """
    Map playback progress to a sample index.

    Returns ``floor(progress * (sample_count - 1))`` clamped to the valid
    index range; an empty trajectory maps to index 0.
    """
    if sample_count <= 0:
        return 0
    value = coerce_float(progress, 0.0)
    index = math.floor(value * (sample_count - 1))
    return max(0, min(sample_count - 1, index))


def display_index(projection: ProjectedTrajectory, progress: float, animating: bool) -> int:
    """Sample to highlight: the playback position while animating, else closest approach."""
    if animating:
        return progress_to_index(progress, len(projection))
    return projection.closest_index
