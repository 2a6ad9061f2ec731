"""Drag-to-parameter mapping for the path editor handles.

A drag is handled in three steps: ``DragSession.grant`` snapshots the path
parameters when the pointer goes down on a handle, every move converts the
cumulative screen delta since the grant into a world delta and maps it
against that snapshot, and ``release`` drops the snapshot. A move never
builds on the result of the previous move.

Mappers return a patch holding only the fields their handle owns; the caller
merges it with ``config.apply_patch``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from functools import singledispatch
from typing import Any, Dict, Optional, Tuple

from ..config import (
    STRAIGHT_ANGLE_RANGE,
    STRAIGHT_H_RANGE,
    AnyPath,
    BezierPath,
    ParabolaPath,
    StraightPath,
    clamp,
)
from .trajectory import StraightLineGeometry
from .transform import CanvasTransform, Point2D

logger = logging.getLogger(__name__)


# Displayed values are stored with two decimals.
PATCH_DECIMALS = 2


class HandleId(str, Enum):
    DISTANCE = "distance"
    ANGLE = "angle"
    VERTEX = "vertex"
    P0 = "p0"
    P1 = "p1"
    P2 = "p2"
    P3 = "p3"


FAMILY_HANDLES: Dict[str, Tuple[HandleId, ...]] = {
    "straight": (HandleId.DISTANCE, HandleId.ANGLE),
    "parabola": (HandleId.VERTEX,),
    "bezier": (HandleId.P0, HandleId.P1, HandleId.P2, HandleId.P3),
}


def handles_for(params: AnyPath) -> Tuple[HandleId, ...]:
    return FAMILY_HANDLES[params.family]


def _round(value: float) -> float:
    return round(value, PATCH_DECIMALS)


def normalize_degrees(angle: float) -> float:
    """Wrap an angle in degrees into ``(-180, 180]``."""
    wrapped = math.fmod(angle, 360.0)
    if wrapped > 180.0:
        wrapped -= 360.0
    elif wrapped <= -180.0:
        wrapped += 360.0
    return wrapped


# ---------------------------------------------------------------------------
# Mappers
# ---------------------------------------------------------------------------

@singledispatch
def map_drag(start: Any, delta: Point2D, handle: HandleId) -> Dict[str, Any]:
    """
    Map a cumulative world-space drag delta to a parameter patch.

    Parameters
    ----------
    start:
        Path parameters captured when the drag began.
    delta:
        World-space displacement of the pointer since the drag began.
    handle:
        The handle being dragged; it must belong to ``start``'s family.

    Returns
    -------
    dict
        Patch with only the fields owned by ``handle``.
    """
    raise TypeError(f"Unsupported path parameters: {type(start).__name__}")


def _check_handle(start: AnyPath, handle: HandleId) -> HandleId:
    handle = HandleId(handle)
    if handle not in FAMILY_HANDLES[start.family]:
        raise ValueError(f"Handle '{handle.value}' does not belong to a {start.family} path")
    return handle


@map_drag.register(StraightPath)
def _map_straight(start: StraightPath, delta: Point2D, handle: HandleId) -> Dict[str, Any]:
    handle = _check_handle(start, handle)
    geometry = StraightLineGeometry.from_params(start)

    if handle is HandleId.DISTANCE:
        # Only the component along the outward normal moves the path.
        radial = delta.x * geometry.normal.x + delta.y * geometry.normal.y
        new_h = clamp(start.h + radial, *STRAIGHT_H_RANGE)
        return {"h": _round(new_h)}

    candidate = Point2D(geometry.end.x + delta.x, geometry.end.y + delta.y)
    vx = candidate.x - geometry.closest.x
    vy = candidate.y - geometry.closest.y
    if math.hypot(vx, vy) == 0.0:
        # Endpoint sits on the pivot; the direction is undefined.
        return {"angle_deg": _round(start.angle_deg)}
    angle = normalize_degrees(math.degrees(math.atan2(vy, vx)))
    new_angle = clamp(angle, *STRAIGHT_ANGLE_RANGE)
    return {"angle_deg": _round(new_angle)}


@map_drag.register(ParabolaPath)
def _map_parabola(start: ParabolaPath, delta: Point2D, handle: HandleId) -> Dict[str, Any]:
    _check_handle(start, handle)
    # The vertex is pinned to the Y axis, so horizontal motion is ignored.
    new_h = max(0.0, start.h + delta.y)
    return {"h": _round(new_h)}


@map_drag.register(BezierPath)
def _map_bezier(start: BezierPath, delta: Point2D, handle: HandleId) -> Dict[str, Any]:
    handle = _check_handle(start, handle)
    point: Point2D = getattr(start, handle.value)
    moved = Point2D(_round(point.x + delta.x), _round(point.y + delta.y))
    return {handle.value: moved}


# ---------------------------------------------------------------------------
# Handle positions
# ---------------------------------------------------------------------------

@singledispatch
def handle_positions(params: Any) -> Dict[HandleId, Point2D]:
    """World positions of every handle of ``params``."""
    raise TypeError(f"Unsupported path parameters: {type(params).__name__}")


@handle_positions.register(StraightPath)
def _straight_handles(params: StraightPath) -> Dict[HandleId, Point2D]:
    geometry = StraightLineGeometry.from_params(params)
    return {HandleId.DISTANCE: geometry.closest, HandleId.ANGLE: geometry.end}


@handle_positions.register(ParabolaPath)
def _parabola_handles(params: ParabolaPath) -> Dict[HandleId, Point2D]:
    return {HandleId.VERTEX: Point2D(0.0, params.h)}


@handle_positions.register(BezierPath)
def _bezier_handles(params: BezierPath) -> Dict[HandleId, Point2D]:
    return {
        HandleId.P0: params.p0,
        HandleId.P1: params.p1,
        HandleId.P2: params.p2,
        HandleId.P3: params.p3,
    }


# ---------------------------------------------------------------------------
# Drag session
# ---------------------------------------------------------------------------

@dataclass
class DragSession:
    """
    One pointer gesture on one handle.

    The snapshot and the transform are frozen at grant time. Use the session
    as a context manager, or call ``release`` when the pointer goes up.

    Attributes:
        handle: The handle being dragged
        snapshot: Path parameters at the moment the drag started
        transform: Canvas transform (editor zoom) at the moment the drag started
    """

    handle: HandleId
    snapshot: Optional[AnyPath]
    transform: CanvasTransform
    last_patch: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def grant(
        cls,
        params: AnyPath,
        handle: HandleId,
        transform: CanvasTransform,
        touch_count: int = 1,
    ) -> Optional["DragSession"]:
        """Start a drag, or return ``None`` unless exactly one pointer is down."""
        if touch_count != 1:
            logger.debug("Ignoring drag with %d active pointers", touch_count)
            return None
        handle = _check_handle(params, handle)
        logger.debug("Drag granted on %s handle '%s'", params.family, handle.value)
        return cls(handle=handle, snapshot=params, transform=transform)

    @property
    def active(self) -> bool:
        return self.snapshot is not None

    def move(self, dx_px: float, dy_px: float, touch_count: int = 1) -> Dict[str, Any]:
        """
        Map the cumulative pointer delta since the grant into a patch.

        Returns an empty patch once the session is released or when a second
        pointer joins the gesture.
        """
        if self.snapshot is None or touch_count != 1:
            return {}
        delta = self.transform.delta_to_world(dx_px, dy_px)
        self.last_patch = map_drag(self.snapshot, delta, self.handle)
        return self.last_patch

    def release(self) -> Dict[str, Any]:
        """End the drag and return the last patch produced."""
        if self.snapshot is not None:
            logger.debug("Drag released on handle '%s'", self.handle.value)
        self.snapshot = None
        return self.last_patch

    def __enter__(self) -> "DragSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
