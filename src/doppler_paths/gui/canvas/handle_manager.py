"""Hit-testing and drag lifecycle for the path handles on the drag canvas."""

from __future__ import annotations

import math
from typing import Dict, Optional, Tuple

from ...config import AnyPath
from ...core.drag import DragSession, HandleId, handle_positions
from ...core.transform import CanvasTransform, Point2D


HANDLE_COLORS: Dict[HandleId, Tuple[int, int, int]] = {
    HandleId.DISTANCE: (76, 175, 80),
    HandleId.ANGLE: (255, 152, 0),
    HandleId.VERTEX: (76, 175, 80),
    HandleId.P0: (76, 175, 80),
    HandleId.P1: (255, 152, 0),
    HandleId.P2: (255, 87, 34),
    HandleId.P3: (156, 39, 176),
}


class HandleManager:
    """Tracks which handle is under the pointer and owns the active drag.

    Pointer positions are canvas pixels. Deltas are measured from the press
    position, so each move reports the cumulative gesture since the grant.

    Attributes:
        hit_radius_px: Distance from a handle center that still counts as a hit
    """

    def __init__(self, hit_radius_px: float = 20.0):
        self.hit_radius_px = hit_radius_px
        self._session: Optional[DragSession] = None
        self._press_pos: Optional[Point2D] = None

    @staticmethod
    def canvas_positions(params: AnyPath, transform: CanvasTransform) -> Dict[HandleId, Point2D]:
        """Canvas pixel position of every handle of ``params``."""
        return {
            handle: transform.to_canvas(*world)
            for handle, world in handle_positions(params).items()
        }

    def hit_test(
        self,
        params: AnyPath,
        transform: CanvasTransform,
        pos: Tuple[float, float],
    ) -> Optional[HandleId]:
        """Return the handle nearest ``pos`` within the hit radius, if any."""
        best: Optional[HandleId] = None
        best_distance = self.hit_radius_px
        for handle, center in self.canvas_positions(params, transform).items():
            distance = math.hypot(pos[0] - center.x, pos[1] - center.y)
            if distance <= self.hit_radius_px and (best is None or distance < best_distance):
                best, best_distance = handle, distance
        return best

    def press(
        self,
        params: AnyPath,
        transform: CanvasTransform,
        pos: Tuple[float, float],
        touch_count: int = 1,
    ) -> Optional[HandleId]:
        """Grant a drag on the handle under ``pos``; returns the handle or ``None``."""
        self.release()
        handle = self.hit_test(params, transform, pos)
        if handle is None:
            return None
        session = DragSession.grant(params, handle, transform, touch_count=touch_count)
        if session is None:
            return None
        self._session = session
        self._press_pos = Point2D(float(pos[0]), float(pos[1]))
        return handle

    def move(self, pos: Tuple[float, float], touch_count: int = 1) -> Dict[str, object]:
        """Patch for the pointer now at ``pos``; empty when no drag is active."""
        if self._session is None or self._press_pos is None:
            return {}
        dx = pos[0] - self._press_pos.x
        dy = pos[1] - self._press_pos.y
        return self._session.move(dx, dy, touch_count=touch_count)

    def release(self) -> Dict[str, object]:
        if self._session is None:
            return {}
        patch = self._session.release()
        self._session = None
        self._press_pos = None
        return patch

    def is_any_handle_active(self) -> bool:
        return self._session is not None

    @property
    def active_handle(self) -> Optional[HandleId]:
        return self._session.handle if self._session is not None else None
