"""Editor state data model."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ...config import (
    PATH_FAMILIES,
    AnyPath,
    CanvasConfig,
    ParabolaPath,
    PathScenario,
    apply_patch,
    build_simulation_request,
    default_parameters,
    set_curvature,
)
from ...core.transform import CanvasState

logger = logging.getLogger(__name__)


def _default_paths() -> Dict[str, AnyPath]:
    return {family: default_parameters(family) for family in PATH_FAMILIES}


@dataclass
class EditorState:
    """Represents the state of one editing session.

    Attributes:
        vehicle_type: Vehicle id sent with the simulation request
        family: Currently selected path family
        paths: Last parameters per family, so switching family keeps edits
        canvas: Drag canvas size and zoom, shared by every family
        metadata: Scenario metadata carried through load/save
    """
    vehicle_type: str = "car"
    family: str = "straight"
    paths: Dict[str, AnyPath] = field(default_factory=_default_paths)
    canvas: CanvasState = field(default_factory=CanvasState)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def params(self) -> AnyPath:
        return self.paths[self.family]

    def set_family(self, family: str) -> AnyPath:
        if family not in PATH_FAMILIES:
            raise ValueError(f"Unknown path family '{family}'")
        self.family = family
        return self.params

    def apply_patch(self, patch: Mapping[str, Any]) -> AnyPath:
        """Merge a drag or form patch into the current family's parameters."""
        updated = apply_patch(self.params, patch)
        self.paths[self.family] = updated
        return updated

    def set_field(self, name: str, raw_value: Any) -> AnyPath:
        """Manual numeric entry; unparsable text falls back to the field default."""
        return self.apply_patch({name: raw_value})

    def set_curvature(self, value: float) -> AnyPath:
        params = self.params
        if not isinstance(params, ParabolaPath):
            logger.debug("Curvature ignored for %s path", params.family)
            return params
        updated = set_curvature(params, value)
        self.paths[self.family] = updated
        return updated

    def set_zoom(self, value: float) -> float:
        return self.canvas.set_zoom(value)

    def to_request(self) -> Dict[str, Any]:
        return build_simulation_request(self.params, self.vehicle_type)

    def to_scenario(self) -> PathScenario:
        return PathScenario(
            vehicle_type=self.vehicle_type,
            path=self.params,
            canvas=CanvasConfig(
                width_px=self.canvas.width_px,
                height_px=self.canvas.height_px,
                zoom=self.canvas.scale,
            ),
            metadata=dict(self.metadata),
        )

    @classmethod
    def from_scenario(cls, scenario: PathScenario) -> "EditorState":
        state = cls(
            vehicle_type=scenario.vehicle_type,
            family=scenario.path.family,
            canvas=CanvasState(
                width_px=scenario.canvas.width_px,
                height_px=scenario.canvas.height_px,
                scale=scenario.canvas.zoom,
            ),
            metadata=dict(scenario.metadata),
        )
        state.paths[scenario.path.family] = scenario.path
        return state
