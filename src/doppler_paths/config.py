"""
Path parameter models and scenario loader for the editor.

Each path family (straight line, parabola, cubic Bézier) has its own
immutable parameter model. Raw values are coerced on the way in so a
missing or unparsable field falls back to its default, and out-of-range
values are clamped instead of rejected.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Annotated, Any, Dict, Literal, Mapping, Optional, Tuple, Union

import yaml
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationInfo,
    field_validator,
    model_validator,
)

from .core.transform import DEFAULT_ZOOM, Point2D, clamp_zoom


logger = logging.getLogger(__name__)


DEFAULT_SPEED = 20.0
DEFAULT_DURATION = 5.0

# Ceilings keep every sampled coordinate finite.
SPEED_RANGE: Tuple[float, float] = (0.0, 1000.0)
DURATION_RANGE: Tuple[float, float] = (0.0, 3600.0)

STRAIGHT_H_RANGE: Tuple[float, float] = (0.1, 1000.0)
STRAIGHT_ANGLE_RANGE: Tuple[float, float] = (-45.0, 45.0)
DEFAULT_STRAIGHT_H = 10.0
DEFAULT_STRAIGHT_ANGLE = 0.0

PARABOLA_A_RANGE: Tuple[float, float] = (0.0, 0.5)
PARABOLA_H_RANGE: Tuple[float, float] = (0.0, 1e6)
DEFAULT_PARABOLA_A = 0.1
DEFAULT_PARABOLA_H = 10.0

DEFAULT_BEZIER_POINTS: Dict[str, Point2D] = {
    "p0": Point2D(-30.0, 20.0),
    "p1": Point2D(-10.0, -10.0),
    "p2": Point2D(10.0, -10.0),
    "p3": Point2D(30.0, 20.0),
}

ACCELERATION_MODE = "perfect"
SHIFT_METHOD = "timestretch"


def coerce_float(value: Any, default: float) -> float:
    """Resolve a raw field value to a finite float, or ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _clamped(name: str, value: float, low: float, high: float) -> float:
    result = clamp(value, low, high)
    if result != value:
        logger.debug("Clamped %s from %s to %s", name, value, result)
    return result


def coerce_point(value: Any, default: Point2D) -> Point2D:
    """Resolve a point given as a mapping, a pair, or a ``Point2D``."""
    if isinstance(value, Mapping):
        raw_x, raw_y = value.get("x"), value.get("y")
    elif isinstance(value, (tuple, list)) and len(value) == 2:
        raw_x, raw_y = value
    else:
        return default
    return Point2D(coerce_float(raw_x, default.x), coerce_float(raw_y, default.y))


class _PathModel(BaseModel, ABC):
    """Fields shared by every path family.

    ``speed`` and ``duration`` shape the straight and parabola paths; the
    Bézier family only forwards them to the simulation request.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    speed: float = DEFAULT_SPEED
    duration: float = Field(
        default=DEFAULT_DURATION,
        validation_alias=AliasChoices("duration", "audio_duration"),
        description="Audio duration in seconds, centred on the closest approach",
    )

    @field_validator("speed", mode="before")
    @classmethod
    def _resolve_speed(cls, value: Any) -> float:
        return _clamped("speed", coerce_float(value, DEFAULT_SPEED), *SPEED_RANGE)

    @field_validator("duration", mode="before")
    @classmethod
    def _resolve_duration(cls, value: Any) -> float:
        return _clamped("duration", coerce_float(value, DEFAULT_DURATION), *DURATION_RANGE)

    @abstractmethod
    def request_fields(self) -> Dict[str, float]:
        """Family-specific fields of the simulation request."""


class StraightPath(_PathModel):
    """Straight pass-by at closest distance ``h`` tilted by ``angle_deg``."""

    family: Literal["straight"] = "straight"
    h: float = DEFAULT_STRAIGHT_H
    angle_deg: float = Field(
        default=DEFAULT_STRAIGHT_ANGLE,
        validation_alias=AliasChoices("angle_deg", "angle"),
    )

    @field_validator("h", mode="before")
    @classmethod
    def _resolve_h(cls, value: Any) -> float:
        return _clamped("h", coerce_float(value, DEFAULT_STRAIGHT_H), *STRAIGHT_H_RANGE)

    @field_validator("angle_deg", mode="before")
    @classmethod
    def _resolve_angle(cls, value: Any) -> float:
        return _clamped("angle_deg", coerce_float(value, DEFAULT_STRAIGHT_ANGLE), *STRAIGHT_ANGLE_RANGE)

    @property
    def angle_rad(self) -> float:
        return math.radians(self.angle_deg)

    def request_fields(self) -> Dict[str, float]:
        return {"h": self.h, "angle": self.angle_deg}


class ParabolaPath(_PathModel):
    """Parabola ``y = a·x² + h`` centred on the Y axis."""

    family: Literal["parabola"] = "parabola"
    a: float = DEFAULT_PARABOLA_A
    h: float = DEFAULT_PARABOLA_H

    @field_validator("a", mode="before")
    @classmethod
    def _resolve_a(cls, value: Any) -> float:
        return _clamped("a", coerce_float(value, DEFAULT_PARABOLA_A), *PARABOLA_A_RANGE)

    @field_validator("h", mode="before")
    @classmethod
    def _resolve_h(cls, value: Any) -> float:
        # The vertex never goes below the horizontal axis.
        return _clamped("h", coerce_float(value, DEFAULT_PARABOLA_H), *PARABOLA_H_RANGE)

    def request_fields(self) -> Dict[str, float]:
        return {"a": self.a, "h": self.h}


class BezierPath(_PathModel):
    """Cubic Bézier through ``p0`` and ``p3`` shaped by ``p1`` and ``p2``."""

    family: Literal["bezier"] = "bezier"
    p0: Point2D = DEFAULT_BEZIER_POINTS["p0"]
    p1: Point2D = DEFAULT_BEZIER_POINTS["p1"]
    p2: Point2D = DEFAULT_BEZIER_POINTS["p2"]
    p3: Point2D = DEFAULT_BEZIER_POINTS["p3"]

    @model_validator(mode="before")
    @classmethod
    def _fold_flat_coordinates(cls, data: Any) -> Any:
        """Accept the flat ``x0, y0 .. x3, y3`` keys used by the request record."""
        if not isinstance(data, Mapping):
            return data
        folded = dict(data)
        for idx in range(4):
            x_key, y_key, name = f"x{idx}", f"y{idx}", f"p{idx}"
            if x_key not in folded and y_key not in folded:
                continue
            current = coerce_point(folded.get(name), DEFAULT_BEZIER_POINTS[name])
            folded[name] = (folded.pop(x_key, current.x), folded.pop(y_key, current.y))
        return folded

    @field_validator("p0", "p1", "p2", "p3", mode="before")
    @classmethod
    def _resolve_point(cls, value: Any, info: ValidationInfo) -> Point2D:
        return coerce_point(value, DEFAULT_BEZIER_POINTS[info.field_name])

    @property
    def control_points(self) -> Tuple[Point2D, Point2D, Point2D, Point2D]:
        return (self.p0, self.p1, self.p2, self.p3)

    def request_fields(self) -> Dict[str, float]:
        fields: Dict[str, float] = {}
        for idx, point in enumerate(self.control_points):
            fields[f"x{idx}"] = point.x
            fields[f"y{idx}"] = point.y
        return fields


PathParameters = Annotated[
    Union[StraightPath, ParabolaPath, BezierPath],
    Field(discriminator="family"),
]

AnyPath = Union[StraightPath, ParabolaPath, BezierPath]

PATH_FAMILIES: Tuple[str, ...] = ("straight", "parabola", "bezier")

_path_adapter: TypeAdapter = TypeAdapter(PathParameters)


def parse_path_parameters(data: Mapping[str, Any]) -> AnyPath:
    """
    Validate a raw mapping into the matching path model.

    The family tag may be given as ``family`` or, as in the request record,
    as ``path``.
    """
    raw = dict(data)
    if "family" not in raw and "path" in raw:
        raw["family"] = raw.pop("path")
    return _path_adapter.validate_python(raw)


def default_parameters(family: str) -> AnyPath:
    return parse_path_parameters({"family": family})


def apply_patch(
    params: AnyPath,
    patch: Mapping[str, Any],
) -> AnyPath:
    """
    Merge a partial update into ``params`` and return a new model.

    Keys the family does not own are dropped. The merged record is
    validated again, so clamping applies to every update.
    """
    owned = type(params).model_fields
    accepted = {key: value for key, value in patch.items() if key in owned and key != "family"}
    ignored = set(patch) - set(accepted)
    if ignored:
        logger.debug("Ignoring patch keys not owned by %s: %s", params.family, sorted(ignored))
    if not accepted:
        return params
    merged = params.model_dump()
    merged.update(accepted)
    return type(params).model_validate(merged)


def set_curvature(params: ParabolaPath, value: Any) -> ParabolaPath:
    """Slider entry point for the parabola curvature ``a``."""
    number = coerce_float(value, params.a)
    return apply_patch(params, {"a": round(number, 3)})  # type: ignore[return-value]


def build_simulation_request(
    params: AnyPath,
    vehicle_type: str,
) -> Dict[str, Any]:
    """Flatten finalized parameters into the record sent to the simulation service."""
    record: Dict[str, Any] = {
        "path": params.family,
        "vehicle_type": vehicle_type,
        "acceleration_mode": ACCELERATION_MODE,
        "shift_method": SHIFT_METHOD,
    }
    record.update({key: float(value) for key, value in params.request_fields().items()})
    record["speed"] = float(params.speed)
    record["audio_duration"] = float(params.duration)
    return record


class CanvasConfig(BaseModel):
    """Size and zoom of the drag canvas."""

    width_px: float = Field(default=640.0, gt=0)
    height_px: float = Field(default=400.0, gt=0)
    zoom: float = Field(default=DEFAULT_ZOOM, description="Pixels per meter")

    @field_validator("zoom", mode="before")
    @classmethod
    def _resolve_zoom(cls, value: Any) -> float:
        return clamp_zoom(coerce_float(value, DEFAULT_ZOOM))


class PathScenario(BaseModel):
    """Top-level scenario file: one vehicle moving along one path."""

    vehicle_type: str = Field(default="car", description="Vehicle id known to the simulation service")
    path: PathParameters
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Optional metadata for bookkeeping"
    )

    @field_validator("path", mode="before")
    @classmethod
    def _accept_path_alias(cls, value: Any) -> Any:
        if isinstance(value, Mapping) and "family" not in value and "path" in value:
            value = dict(value)
            value["family"] = value.pop("path")
        return value

    def to_request(self, vehicle_type: Optional[str] = None) -> Dict[str, Any]:
        return build_simulation_request(self.path, vehicle_type or self.vehicle_type)


def load_path_scenario(path: Union[str, Path]) -> PathScenario:
    """
    Load and validate a path scenario from a YAML file.

    Parameters
    ----------
    path:
        Path to the YAML scenario file.

    Returns
    -------
    PathScenario
        Parsed and validated scenario.
    """

    scenario_path = Path(path).resolve()
    if not scenario_path.exists():
        raise FileNotFoundError(f"Scenario file not found: {scenario_path}")

    with scenario_path.open("r", encoding="utf-8") as handle:
        raw_data = yaml.safe_load(handle) or {}

    return PathScenario.model_validate(raw_data)


def save_path_scenario(scenario: PathScenario, path: Union[str, Path]) -> Path:
    """Write ``scenario`` as YAML and return the resolved path."""
    target = Path(path).resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    data = scenario.model_dump(mode="json")
    with target.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False)
    return target
