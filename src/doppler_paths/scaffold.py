"""Scenario scaffolding utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import PATH_FAMILIES, CanvasConfig, PathScenario, default_parameters, save_path_scenario


def build_stub(
    family: str = "straight",
    vehicle_type: str = "car",
    scenario_name: Optional[str] = None,
) -> PathScenario:
    if family not in PATH_FAMILIES:
        raise ValueError(f"Unknown path family '{family}'. Available families: {list(PATH_FAMILIES)}")
    metadata = {"scenario": scenario_name} if scenario_name else {}
    return PathScenario(
        vehicle_type=vehicle_type,
        path=default_parameters(family),
        canvas=CanvasConfig(),
        metadata=metadata,
    )


def write_stub(
    target_path: Path,
    family: str = "straight",
    vehicle_type: str = "car",
    scenario_name: Optional[str] = None,
) -> Path:
    return save_path_scenario(build_stub(family, vehicle_type, scenario_name), target_path)
