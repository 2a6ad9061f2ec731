"""Output exporters for sampled trajectories.

Provides helpers for writing sampled path points to CSV, a JSON manifest
with the parameters and projection summary, and the simulation request
record.
"""

from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import numpy as np

from .config import PathScenario
from .core.projector import ProjectedTrajectory
from .settings import output_root as default_output_root


def determine_scenario_name(scenario: PathScenario, fallback: str = "scenario") -> str:
    """
    Determine a filesystem-friendly scenario name.

    Preference order:
    1. `scenario.metadata["scenario"]`
    2. `scenario.metadata["name"]`
    3. Provided fallback string
    """
    for key in ("scenario", "name"):
        value = scenario.metadata.get(key)
        if isinstance(value, str) and value.strip():
            return _sanitize_name(value)
    return _sanitize_name(fallback)


def _sanitize_name(name: str) -> str:
    safe = "".join(ch if ch.isalnum() or ch in ("-", "_") else "_" for ch in name.strip().lower())
    return safe or "scenario"


def prepare_output_directory(output_root: Path, timestamp: Optional[str] = None) -> Path:
    """
    Create the directory where all artefacts for an export will be stored.
    """
    ts = timestamp or datetime.now().strftime("%Y%m%d_%H%M%S_%f")

    output_dir = output_root / "trajectories" / ts
    counter = 1
    while output_dir.exists():
        output_dir = output_root / "trajectories" / f"{ts}_{counter}"
        counter += 1

    output_dir.mkdir(parents=True, exist_ok=False)
    return output_dir


def export_trajectory_csv(points: np.ndarray, output_path: Path, projection: Optional[ProjectedTrajectory] = None) -> None:
    """
    Write sampled points to CSV, one row per sample.

    Canvas columns are included when a projection is given.
    """
    fieldnames = ["index", "x_m", "y_m"]
    if projection is not None:
        fieldnames += ["canvas_x_px", "canvas_y_px"]
    with output_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for idx, (x, y) in enumerate(points):
            row: Dict[str, Any] = {"index": idx, "x_m": float(x), "y_m": float(y)}
            if projection is not None:
                row["canvas_x_px"] = float(projection.canvas_points[idx, 0])
                row["canvas_y_px"] = float(projection.canvas_points[idx, 1])
            writer.writerow(row)


def export_trajectory_json(
    scenario: PathScenario,
    points: np.ndarray,
    projection: ProjectedTrajectory,
    output_path: Path,
) -> None:
    """
    Write a JSON manifest describing the path and its projection (no per-sample data).
    """
    closest = projection.closest_index
    payload = {
        "vehicle_type": scenario.vehicle_type,
        "path": scenario.path.model_dump(mode="json"),
        "samples": int(points.shape[0]),
        "projection": {
            "scale_px_per_m": projection.scale,
            "observer_px": list(projection.observer),
            "bounds_m": list(projection.bounds),
        },
        "closest_approach": {
            "index": closest,
            "position_m": [float(v) for v in points[closest]] if points.shape[0] else None,
            "distance_m": projection.distance_m(closest),
        },
        "metadata": scenario.metadata,
    }

    with output_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def export_simulation_request(record: Mapping[str, Any], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as handle:
        json.dump(dict(record), handle, indent=2)


def export_trajectory_outputs(
    scenario: PathScenario,
    points: np.ndarray,
    projection: ProjectedTrajectory,
    output_root: Optional[Path] = None,
    timestamp: Optional[str] = None,
) -> Path:
    """
    Export the default artefacts for a sampled path.

    Returns the path to the directory containing the artefacts.
    """
    if output_root is None:
        output_root = default_output_root()
    else:
        output_root = Path(output_root)
    output_root.mkdir(parents=True, exist_ok=True)

    scenario_name = determine_scenario_name(scenario, fallback=scenario.path.family)
    output_dir = prepare_output_directory(output_root, timestamp=timestamp)

    export_trajectory_csv(points, output_dir / f"{scenario_name}_samples.csv", projection=projection)
    export_trajectory_json(scenario, points, projection, output_dir / f"{scenario_name}_trajectory.json")
    export_simulation_request(scenario.to_request(), output_dir / "simulation_request.json")
    return output_dir
