import csv
import json

import pytest

from doppler_paths.config import PathScenario, default_parameters
from doppler_paths.core.projector import fit_trajectory
from doppler_paths.core.trajectory import sample_path
from doppler_paths.exporters import (
    determine_scenario_name,
    export_trajectory_csv,
    export_trajectory_outputs,
    prepare_output_directory,
)


def _scenario(family="straight", **metadata):
    return PathScenario(vehicle_type="car", path=default_parameters(family), metadata=metadata)


def test_determine_scenario_name():
    assert determine_scenario_name(_scenario(scenario="Morning Pass")) == "morning_pass"
    assert determine_scenario_name(_scenario(name="alt")) == "alt"
    assert determine_scenario_name(_scenario(), fallback="parabola") == "parabola"


def test_prepare_output_directory_avoids_collisions(tmp_path):
    first = prepare_output_directory(tmp_path, timestamp="20250101")
    second = prepare_output_directory(tmp_path, timestamp="20250101")

    assert first == tmp_path / "trajectories" / "20250101"
    assert second == tmp_path / "trajectories" / "20250101_1"
    assert second.is_dir()


def test_csv_includes_canvas_columns_with_projection(tmp_path):
    points = sample_path(default_parameters("straight"), samples=5)
    projection = fit_trajectory(points, 640, 400)
    target = tmp_path / "samples.csv"

    export_trajectory_csv(points, target, projection=projection)

    with target.open(newline="") as handle:
        rows = list(csv.DictReader(handle))
    assert len(rows) == 5
    assert set(rows[0]) == {"index", "x_m", "y_m", "canvas_x_px", "canvas_y_px"}
    assert float(rows[0]["x_m"]) == pytest.approx(-50.0)


def test_export_trajectory_outputs(tmp_path):
    scenario = _scenario("parabola", scenario="curve")
    points = sample_path(scenario.path)
    projection = fit_trajectory(points, 640, 400)

    output_dir = export_trajectory_outputs(scenario, points, projection, output_root=tmp_path, timestamp="run")

    assert output_dir == tmp_path / "trajectories" / "run"
    assert (output_dir / "curve_samples.csv").exists()
    manifest = json.loads((output_dir / "curve_trajectory.json").read_text())
    assert manifest["samples"] == 100
    assert manifest["path"]["family"] == "parabola"
    assert manifest["closest_approach"]["index"] == projection.closest_index
    request = json.loads((output_dir / "simulation_request.json").read_text())
    assert request["path"] == "parabola"
    assert request["audio_duration"] == 5.0


def test_export_defaults_to_configured_output_root(tmp_path):
    scenario = _scenario()
    points = sample_path(scenario.path)

    output_dir = export_trajectory_outputs(scenario, points, fit_trajectory(points, 640, 400), timestamp="t")

    assert output_dir == (tmp_path / "outputs" / "trajectories" / "t").resolve()
    assert (output_dir / "straight_samples.csv").exists()
