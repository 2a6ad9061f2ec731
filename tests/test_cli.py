import json

import httpx
import pytest
import yaml

from doppler_paths import cli
from doppler_paths.client import SimulationClient
from doppler_paths.config import load_path_scenario


@pytest.fixture
def scenario_file(tmp_path):
    path = tmp_path / "scenario.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "vehicle_type": "car",
                "path": {"family": "straight", "h": 12, "angle_deg": 10},
                "metadata": {"scenario": "pass_by"},
            }
        )
    )
    return path


def test_validate_prints_summary(scenario_file, capsys):
    assert cli.main(["validate", str(scenario_file)]) == 0

    out = capsys.readouterr().out
    assert "Straight line" in out
    assert "Closest approach" in out


def test_missing_config_returns_2(tmp_path):
    missing = str(tmp_path / "missing.yaml")
    for command in ("validate", "sample", "preview", "request", "submit"):
        assert cli.main([command, missing]) == 2


def test_invalid_config_returns_1(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text(yaml.safe_dump({"path": {"family": "circle"}}))

    assert cli.main(["validate", str(bad)]) == 1


def test_sample_writes_artefacts(scenario_file, tmp_path):
    output_root = tmp_path / "out"
    code = cli.main(["sample", str(scenario_file), "--output", str(output_root), "--samples", "25", "--timestamp", "t"])

    assert code == 0
    output_dir = output_root / "trajectories" / "t"
    manifest = json.loads((output_dir / "pass_by_trajectory.json").read_text())
    assert manifest["samples"] == 25


def test_preview_writes_png(scenario_file, tmp_path):
    target = tmp_path / "preview.png"
    assert cli.main(["preview", str(scenario_file), "--output", str(target), "--progress", "0.5"]) == 0
    assert target.stat().st_size > 0


def test_preview_closes_figure_when_save_fails(scenario_file, tmp_path, monkeypatch):
    import matplotlib.pyplot as plt
    from matplotlib.figure import Figure

    def failing_savefig(self, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(Figure, "savefig", failing_savefig)
    plt.close("all")

    target = tmp_path / "preview.png"
    assert cli.main(["preview", str(scenario_file), "--output", str(target)]) == 1
    assert plt.get_fignums() == []
    assert not target.exists()


def test_request_prints_record(scenario_file, capsys):
    assert cli.main(["request", str(scenario_file), "--vehicle", "truck"]) == 0

    record = json.loads(capsys.readouterr().out)
    assert record["vehicle_type"] == "truck"
    assert record["h"] == 12.0
    assert record["angle"] == 10.0


def test_request_writes_file(scenario_file, tmp_path):
    target = tmp_path / "request.json"
    assert cli.main(["request", str(scenario_file), "--output", str(target)]) == 0
    assert json.loads(target.read_text())["path"] == "straight"


def test_submit_waits_for_job(scenario_file, monkeypatch, capsys):
    def handler(request):
        if request.method == "POST":
            return httpx.Response(200, json={"job_id": "j1"})
        return httpx.Response(200, json={"status": "completed", "result": {"filename": "a.wav"}})

    monkeypatch.setattr(
        cli,
        "SimulationClient",
        lambda: SimulationClient(base_url="http://sim.test", transport=httpx.MockTransport(handler)),
    )

    assert cli.main(["submit", str(scenario_file), "--wait"]) == 0
    out = capsys.readouterr().out
    assert "job_id: j1" in out
    assert "http://sim.test/api/download/a.wav" in out


def test_submit_rejects_out_of_range_duration(tmp_path):
    path = tmp_path / "long.yaml"
    path.write_text(yaml.safe_dump({"path": {"family": "parabola", "duration": 45}}))

    assert cli.main(["submit", str(path)]) == 1


def test_scaffold_creates_loadable_stub(tmp_path):
    target = tmp_path / "stub.yaml"
    assert cli.main(["scaffold", str(target), "--family", "bezier", "--vehicle", "bike"]) == 0

    scenario = load_path_scenario(target)
    assert scenario.path.family == "bezier"
    assert scenario.vehicle_type == "bike"


def test_gui_missing_config_returns_2(tmp_path):
    assert cli.main(["gui", str(tmp_path / "missing.yaml")]) == 2
