import pytest

from doppler_paths.config import BezierPath, load_path_scenario
from doppler_paths.scaffold import build_stub, write_stub


def test_build_stub_uses_family_defaults():
    stub = build_stub("bezier", vehicle_type="truck", scenario_name="demo")

    assert isinstance(stub.path, BezierPath)
    assert stub.vehicle_type == "truck"
    assert stub.metadata == {"scenario": "demo"}


def test_build_stub_rejects_unknown_family():
    with pytest.raises(ValueError):
        build_stub("circle")


def test_write_stub_round_trips(tmp_path):
    target = write_stub(tmp_path / "stubs" / "scenario.yaml", family="parabola")

    scenario = load_path_scenario(target)
    assert scenario.path.family == "parabola"
    assert scenario.path.a == 0.1
