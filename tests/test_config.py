import math

import pytest
import yaml

from doppler_paths.config import (
    BezierPath,
    ParabolaPath,
    PathScenario,
    StraightPath,
    _PathModel,
    apply_patch,
    build_simulation_request,
    coerce_float,
    default_parameters,
    load_path_scenario,
    parse_path_parameters,
    save_path_scenario,
    set_curvature,
)


@pytest.mark.parametrize("raw", [None, True, "", "abc", math.nan, math.inf, -math.inf])
def test_coerce_float_falls_back_to_default(raw):
    assert coerce_float(raw, 7.0) == 7.0


def test_coerce_float_parses_numeric_strings():
    assert coerce_float(" 12.5 ", 0.0) == 12.5


def test_defaults():
    straight = default_parameters("straight")
    assert isinstance(straight, StraightPath)
    assert (straight.speed, straight.duration, straight.h, straight.angle_deg) == (20.0, 5.0, 10.0, 0.0)

    parabola = default_parameters("parabola")
    assert (parabola.a, parabola.h) == (0.1, 10.0)

    bezier = default_parameters("bezier")
    assert bezier.control_points == ((-30, 20), (-10, -10), (10, -10), (30, 20))


def test_straight_fields_are_clamped():
    params = StraightPath(h=5000, angle=90)
    assert params.h == 1000.0
    assert params.angle_deg == 45.0

    params = StraightPath(h=0, angle_deg=-80)
    assert params.h == 0.1
    assert params.angle_deg == -45.0


def test_parabola_fields_are_clamped():
    params = ParabolaPath(a=2.0, h=-4.0)
    assert params.a == 0.5
    assert params.h == 0.0


def test_invalid_numbers_resolve_to_defaults():
    params = parse_path_parameters({"path": "straight", "h": "abc", "speed": None, "audio_duration": math.nan})
    assert params.h == 10.0
    assert params.speed == 20.0
    assert params.duration == 5.0


def test_negative_speed_and_duration_floor_at_zero():
    params = ParabolaPath(speed=-3, duration=-1)
    assert params.speed == 0.0
    assert params.duration == 0.0


def test_speed_duration_and_vertex_have_ceilings():
    params = ParabolaPath(a=0.5, h=1e12, speed=1e160, duration=1e9)
    assert params.speed == 1000.0
    assert params.duration == 3600.0
    assert params.h == 1e6

    assert StraightPath(speed=1e160).speed == 1000.0


def test_shared_base_model_is_abstract():
    with pytest.raises(TypeError):
        _PathModel()


def test_bezier_accepts_flat_coordinates():
    params = parse_path_parameters({"path": "bezier", "x1": 1, "y1": "2", "y3": "bad"})
    assert isinstance(params, BezierPath)
    assert params.p1 == (1.0, 2.0)
    assert params.p3 == (30.0, 20.0)


def test_models_are_immutable():
    params = default_parameters("straight")
    with pytest.raises(Exception):
        params.h = 3.0


def test_apply_patch_revalidates_and_ignores_foreign_keys():
    params = default_parameters("straight")
    updated = apply_patch(params, {"h": 2000, "a": 0.3, "family": "parabola"})

    assert isinstance(updated, StraightPath)
    assert updated.h == 1000.0
    assert params.h == 10.0


def test_apply_patch_without_owned_keys_returns_same_model():
    params = default_parameters("parabola")
    assert apply_patch(params, {"p0": (1, 1)}) is params


def test_set_curvature_rounds_to_three_decimals():
    params = set_curvature(default_parameters("parabola"), 0.12345)
    assert params.a == 0.123
    assert set_curvature(params, 0.9).a == 0.5


def test_build_simulation_request_straight():
    record = build_simulation_request(StraightPath(h=12, angle_deg=15), "truck")
    assert record == {
        "path": "straight",
        "vehicle_type": "truck",
        "acceleration_mode": "perfect",
        "shift_method": "timestretch",
        "h": 12.0,
        "angle": 15.0,
        "speed": 20.0,
        "audio_duration": 5.0,
    }


def test_build_simulation_request_bezier_flattens_points():
    record = build_simulation_request(default_parameters("bezier"), "car")
    assert record["x0"] == -30.0
    assert record["y3"] == 20.0
    assert "p0" not in record


def test_scenario_yaml_round_trip(tmp_path):
    scenario = PathScenario(path=ParabolaPath(a=0.2, h=8), metadata={"scenario": "curve"})
    target = save_path_scenario(scenario, tmp_path / "scenario.yaml")

    loaded = load_path_scenario(target)
    assert loaded.path == scenario.path
    assert loaded.metadata == {"scenario": "curve"}
    assert loaded.canvas.zoom == 5.0


def test_scenario_accepts_path_key_and_clamps_zoom(tmp_path):
    source = tmp_path / "scenario.yaml"
    source.write_text(
        yaml.safe_dump({"vehicle_type": "bus", "path": {"path": "straight", "angle": 30}, "canvas": {"zoom": 99}})
    )

    scenario = load_path_scenario(source)
    assert scenario.path.angle_deg == 30.0
    assert scenario.canvas.zoom == 15.0
    assert scenario.to_request()["vehicle_type"] == "bus"
    assert scenario.to_request(vehicle_type="car")["vehicle_type"] == "car"


def test_missing_scenario_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_path_scenario(tmp_path / "missing.yaml")
