import numpy as np
import pytest

from doppler_paths.core.transform import WORLD_LIMIT_M, CanvasState, CanvasTransform, Point2D, clamp_zoom, finite_points


def test_world_canvas_round_trip():
    transform = CanvasTransform(scale=5.0, center=Point2D(320.0, 200.0))

    canvas = transform.to_canvas(10.0, 4.0)
    assert canvas == Point2D(370.0, 180.0)

    world = transform.to_world(*canvas)
    assert world.x == pytest.approx(10.0)
    assert world.y == pytest.approx(4.0)


def test_delta_flips_vertical_axis():
    transform = CanvasTransform(scale=5.0, center=Point2D(0.0, 0.0))
    assert transform.delta_to_world(10.0, -25.0) == Point2D(2.0, 5.0)


def test_points_to_canvas_matches_scalar_conversion():
    transform = CanvasTransform(scale=2.0, center=Point2D(100.0, 50.0))
    points = np.array([[0.0, 0.0], [1.0, 1.0], [-3.0, 2.5]])

    canvas = transform.points_to_canvas(points)

    for row, (x, y) in zip(canvas, points):
        assert tuple(row) == transform.to_canvas(x, y)


@pytest.mark.parametrize("scale", [0.0, -1.0])
def test_non_positive_scale_rejected(scale):
    with pytest.raises(ValueError):
        CanvasTransform(scale=scale, center=Point2D(0.0, 0.0))


def test_zoom_is_clamped():
    assert clamp_zoom(0.01) == 0.1
    assert clamp_zoom(40) == 15.0

    state = CanvasState(scale=100.0)
    assert state.scale == 15.0
    assert state.set_zoom(2.5) == 2.5
    state.resize(800, 600)
    assert state.transform().center == Point2D(400.0, 300.0)


def test_finite_points_replaces_nan_and_clips():
    points = np.array([[np.nan, 1.5], [np.inf, -np.inf], [2e9, -3e12]])
    cleaned = finite_points(points)

    np.testing.assert_array_equal(
        cleaned,
        [[0.0, 1.5], [WORLD_LIMIT_M, -WORLD_LIMIT_M], [WORLD_LIMIT_M, -WORLD_LIMIT_M]],
    )
