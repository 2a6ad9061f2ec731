from doppler_paths.core.drag import HandleId
from doppler_paths.gui.canvas import HandleManager, TrajectoryRenderer
from doppler_paths.gui.models import EditorState


def _setup(family="straight"):
    state = EditorState()
    state.set_family(family)
    return state, HandleManager(), state.canvas.transform()


def test_handle_positions_on_canvas():
    state, manager, transform = _setup()
    positions = manager.canvas_positions(state.params, transform)

    assert positions[HandleId.DISTANCE] == (320.0, 150.0)
    assert positions[HandleId.ANGLE] == (570.0, 150.0)


def test_hit_test_respects_radius():
    state, manager, transform = _setup()

    assert manager.hit_test(state.params, transform, (325.0, 155.0)) is HandleId.DISTANCE
    assert manager.hit_test(state.params, transform, (400.0, 300.0)) is None


def test_drag_updates_state_through_patches():
    state, manager, transform = _setup()

    assert manager.press(state.params, transform, (322.0, 151.0)) is HandleId.DISTANCE
    assert manager.is_any_handle_active()
    state.apply_patch(manager.move((322.0, 131.0)))
    state.apply_patch(manager.move((322.0, 126.0)))

    assert state.params.h == 15.0
    assert manager.release() == {"h": 15.0}
    assert not manager.is_any_handle_active()
    assert manager.move((0.0, 0.0)) == {}


def test_press_outside_handles_starts_nothing():
    state, manager, transform = _setup("parabola")

    assert manager.press(state.params, transform, (10.0, 10.0)) is None
    assert manager.move((20.0, 20.0)) == {}


def test_multi_touch_press_is_ignored():
    state, manager, transform = _setup("parabola")
    assert manager.press(state.params, transform, (320.0, 150.0), touch_count=2) is None
    assert manager.active_handle is None


def test_editor_curve_for_each_family():
    state, _, transform = _setup()
    assert TrajectoryRenderer.editor_curve(state.params, transform).shape == (2, 2)
    assert len(TrajectoryRenderer.guide_lines(state.params, transform)) == 1

    state.set_family("parabola")
    assert TrajectoryRenderer.editor_curve(state.params, transform).shape == (160, 2)
    assert TrajectoryRenderer.guide_lines(state.params, transform) == []

    state.set_family("bezier")
    assert TrajectoryRenderer.editor_curve(state.params, transform).shape == (100, 2)
    assert len(TrajectoryRenderer.guide_lines(state.params, transform)) == 3


def test_overlapping_handles_resolve_to_first():
    state, manager, transform = _setup()
    state.apply_patch({"speed": 0.0})
    positions = manager.canvas_positions(state.params, transform)
    assert positions[HandleId.ANGLE] == positions[HandleId.DISTANCE]

    assert manager.hit_test(state.params, transform, positions[HandleId.DISTANCE]) is HandleId.DISTANCE
