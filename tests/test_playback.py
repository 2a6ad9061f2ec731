import numpy as np
import pytest

from doppler_paths.config import default_parameters
from doppler_paths.core.playback import display_index, playback_progress, progress_to_index
from doppler_paths.core.projector import fit_trajectory
from doppler_paths.core.trajectory import sample_path


@pytest.mark.parametrize(
    "progress, count, expected",
    [(0.0, 100, 0), (0.5, 100, 49), (1.0, 100, 99), (1.7, 100, 99), (-0.3, 100, 0), (0.5, 1, 0), (0.5, 0, 0)],
)
def test_progress_to_index(progress, count, expected):
    assert progress_to_index(progress, count) == expected


def test_progress_to_index_is_monotonic():
    indices = [progress_to_index(p, 100) for p in np.linspace(0, 1, 501)]
    assert indices == sorted(indices)


def test_playback_progress():
    assert playback_progress(2.5, 5.0) == 0.5
    assert playback_progress(7.0, 5.0) == 1.0
    assert playback_progress(-1.0, 5.0) == 0.0
    assert playback_progress(1.0, 0.0) == 0.0


def test_display_index_switches_on_animation():
    projection = fit_trajectory(sample_path(default_parameters("straight")), 640, 400)

    assert display_index(projection, 0.0, animating=False) == projection.closest_index
    assert display_index(projection, 0.0, animating=True) == 0
    assert display_index(projection, 1.0, animating=True) == 99
