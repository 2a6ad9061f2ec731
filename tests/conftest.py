import pytest

from doppler_paths.settings import reset_settings_cache


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the output root at a temp dir and drop cached settings around each test."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DOPPLER_OUTPUT_ROOT", str(tmp_path / "outputs"))
    monkeypatch.delenv("DOPPLER_API_URL", raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()
