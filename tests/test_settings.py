from pathlib import Path

from doppler_paths.settings import get_settings, output_root, reset_settings_cache


def test_defaults(tmp_path):
    settings = get_settings()

    assert settings.api_url == "https://doppler-simulator.duckdns.org"
    assert settings.polling_interval_s == 2.0
    assert settings.vehicle_type == "car"
    assert output_root() == (tmp_path / "outputs").resolve()


def test_environment_overrides_are_cached_until_reset(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("DOPPLER_API_URL", "http://localhost:8000/")
    monkeypatch.setenv("DOPPLER_VEHICLE_TYPE", "truck")

    assert get_settings() is first
    reset_settings_cache()

    settings = get_settings()
    assert settings.api_url == "http://localhost:8000"
    assert settings.vehicle_type == "truck"


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("DOPPLER_POLLING_INTERVAL_S=0.5\n")
    reset_settings_cache()

    assert get_settings().polling_interval_s == 0.5
    assert isinstance(get_settings().output_root, Path)
