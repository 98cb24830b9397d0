"""
Tests for configuration precedence and typed settings.
"""

import pytest

from captionburn.config import ConfigManager, ServerSettings


def test_default_value(monkeypatch):
    monkeypatch.delenv("PUBLIC_BASE_URL", raising=False)
    assert ConfigManager.get_display_value("PUBLIC_BASE_URL") == ("http://localhost:4000", "default")


def test_environment_overrides_default(monkeypatch):
    monkeypatch.setenv("UPLOAD_DIR", "/srv/uploads")
    assert ConfigManager.get_display_value("UPLOAD_DIR") == ("/srv/uploads", "env")


def test_explicit_override_wins(monkeypatch):
    monkeypatch.setenv("UPLOAD_DIR", "/srv/uploads")
    assert ConfigManager.get("UPLOAD_DIR", "/tmp/uploads") == "/tmp/uploads"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("WORDS_PER_CUE", "7")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://videos.example/")

    settings = ServerSettings.from_env({"PORT": 8080})

    assert settings.words_per_cue == 7
    assert settings.seconds_per_cue == 3
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"
    assert settings.public_base_url == "https://videos.example"


def test_non_integer_value_raises(monkeypatch):
    monkeypatch.setenv("PORT", "four thousand")
    with pytest.raises(ValueError):
        ServerSettings.from_env()


@pytest.mark.parametrize("field, value", [("words_per_cue", 0), ("seconds_per_cue", 0), ("max_pending_jobs", -1)])
def test_invalid_settings_raise(field, value):
    with pytest.raises(ValueError):
        ServerSettings(**{field: value})


def test_settings_overrides_beat_environment_for_every_key(monkeypatch):
    overrides = {
        "HOST": "127.0.0.1",
        "PORT": "9000",
        "PUBLIC_BASE_URL": "https://cdn.example",
        "UPLOAD_DIR": "/data/in",
        "PROCESSED_DIR": "/data/out",
        "FFMPEG_PATH": "/opt/ffmpeg",
        "FFPROBE_PATH": "/opt/ffprobe",
        "WORDS_PER_CUE": "4",
        "SECONDS_PER_CUE": "2",
        "SUBTITLE_STYLE": "Fontsize=30",
        "MAX_PENDING_JOBS": "3",
        "MAX_UPLOAD_MB": "50",
        "LOG_LEVEL": "warning",
    }
    for key in overrides:
        monkeypatch.setenv(key, "1")

    settings = ServerSettings.from_env(overrides)

    assert settings == ServerSettings(
        host="127.0.0.1",
        port=9000,
        public_base_url="https://cdn.example",
        upload_dir="/data/in",
        processed_dir="/data/out",
        ffmpeg_path="/opt/ffmpeg",
        ffprobe_path="/opt/ffprobe",
        words_per_cue=4,
        seconds_per_cue=2,
        subtitle_style="Fontsize=30",
        max_pending_jobs=3,
        max_upload_mb=50,
        log_level="WARNING",
    )
