"""
Configuration management with three-tier precedence system:
1. Default values from codebase
2. Environment variables from .env
3. Explicit overrides passed by the caller (tests, CLI)

Precedence: Overrides > Environment Variables > Defaults
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class ConfigManager:
    """Manages configuration with three-tier precedence."""

    # Default values (Tier 1 - Codebase defaults)
    DEFAULTS = {
        "HOST": "0.0.0.0",
        "PORT": "4000",
        "PUBLIC_BASE_URL": "http://localhost:4000",
        "UPLOAD_DIR": "uploads",
        "PROCESSED_DIR": "processed",
        "FFMPEG_PATH": "ffmpeg",
        "FFPROBE_PATH": "ffprobe",
        "WORDS_PER_CUE": "5",
        "SECONDS_PER_CUE": "3",
        "SUBTITLE_STYLE": "Alignment=2,Fontsize=24,PrimaryColour=&Hffffff&",
        "MAX_PENDING_JOBS": "1",
        "MAX_UPLOAD_MB": "500",
        "LOG_LEVEL": "INFO",
    }

    @staticmethod
    def get(key: str, override: Optional[Any] = None) -> Any:
        """
        Get configuration value with three-tier precedence.

        Args:
            key: Configuration key
            override: Explicit value (highest priority)

        Returns:
            Configuration value from highest priority source
        """
        value, _ = ConfigManager.get_display_value(key, override)
        return value

    @staticmethod
    def get_int(key: str, override: Optional[Any] = None) -> int:
        """Get a configuration value converted to int."""
        value = ConfigManager.get(key, override)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValueError(f"Configuration value {key}={value!r} is not an integer")

    @staticmethod
    def get_display_value(key: str, override: Optional[Any] = None) -> tuple[Any, str]:
        """
        Get configuration value and its source.

        Returns:
            Tuple of (value, source) where source is 'override', 'env', or 'default'
        """
        if override is not None and override != "":
            return override, "override"

        env_value = os.getenv(key)
        if env_value is not None and env_value != "":
            return env_value, "env"

        return ConfigManager.DEFAULTS.get(key, ""), "default"


@dataclass
class ServerSettings:
    """Typed settings for the subtitle burning server."""

    host: str = "0.0.0.0"
    port: int = 4000
    public_base_url: str = "http://localhost:4000"
    upload_dir: str = "uploads"
    processed_dir: str = "processed"
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    words_per_cue: int = 5
    seconds_per_cue: int = 3
    subtitle_style: str = "Alignment=2,Fontsize=24,PrimaryColour=&Hffffff&"
    max_pending_jobs: int = 1
    max_upload_mb: int = 500
    log_level: str = "INFO"

    def __post_init__(self):
        if self.words_per_cue < 1:
            raise ValueError(f"words_per_cue must be positive, got {self.words_per_cue}")
        if self.seconds_per_cue <= 0:
            raise ValueError(f"seconds_per_cue must be positive, got {self.seconds_per_cue}")
        if self.max_pending_jobs < 0:
            raise ValueError(f"max_pending_jobs must not be negative, got {self.max_pending_jobs}")
        self.public_base_url = self.public_base_url.rstrip("/")

    @classmethod
    def from_env(cls, overrides: Optional[Dict[str, Any]] = None) -> "ServerSettings":
        """
        Create settings from environment variables.

        Args:
            overrides: Optional mapping of config keys (e.g. "UPLOAD_DIR") taking
                precedence over the environment

        Returns:
            ServerSettings instance
        """
        overrides = overrides or {}

        return cls(
            host=ConfigManager.get("HOST", overrides.get("HOST")),
            port=ConfigManager.get_int("PORT", overrides.get("PORT")),
            public_base_url=ConfigManager.get("PUBLIC_BASE_URL", overrides.get("PUBLIC_BASE_URL")),
            upload_dir=ConfigManager.get("UPLOAD_DIR", overrides.get("UPLOAD_DIR")),
            processed_dir=ConfigManager.get("PROCESSED_DIR", overrides.get("PROCESSED_DIR")),
            ffmpeg_path=ConfigManager.get("FFMPEG_PATH", overrides.get("FFMPEG_PATH")),
            ffprobe_path=ConfigManager.get("FFPROBE_PATH", overrides.get("FFPROBE_PATH")),
            words_per_cue=ConfigManager.get_int("WORDS_PER_CUE", overrides.get("WORDS_PER_CUE")),
            seconds_per_cue=ConfigManager.get_int("SECONDS_PER_CUE", overrides.get("SECONDS_PER_CUE")),
            subtitle_style=ConfigManager.get("SUBTITLE_STYLE", overrides.get("SUBTITLE_STYLE")),
            max_pending_jobs=ConfigManager.get_int("MAX_PENDING_JOBS", overrides.get("MAX_PENDING_JOBS")),
            max_upload_mb=ConfigManager.get_int("MAX_UPLOAD_MB", overrides.get("MAX_UPLOAD_MB")),
            log_level=str(ConfigManager.get("LOG_LEVEL", overrides.get("LOG_LEVEL"))).upper(),
        )
