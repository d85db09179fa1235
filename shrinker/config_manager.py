"""Configuration management for the video shrinker."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional


DEFAULT_CONFIG_FILE = "shrinker.json"

DEFAULTS: Dict[str, Any] = {
    "video_extensions": [".mp4", ".mov"],
    "marker_directory": "Completed",
    "video_codec": "auto",
    "audio_codec": "copy",
    "ffmpeg_path": "ffmpeg",
    "ffprobe_path": "ffprobe",
    "log_file": "compression_report.txt",
    "max_line_length": 256 * 1024,
    "show_progress": True,
}

# Hardware encoder where the platform reliably ships one, software HEVC elsewhere
PLATFORM_CODECS = {
    "darwin": "hevc_videotoolbox",
}
FALLBACK_CODEC = "libx265"

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""
    pass


def platform_codec(platform: Optional[str] = None) -> str:
    """
    Pick the video encoder for the running platform.

    Args:
        platform: Platform string as reported by ``sys.platform`` (default: current)

    Returns:
        FFmpeg encoder name
    """
    platform = platform or sys.platform
    return PLATFORM_CODECS.get(platform, FALLBACK_CODEC)


class ConfigManager:
    """Loads optional settings from shrinker.json and validates them."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_FILE):
        """
        Initialize ConfigManager with path to configuration file.

        The file is optional; every missing key falls back to its default.

        Args:
            config_path: Path to the JSON configuration file (default: "shrinker.json")
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = dict(DEFAULTS)
        self._load_and_validate()

    def _load_and_validate(self):
        """Load and validate configuration on initialization."""
        try:
            overrides = self.load_config()
            merged = dict(DEFAULTS)
            merged.update(overrides)
            self.validate_config(merged)
            self._config = merged
        except ConfigurationError:
            logger.error(f"Configuration error: Failed to load or validate {self.config_path}")
            raise

    def load_config(self) -> Dict[str, Any]:
        """
        Read and parse JSON configuration from file.

        Returns:
            Dictionary of overrides, empty when the file does not exist

        Raises:
            ConfigurationError: If the file is unreadable or contains invalid JSON
        """
        if not self.config_path.exists():
            logger.debug(f"No configuration file at {self.config_path}, using defaults")
            return {}

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration file: {e}")

        if not isinstance(config, dict):
            raise ConfigurationError("Configuration file must contain a JSON object")

        unknown = sorted(set(config) - set(DEFAULTS))
        for key in unknown:
            logger.debug(f"Ignoring unknown configuration key: {key}")
            del config[key]

        logger.debug(f"Configuration overrides: {config}")
        return config

    def validate_config(self, config: Dict[str, Any]) -> bool:
        """
        Verify that every field has a usable value.

        Args:
            config: Merged configuration dictionary to validate

        Returns:
            True if configuration is valid

        Raises:
            ConfigurationError: If validation fails
        """
        extensions = config["video_extensions"]
        if not isinstance(extensions, list) or not extensions:
            raise ConfigurationError("'video_extensions' must be a non-empty list")
        for ext in extensions:
            if not isinstance(ext, str) or not ext.strip(".").strip():
                raise ConfigurationError(f"Invalid video extension: {ext!r}")

        for field in ("marker_directory", "video_codec", "audio_codec",
                      "ffmpeg_path", "ffprobe_path", "log_file"):
            value = config[field]
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(
                    f"'{field}' must be a non-empty string, got {type(value).__name__}"
                )

        marker = config["marker_directory"]
        if "/" in marker or "\\" in marker or marker in (".", ".."):
            raise ConfigurationError(f"'marker_directory' must be a plain directory name: {marker!r}")

        max_line = config["max_line_length"]
        # bool is an int subclass
        if isinstance(max_line, bool) or not isinstance(max_line, int) or max_line <= 0:
            raise ConfigurationError("'max_line_length' must be a positive integer")

        if not isinstance(config["show_progress"], bool):
            raise ConfigurationError(
                f"'show_progress' must be a boolean, got {type(config['show_progress']).__name__}"
            )

        return True

    @property
    def video_extensions(self) -> FrozenSet[str]:
        """Eligible extensions, lower-cased with a leading dot."""
        return frozenset(
            "." + ext.strip().lstrip(".").lower() for ext in self._config["video_extensions"]
        )

    @property
    def marker_directory(self) -> str:
        return self._config["marker_directory"]

    @property
    def video_codec(self) -> str:
        """Get the video encoder, resolving "auto" for the running platform."""
        codec = self._config["video_codec"]
        if codec == "auto":
            return platform_codec()
        return codec

    @property
    def audio_codec(self) -> str:
        return self._config["audio_codec"]

    @property
    def ffmpeg_path(self) -> str:
        return self._config["ffmpeg_path"]

    @property
    def ffprobe_path(self) -> str:
        return self._config["ffprobe_path"]

    @property
    def log_file(self) -> Path:
        return Path(self._config["log_file"])

    @property
    def max_line_length(self) -> int:
        return self._config["max_line_length"]

    @property
    def show_progress(self) -> bool:
        return self._config["show_progress"]
