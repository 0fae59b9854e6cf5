"""Configuration service for managing Pomoplan settings.

This module provides the ConfigService class, the single source of truth for
user settings. It handles:

- Loading and saving config.json
- Config file initialization with sensible defaults
- Dotted-key get/set used by the CLI
- Timer preset lookup
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError

from pomoplan.models.config_models import AppConfig, TimerPreset
from pomoplan.models.exceptions import ConfigurationError


class ConfigService:
    """Service for managing application configuration.

    Args:
        config_dir: Override for the config directory (tests)
        data_dir: Override for the data directory holding tasks.json
    """

    def __init__(self, config_dir: Path | None = None, data_dir: Path | None = None):
        self.config_dir = Path(config_dir or user_config_dir("pomoplan"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(data_dir or user_data_dir("pomoplan"))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    @property
    def tasks_path(self) -> Path:
        return self.data_dir / "tasks.json"

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run
            self._config = AppConfig()
            self.save_config()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))
        except Exception as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self) -> AppConfig:
        """Reset configuration to defaults."""
        self._config = AppConfig()
        self.save_config()
        return self._config

    def get(self, key: str) -> Any:
        """Read a setting by dotted key, e.g. ``notifications.reminders``."""
        value: Any = self.config
        for part in key.split("."):
            if not hasattr(value, part):
                raise ConfigurationError(f"Unknown setting: {key}")
            value = getattr(value, part)
        return value

    def set(self, key: str, value: Any) -> AppConfig:
        """Update a setting by dotted key and persist.

        The whole config is re-validated, so type coercion and bounds checks
        apply exactly as when loading.

        Raises:
            ConfigurationError: If the key is unknown or the value invalid
        """
        data = self.config.model_dump()
        target = data
        parts = key.split(".")
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                raise ConfigurationError(f"Unknown setting: {key}")
            target = target[part]
        if parts[-1] not in target:
            raise ConfigurationError(f"Unknown setting: {key}")
        target[parts[-1]] = value

        try:
            self._config = AppConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid value for {key}: {e}") from e
        self.save_config()
        return self._config

    def apply_preset(self, name: str) -> TimerPreset:
        """Make a named preset the default focus/break lengths."""
        preset = self.config.get_timer_preset(name)
        if preset is None:
            raise ConfigurationError(f"Unknown timer preset: {name}")
        self.config.focus_duration = preset.focus_duration
        self.config.break_duration = preset.break_duration
        self.save_config()
        return preset


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
