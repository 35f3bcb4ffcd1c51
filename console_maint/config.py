"""Settings: defaults, then an optional YAML file, then environment overrides."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import yaml

from .errors import ConfigError

ENV_PREFIX = "CONSOLE_MAINT_"


@dataclass
class Settings:
    spool_file: Optional[Path] = None
    reminder_hour: int = 9
    cache_ttl_minutes: float = 5
    history_limit: int = 50
    log_level: str = "WARNING"

    def spool_for(self, collection_file: Union[str, Path]) -> Path:
        """Spool path, defaulting to '<collection>.reminders.yaml' beside the collection."""
        if self.spool_file is not None:
            return Path(self.spool_file)
        path = Path(collection_file)
        return path.with_name(f"{path.stem}.reminders.yaml")


_FILE_KEYS = {
    "spoolFile": "spool_file",
    "reminderHour": "reminder_hour",
    "cacheTtlMinutes": "cache_ttl_minutes",
    "historyLimit": "history_limit",
    "logLevel": "log_level",
}

_ENV_KEYS = {
    "SPOOL": "spool_file",
    "REMINDER_HOUR": "reminder_hour",
    "LOG_LEVEL": "log_level",
}


def _coerce(settings: Settings) -> Settings:
    try:
        if settings.spool_file is not None:
            settings.spool_file = Path(settings.spool_file)
        settings.reminder_hour = int(settings.reminder_hour)
        settings.cache_ttl_minutes = float(settings.cache_ttl_minutes)
        settings.history_limit = int(settings.history_limit)
        settings.log_level = str(settings.log_level).upper()
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid setting: {exc}") from exc

    if not 0 <= settings.reminder_hour <= 23:
        raise ConfigError(f"reminderHour must be 0-23, got {settings.reminder_hour}")
    if settings.cache_ttl_minutes < 0:
        raise ConfigError("cacheTtlMinutes must not be negative")
    if settings.history_limit < 1:
        raise ConfigError("historyLimit must be at least 1")
    if not isinstance(logging.getLevelName(settings.log_level), int):
        raise ConfigError(f"Unknown log level: {settings.log_level}")
    return settings


def load_settings(path: Optional[Union[str, Path]] = None, environ=None) -> Settings:
    """Build Settings from an optional YAML file and CONSOLE_MAINT_* variables."""
    environ = os.environ if environ is None else environ
    settings = Settings()

    if path is not None:
        try:
            with open(path) as fp:
                data = yaml.safe_load(fp) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Cannot read config {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must be a mapping")
        unknown = set(data) - set(_FILE_KEYS)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        for key, attr in _FILE_KEYS.items():
            if key in data:
                setattr(settings, attr, data[key])

    for suffix, attr in _ENV_KEYS.items():
        value = environ.get(ENV_PREFIX + suffix)
        if value:
            setattr(settings, attr, value)

    return _coerce(settings)
