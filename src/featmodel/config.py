"""
Library settings for featmodel.

Settings are process-wide. They are read once at startup (from the
environment, a YAML document, or code) and consulted by the model
layer at call time.

Example YAML:

    log_level: DEBUG
    deduplicate_contained_features: false
    default_name_prefix: "@"
"""

import logging
import os
import threading
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from featmodel.errors import ConfigError


LOGGER_NAME = "featmodel"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    """
    Settings for the featmodel package.

    Attributes:
        log_level: Level applied to the "featmodel" logger by configure_logging
        deduplicate_contained_features: Collapse repeated variable names
            when a constraint resolves its contained features. Off by default,
            so a variable occurring twice yields the feature twice.
        default_name_prefix: Prefix of the generated default NAME attribute
            ("@" + identifier)
    """

    log_level: str = "WARNING"
    deduplicate_contained_features: bool = False
    default_name_prefix: str = "@"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Create settings from environment variables.

        Environment variables:
        - FEATMODEL_LOG_LEVEL: Logging level name
        - FEATMODEL_DEDUPLICATE: "true" to deduplicate contained features
        - FEATMODEL_NAME_PREFIX: Prefix for generated feature names
        """
        return cls(
            log_level=os.getenv("FEATMODEL_LOG_LEVEL", "WARNING").upper(),
            deduplicate_contained_features=os.getenv("FEATMODEL_DEDUPLICATE", "false").lower() == "true",
            default_name_prefix=os.getenv("FEATMODEL_NAME_PREFIX", "@"),
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Settings":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Settings must be a mapping, got {type(data).__name__}")

        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigError(f"Unknown settings: {', '.join(unknown)}")

        for key, value in data.items():
            expected = type(getattr(cls(), key))
            if not isinstance(value, expected):
                raise ConfigError(
                    f"Setting {key!r} expects {expected.__name__}, got {type(value).__name__}"
                )
        return cls(**data)

    @classmethod
    def from_yaml(cls, text: str) -> "Settings":
        """Parse settings from a YAML document."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid settings YAML: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Settings":
        with open(path, "r", encoding="utf-8") as fh:
            return cls.from_yaml(fh.read())

    def to_yaml(self) -> str:
        return yaml.safe_dump({f.name: getattr(self, f.name) for f in fields(self)})

    def with_changes(self, **changes: Any) -> "Settings":
        return replace(self, **changes)


_settings = Settings()
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Return the active process-wide settings."""
    return _settings


def set_settings(settings: Settings) -> Settings:
    """Install new process-wide settings and return the previous ones."""
    global _settings
    with _settings_lock:
        previous = _settings
        _settings = settings
    return previous


def reset_settings() -> None:
    set_settings(Settings())


def configure_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """
    Configure the "featmodel" logger from settings.

    Sets the level and attaches a single stream handler. Calling this more
    than once replaces the handler instead of stacking them.

    Returns:
        The configured package logger
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        raise ConfigError(f"Unknown log level: {settings.log_level}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_featmodel_handler", False):
            logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    console._featmodel_handler = True
    logger.addHandler(console)
    return logger


__all__ = [
    "Settings",
    "get_settings",
    "set_settings",
    "reset_settings",
    "configure_logging",
]
