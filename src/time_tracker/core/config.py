"""Configuration for the time tracker.

Values come from, in increasing precedence: built-in defaults, an optional
JSON config file, ``TIME_TRACKER_*`` environment variables and finally
explicit overrides (the CLI options).
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator

from time_tracker.core.history_store import DEFAULT_HISTORY_FILE

logger = logging.getLogger(__name__)

ENV_PREFIX = "TIME_TRACKER_"
CONFIG_ENV_VAR = f"{ENV_PREFIX}CONFIG"

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(ValueError):
    """Raised when a config file or value cannot be used."""


class TrackerConfig(BaseModel):
    """Runtime settings for the tracker."""

    history_file: Path = Path(DEFAULT_HISTORY_FILE)
    log_file: Optional[Path] = None
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def _from_environ(environ: Mapping[str, str]) -> Dict[str, Any]:
    values = {}
    for field in TrackerConfig.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{field.upper()}")
        if raw:
            values[field] = raw
    return values


def load_config(
    config_file: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> TrackerConfig:
    """Build a :class:`TrackerConfig` from all configuration sources.

    ``None`` values in ``overrides`` are ignored so CLI options that were not
    given do not mask lower-precedence sources.
    """
    if environ is None:
        environ = os.environ
    if config_file is None and environ.get(CONFIG_ENV_VAR):
        config_file = Path(environ[CONFIG_ENV_VAR])

    values: Dict[str, Any] = {}
    if config_file is not None:
        values.update(_read_config_file(Path(config_file)))
        logger.debug("Loaded config file %s", config_file)
    values.update(_from_environ(environ))
    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return TrackerConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
