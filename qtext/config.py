"""Protocol limits and logging configuration with YAML + env vars + override support."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from qtext.spec import MAX_INFO_KEY, MAX_INFO_STRING, MAX_INFO_VALUE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InfoLimits:
    """Byte bounds of an info string and its fields. All bounds are exclusive."""

    max_info_string: int = MAX_INFO_STRING
    max_info_key: int = MAX_INFO_KEY
    max_info_value: int = MAX_INFO_VALUE

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 2:
                raise ValueError(f"{f.name} must be an integer >= 2, got {value!r}")
        if self.max_info_key >= self.max_info_string:
            raise ValueError("max_info_key must be smaller than max_info_string")
        if self.max_info_value >= self.max_info_string:
            raise ValueError("max_info_value must be smaller than max_info_string")


DEFAULT_LIMITS = InfoLimits()


@dataclass
class ProtocolConfig:
    max_info_string: int = MAX_INFO_STRING
    max_info_key: int = MAX_INFO_KEY
    max_info_value: int = MAX_INFO_VALUE

    def limits(self) -> InfoLimits:
        return InfoLimits(
            max_info_string=self.max_info_string,
            max_info_key=self.max_info_key,
            max_info_value=self.max_info_value,
        )


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class AppConfig:
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Mapping: env var name -> (section, field)
_ENV_MAPPING: dict[str, tuple[str, str]] = {
    "QTEXT_MAX_INFO_STRING": ("protocol", "max_info_string"),
    "QTEXT_MAX_INFO_KEY": ("protocol", "max_info_key"),
    "QTEXT_MAX_INFO_VALUE": ("protocol", "max_info_value"),
    "QTEXT_LOG_LEVEL": ("logging", "level"),
}


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Load configuration with priority: YAML < env vars < CLI overrides.

    Args:
        config_path: Path to YAML config file. None to skip.
        cli_overrides: Dict of overrides in format {"section.field": value}.
            None values are skipped (option was not provided).

    The protocol section is checked by building its InfoLimits, so a bad
    combination fails here instead of at the first codec call.
    """
    config = AppConfig()

    if config_path:
        _apply_yaml(config, config_path)

    _apply_env_vars(config)

    if cli_overrides:
        _apply_overrides(config, cli_overrides)

    config.protocol.limits()
    return config


def _apply_yaml(config: AppConfig, config_path: str) -> None:
    path = Path(config_path)
    if not path.is_file():
        logger.warning("Config file not found: %s, using defaults", config_path)
        return

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        logger.warning("Config file is not a valid YAML mapping: %s", config_path)
        return

    for section_name, section_data in data.items():
        if not isinstance(section_data, dict):
            continue
        section = getattr(config, section_name, None)
        if section is None:
            logger.debug("Unknown config section: %s", section_name)
            continue
        for key, value in section_data.items():
            if value is not None:
                _set_field_value(section, key, value)

    logger.info("Loaded config from %s", config_path)


def _apply_env_vars(config: AppConfig) -> None:
    for env_name, (section_name, field_name) in _ENV_MAPPING.items():
        value = os.environ.get(env_name)
        if value is None:
            continue
        _set_field_value(getattr(config, section_name), field_name, value)


def _apply_overrides(config: AppConfig, overrides: dict[str, Any]) -> None:
    for key, value in overrides.items():
        if value is None:
            continue
        parts = key.split(".", 1)
        if len(parts) != 2:
            continue
        section_name, field_name = parts
        section = getattr(config, section_name, None)
        if section is None:
            continue
        _set_field_value(section, field_name, value)


def _set_field_value(obj: Any, field_name: str, value: Any) -> None:
    """Set a dataclass field, coercing to the type of its default."""
    field_info = {f.name: f for f in fields(obj)}.get(field_name)
    if field_info is None:
        logger.debug("Unknown config field: %s", field_name)
        return

    current = getattr(obj, field_name)
    if isinstance(current, int):
        try:
            value = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"Config field {field_name} expects an integer, got {value!r}")
    else:
        value = str(value)
    setattr(obj, field_name, value)
