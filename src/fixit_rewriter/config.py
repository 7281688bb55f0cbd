"""Optional YAML configuration for the fix-it rewriter CLI."""

from __future__ import annotations

import copy
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from .tools.output import DEFAULT_OUTPUT_MARKER

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_CONFIG_TEMPLATE",
    "ConfigError",
    "RewriterSettings",
    "load_config",
    "resolve_settings",
]

DEFAULT_CONFIG_NAME = "fixit.yaml"
MARKER_ENV_VAR = "FIXIT_OUTPUT_MARKER"

DEFAULT_CONFIG_TEMPLATE: Dict[str, Any] = {
    "output": {
        "encoding": "utf-8",
    },
    "logging": {
        "level": "WARNING",
    },
}

_MARKER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+(?:\.[A-Za-z0-9_-]+)*$")


class ConfigError(ValueError):
    """Raised when the configuration file is malformed."""


@dataclass(frozen=True, slots=True)
class RewriterSettings:
    """Settings resolved from defaults, environment and the config file."""

    marker: str = DEFAULT_OUTPUT_MARKER
    encoding: str = "utf-8"
    log_level: int = logging.WARNING


def load_config(config_path: Path | None) -> Dict[str, Any]:
    """Load YAML configuration merged over the defaults.

    A missing file yields the defaults. A file that is not a YAML mapping
    raises ``ConfigError``.
    """
    config = copy.deepcopy(DEFAULT_CONFIG_TEMPLATE)
    if config_path is None or not config_path.exists():
        return config
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
    except yaml.YAMLError as error:
        raise ConfigError(f"Failed to parse config: {error}") from error
    if not isinstance(loaded, Mapping):
        raise ConfigError("Configuration must be a mapping at the top level.")
    for section, values in loaded.items():
        if isinstance(values, Mapping) and isinstance(config.get(section), dict):
            config[section].update(values)
        else:
            config[section] = values
    return config


def _valid_marker(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    candidate = value.strip().strip(".")
    if candidate and _MARKER_PATTERN.match(candidate):
        return candidate
    return None


def resolve_settings(
    config: Mapping[str, Any],
    *,
    env: Mapping[str, str] | None = None,
) -> RewriterSettings:
    """Interpret configuration into ``RewriterSettings``.

    A marker set in the config file wins over ``FIXIT_OUTPUT_MARKER``, which
    in turn wins over the built-in default.
    """
    env_mapping = env if env is not None else os.environ

    marker = DEFAULT_OUTPUT_MARKER
    env_marker = _valid_marker(env_mapping.get(MARKER_ENV_VAR))
    if env_marker:
        marker = env_marker

    encoding = "utf-8"
    output_section = config.get("output")
    if isinstance(output_section, Mapping):
        configured = _valid_marker(output_section.get("marker"))
        if configured:
            marker = configured
        candidate = output_section.get("encoding")
        if isinstance(candidate, str) and candidate.strip():
            encoding = candidate.strip()

    log_level = logging.WARNING
    logging_section = config.get("logging")
    if isinstance(logging_section, Mapping):
        level_name = logging_section.get("level")
        if isinstance(level_name, str):
            resolved = logging.getLevelName(level_name.strip().upper())
            if isinstance(resolved, int):
                log_level = resolved
        elif isinstance(level_name, int) and level_name >= 0:
            log_level = level_name

    return RewriterSettings(marker=marker, encoding=encoding, log_level=log_level)
