from __future__ import annotations

import logging
from pathlib import Path

import pytest

from fixit_rewriter.config import ConfigError, load_config, resolve_settings


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    settings = resolve_settings(load_config(tmp_path / "fixit.yaml"), env={})

    assert settings.marker == "fixit"
    assert settings.encoding == "utf-8"
    assert settings.log_level == logging.WARNING


def test_config_file_overrides_defaults(tmp_path: Path) -> None:
    path = tmp_path / "fixit.yaml"
    path.write_text("output:\n  marker: patched\nlogging:\n  level: debug\n", encoding="utf-8")

    config = load_config(path)
    settings = resolve_settings(config, env={})

    assert config["output"]["encoding"] == "utf-8"
    assert settings.marker == "patched"
    assert settings.log_level == logging.DEBUG


def test_environment_marker_applies_when_file_sets_no_marker(tmp_path: Path) -> None:
    settings = resolve_settings(load_config(None), env={"FIXIT_OUTPUT_MARKER": "auto"})

    assert settings.marker == "auto"


def test_invalid_marker_values_are_ignored() -> None:
    settings = resolve_settings({"output": {"marker": "../escape"}}, env={"FIXIT_OUTPUT_MARKER": "a/b"})

    assert settings.marker == "fixit"


def test_non_mapping_config_raises(tmp_path: Path) -> None:
    path = tmp_path / "fixit.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_explicit_default_marker_in_file_beats_environment(tmp_path: Path) -> None:
    path = tmp_path / "fixit.yaml"
    path.write_text("output:\n  marker: fixit\n", encoding="utf-8")

    settings = resolve_settings(load_config(path), env={"FIXIT_OUTPUT_MARKER": "auto"})

    assert settings.marker == "fixit"
