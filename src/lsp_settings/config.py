# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Configuration model and TOML / ``pyproject.toml`` sources for the settings UI."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ConfigError

PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "lsp-settings"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"

DEFAULT_SCHEMA_TITLE: Final[str] = "Workspace Configuration"
DEFAULT_DETECTED_DESCRIPTION: Final[str] = (
    "Settings to be passed to {display_name} in `workspace/didChangeConfiguration` notification."
)
DEFAULT_UNDETECTED_DESCRIPTION: Final[str] = (
    "Settings that would be passed to `{display_name}` server (this server was not detected as "
    "installed during startup) in `workspace/didChangeConfiguration` notification."
)


class SettingsUIConfig(BaseModel):
    """Behavioural switches and message templates for the settings UI manager."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Pruning stays off: a default redefined server-side would silently change
    # the effective value of a save without any schema version bump.
    prune_defaults: bool = False
    strict_validation: bool = True
    show_conflicts: bool = True
    validation_id_prefix: str = "lsp-validation-attempt"
    schema_title: str = DEFAULT_SCHEMA_TITLE
    detected_description: str = DEFAULT_DETECTED_DESCRIPTION
    undetected_description: str = DEFAULT_UNDETECTED_DESCRIPTION

    @field_validator("detected_description", "undetected_description")
    @classmethod
    def _check_template(cls, value: str) -> str:
        try:
            value.format(display_name="")
        except (IndexError, KeyError, ValueError) as exc:
            raise ValueError(f"description template only accepts '{{display_name}}': {exc}") from exc
        return value


def config_from_mapping(data: Mapping[str, Any], *, source: str = "<mapping>") -> SettingsUIConfig:
    """Build a :class:`SettingsUIConfig` from raw ``data``.

    Keys may use dashes or underscores.

    Raises:
        ConfigError: If ``data`` contains unknown keys or invalid values.
    """

    normalised = {str(key).replace("-", "_"): value for key, value in data.items()}
    try:
        return SettingsUIConfig.model_validate(normalised)
    except ValidationError as exc:
        raise ConfigError(f"{source}: invalid settings UI configuration: {exc}") from exc


def load_config(path: Path | None) -> SettingsUIConfig:
    """Load configuration from a TOML file.

    A ``pyproject.toml`` is read from its ``[tool.lsp-settings]`` table; any other
    file is read as a whole. A missing file yields the defaults.

    Args:
        path: TOML file to read, or ``None`` for the defaults.

    Returns:
        SettingsUIConfig: Parsed configuration.

    Raises:
        ConfigError: If the file is not valid TOML or holds invalid settings.
    """

    if path is None or not path.exists():
        return SettingsUIConfig()
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: failed to parse TOML: {exc}") from exc
    if path.name == PYPROJECT_FILENAME:
        tool_section = document.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return SettingsUIConfig()
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if section is None:
            return SettingsUIConfig()
        if not isinstance(section, Mapping):
            raise ConfigError(f"{path}: [tool.{PYPROJECT_SECTION_KEY}] must be a table")
        document = dict(section)
    return config_from_mapping(document, source=str(path))


__all__ = ["SettingsUIConfig", "config_from_mapping", "load_config"]
