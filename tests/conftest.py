# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import copy
from collections.abc import Callable, Sequence
from typing import Any

import pytest

from lsp_settings import (
    JsonSchemaDataValidator,
    PluginData,
    ServerSpec,
    SettingsPlugin,
    StaticServerCatalog,
    ValidationIssue,
)


class FakeRegistry:
    """Minimal settings registry driving the transform hooks like a host would."""

    def __init__(self, schema: dict[str, Any], *, validator: Any = None, raw: str = "{}") -> None:
        self.validator = validator or JsonSchemaDataValidator()
        self.schema = schema
        self.raw = raw
        self.hooks: dict[str, tuple[Callable[..., SettingsPlugin], Callable[..., SettingsPlugin]]] = {}
        self.reloads: list[str] = []

    def transform(self, plugin_id: str, *, fetch: Callable[..., SettingsPlugin], compose: Callable[..., SettingsPlugin]) -> None:
        self.hooks[plugin_id] = (fetch, compose)

    def reload(self, plugin_id: str) -> None:
        self.reloads.append(plugin_id)

    def load(self, plugin_id: str, user: dict[str, Any] | None = None) -> SettingsPlugin:
        fetch, compose = self.hooks[plugin_id]
        plugin = SettingsPlugin(
            id=plugin_id,
            schema=copy.deepcopy(self.schema),
            raw=self.raw,
            version="1.0.0",
            data=PluginData(user=user if user is not None else {}),
        )
        return compose(fetch(plugin))


class RejectingValidator:
    """Validator that rejects every record and remembers what it saw."""

    def __init__(self) -> None:
        self.records: list[SettingsPlugin] = []

    def validate_data(self, plugin: SettingsPlugin, strict: bool = True) -> list[ValidationIssue] | None:
        self.records.append(plugin)
        return [ValidationIssue(message="rejected", keyword="test")]


class AcceptingValidator:
    """Validator that accepts every record and remembers what it saw."""

    def __init__(self) -> None:
        self.records: list[SettingsPlugin] = []

    def validate_data(self, plugin: SettingsPlugin, strict: bool = True) -> list[ValidationIssue] | None:
        self.records.append(plugin)
        return None


class RecordingDialog:
    """Conflict dialog capturing every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, Sequence[str]]] = []

    def show(self, body: str, *, title: str, buttons: Sequence[str]) -> None:
        self.calls.append((body, title, tuple(buttons)))


@pytest.fixture
def plugin_schema() -> dict[str, Any]:
    """Return a plugin schema whose ``language_servers`` node declares no properties."""

    return {
        "type": "object",
        "definitions": {
            "language-server": {
                "type": "object",
                "properties": {
                    "priority": {"type": "number", "default": 50},
                    "serverSettings": {"type": "object", "default": {}},
                },
            },
        },
        "properties": {
            "language_servers": {
                "type": "object",
                "patternProperties": {".*": {"$ref": "#/definitions/language-server"}},
            },
        },
    }


@pytest.fixture
def pyls_spec() -> ServerSpec:
    """Return a live spec with a single defaulted property."""

    return ServerSpec(
        key="pyls",
        display_name="Python LS",
        config_schema={"properties": {"maxLineLength": {"type": "number", "default": 80}}},
        has_live_session=True,
    )


@pytest.fixture
def rust_spec() -> ServerSpec:
    """Return a spec without a live session."""

    return ServerSpec(
        key="rust-analyzer",
        display_name="Rust Analyzer",
        config_schema={
            "definitions": {"features": {"type": "array", "items": {"type": "string"}, "default": ["all"]}},
            "properties": {
                "cargo.features": {"$ref": "#/definitions/features"},
                "checkOnSave": {"type": "boolean", "default": True},
            },
        },
    )


@pytest.fixture
def catalog(pyls_spec: ServerSpec, rust_spec: ServerSpec) -> StaticServerCatalog:
    """Return a catalog holding the python and rust specs."""

    return StaticServerCatalog([pyls_spec, rust_spec])


@pytest.fixture
def registry(plugin_schema: dict[str, Any]) -> FakeRegistry:
    """Return a fake registry backed by the ``jsonschema`` validator."""

    return FakeRegistry(plugin_schema)


@pytest.fixture
def make_registry(plugin_schema: dict[str, Any]) -> Callable[..., FakeRegistry]:
    """Return a factory building fake registries around ``plugin_schema``."""

    def _factory(*, validator: Any = None, schema: dict[str, Any] | None = None, raw: str = "{}") -> FakeRegistry:
        return FakeRegistry(schema if schema is not None else plugin_schema, validator=validator, raw=raw)

    return _factory


@pytest.fixture
def rejecting_validator() -> RejectingValidator:
    """Return a validator that rejects everything."""

    return RejectingValidator()


@pytest.fixture
def accepting_validator() -> AcceptingValidator:
    """Return a validator that accepts everything."""

    return AcceptingValidator()


@pytest.fixture
def recording_dialog() -> RecordingDialog:
    """Return a dialog that records its calls."""

    return RecordingDialog()
