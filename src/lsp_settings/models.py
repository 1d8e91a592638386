# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Value objects exchanged between the composer, the gate, and the host registry."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, TypeAlias

from .errors import MalformedServerSpecError
from .types import JSONObject, JSONValue
from .utils import deep_copy_json, optional_mapping, optional_string

ConflictReport: TypeAlias = dict[str, dict[str, list[Any]]]
DefaultsTable: TypeAlias = dict[str, JSONObject]


@dataclass(frozen=True, slots=True)
class ServerSpec:
    """Language server metadata supplied by the server catalog.

    The ``config_schema`` fragment belongs to the catalog; consumers copy it
    before making any change.
    """

    key: str
    display_name: str
    config_schema: Mapping[str, JSONValue] | None = None
    has_live_session: bool = False

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, context: str = "<spec>") -> ServerSpec:
        """Create a ``ServerSpec`` from a JSON mapping.

        Args:
            data: Mapping with ``key``, ``display_name``, ``config_schema`` and
                ``has_live_session`` entries.
            context: Human-readable context used in error messages.

        Returns:
            ServerSpec: Frozen spec instance.

        Raises:
            MalformedServerSpecError: If ``key`` is not a string.
        """

        key = data.get("key")
        if not isinstance(key, str):
            raise MalformedServerSpecError(context, "Server key must be a string")
        display_name = optional_string(data.get("display_name")) or key
        schema = optional_mapping(data.get("config_schema"))
        return ServerSpec(
            key=key,
            display_name=display_name,
            config_schema=MappingProxyType(deep_copy_json(schema)) if schema is not None else None,
            has_live_session=bool(data.get("has_live_session", False)),
        )


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """Single error reported by the host data validator."""

    message: str
    keyword: str = ""
    data_path: str = ""
    schema_path: str = ""


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Result of submitting a composed schema to the validator."""

    errors: tuple[ValidationIssue, ...] = ()

    @property
    def valid(self) -> bool:
        """Return ``True`` when the validator reported no errors."""

        return not self.errors


@dataclass(slots=True)
class PluginData:
    """User overrides as persisted plus the effective composite view."""

    user: JSONObject = field(default_factory=dict)
    composite: JSONObject = field(default_factory=dict)


@dataclass(slots=True)
class SettingsPlugin:
    """Plugin record exchanged with the host settings registry."""

    id: str
    schema: JSONObject
    raw: str = "{}"
    version: str = ""
    data: PluginData = field(default_factory=PluginData)


@dataclass(frozen=True, slots=True)
class SchemaComposition:
    """Per-server schemas and defaults produced by one composition pass."""

    known_servers: JSONObject
    defaults: DefaultsTable


@dataclass(frozen=True, slots=True)
class CollapseResult:
    """Nested settings produced from dotted keys with any conflicting values."""

    result: JSONObject
    conflicts: dict[str, list[Any]]


__all__ = [
    "CollapseResult",
    "ConflictReport",
    "DefaultsTable",
    "PluginData",
    "SchemaComposition",
    "ServerSpec",
    "SettingsPlugin",
    "ValidationIssue",
    "ValidationOutcome",
]
