# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared type aliases and schema keys for language server settings."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Final, TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | Sequence["JSONValue"] | Mapping[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, Any]

LANGUAGE_SERVERS_KEY: Final[str] = "language_servers"
SERVER_SETTINGS_KEY: Final[str] = "serverSettings"
BASE_SERVER_DEFINITION: Final[str] = "language-server"
LOCAL_DEFINITIONS_PREFIX: Final[str] = "#/definitions/"
REF_KEY: Final[str] = "$ref"
DOTTED_SEPARATOR: Final[str] = "."

__all__ = [
    "BASE_SERVER_DEFINITION",
    "DOTTED_SEPARATOR",
    "JSONObject",
    "JSONPrimitive",
    "JSONValue",
    "LANGUAGE_SERVERS_KEY",
    "LOCAL_DEFINITIONS_PREFIX",
    "REF_KEY",
    "SERVER_SETTINGS_KEY",
]
