# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Custom exceptions raised while composing language server settings schemas."""

from __future__ import annotations


class SettingsSchemaError(RuntimeError):
    """Base class for schema composition failures."""


class MalformedServerSpecError(SettingsSchemaError):
    """Raised when a server spec cannot contribute to the composed schema."""

    def __init__(self, server_key: str, reason: str) -> None:
        """Create the error for ``server_key`` with a short ``reason``."""

        super().__init__(f"{reason} - skipping transformation for {server_key or '<empty key>'}")
        self.server_key = server_key
        self.reason = reason


class UnsupportedReferenceError(SettingsSchemaError):
    """Raised when a ``$ref`` cannot be inlined from local definitions."""

    def __init__(self, reference: str, message: str) -> None:
        """Create the error for ``reference``."""

        super().__init__(f"{message}: {reference}")
        self.reference = reference


class SchemaTemplateError(SettingsSchemaError):
    """Raised when the plugin schema lacks the language server scaffolding."""


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


__all__ = (
    "ConfigError",
    "MalformedServerSpecError",
    "SchemaTemplateError",
    "SettingsSchemaError",
    "UnsupportedReferenceError",
)
