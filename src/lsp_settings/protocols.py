# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Host collaborator contracts consumed by the settings UI manager."""

# pylint: disable=too-few-public-methods -- Protocol definitions intentionally expose minimal method surfaces.

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, runtime_checkable

from .models import SettingsPlugin, ValidationIssue

FetchHook = Callable[[SettingsPlugin], SettingsPlugin]
ComposeHook = Callable[[SettingsPlugin], SettingsPlugin]


@runtime_checkable
class DataValidator(Protocol):
    """Validate plugin records against the schema they carry."""

    def validate_data(self, plugin: SettingsPlugin, strict: bool = True) -> list[ValidationIssue] | None:
        """Return ``None`` when ``plugin`` is valid, otherwise the reported errors."""

        raise NotImplementedError


@runtime_checkable
class SettingRegistry(Protocol):
    """Settings registry hosting plugin schemas and user data."""

    @property
    def validator(self) -> DataValidator:
        """Return the validator used by the registry."""

        raise NotImplementedError

    def transform(self, plugin_id: str, *, fetch: FetchHook, compose: ComposeHook) -> None:
        """Register ``fetch`` and ``compose`` hooks for ``plugin_id``."""

        raise NotImplementedError

    def reload(self, plugin_id: str) -> Awaitable[object] | None:
        """Reload ``plugin_id``; implementations may return an awaitable."""

        raise NotImplementedError


@runtime_checkable
class ConflictDialog(Protocol):
    """Modal notification surface used to report collapse conflicts."""

    def show(self, body: str, *, title: str, buttons: Sequence[str]) -> Awaitable[object] | None:
        """Display ``body`` with the given acknowledgement ``buttons``."""

        raise NotImplementedError


__all__ = ["ComposeHook", "ConflictDialog", "DataValidator", "FetchHook", "SettingRegistry"]
