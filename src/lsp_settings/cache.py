# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Epoch cache holding the composed schema between session-set changes."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from .catalog import ServerCatalog
from .composer import SchemaComposer
from .errors import SchemaTemplateError
from .models import DefaultsTable, SettingsPlugin, ValidationOutcome
from .scheduling import BackgroundScheduler
from .types import JSONObject
from .utils import deep_copy_json
from .validation import ValidationGate

LOGGER = logging.getLogger(__name__)

ReloadRequest = Callable[[], Awaitable[object] | None]


@dataclass(slots=True)
class CompositionCache:
    """Compose the plugin schema lazily, once per session-set epoch.

    The schema seen on the very first fetch is kept for the lifetime of the
    cache and serves as the rollback reference for every later epoch.
    """

    catalog: ServerCatalog
    composer: SchemaComposer
    gate: ValidationGate
    reload: ReloadRequest | None = None
    scheduler: BackgroundScheduler = field(default_factory=BackgroundScheduler)
    _epoch_schema: JSONObject | None = field(default=None, init=False, repr=False)
    _original_schema: JSONObject | None = field(default=None, init=False, repr=False)
    _defaults: DefaultsTable = field(default_factory=dict, init=False, repr=False)
    _outcome: ValidationOutcome = field(default_factory=ValidationOutcome, init=False, repr=False)
    _epoch: int = field(default=0, init=False, repr=False)

    @property
    def epoch(self) -> int:
        """Return the number of compositions performed so far."""

        return self._epoch

    @property
    def defaults(self) -> DefaultsTable:
        """Return the defaults table of the latest composition."""

        return self._defaults

    @property
    def outcome(self) -> ValidationOutcome:
        """Return the validation outcome of the latest composition."""

        return self._outcome

    @property
    def original_schema(self) -> JSONObject | None:
        """Return the schema captured on the first fetch, if any."""

        return self._original_schema

    @property
    def is_current(self) -> bool:
        """Return ``True`` while a composed schema is cached."""

        return self._epoch_schema is not None

    def fetch(self, plugin: SettingsPlugin) -> JSONObject:
        """Return the composed schema for ``plugin``, composing it when the cache is empty.

        Args:
            plugin: Plugin record as provided by the host registry.

        Returns:
            JSONObject: Composed schema; the same object until the cache is invalidated.
        """

        if self._original_schema is None:
            self._original_schema = deep_copy_json(plugin.schema)
        if self._epoch_schema is None:
            self._epoch_schema = self._compose(plugin)
        return self._epoch_schema

    def invalidate(self) -> None:
        """Drop the composed schema; the original schema is kept."""

        self._epoch_schema = None

    def on_session_set_changed(self) -> None:
        """Invalidate the cache and ask the host to reload the plugin."""

        self.invalidate()
        if self.reload is None:
            return
        self.scheduler.submit(self.reload(), description="Settings reload")

    def _compose(self, plugin: SettingsPlugin) -> JSONObject:
        canonical: JSONObject = deep_copy_json(plugin.schema)
        self._epoch += 1
        try:
            composition = self.composer.populate(canonical, self.catalog.specs())
        except SchemaTemplateError as exc:
            LOGGER.error("Cannot compose language server settings for %s: %s", plugin.id, exc)
            self._defaults = {}
            self._outcome = ValidationOutcome()
            return canonical
        self._outcome = self.gate.validate(plugin, canonical, self._original_schema)
        self._defaults = composition.defaults
        return canonical


__all__ = ["CompositionCache", "ReloadRequest"]
