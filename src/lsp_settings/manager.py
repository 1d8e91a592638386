# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Wire schema composition and override collapsing into the host settings registry."""

from __future__ import annotations

import logging
from functools import partial

from .cache import CompositionCache
from .catalog import ServerCatalog
from .collapser import ConfigCollapser
from .composer import SchemaComposer
from .config import SettingsUIConfig
from .models import DefaultsTable, PluginData, SettingsPlugin, ValidationIssue
from .protocols import ConflictDialog, SettingRegistry
from .pruner import DefaultPruner
from .scheduling import BackgroundScheduler
from .types import LANGUAGE_SERVERS_KEY
from .utils import deep_copy_json
from .validation import ValidationGate

LOGGER = logging.getLogger(__name__)


class SettingsUIManager:
    """Expose a per-server settings schema for plugins of the host registry.

    One :class:`CompositionCache` is kept per plugin id. Its ``fetch`` hook
    returns the composed schema, its ``compose`` hook collapses dotted
    ``serverSettings`` overrides, and session-set changes in the catalog
    invalidate the cache and trigger a registry reload.
    """

    def __init__(
        self,
        *,
        registry: SettingRegistry,
        catalog: ServerCatalog,
        dialog: ConflictDialog | None = None,
        config: SettingsUIConfig | None = None,
    ) -> None:
        """Create the manager.

        Args:
            registry: Host settings registry receiving the transform hooks.
            catalog: Catalog of known language servers.
            dialog: Optional dialog used to report collapse conflicts.
            config: Behavioural configuration; defaults apply when omitted.
        """

        self._registry = registry
        self._catalog = catalog
        self._config = config or SettingsUIConfig()
        self._composer = SchemaComposer(config=self._config)
        self._gate = ValidationGate(validator=registry.validator, config=self._config)
        self._scheduler = BackgroundScheduler()
        self._collapser = ConfigCollapser(dialog=dialog, config=self._config, scheduler=self._scheduler)
        self._pruner = DefaultPruner(enabled=self._config.prune_defaults)
        self._caches: dict[str, CompositionCache] = {}

    @property
    def config(self) -> SettingsUIConfig:
        """Return the active configuration."""

        return self._config

    @property
    def scheduler(self) -> BackgroundScheduler:
        """Return the scheduler running reload and dialog awaitables."""

        return self._scheduler

    def validation_errors(self, plugin_id: str) -> tuple[ValidationIssue, ...]:
        """Return the errors reported for the latest composed schema of ``plugin_id``.

        The tuple is empty until the first fetch and whenever the latest
        composition was accepted.

        Raises:
            KeyError: If :meth:`setup_schema_for_ui` was not called for ``plugin_id``.
        """

        return self._caches[plugin_id].outcome.errors

    def cache(self, plugin_id: str) -> CompositionCache:
        """Return the composition cache registered for ``plugin_id``.

        Raises:
            KeyError: If :meth:`setup_schema_for_ui` was not called for ``plugin_id``.
        """

        return self._caches[plugin_id]

    def defaults(self, plugin_id: str) -> DefaultsTable:
        """Return the defaults table of the latest composition for ``plugin_id``."""

        return self._caches[plugin_id].defaults

    def setup_schema_for_ui(self, plugin_id: str) -> CompositionCache:
        """Register the transform hooks for ``plugin_id``.

        Must run before anything else touches ``plugin_id`` in the registry.
        Calling it again for the same id returns the existing cache.

        Args:
            plugin_id: Identifier of the plugin whose schema is extended.

        Returns:
            CompositionCache: Cache backing the plugin's composed schema.
        """

        existing = self._caches.get(plugin_id)
        if existing is not None:
            return existing
        cache = CompositionCache(
            catalog=self._catalog,
            composer=self._composer,
            gate=self._gate,
            reload=partial(self._registry.reload, plugin_id),
            scheduler=self._scheduler,
        )
        self._caches[plugin_id] = cache
        self._registry.transform(
            plugin_id,
            fetch=partial(self.fetch, cache),
            compose=partial(self.compose, cache),
        )
        # Subscribe only once the transform exists so a reload cannot race it.
        self._catalog.session_set_changed.connect(cache.on_session_set_changed)
        LOGGER.debug("Registered language server settings transform for %s", plugin_id)
        return cache

    def teardown(self, plugin_id: str) -> None:
        """Stop tracking session changes for ``plugin_id``."""

        cache = self._caches.pop(plugin_id, None)
        if cache is not None:
            self._catalog.session_set_changed.disconnect(cache.on_session_set_changed)

    def fetch(self, cache: CompositionCache, plugin: SettingsPlugin) -> SettingsPlugin:
        """Return ``plugin`` with its schema replaced by the composed schema."""

        schema = cache.fetch(plugin)
        return SettingsPlugin(
            id=plugin.id,
            schema=schema,
            raw=plugin.raw,
            version=plugin.version,
            data=plugin.data,
        )

    def compose(self, cache: CompositionCache, plugin: SettingsPlugin) -> SettingsPlugin:
        """Collapse the user's ``language_servers`` overrides and rebuild the composite view.

        ``plugin.data.user`` is normalised in place; the composite view shares the
        collapsed overrides. With default pruning enabled the user copy is pruned
        against the current defaults while the composite keeps every value.
        """

        user = plugin.data.user
        composite = deep_copy_json(user)
        if LANGUAGE_SERVERS_KEY in user:
            collapsed = self._collapser.collapse_and_notify(user[LANGUAGE_SERVERS_KEY])
            user[LANGUAGE_SERVERS_KEY] = collapsed
            composite[LANGUAGE_SERVERS_KEY] = collapsed
            if self._pruner.enabled:
                user[LANGUAGE_SERVERS_KEY] = self._pruner.prune(collapsed, cache.defaults)
        plugin.data = PluginData(user=user, composite=composite)
        return plugin


__all__ = ["SettingsUIManager"]
