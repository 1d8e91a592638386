# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""End-to-end tests for the settings UI manager against a fake registry."""

from __future__ import annotations

import copy
from typing import Any

from lsp_settings import ServerSpec, SettingsUIConfig, SettingsUIManager, StaticServerCatalog

PLUGIN_ID = "@example/lsp:plugin"


def test_fetch_hook_exposes_composed_schema(registry: Any, catalog: StaticServerCatalog) -> None:
    manager = SettingsUIManager(registry=registry, catalog=catalog)
    manager.setup_schema_for_ui(PLUGIN_ID)

    plugin = registry.load(PLUGIN_ID)

    node = plugin.schema["properties"]["language_servers"]
    assert set(node["properties"]) == {"pyls", "rust-analyzer"}
    assert node["default"]["pyls"] == {"serverSettings": {"maxLineLength": 80}}
    assert manager.validation_errors(PLUGIN_ID) == ()
    assert registry.load(PLUGIN_ID).schema is plugin.schema


def test_setup_is_idempotent(registry: Any, catalog: StaticServerCatalog) -> None:
    manager = SettingsUIManager(registry=registry, catalog=catalog)

    first = manager.setup_schema_for_ui(PLUGIN_ID)

    assert manager.setup_schema_for_ui(PLUGIN_ID) is first
    assert len(catalog.session_set_changed) == 1


def test_compose_hook_collapses_user_overrides(
    registry: Any,
    catalog: StaticServerCatalog,
    recording_dialog: Any,
) -> None:
    manager = SettingsUIManager(registry=registry, catalog=catalog, dialog=recording_dialog)
    manager.setup_schema_for_ui(PLUGIN_ID)
    user = {
        "language_servers": {
            "pyls": {"serverSettings": {"pyls.plugins.jedi.enabled": False, "pyls": {"plugins": {"jedi": {"enabled": True}}}}},
        },
        "logAllCommunication": True,
    }

    plugin = registry.load(PLUGIN_ID, user)

    expected = {"pyls": {"serverSettings": {"pyls": {"plugins": {"jedi": {"enabled": True}}}}}}
    assert plugin.data.user is user
    assert user["language_servers"] == expected
    assert plugin.data.composite == {"language_servers": expected, "logAllCommunication": True}
    assert len(recording_dialog.calls) == 1
    assert "pyls.plugins.jedi.enabled" in recording_dialog.calls[0][0]


def test_compose_hook_without_language_servers(registry: Any, catalog: StaticServerCatalog) -> None:
    SettingsUIManager(registry=registry, catalog=catalog).setup_schema_for_ui(PLUGIN_ID)

    plugin = registry.load(PLUGIN_ID, {"logAllCommunication": False})

    assert plugin.data.user == {"logAllCommunication": False}
    assert plugin.data.composite == {"logAllCommunication": False}


def test_session_change_reloads_and_recomposes(
    registry: Any,
    catalog: StaticServerCatalog,
    pyls_spec: ServerSpec,
) -> None:
    manager = SettingsUIManager(registry=registry, catalog=catalog)
    manager.setup_schema_for_ui(PLUGIN_ID)
    before = registry.load(PLUGIN_ID).schema

    catalog.set_specs([pyls_spec])

    assert registry.reloads == [PLUGIN_ID]
    after = registry.load(PLUGIN_ID).schema
    assert after is not before
    assert list(after["properties"]["language_servers"]["properties"]) == ["pyls"]
    assert list(manager.defaults(PLUGIN_ID)) == ["pyls"]


def test_teardown_stops_reloads(registry: Any, catalog: StaticServerCatalog) -> None:
    manager = SettingsUIManager(registry=registry, catalog=catalog)
    manager.setup_schema_for_ui(PLUGIN_ID)

    manager.teardown(PLUGIN_ID)
    catalog.set_live_sessions([])

    assert registry.reloads == []


def test_validation_errors_surface_and_clear(make_registry: Any, pyls_spec: ServerSpec) -> None:
    broken = ServerSpec(
        key="broken",
        display_name="Broken",
        config_schema={"properties": {"mode": {"$ref": "#/definitions/absent"}}},
    )
    catalog = StaticServerCatalog([pyls_spec, broken])
    registry = make_registry()
    manager = SettingsUIManager(registry=registry, catalog=catalog)
    manager.setup_schema_for_ui(PLUGIN_ID)

    degraded = registry.load(PLUGIN_ID).schema

    assert "properties" not in degraded["properties"]["language_servers"]
    assert manager.validation_errors(PLUGIN_ID)
    assert "#/definitions/absent" in manager.validation_errors(PLUGIN_ID)[0].message

    catalog.set_specs([pyls_spec])
    recovered = registry.load(PLUGIN_ID).schema

    assert list(recovered["properties"]["language_servers"]["properties"]) == ["pyls"]
    assert manager.validation_errors(PLUGIN_ID) == ()


def test_default_pruning_only_touches_user_copy(registry: Any, catalog: StaticServerCatalog) -> None:
    manager = SettingsUIManager(
        registry=registry,
        catalog=catalog,
        config=SettingsUIConfig(prune_defaults=True),
    )
    manager.setup_schema_for_ui(PLUGIN_ID)
    user = {"language_servers": {"pyls": {"serverSettings": {"maxLineLength": 80, "other": 1}}}}

    plugin = registry.load(PLUGIN_ID, user)

    assert plugin.data.user["language_servers"] == {"pyls": {"serverSettings": {"other": 1}}}
    assert plugin.data.composite["language_servers"] == {
        "pyls": {"serverSettings": {"maxLineLength": 80, "other": 1}},
    }


def test_pruning_is_off_by_default(registry: Any, catalog: StaticServerCatalog) -> None:
    manager = SettingsUIManager(registry=registry, catalog=catalog)
    manager.setup_schema_for_ui(PLUGIN_ID)
    user = {"language_servers": {"pyls": {"serverSettings": {"maxLineLength": 80}}}}

    plugin = registry.load(PLUGIN_ID, user)

    assert plugin.data.user["language_servers"] == {"pyls": {"serverSettings": {"maxLineLength": 80}}}
    assert manager.config.prune_defaults is False


def test_empty_catalog_passes_validation_without_rollback(registry: Any) -> None:
    manager = SettingsUIManager(registry=registry, catalog=StaticServerCatalog())
    manager.setup_schema_for_ui(PLUGIN_ID)

    node = registry.load(PLUGIN_ID).schema["properties"]["language_servers"]

    assert manager.cache(PLUGIN_ID).outcome.valid
    assert node["properties"] == {}
    assert node["default"] == {}
    assert manager.validation_errors(PLUGIN_ID) == ()


def test_validation_errors_are_kept_per_plugin(
    plugin_schema: dict[str, Any],
    make_registry: Any,
    pyls_spec: ServerSpec,
) -> None:
    broken_schema = copy.deepcopy(plugin_schema)
    broken_schema["properties"]["language_servers"]["patternProperties"] = {".*": {"$ref": "#/definitions/absent"}}
    registry = make_registry()
    catalog = StaticServerCatalog([pyls_spec])
    manager = SettingsUIManager(registry=registry, catalog=catalog)
    manager.setup_schema_for_ui("broken")
    manager.setup_schema_for_ui(PLUGIN_ID)

    registry.schema = broken_schema
    registry.load("broken")
    registry.schema = plugin_schema
    registry.load(PLUGIN_ID)

    assert manager.validation_errors("broken")
    assert manager.validation_errors(PLUGIN_ID) == ()
