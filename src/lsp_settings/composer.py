# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Compose per-server configuration schemas into the plugin schema."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, cast

from .config import SettingsUIConfig
from .errors import MalformedServerSpecError
from .models import DefaultsTable, SchemaComposition, ServerSpec
from .references import inline_local_references
from .types import BASE_SERVER_DEFINITION, LANGUAGE_SERVERS_KEY, SERVER_SETTINGS_KEY, JSONObject, JSONValue
from .utils import deep_copy_json, ensure_object, expect_mapping

LOGGER = logging.getLogger(__name__)


def get_defaults(properties: JSONValue | None) -> dict[str, Any]:
    """Collect the ``default`` of every property that declares one.

    Args:
        properties: ``properties`` table of a JSON schema, possibly absent.

    Returns:
        dict[str, Any]: Property names mapped to copies of their defaults.
    """

    if not isinstance(properties, Mapping):
        return {}
    defaults: dict[str, Any] = {}
    for key, value in properties.items():
        if isinstance(value, Mapping) and "default" in value:
            defaults[key] = deep_copy_json(value["default"])
    return defaults


def language_servers_node(schema: JSONObject) -> JSONObject:
    """Return the mutable ``properties.language_servers`` node of ``schema``.

    Raises:
        SchemaTemplateError: If the plugin schema lacks the node.
    """

    properties = expect_mapping(schema.get("properties"), key="properties", context="plugin schema")
    node = expect_mapping(properties.get(LANGUAGE_SERVERS_KEY), key=LANGUAGE_SERVERS_KEY, context="plugin schema")
    return cast(JSONObject, node)


def base_server_template(schema: Mapping[str, JSONValue]) -> Mapping[str, JSONValue]:
    """Return the ``definitions["language-server"]`` template of ``schema``.

    Raises:
        SchemaTemplateError: If the template is missing.
    """

    definitions = expect_mapping(schema.get("definitions"), key="definitions", context="plugin schema")
    return expect_mapping(
        definitions.get(BASE_SERVER_DEFINITION),
        key=BASE_SERVER_DEFINITION,
        context="plugin schema definitions",
    )


@dataclass(slots=True)
class SchemaComposer:
    """Build the ``language_servers`` schema from the servers in the catalog."""

    config: SettingsUIConfig = field(default_factory=SettingsUIConfig)

    def compose(
        self,
        specs: Iterable[ServerSpec],
        base_template: Mapping[str, JSONValue],
        shared_defaults: Mapping[str, Any],
    ) -> SchemaComposition:
        """Compose one schema entry and one defaults entry per usable server spec.

        Args:
            specs: Server specs in catalog order.
            base_template: Schema wrapping each server's ``serverSettings``.
            shared_defaults: Defaults shared by every server entry.

        Returns:
            SchemaComposition: Known server schemas and the defaults table.
        """

        known_servers: JSONObject = {}
        defaults: DefaultsTable = {}
        for spec in specs:
            try:
                server_schema = self.server_settings_schema(spec)
            except MalformedServerSpecError as exc:
                LOGGER.warning("%s", exc)
                continue
            wrapper = deep_copy_json(base_template)
            ensure_object(wrapper, "properties")[SERVER_SETTINGS_KEY] = server_schema
            known_servers[spec.key] = wrapper
            defaults[spec.key] = {
                **deep_copy_json(shared_defaults),
                SERVER_SETTINGS_KEY: get_defaults(server_schema["properties"]),
            }
        return SchemaComposition(known_servers=known_servers, defaults=defaults)

    def server_settings_schema(self, spec: ServerSpec) -> JSONObject:
        """Return a processed copy of ``spec.config_schema``.

        Raises:
            MalformedServerSpecError: If the spec has no key, schema, or properties.
        """

        if spec.key == "":
            raise MalformedServerSpecError(spec.key, "Empty server key")
        if spec.config_schema is None:
            raise MalformedServerSpecError(spec.key, "No config schema")
        if not isinstance(spec.config_schema.get("properties"), Mapping):
            raise MalformedServerSpecError(spec.key, "No properties in config schema")

        schema: JSONObject = deep_copy_json(spec.config_schema)
        if spec.has_live_session:
            template = self.config.detected_description
        else:
            template = self.config.undetected_description
        schema["description"] = template.format(display_name=spec.display_name)
        schema["title"] = self.config.schema_title
        inline_local_references(schema, context=spec.key)
        return schema

    def populate(self, schema: JSONObject, specs: Iterable[ServerSpec]) -> SchemaComposition:
        """Compose ``specs`` into ``schema`` in place.

        ``language_servers.properties`` and ``language_servers.default`` are
        replaced with the composed entries.

        Raises:
            SchemaTemplateError: If ``schema`` lacks the language server scaffolding.
        """

        node = language_servers_node(schema)
        template = base_server_template(schema)
        composition = self.compose(specs, template, get_defaults(node.get("properties")))
        node["properties"] = composition.known_servers
        node["default"] = composition.defaults
        return composition


__all__ = ["SchemaComposer", "base_server_template", "get_defaults", "language_servers_node"]
