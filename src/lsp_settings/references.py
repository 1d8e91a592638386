# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Inline ``$ref`` pointers that target a fragment's own ``definitions``."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .errors import UnsupportedReferenceError
from .types import LOCAL_DEFINITIONS_PREFIX, REF_KEY, JSONObject, JSONValue
from .utils import deep_copy_json

LOGGER = logging.getLogger(__name__)


def resolve_local_reference(reference: JSONValue, definitions: JSONValue) -> Mapping[str, JSONValue]:
    """Return the definition ``reference`` points at.

    Args:
        reference: Value of a ``$ref`` key.
        definitions: The fragment's ``definitions`` table, if any.

    Returns:
        Mapping[str, JSONValue]: Definition referenced by ``reference``.

    Raises:
        UnsupportedReferenceError: If ``reference`` is not of the form
            ``#/definitions/<name>`` or the definition does not exist.
    """

    if not isinstance(reference, str) or not reference.startswith(LOCAL_DEFINITIONS_PREFIX):
        raise UnsupportedReferenceError(str(reference), "Unsupported $ref")
    name = reference[len(LOCAL_DEFINITIONS_PREFIX) :]
    definition = definitions.get(name) if isinstance(definitions, Mapping) else None
    if not isinstance(definition, Mapping):
        raise UnsupportedReferenceError(reference, "Definition not found")
    return definition


def inline_local_references(schema: JSONObject, *, context: str) -> tuple[str, ...]:
    """Replace top-level property ``$ref`` pointers with their definitions, in place.

    Properties whose reference cannot be resolved keep their ``$ref`` key.

    Args:
        schema: Mutable copy of a server's configuration schema.
        context: Server key used in log messages.

    Returns:
        tuple[str, ...]: References that were left unresolved.
    """

    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return ()
    definitions = schema.get("definitions")
    unresolved: list[str] = []
    for name, value in properties.items():
        if not isinstance(value, dict) or REF_KEY not in value:
            continue
        try:
            definition = resolve_local_reference(value[REF_KEY], definitions)
        except UnsupportedReferenceError as exc:
            LOGGER.warning("%s (server %s, property %s)", exc, context, name)
            unresolved.append(exc.reference)
            continue
        for def_key, def_value in definition.items():
            value[def_key] = deep_copy_json(def_value)
        value.pop(REF_KEY, None)
    return tuple(unresolved)


__all__ = ["inline_local_references", "resolve_local_reference"]
