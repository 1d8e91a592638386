# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Validation gate for composed schemas and a ``jsonschema`` backed data validator."""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Final

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError
from jsonschema.protocols import Validator
from jsonschema.validators import validator_for
from referencing import Registry, Resource
from referencing.exceptions import Unresolvable
from referencing.jsonschema import DRAFT7, specification_with

from .composer import get_defaults
from .config import SettingsUIConfig
from .io import parse_raw_settings
from .models import PluginData, SettingsPlugin, ValidationIssue, ValidationOutcome
from .protocols import DataValidator
from .types import LANGUAGE_SERVERS_KEY, REF_KEY, JSONObject

LOGGER = logging.getLogger(__name__)

ROLLBACK_FIELDS: tuple[str, ...] = ("properties", "default")
DEFAULT_MAX_COMPILED: Final[int] = 8


def _pointer(parts: Sequence[object], *, prefix: str) -> str:
    return prefix + "".join(f"/{part}" for part in parts)


def _issue_from_error(error: JsonSchemaValidationError | SchemaError) -> ValidationIssue:
    return ValidationIssue(
        message=error.message,
        keyword=str(error.validator) if error.validator is not None else "",
        data_path=_pointer(list(error.absolute_path), prefix=""),
        schema_path=_pointer(list(error.absolute_schema_path), prefix="#"),
    )


def schema_resource(schema: JSONObject) -> Resource[Any]:
    """Return ``schema`` as a ``referencing`` resource of its declared dialect (Draft 7 by default)."""

    dialect = schema.get("$schema")
    specification = specification_with(dialect, default=DRAFT7) if isinstance(dialect, str) else DRAFT7
    return specification.create_resource(schema)


def iter_subschemas(resource: Resource[Any]) -> Iterator[Resource[Any]]:
    """Yield ``resource`` and every subschema below it.

    Only schema-valued keywords are followed, so ``default``, ``enum``, ``const``
    and ``examples`` values are never treated as schemas.
    """

    yield resource
    for subresource in resource.subresources():
        yield from iter_subschemas(subresource)


def unresolved_references(schema: JSONObject) -> list[str]:
    """Return every ``$ref`` of ``schema`` that does not resolve against ``schema`` itself.

    Args:
        schema: Root schema; no remote documents are retrieved.

    Returns:
        list[str]: Unresolvable references in traversal order.
    """

    root = schema_resource(schema)
    base_uri = root.id() or ""
    resolver = Registry().with_resource(base_uri, root).resolver(base_uri=base_uri)
    unresolved: list[str] = []
    for resource in iter_subschemas(root):
        contents = resource.contents
        if not isinstance(contents, Mapping):
            continue
        reference = contents.get(REF_KEY)
        if not isinstance(reference, str):
            continue
        try:
            resolver.lookup(reference)
        except Unresolvable:
            unresolved.append(reference)
    return unresolved


class JsonSchemaDataValidator(DataValidator):
    """Validate plugin records with ``jsonschema``, caching compiled schemas by plugin id.

    Compiled validators are reused for every record sharing an id, so a caller
    submitting a new schema must also submit a new id. Only the most recently
    used ``max_compiled`` validators are kept.
    """

    def __init__(self, *, max_compiled: int = DEFAULT_MAX_COMPILED) -> None:
        """Initialise an empty compiled-schema cache.

        Args:
            max_compiled: Number of compiled validators kept before the least
                recently used one is evicted.

        Raises:
            ValueError: If ``max_compiled`` is not positive.
        """

        if max_compiled < 1:
            raise ValueError("max_compiled must be at least 1")
        self._max_compiled = max_compiled
        self._compiled: OrderedDict[str, Validator] = OrderedDict()

    @property
    def cached_ids(self) -> tuple[str, ...]:
        """Return the plugin ids with a compiled validator, oldest first."""

        return tuple(self._compiled)

    def validate_data(self, plugin: SettingsPlugin, strict: bool = True) -> list[ValidationIssue] | None:
        """Validate the raw settings of ``plugin`` against its schema.

        In strict mode the schema itself is checked first: it must conform to its
        metaschema and every ``$ref`` must resolve. On success the parsed settings
        populate ``plugin.data``.

        Args:
            plugin: Record carrying the schema and raw settings text.
            strict: Whether the schema itself is checked before the data.

        Returns:
            list[ValidationIssue] | None: ``None`` when valid, otherwise the errors.
        """

        validator = self._compiled_for(plugin, strict=strict)
        if isinstance(validator, list):
            return validator

        try:
            data = parse_raw_settings(plugin.raw)
        except json.JSONDecodeError as exc:
            return [ValidationIssue(message=f"raw settings are not valid JSON: {exc}", keyword="parse")]

        try:
            issues = [_issue_from_error(error) for error in validator.iter_errors(data)]
        except Unresolvable as exc:
            return [ValidationIssue(message=f"can't resolve reference: {exc}", keyword=REF_KEY)]
        if issues:
            return issues

        if isinstance(data, dict):
            plugin.data = PluginData(
                user=data,
                composite={**get_defaults(plugin.schema.get("properties")), **data},
            )
        return None

    def _compiled_for(self, plugin: SettingsPlugin, *, strict: bool) -> Validator | list[ValidationIssue]:
        validator = self._compiled.get(plugin.id)
        if validator is not None:
            self._compiled.move_to_end(plugin.id)
            return validator
        if strict:
            schema_issues = self.check_schema(plugin.schema)
            if schema_issues:
                return schema_issues
        validator_cls = validator_for(plugin.schema, default=Draft7Validator)
        validator = validator_cls(plugin.schema)
        self._compiled[plugin.id] = validator
        while len(self._compiled) > self._max_compiled:
            self._compiled.popitem(last=False)
        return validator

    @staticmethod
    def check_schema(schema: JSONObject) -> list[ValidationIssue]:
        """Return problems with ``schema`` itself.

        Args:
            schema: Schema to check.

        Returns:
            list[ValidationIssue]: Metaschema violations and unresolvable ``$ref`` pointers.
        """

        validator_cls = validator_for(schema, default=Draft7Validator)
        try:
            validator_cls.check_schema(schema)
        except SchemaError as exc:
            return [_issue_from_error(exc)]
        return [
            ValidationIssue(message=f"can't resolve reference {reference}", keyword=REF_KEY)
            for reference in unresolved_references(schema)
        ]


def rollback_composed_fields(composed: JSONObject, original: Mapping[str, Any] | None) -> tuple[str, ...]:
    """Remove composed ``language_servers`` fields the original schema did not declare.

    Args:
        composed: Composed schema, modified in place.
        original: Schema captured before any composition, if available.

    Returns:
        tuple[str, ...]: Names of the fields removed from ``composed``.
    """

    if original is None:
        LOGGER.error("Original language servers schema not available to restore non-transformed values.")
        return ()
    original_node = original.get("properties", {}).get(LANGUAGE_SERVERS_KEY, {})
    composed_node = composed.get("properties", {}).get(LANGUAGE_SERVERS_KEY)
    if not isinstance(composed_node, dict):
        return ()
    removed: list[str] = []
    for name in ROLLBACK_FIELDS:
        if original_node.get(name) is None and name in composed_node:
            del composed_node[name]
            removed.append(name)
    return tuple(removed)


@dataclass(slots=True)
class ValidationGate:
    """Check composed schemas with the host validator and roll back on rejection."""

    validator: DataValidator
    config: SettingsUIConfig = field(default_factory=SettingsUIConfig)
    _attempt: int = field(default=0, init=False, repr=False)

    @property
    def attempts(self) -> int:
        """Return how many validation attempts this gate has made."""

        return self._attempt

    def next_plugin_id(self) -> str:
        """Return a fresh synthetic plugin id so the validator cannot reuse a cached schema."""

        self._attempt += 1
        return f"{self.config.validation_id_prefix}-{self._attempt}"

    def validate(
        self,
        plugin: SettingsPlugin,
        composed: JSONObject,
        original: Mapping[str, Any] | None,
    ) -> ValidationOutcome:
        """Validate ``composed`` and roll back composed fields when it is rejected.

        Args:
            plugin: Plugin whose raw settings and version accompany the schema.
            composed: Composed schema, modified in place on rejection.
            original: Schema captured before the first composition.

        Returns:
            ValidationOutcome: Empty when accepted, otherwise the reported errors.
        """

        record = SettingsPlugin(
            id=self.next_plugin_id(),
            schema=composed,
            raw=plugin.raw,
            version=plugin.version,
            data=PluginData(),
        )
        errors = self.validator.validate_data(record, self.config.strict_validation)
        if not errors:
            return ValidationOutcome()

        LOGGER.error(
            "LSP server settings validation failed; configuration graphical interface will run "
            "in schema-free mode; errors: %s",
            [issue.message for issue in errors],
        )
        removed = rollback_composed_fields(composed, original)
        if removed:
            LOGGER.info("Withheld composed language_servers fields: %s", ", ".join(removed))
        return ValidationOutcome(errors=tuple(errors))


__all__ = [
    "JsonSchemaDataValidator",
    "ValidationGate",
    "iter_subschemas",
    "rollback_composed_fields",
    "schema_resource",
    "unresolved_references",
]
