# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Utility helpers for validating, copying, and comparing JSON structures."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .errors import SchemaTemplateError
from .types import JSONObject, JSONValue


def expect_mapping(value: JSONValue | None, *, key: str, context: str) -> Mapping[str, JSONValue]:
    """Return ``value`` as a mapping of JSON values or raise an error.

    Args:
        value: Raw JSON value extracted from a schema document.
        key: Attribute name used in error messages.
        context: Human-friendly prefix describing the validation context.

    Returns:
        Mapping[str, JSONValue]: Mapping derived from ``value``.

    Raises:
        SchemaTemplateError: If ``value`` is not a mapping.
    """
    if not isinstance(value, Mapping):
        raise SchemaTemplateError(f"{context}: expected '{key}' to be an object")
    return value


def optional_mapping(value: JSONValue | None) -> Mapping[str, JSONValue] | None:
    """Return ``value`` when it is a mapping, otherwise ``None``."""

    return value if isinstance(value, Mapping) else None


def optional_string(value: JSONValue | None) -> str | None:
    """Return ``value`` when it is a string, otherwise ``None``."""

    return value if isinstance(value, str) else None


def deep_copy_json(value: Any) -> Any:
    """Return a deep copy of ``value`` built from plain ``dict`` and ``list`` containers.

    Mapping proxies and tuples are converted on the way so the copy can be
    mutated freely without touching the source document.

    Args:
        value: JSON-compatible value to copy.

    Returns:
        Any: Independent copy of ``value``.
    """

    if isinstance(value, Mapping):
        return {str(key): deep_copy_json(item) for key, item in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [deep_copy_json(item) for item in value]
    return value


def json_deep_equal(first: Any, second: Any) -> bool:
    """Return ``True`` when two JSON values are structurally equal.

    Booleans never compare equal to numbers, unlike Python's ``==``.

    Args:
        first: First JSON value.
        second: Second JSON value.

    Returns:
        bool: ``True`` when both values hold the same JSON data.
    """

    if first is second:
        return True
    if isinstance(first, bool) or isinstance(second, bool):
        return isinstance(first, bool) and isinstance(second, bool) and first == second
    if isinstance(first, Mapping):
        if not isinstance(second, Mapping) or len(first) != len(second):
            return False
        return all(key in second and json_deep_equal(item, second[key]) for key, item in first.items())
    if isinstance(first, Sequence) and not isinstance(first, (str, bytes, bytearray)):
        if not isinstance(second, Sequence) or isinstance(second, (str, bytes, bytearray)):
            return False
        return len(first) == len(second) and all(json_deep_equal(a, b) for a, b in zip(first, second))
    return first == second


def ensure_object(target: JSONObject, key: str) -> JSONObject:
    """Return ``target[key]`` as a mutable dict, creating it when absent."""

    current = target.get(key)
    if not isinstance(current, dict):
        current = {}
        target[key] = current
    return current


__all__ = [
    "deep_copy_json",
    "ensure_object",
    "expect_mapping",
    "json_deep_equal",
    "optional_mapping",
    "optional_string",
]
