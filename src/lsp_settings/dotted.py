# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Expand dotted-path setting keys into nested objects, recording conflicting values."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .models import CollapseResult
from .types import DOTTED_SEPARATOR, JSONObject
from .utils import deep_copy_json, json_deep_equal


class _Expansion:
    """Accumulate nested settings and every distinct value seen per path."""

    def __init__(self, separator: str) -> None:
        self.separator = separator
        self.result: JSONObject = {}
        self.seen: dict[str, list[Any]] = {}

    def merge(self, settings: Mapping[str, Any], prefix: Sequence[str] = ()) -> None:
        for key, value in settings.items():
            path = (*prefix, *str(key).split(self.separator))
            if isinstance(value, Mapping):
                self._ensure_branch(path, value)
                self.merge(value, path)
            else:
                self._assign(path, deep_copy_json(value))

    def conflicts(self) -> dict[str, list[Any]]:
        return {path: values for path, values in self.seen.items() if len(values) > 1}

    def _record(self, path: Sequence[str], value: Any, *, previous: Any = None, replaced: bool = False) -> None:
        dotted = self.separator.join(path)
        values = self.seen.get(dotted)
        if values is None:
            values = [previous] if replaced else []
            self.seen[dotted] = values
        if not any(json_deep_equal(value, known) for known in values):
            values.append(value)

    def _parent(self, path: Sequence[str], incoming: Any) -> JSONObject:
        node = self.result
        for depth, segment in enumerate(path[:-1]):
            child = node.get(segment)
            if not isinstance(child, dict):
                if segment in node:
                    rest = path[depth + 1 :]
                    self._record(path[: depth + 1], _nest(rest, incoming), previous=child, replaced=True)
                child = {}
                node[segment] = child
            node = child
        return node

    def _ensure_branch(self, path: Sequence[str], value: Mapping[str, Any]) -> None:
        parent = self._parent(path, deep_copy_json(value))
        leaf = path[-1]
        existing = parent.get(leaf)
        if isinstance(existing, dict):
            return
        if leaf in parent:
            self._record(path, deep_copy_json(value), previous=existing, replaced=True)
        parent[leaf] = {}

    def _assign(self, path: Sequence[str], value: Any) -> None:
        parent = self._parent(path, value)
        leaf = path[-1]
        existing = parent.get(leaf)
        replaced = isinstance(existing, dict) and self.separator.join(path) not in self.seen
        self._record(path, value, previous=deep_copy_json(existing), replaced=replaced)
        parent[leaf] = value


def _nest(path: Sequence[str], value: Any) -> Any:
    nested = value
    for segment in reversed(path):
        nested = {segment: nested}
    return nested


def expand_dotted_sources(
    sources: Iterable[Mapping[str, Any]],
    *,
    separator: str = DOTTED_SEPARATOR,
) -> CollapseResult:
    """Merge ``sources`` in order into one nested object.

    Keys containing ``separator`` are split into nested levels. When several
    entries land on the same path the last one wins, and every distinct value
    seen for that path is reported in contribution order.

    Args:
        sources: Override mappings, lowest precedence first.
        separator: Path separator used inside keys.

    Returns:
        CollapseResult: Nested settings and the conflicts keyed by dotted path.
    """

    expansion = _Expansion(separator)
    for source in sources:
        expansion.merge(source)
    return CollapseResult(result=expansion.result, conflicts=expansion.conflicts())


def expand_dotted(settings: Mapping[str, Any], *, separator: str = DOTTED_SEPARATOR) -> CollapseResult:
    """Expand the dotted keys of a single settings mapping.

    Examples:
        >>> expand_dotted({"a.b": 1, "a": {"b": 2}}).conflicts
        {'a.b': [1, 2]}
    """

    return expand_dotted_sources((settings,), separator=separator)


__all__ = ["expand_dotted", "expand_dotted_sources"]
