# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Drop user overrides that merely repeat the composed defaults."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .models import DefaultsTable
from .types import SERVER_SETTINGS_KEY, JSONObject
from .utils import deep_copy_json, json_deep_equal

_MISSING = object()


def prune_defaults(settings: Mapping[str, Any] | None, defaults: DefaultsTable) -> JSONObject:
    """Return a copy of ``settings`` without values equal to their defaults.

    Top-level keys of each server group are compared with ``defaults[server]``;
    ``serverSettings`` is compared one level deeper against
    ``defaults[server]["serverSettings"]``. Servers without defaults are kept as is.

    Args:
        settings: ``language_servers`` user overrides.
        defaults: Defaults table of the current composition.

    Returns:
        JSONObject: Pruned copy of ``settings``.
    """

    result: JSONObject = deep_copy_json(settings or {})
    for server_key, group in result.items():
        server_defaults = defaults.get(server_key)
        if server_defaults is None or not isinstance(group, dict) or SERVER_SETTINGS_KEY not in group:
            continue
        for setting_key in list(group):
            value = group[setting_key]
            setting_default = server_defaults.get(setting_key, _MISSING)
            if setting_key == SERVER_SETTINGS_KEY:
                if isinstance(value, dict) and isinstance(setting_default, Mapping):
                    for sub_key in list(value):
                        sub_default = setting_default.get(sub_key, _MISSING)
                        if sub_default is not _MISSING and json_deep_equal(value[sub_key], sub_default):
                            del value[sub_key]
            elif setting_default is not _MISSING and json_deep_equal(value, setting_default):
                del group[setting_key]
    return result


@dataclass(frozen=True, slots=True)
class DefaultPruner:
    """Write-path policy applying :func:`prune_defaults` only when enabled."""

    enabled: bool = False

    def prune(self, settings: Mapping[str, Any] | None, defaults: DefaultsTable) -> JSONObject:
        """Return pruned settings when enabled, otherwise an unchanged copy."""

        if not self.enabled:
            return deep_copy_json(settings or {})
        return prune_defaults(settings, defaults)


__all__ = ["DefaultPruner", "prune_defaults"]
