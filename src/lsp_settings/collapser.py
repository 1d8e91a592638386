# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Collapse dotted ``serverSettings`` overrides into nested settings per server."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .config import SettingsUIConfig
from .dialogs import ACKNOWLEDGE_BUTTON, CONFLICT_DIALOG_TITLE, render_conflicts
from .dotted import expand_dotted
from .models import ConflictReport
from .protocols import ConflictDialog
from .scheduling import BackgroundScheduler
from .types import SERVER_SETTINGS_KEY, JSONObject
from .utils import deep_copy_json

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ConfigCollapser:
    """Normalise per-server overrides and report conflicting values without blocking."""

    dialog: ConflictDialog | None = None
    config: SettingsUIConfig = field(default_factory=SettingsUIConfig)
    scheduler: BackgroundScheduler = field(default_factory=BackgroundScheduler)

    def collapse(self, overrides: Mapping[str, Any] | None) -> tuple[JSONObject, ConflictReport]:
        """Expand dotted ``serverSettings`` keys of every server group.

        Args:
            overrides: ``language_servers`` mapping as persisted; groups may be ``None``.

        Returns:
            tuple[JSONObject, ConflictReport]: Collapsed copy of ``overrides`` and the
            conflicts of every server that produced any.
        """

        if not overrides:
            return {}, {}
        result: JSONObject = deep_copy_json(overrides)
        conflicts: ConflictReport = {}
        for server_key, group in overrides.items():
            if not isinstance(group, Mapping):
                continue
            server_settings = group.get(SERVER_SETTINGS_KEY)
            if not isinstance(server_settings, Mapping):
                continue
            collapsed = expand_dotted(server_settings)
            if collapsed.conflicts:
                conflicts[server_key] = collapsed.conflicts
            result[server_key][SERVER_SETTINGS_KEY] = collapsed.result
        return result, conflicts

    def collapse_and_notify(self, overrides: Mapping[str, Any] | None) -> JSONObject:
        """Collapse ``overrides`` and show any conflicts to the user.

        The collapsed settings are returned whether or not the dialog is shown
        or acknowledged.
        """

        result, conflicts = self.collapse(overrides)
        if conflicts:
            self.notify(conflicts)
        return result

    def notify(self, conflicts: ConflictReport) -> None:
        """Show ``conflicts`` in the dialog; display failures are only logged."""

        LOGGER.warning("Conflicting dotted settings for servers: %s", ", ".join(conflicts))
        if self.dialog is None or not self.config.show_conflicts:
            return
        try:
            shown = self.dialog.show(
                render_conflicts(conflicts),
                title=CONFLICT_DIALOG_TITLE,
                buttons=(ACKNOWLEDGE_BUTTON,),
            )
        except Exception:
            LOGGER.warning("Could not display settings conflicts", exc_info=True)
            return
        self.scheduler.submit(shown, description="Conflict dialog")


__all__ = ["ConfigCollapser"]
