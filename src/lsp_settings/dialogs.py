# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Render collapse conflicts and show them in a console dialog."""

from __future__ import annotations

import io
import json
from collections.abc import Sequence
from typing import Any, Final

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .console import get_console
from .models import ConflictReport
from .protocols import ConflictDialog

CONFLICT_DIALOG_TITLE: Final[str] = "Conflicting language server settings"
ACKNOWLEDGE_BUTTON: Final[str] = "OK"
_RENDER_WIDTH: Final[int] = 100


def _format_value(value: Any) -> str:
    return json.dumps(value, sort_keys=True)


def conflict_table(conflicts: ConflictReport) -> Table:
    """Return a table with one row per conflicting setting.

    Args:
        conflicts: Conflicting values keyed by server and dotted setting path.

    Returns:
        Table: Rich table listing every value seen for each setting.
    """

    table = Table(box=box.SIMPLE_HEAVY, show_lines=False)
    table.add_column("Server", style="bold")
    table.add_column("Setting")
    table.add_column("Values (last one applied)")
    for server_key, settings in conflicts.items():
        for setting, values in settings.items():
            table.add_row(
                Text(server_key),
                Text(setting),
                Text(", ".join(_format_value(value) for value in values)),
            )
    return table


def render_conflicts(conflicts: ConflictReport) -> str:
    """Render ``conflicts`` as plain text suitable for a modal dialog body."""

    buffer = io.StringIO()
    console = Console(file=buffer, color_system=None, force_terminal=False, width=_RENDER_WIDTH)
    console.print(
        "Some settings were given more than one value after expanding dotted keys. "
        "The last value was kept for each of them:",
    )
    console.print(conflict_table(conflicts))
    return buffer.getvalue()


class ConsoleConflictDialog(ConflictDialog):
    """Print the conflict summary in a panel on the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        """Create the dialog, defaulting to the shared console."""

        self._console = console

    def show(self, body: str, *, title: str, buttons: Sequence[str]) -> None:
        console = self._console or get_console(color=True, emoji=True)
        subtitle = Text(" / ".join(buttons))
        console.print(Panel(Text(body.rstrip()), title=Text(title), subtitle=subtitle, expand=False))


__all__ = [
    "ACKNOWLEDGE_BUTTON",
    "CONFLICT_DIALOG_TITLE",
    "ConsoleConflictDialog",
    "conflict_table",
    "render_conflicts",
]
