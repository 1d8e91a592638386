# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for background scheduling and the console conflict dialog."""

from __future__ import annotations

import asyncio
import io
import logging
import threading

import pytest
from rich.console import Console

from lsp_settings.dialogs import ACKNOWLEDGE_BUTTON, CONFLICT_DIALOG_TITLE, ConsoleConflictDialog, render_conflicts
from lsp_settings.scheduling import BackgroundScheduler


def test_plain_values_are_ignored() -> None:
    scheduler = BackgroundScheduler()

    scheduler.submit(None, description="noop")
    scheduler.submit(42, description="noop")

    assert scheduler.pending == 0


def test_awaitable_runs_on_worker_thread_without_event_loop() -> None:
    scheduler = BackgroundScheduler()
    threads: list[str] = []

    async def _reload() -> None:
        threads.append(threading.current_thread().name)

    scheduler.submit(_reload(), description="Settings reload")
    scheduler.drain(timeout=5)
    scheduler.shutdown()

    assert len(threads) == 1
    assert threads[0] != threading.current_thread().name
    assert scheduler.pending == 0


def test_failures_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    scheduler = BackgroundScheduler()

    async def _broken() -> None:
        raise RuntimeError("registry gone")

    with caplog.at_level(logging.WARNING, logger="lsp_settings.scheduling"):
        scheduler.submit(_broken(), description="Settings reload")
        scheduler.drain(timeout=5)

    assert "Settings reload failed" in caplog.text


def test_awaitable_scheduled_on_running_loop() -> None:
    scheduler = BackgroundScheduler()
    calls: list[str] = []

    async def _reload() -> None:
        calls.append("reloaded")

    async def _main() -> None:
        scheduler.submit(_reload(), description="Settings reload")
        assert calls == []
        assert scheduler.pending == 1
        await asyncio.sleep(0)
        await asyncio.sleep(0)

    asyncio.run(_main())

    assert calls == ["reloaded"]
    assert scheduler.pending == 0


def test_schedulers_do_not_share_pending_work() -> None:
    first = BackgroundScheduler()
    second = BackgroundScheduler()

    async def _main() -> None:
        first.submit(asyncio.sleep(0), description="first")
        assert (first.pending, second.pending) == (1, 0)
        await asyncio.sleep(0)
        await asyncio.sleep(0)

    asyncio.run(_main())


def test_console_dialog_prints_panel() -> None:
    buffer = io.StringIO()
    dialog = ConsoleConflictDialog(Console(file=buffer, color_system=None, width=120))

    dialog.show(
        render_conflicts({"pyls": {"plugins.jedi": [[1], [2]]}}),
        title=CONFLICT_DIALOG_TITLE,
        buttons=(ACKNOWLEDGE_BUTTON,),
    )

    output = buffer.getvalue()
    assert CONFLICT_DIALOG_TITLE in output
    assert "plugins.jedi" in output
    assert "[1], [2]" in output
