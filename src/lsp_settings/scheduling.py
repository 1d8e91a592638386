# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Fire-and-forget handling for awaitables returned by host collaborators."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Awaitable, Coroutine
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any

LOGGER = logging.getLogger(__name__)


async def _consume(awaitable: Awaitable[object], description: str) -> None:
    try:
        await awaitable
    except Exception:
        LOGGER.warning("%s failed", description, exc_info=True)


def _run_detached(coroutine: Coroutine[Any, Any, None]) -> None:
    asyncio.run(coroutine)


class BackgroundScheduler:
    """Run awaitables to completion without making the caller wait on them.

    Awaitables become tasks on the running event loop. Without a running loop
    they are run on a private worker thread with its own loop. Failures are
    logged and never reach the caller.
    """

    def __init__(self) -> None:
        """Initialise the scheduler without pending work."""

        self._tasks: set[asyncio.Task[None]] = set()
        self._futures: set[Future[None]] = set()
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None

    @property
    def pending(self) -> int:
        """Return the number of scheduled awaitables that have not finished yet."""

        with self._lock:
            return len(self._tasks) + len(self._futures)

    def submit(self, result: Awaitable[object] | object, *, description: str) -> None:
        """Schedule ``result`` when it is awaitable; plain values are ignored.

        Args:
            result: Return value of a host call that may be awaitable.
            description: Label used when logging a failure.
        """

        if not inspect.isawaitable(result):
            return
        coroutine = _consume(result, description)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._submit_detached(coroutine)
            return
        task = loop.create_task(coroutine)
        with self._lock:
            self._tasks.add(task)
        task.add_done_callback(self._forget_task)

    def drain(self, timeout: float | None = None) -> None:
        """Block until work running on the worker thread has finished."""

        with self._lock:
            futures = tuple(self._futures)
        done, _ = wait(futures, timeout=timeout)
        with self._lock:
            self._futures.difference_update(done)

    def shutdown(self) -> None:
        """Finish outstanding worker-thread work and release the worker."""

        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def _submit_detached(self, coroutine: Coroutine[Any, Any, None]) -> None:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="lsp-settings")
            future = self._executor.submit(_run_detached, coroutine)
            self._futures.add(future)
        future.add_done_callback(self._forget_future)

    def _forget_task(self, task: asyncio.Task[None]) -> None:
        with self._lock:
            self._tasks.discard(task)

    def _forget_future(self, future: Future[None]) -> None:
        with self._lock:
            self._futures.discard(future)


__all__ = ["BackgroundScheduler"]
