# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Server catalog contracts and an in-memory catalog implementation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import Protocol, runtime_checkable

from .models import ServerSpec

LOGGER = logging.getLogger(__name__)

SignalCallback = Callable[[], object]


class Signal:
    """Payload-free notification stream with ordered subscribers."""

    def __init__(self) -> None:
        """Initialise the signal without subscribers."""

        self._callbacks: list[SignalCallback] = []

    def connect(self, callback: SignalCallback) -> None:
        """Subscribe ``callback``; duplicate subscriptions are ignored."""

        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def disconnect(self, callback: SignalCallback) -> None:
        """Remove ``callback`` when it is subscribed."""

        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def emit(self) -> None:
        """Invoke every subscriber; a failing subscriber does not stop the rest."""

        for callback in tuple(self._callbacks):
            try:
                callback()
            except Exception:
                LOGGER.exception("Session change subscriber %r failed", callback)

    def __len__(self) -> int:
        return len(self._callbacks)


@runtime_checkable
class ServerCatalog(Protocol):
    """Read-only view over the language servers known to the host."""

    @property
    def session_set_changed(self) -> Signal:
        """Return the signal fired whenever the set of live sessions changes."""

        raise NotImplementedError

    def specs(self) -> Iterable[ServerSpec]:
        """Return the current server specs in catalog order."""

        raise NotImplementedError

    def has_live_session(self, key: str) -> bool:
        """Return ``True`` when a session currently exists for ``key``."""

        raise NotImplementedError


class StaticServerCatalog(ServerCatalog):
    """Mutable in-memory catalog used by the CLI and by embedding hosts."""

    def __init__(self, specs: Iterable[ServerSpec] = (), *, live: Iterable[str] | None = None) -> None:
        """Create a catalog from ``specs``.

        Args:
            specs: Initial server specs, kept in iteration order.
            live: Keys with a live session. Defaults to the specs flagged live.
        """

        self._specs: dict[str, ServerSpec] = {}
        self._live: set[str] = set()
        self._signal = Signal()
        self._store(specs, live)

    @property
    def session_set_changed(self) -> Signal:
        return self._signal

    def specs(self) -> tuple[ServerSpec, ...]:
        return tuple(
            replace(spec, has_live_session=spec.key in self._live) for spec in self._specs.values()
        )

    def has_live_session(self, key: str) -> bool:
        return key in self._live

    def set_specs(self, specs: Iterable[ServerSpec], *, live: Iterable[str] | None = None) -> None:
        """Replace the known specs and notify subscribers."""

        self._specs.clear()
        self._live.clear()
        self._store(specs, live)
        self._signal.emit()

    def set_live_sessions(self, keys: Iterable[str]) -> None:
        """Replace the set of live sessions and notify subscribers."""

        self._live = set(keys)
        self._signal.emit()

    def _store(self, specs: Iterable[ServerSpec], live: Iterable[str] | None) -> None:
        for spec in specs:
            self._specs[spec.key] = spec
        if live is None:
            self._live = {spec.key for spec in self._specs.values() if spec.has_live_session}
        else:
            self._live = set(live)


__all__ = ["ServerCatalog", "Signal", "SignalCallback", "StaticServerCatalog"]
