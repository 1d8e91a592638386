# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the session change signal and the in-memory server catalog."""

from __future__ import annotations

import logging

import pytest

from lsp_settings import ServerCatalog, ServerSpec, Signal, StaticServerCatalog


def test_signal_ignores_duplicate_subscriptions() -> None:
    signal = Signal()
    calls: list[str] = []

    def _callback() -> None:
        calls.append("called")

    signal.connect(_callback)
    signal.connect(_callback)
    signal.emit()

    assert calls == ["called"]
    signal.disconnect(_callback)
    signal.emit()
    assert calls == ["called"]


def test_failing_subscriber_does_not_stop_others(caplog: pytest.LogCaptureFixture) -> None:
    signal = Signal()
    calls: list[str] = []

    def _broken() -> None:
        raise RuntimeError("boom")

    signal.connect(_broken)
    signal.connect(lambda: calls.append("after"))

    with caplog.at_level(logging.ERROR):
        signal.emit()

    assert calls == ["after"]
    assert "subscriber" in caplog.text


def test_static_catalog_tracks_live_sessions(pyls_spec: ServerSpec, rust_spec: ServerSpec) -> None:
    catalog = StaticServerCatalog([pyls_spec, rust_spec])
    events: list[str] = []
    catalog.session_set_changed.connect(lambda: events.append("changed"))

    assert isinstance(catalog, ServerCatalog)
    assert [spec.key for spec in catalog.specs()] == ["pyls", "rust-analyzer"]
    assert catalog.has_live_session("pyls")
    assert not catalog.has_live_session("rust-analyzer")

    catalog.set_live_sessions(["rust-analyzer"])

    assert events == ["changed"]
    flags = {spec.key: spec.has_live_session for spec in catalog.specs()}
    assert flags == {"pyls": False, "rust-analyzer": True}


def test_set_specs_replaces_catalog(pyls_spec: ServerSpec, rust_spec: ServerSpec) -> None:
    catalog = StaticServerCatalog([pyls_spec])
    events: list[str] = []
    catalog.session_set_changed.connect(lambda: events.append("changed"))

    catalog.set_specs([rust_spec], live=["rust-analyzer"])

    assert [spec.key for spec in catalog.specs()] == ["rust-analyzer"]
    assert catalog.has_live_session("rust-analyzer")
    assert events == ["changed"]
