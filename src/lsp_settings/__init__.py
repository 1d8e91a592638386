# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Dynamic language server settings schema composition for settings UIs."""

from __future__ import annotations

from importlib import metadata

from .cache import CompositionCache
from .catalog import ServerCatalog, Signal, StaticServerCatalog
from .collapser import ConfigCollapser
from .composer import SchemaComposer, get_defaults
from .config import SettingsUIConfig, config_from_mapping, load_config
from .dotted import expand_dotted, expand_dotted_sources
from .errors import (
    ConfigError,
    MalformedServerSpecError,
    SchemaTemplateError,
    SettingsSchemaError,
    UnsupportedReferenceError,
)
from .manager import SettingsUIManager
from .models import (
    CollapseResult,
    ConflictReport,
    DefaultsTable,
    PluginData,
    SchemaComposition,
    ServerSpec,
    SettingsPlugin,
    ValidationIssue,
    ValidationOutcome,
)
from .pruner import DefaultPruner, prune_defaults
from .scheduling import BackgroundScheduler
from .validation import JsonSchemaDataValidator, ValidationGate

try:
    __version__ = metadata.version("lsp-settings")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"

__all__ = [
    "BackgroundScheduler",
    "CollapseResult",
    "CompositionCache",
    "ConfigCollapser",
    "ConfigError",
    "ConflictReport",
    "DefaultPruner",
    "DefaultsTable",
    "JsonSchemaDataValidator",
    "MalformedServerSpecError",
    "PluginData",
    "SchemaComposer",
    "SchemaComposition",
    "SchemaTemplateError",
    "ServerCatalog",
    "ServerSpec",
    "SettingsPlugin",
    "SettingsSchemaError",
    "SettingsUIConfig",
    "SettingsUIManager",
    "Signal",
    "StaticServerCatalog",
    "UnsupportedReferenceError",
    "ValidationGate",
    "ValidationIssue",
    "ValidationOutcome",
    "__version__",
    "config_from_mapping",
    "expand_dotted",
    "expand_dotted_sources",
    "get_defaults",
    "load_config",
    "prune_defaults",
]
