# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line entry points for composing schemas and collapsing overrides offline."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

import typer

from .cache import CompositionCache
from .catalog import StaticServerCatalog
from .collapser import ConfigCollapser
from .composer import SchemaComposer
from .config import load_config
from .console import fail
from .dialogs import ConsoleConflictDialog
from .errors import ConfigError, MalformedServerSpecError, SchemaTemplateError
from .io import load_document, load_schema
from .models import ServerSpec, SettingsPlugin
from .types import LANGUAGE_SERVERS_KEY
from .utils import deep_copy_json
from .validation import JsonSchemaDataValidator, ValidationGate

app = typer.Typer(
    name="lsp-settings",
    help="Compose and check language server settings schemas.",
    no_args_is_help=True,
    add_completion=False,
)


def _load_specs(path: Path) -> list[ServerSpec]:
    document = load_document(path)
    if not isinstance(document, list):
        raise typer.BadParameter(f"{path}: expected a JSON array of server specs")
    specs: list[ServerSpec] = []
    for index, entry in enumerate(document):
        if not isinstance(entry, Mapping):
            raise typer.BadParameter(f"{path}[{index}]: expected an object")
        specs.append(ServerSpec.from_mapping(entry, context=f"{path}[{index}]"))
    return specs


@app.command("compose")
def compose_command(
    specs_path: Path = typer.Argument(..., metavar="SPECS", help="JSON array of server specs."),
    template_path: Path = typer.Argument(..., metavar="TEMPLATE", help="Plugin settings schema."),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="TOML or pyproject.toml configuration."),
    live: list[str] = typer.Option([], "--live", help="Server key with a live session (repeatable)."),
) -> None:
    """Print the composed plugin schema, or the validation errors when it is rejected."""

    try:
        config = load_config(config_path)
        specs = _load_specs(specs_path)
        template = deep_copy_json(load_schema(template_path))
    except (ConfigError, MalformedServerSpecError, SchemaTemplateError, FileNotFoundError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    catalog = StaticServerCatalog(specs, live=live or None)
    composer = SchemaComposer(config=config)
    gate = ValidationGate(validator=JsonSchemaDataValidator(), config=config)
    cache = CompositionCache(catalog=catalog, composer=composer, gate=gate)
    schema = cache.fetch(SettingsPlugin(id=template_path.stem, schema=template))

    if not cache.outcome.valid:
        fail("Composed schema failed validation; language server fields were withheld:")
        for issue in cache.outcome.errors:
            typer.echo(f"  • {issue.schema_path or issue.data_path or '<root>'}: {issue.message}")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(schema, indent=2, sort_keys=True))


@app.command("collapse")
def collapse_command(
    settings_path: Path = typer.Argument(..., metavar="SETTINGS", help="User settings JSON."),
) -> None:
    """Print user settings with dotted ``serverSettings`` keys expanded."""

    try:
        document = load_document(settings_path)
    except (SchemaTemplateError, FileNotFoundError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    if not isinstance(document, Mapping):
        raise typer.BadParameter(f"{settings_path}: expected a JSON object")

    overrides = document.get(LANGUAGE_SERVERS_KEY, document)
    collapser = ConfigCollapser(dialog=ConsoleConflictDialog())
    collapsed, conflicts = collapser.collapse(overrides if isinstance(overrides, Mapping) else {})
    typer.echo(json.dumps(collapsed, indent=2, sort_keys=True))
    if conflicts:
        collapser.notify(conflicts)


__all__ = ["app"]
