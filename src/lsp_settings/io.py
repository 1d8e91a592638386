# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""I/O helpers for reading settings schemas and server spec documents."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import cast

from .errors import SchemaTemplateError
from .types import JSONValue


def load_schema(path: Path) -> Mapping[str, JSONValue]:
    """Load a JSON schema from disk and ensure it is a JSON object.

    Args:
        path: Filesystem path to the schema file.

    Returns:
        Mapping[str, JSONValue]: Parsed JSON schema mapping.

    Raises:
        FileNotFoundError: If the schema file does not exist.
        SchemaTemplateError: If the schema cannot be parsed or is not a JSON object.
    """
    payload = load_document(path)
    if not isinstance(payload, Mapping):
        raise SchemaTemplateError(f"{path}: expected a JSON object")
    return payload


def load_document(path: Path) -> JSONValue:
    """Load a JSON document from disk.

    Args:
        path: Filesystem path to the JSON document.

    Returns:
        JSONValue: Parsed JSON value extracted from the document.

    Raises:
        FileNotFoundError: If the JSON document is missing.
        SchemaTemplateError: If the document cannot be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as stream:
        try:
            return cast(JSONValue, json.load(stream))
        except json.JSONDecodeError as exc:
            raise SchemaTemplateError(f"{path}: failed to parse JSON document") from exc


def _comment_end(text: str, index: int) -> int | None:
    if text.startswith("//", index):
        newline = text.find("\n", index)
        return len(text) if newline == -1 else newline
    if text.startswith("/*", index):
        close = text.find("*/", index + 2)
        return len(text) if close == -1 else close + 2
    return None


def _closes_container(text: str, index: int) -> bool:
    while index < len(text):
        if text[index].isspace():
            index += 1
            continue
        comment_end = _comment_end(text, index)
        if comment_end is None:
            return text[index] in "]}"
        index = comment_end
    return True


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments and trailing commas outside strings.

    Args:
        text: JSON text with JSONC-style comments.

    Returns:
        str: Text accepted by :func:`json.loads` when the remainder is valid JSON.
    """

    output: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == '"':
            end = index + 1
            while end < len(text) and text[end] != '"':
                end += 2 if text[end] == "\\" else 1
            output.append(text[index : end + 1])
            index = end + 1
            continue
        comment_end = _comment_end(text, index)
        if comment_end is not None:
            index = comment_end
            continue
        if char != "," or not _closes_container(text, index + 1):
            output.append(char)
        index += 1
    return "".join(output)


def parse_raw_settings(raw: str | None) -> JSONValue:
    """Parse raw user settings text written as JSON with comments.

    ``//`` and ``/* */`` comments and trailing commas are accepted, as in the
    settings files edited by hand in the host. Other JSON5 extensions such as
    unquoted keys or single-quoted strings are not.

    Args:
        raw: Raw settings text as persisted by the host; blank text means ``{}``.

    Returns:
        JSONValue: Parsed settings payload.

    Raises:
        json.JSONDecodeError: If the text is not valid JSON once comments are removed.
    """

    if raw is None:
        return {}
    text = strip_json_comments(raw).strip()
    if not text:
        return {}
    return cast(JSONValue, json.loads(text))


__all__ = ["load_document", "load_schema", "parse_raw_settings", "strip_json_comments"]
