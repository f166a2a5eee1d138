"""Parsing of loosely written JSON documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import json5


class DocumentParseError(Exception):
    """Raised when a document cannot be fully parsed."""


def parse_document(text: str, *, source: str) -> Any:
    """Parse strict JSON, falling back to JSON5 for comments and trailing commas."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    try:
        return json5.loads(text)
    except ValueError as exc:
        raise DocumentParseError(f"Failed to parse JSON content for {source}: {exc}") from exc


def read_document(path: Path) -> Any:
    """Read and parse one document from disk."""
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentParseError(f"Failed to read {path}: {exc}") from exc
    return parse_document(text, source=str(path))


def decode_document_bytes(payload: bytes, *, source: str) -> Any:
    """Decode UTF-8 bytes (with or without a byte order mark) and parse them."""
    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DocumentParseError(f"Content for {source} is not UTF-8: {exc}") from exc
    return parse_document(text, source=source)
