"""TypeScript declaration and JSON export/import of schemas."""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from formschema import logger
from formschema.exceptions import MalformedLiteralError, NotASequenceError, SignatureNotFoundError
from formschema.typing.models import Schema

if TYPE_CHECKING:
    from pathlib import Path

SCHEMA_MODULE_PATH = "@/types/schema"
SCHEMA_TYPE_NAMES = ("Schema", "SchemaItem")
EMPTY_LIST_DROPPED_KEYS = frozenset({"linked_form_fields_text", "linked_dates", "linkedFields", "visibleIf"})

_DECLARATION_SIGNATURE = re.compile(r"(?:export\s+)?const\s+\w+:\s*Schema\s*=\s*(\[[\s\S]*\])\s*;")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_]")

_DROP = object()


def declaration_name(form_type: str) -> str:
    """Return the identifier prefix derived from a form type.

    Args:
        form_type (str): Caller supplied form type, e.g. ``"listing-agreement"``.

    Returns:
        str: ``form_type`` with every character outside ``[A-Za-z0-9_]`` replaced by ``_``.
    """
    return _UNSAFE_NAME_CHARS.sub("_", form_type)


def _clean(value: Any, key: str | None = None) -> Any:
    """Strip values that cannot or should not appear in exported text."""
    if callable(value):
        return _DROP
    if key in EMPTY_LIST_DROPPED_KEYS and isinstance(value, list | tuple) and not value:
        return _DROP
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        cleaned = {}
        for entry_key, entry in value.items():
            entry_value = _clean(entry, entry_key)
            if entry_value is not _DROP:
                cleaned[entry_key] = entry_value
        return cleaned
    if isinstance(value, list | tuple):
        return [entry_value for entry in value if (entry_value := _clean(entry)) is not _DROP]
    return value


def schema_to_data(schema: Schema) -> list[dict[str, Any]]:
    """Return the exportable data literal of a schema.

    Args:
        schema (Schema): Schema to export.

    Returns:
        list[dict[str, Any]]: JSON-ready items, callables and empty link lists removed.
    """
    return [_clean(item.model_dump(by_alias=True)) for item in schema.all()]


def _dumps(data: list[dict[str, Any]]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def export_declaration(schema: Schema, form_type: str) -> str:
    """Serialize a schema as a TypeScript module.

    Args:
        schema (Schema): Schema to export.
        form_type (str): Form type used to name the exported constant.

    Returns:
        str: Module text.
    """
    name = f"{declaration_name(form_type)}_schema"
    return (
        f"import {{ {', '.join(SCHEMA_TYPE_NAMES)} }} from '{SCHEMA_MODULE_PATH}';\n\n"
        f"export const {name}: Schema = {_dumps(schema_to_data(schema))};\n\n"
        f"export default {name};"
    )


def export_json(schema: Schema) -> str:
    """Serialize a schema as the companion JSON document."""
    return _dumps(schema_to_data(schema))


def write_declaration(schema: Schema, form_type: str, directory: Path) -> Path:
    """Write ``<form_type>_schema.ts`` into `directory`.

    Args:
        schema (Schema): Schema to export.
        form_type (str): Form type.
        directory (Path): Output directory, created when missing.

    Returns:
        Path: Written file path.
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{declaration_name(form_type)}_schema.ts"
    path.write_text(export_declaration(schema, form_type), encoding="utf-8")
    logger.info("Schema declaration written", extra={"path": str(path), "items": len(schema)})
    return path


def write_json(schema: Schema, form_type: str, directory: Path) -> Path:
    """Write ``<form_type>_schema.json`` into `directory`.

    Args:
        schema (Schema): Schema to export.
        form_type (str): Form type.
        directory (Path): Output directory, created when missing.

    Returns:
        Path: Written file path.
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{declaration_name(form_type)}_schema.json"
    path.write_text(export_json(schema), encoding="utf-8")
    logger.info("Schema JSON written", extra={"path": str(path), "items": len(schema)})
    return path


def repair_trailing_commas(literal: str) -> str:
    """Remove commas directly preceding a closing bracket or brace."""
    return _TRAILING_COMMA.sub(r"\1", literal)


def _check_sequence(data: object) -> list[Any]:
    if not isinstance(data, list):
        raise NotASequenceError(type_name=type(data).__name__)
    return data


def _schema_from_data(data: list[Any]) -> Schema:
    """Validate parsed items into a schema.

    Raises:
        MalformedLiteralError: If an item does not match the item model.
    """
    try:
        return Schema.model_validate({"items": data})
    except ValidationError as exc:
        raise MalformedLiteralError(message="Schema items do not match the item model", exc=exc) from exc


def parse_declaration(text: str) -> list[Any]:
    """Extract and parse the schema literal of a TypeScript module.

    Only trailing commas are repaired; any other syntax error fails.

    Args:
        text (str): Module text, possibly hand-edited.

    Raises:
        SignatureNotFoundError: If no ``const <name>: Schema = [...];`` declaration exists.
        MalformedLiteralError: If the literal is not valid JSON after repair.
        NotASequenceError: If the literal is not a list.

    Returns:
        list[Any]: Parsed literal.
    """
    match = _DECLARATION_SIGNATURE.search(text)
    if match is None:
        raise SignatureNotFoundError()

    literal = repair_trailing_commas(match.group(1))
    try:
        data = json.loads(literal)
    except json.JSONDecodeError as exc:
        raise MalformedLiteralError(exc=exc) from exc
    return _check_sequence(data)


def import_declaration(text: str) -> Schema:
    """Parse a TypeScript module back into a schema.

    Items are checked against the item model but not against the generator
    allow-lists.

    Args:
        text (str): Module text.

    Returns:
        Schema: Parsed schema.
    """
    schema = _schema_from_data(parse_declaration(text))
    logger.info("Schema declaration parsed", extra={"items": len(schema)})
    return schema


def import_json(text: str) -> Schema:
    """Parse the companion JSON document back into a schema.

    Raises:
        MalformedLiteralError: If the text is not valid JSON or items are invalid.
        NotASequenceError: If the document is not a list.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedLiteralError(exc=exc) from exc
    return _schema_from_data(_check_sequence(data))
