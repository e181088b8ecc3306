"""
Schema Validation Utilities

Validates host request payloads and document JSON against the bundled
JSON Schema files (``<name>.schema.json`` beside this module).

Requests are checked in two steps:
- Envelope: ``{"type": <known message type>, "data": {...}}``
- Payload: the per-type schema, when the message type carries one

Fail fast: the first violation raises ``ValidationError`` carrying the
JSON path of the offending value.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import jsonschema


# Message type -> payload schema name (None: no payload expected)
REQUEST_SCHEMAS: dict[str, Optional[str]] = {
    "scan": None,
    "consolidate": "consolidate",
    "consolidate-library-duplicates": "consolidate_library",
    "convert-single-icon": "single_icon",
    "replace-with-instance": "replace_with_instance",
    "smart-rename-icon": "icon_id",
    "generate-previews": "generate_previews",
    "ignore-icon": "icon_id",
    "unignore-icon": "icon_id",
    "mark-icon": "mark_icon",
    "clear-all-markings": None,
    "swap-icons": "swap_icons",
    "add-icon-to-library": "add_icon",
}

DOCUMENT_SCHEMA_VERSION = 1


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _validate(data: Any, schema_name: str, prefix: str = "") -> None:
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path)
        if prefix:
            path = f"{prefix}.{path}" if path else prefix
        raise ValidationError(
            f"Schema validation failed: {e.message}",
            path=path,
            errors=[e.message],
        ) from e


def validate_request(message: dict[str, Any]) -> None:
    """
    Validate a host request envelope and its payload.

    Args:
        message: ``{"type": ..., "data": ...}`` as received from the host

    Raises:
        ValidationError: If the type is unknown or the payload is malformed
    """
    if not isinstance(message, dict):
        raise ValidationError("Request must be an object", errors=["not an object"])

    message_type = message.get("type")
    if not isinstance(message_type, str) or message_type not in REQUEST_SCHEMAS:
        raise ValidationError(
            f"Unknown request type: {message_type!r}",
            path="type",
            errors=[f"Unknown type: {message_type!r}"],
        )

    schema_name = REQUEST_SCHEMAS[message_type]
    if schema_name is None:
        return
    if "data" not in message:
        raise ValidationError(
            f"Request {message_type!r} requires a data payload",
            path="data",
            errors=["Missing field: data"],
        )
    _validate(message["data"], schema_name, prefix="data")


def validate_document(data: dict[str, Any]) -> None:
    """
    Validate nested document JSON before loading it.

    Raises:
        ValidationError: If the document is malformed or the schema
            version is unsupported
    """
    version = data.get("schemaVersion", DOCUMENT_SCHEMA_VERSION) if isinstance(data, dict) else None
    if version != DOCUMENT_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported document schema version: {version} (expected {DOCUMENT_SCHEMA_VERSION})",
            path="schemaVersion",
        )
    _validate(data, "document")
