"""
Serialization Utilities

To/from JSON helpers for documents and candidate lists.

- Documents: nested page/node JSON <-> ``InMemoryDocument``
- Candidates: host JSON (camelCase) <-> ``Candidate``

All loaders validate against the bundled schemas before building models.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List

from ..models.candidates import Candidate
from ..schemas.validator import DOCUMENT_SCHEMA_VERSION, ValidationError, validate_document

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Document Serialization
# ─────────────────────────────────────────────────────────────────────────────

def deserialize_document(data: dict[str, Any], *, validate: bool = True):
    """
    Build an ``InMemoryDocument`` from nested JSON.

    Args:
        data: Dictionary from JSON
        validate: Whether to validate against the document schema first

    Returns:
        InMemoryDocument instance

    Raises:
        ValidationError: If validate=True and data is invalid
        ValueError: If node ids are duplicated
    """
    # Imported here: the document package depends on core.models
    from icon_toolkit.document.memory import InMemoryDocument

    if validate:
        validate_document(data)
    return InMemoryDocument.from_dict(data)


def serialize_document(document) -> dict[str, Any]:
    """Nested JSON form of an ``InMemoryDocument``, tagged with its schema version."""
    data = document.to_dict()
    data["schemaVersion"] = DOCUMENT_SCHEMA_VERSION
    return data


def load_document(path: Path, *, validate: bool = True):
    """
    Load a document JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the content is invalid
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {path}: {e}", errors=[str(e)]) from e
    document = deserialize_document(data, validate=validate)
    logger.info(f"Loaded document '{document.document_name}' ({len(document)} nodes) from {path}")
    return document


def save_document(document, path: Path) -> None:
    """Write a document to JSON, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(serialize_document(document), f, indent=2, ensure_ascii=False)
    logger.info(f"Saved document to {path}")


# ─────────────────────────────────────────────────────────────────────────────
# Candidate Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_candidates(candidates: Iterable[Candidate]) -> List[dict[str, Any]]:
    return [c.to_dict() for c in candidates]


def deserialize_candidates(items: Iterable[dict[str, Any]]) -> List[Candidate]:
    """
    Parse candidates sent back by the host.

    Raises:
        ValidationError: If an item is missing keys or carries bad values
    """
    result = []
    for i, item in enumerate(items):
        try:
            result.append(Candidate.from_dict(item))
        except (KeyError, ValueError, TypeError) as e:
            raise ValidationError(
                f"Invalid icon at index {i}: {e}",
                path=f"icons[{i}]",
                errors=[str(e)],
            ) from e
    return result
