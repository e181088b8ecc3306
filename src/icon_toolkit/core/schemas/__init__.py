"""
Schemas Package

JSON schema definitions for host requests and documents, plus validation
utilities.
"""

from .validator import (
    DOCUMENT_SCHEMA_VERSION,
    REQUEST_SCHEMAS,
    ValidationError,
    validate_document,
    validate_request,
)

__all__ = [
    "DOCUMENT_SCHEMA_VERSION",
    "REQUEST_SCHEMAS",
    "ValidationError",
    "validate_document",
    "validate_request",
]
