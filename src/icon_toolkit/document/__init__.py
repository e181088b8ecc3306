"""
Document Package

Tree Mutation Interface plus the in-memory arena implementation used by the
command line and the tests.
"""

from .access import (
    CloneFailureError,
    DocumentAccess,
    DocumentError,
    ExportFailureError,
    ImportFailureError,
    InvalidParentError,
    NodeInaccessibleError,
    NodeNotFoundError,
)
from .memory import InMemoryDocument
from .preview import preview_data_uri, render_preview

__all__ = [
    "CloneFailureError",
    "DocumentAccess",
    "DocumentError",
    "ExportFailureError",
    "ImportFailureError",
    "InvalidParentError",
    "NodeInaccessibleError",
    "NodeNotFoundError",
    "InMemoryDocument",
    "preview_data_uri",
    "render_preview",
]
