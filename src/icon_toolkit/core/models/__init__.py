"""
Core Models Package

Immutable data models shared by discovery, consolidation and the engine.
Candidates and snapshots are frozen dataclasses; enrichment always creates
new instances via ``dataclasses.replace``.
"""

from .nodes import BoundingBox, NodeKind, NodeSnapshot, Paint
from .candidates import Candidate, CandidateStatus
from .groups import DuplicateGroup
from .markings import Marking, MarkingMap, MarkType
from .results import (
    ClusterOutcome,
    ConsolidationResult,
    LibraryConsolidationResult,
    LibraryImportResult,
    ProgressCallback,
    ProgressEvent,
    ScanResult,
    SwapResult,
)

__all__ = [
    "BoundingBox",
    "NodeKind",
    "NodeSnapshot",
    "Paint",
    "Candidate",
    "CandidateStatus",
    "DuplicateGroup",
    "Marking",
    "MarkingMap",
    "MarkType",
    "ClusterOutcome",
    "ConsolidationResult",
    "LibraryConsolidationResult",
    "ProgressCallback",
    "ProgressEvent",
    "ScanResult",
    "SwapResult",
    "LibraryImportResult",
]
