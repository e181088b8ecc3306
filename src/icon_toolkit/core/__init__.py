"""
Icon Toolkit Core Package

Shared data models, host message schemas and serialization helpers. These
models are the single source of truth for discovery, consolidation and the
engine.

1. **Immutable Data Models**
   - Snapshots and candidates are frozen dataclasses
   - Enrichment (consistency, markings) creates new instances

2. **Stale Ids**
   - Models hold node ids, never live node references
   - Every id is re-resolved through the document before use
"""

from .models import Candidate, CandidateStatus, DuplicateGroup, NodeKind, NodeSnapshot

__all__ = [
    "Candidate",
    "CandidateStatus",
    "DuplicateGroup",
    "NodeKind",
    "NodeSnapshot",
]
