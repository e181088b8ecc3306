"""
Module: groups

Purpose:
    DuplicateGroup - one cluster produced by the duplicate clusterer.
    A group with a single member is a singleton that is promoted to its
    own master instead of being merged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

from .candidates import Candidate


@dataclass(frozen=True)
class DuplicateGroup:
    """
    Cluster of candidates that will share one canonical master.

    Attributes:
        key: Bucket key the cluster was formed from
        members: Member candidates in insertion order (first = representative)

    Invariants:
        - len(members) >= 1
    """
    key: str
    members: Tuple[Candidate, ...]

    def __post_init__(self) -> None:
        if not self.members:
            raise ValueError(f"DuplicateGroup {self.key!r} must have at least one member")

    @property
    def is_singleton(self) -> bool:
        return len(self.members) == 1

    @property
    def representative(self) -> Candidate:
        """First member; used as the comparison anchor during clustering."""
        return self.members[0]

    @property
    def pages(self) -> set[str]:
        return {m.page for m in self.members}

    def with_member(self, candidate: Candidate) -> DuplicateGroup:
        """Return a new group with ``candidate`` appended."""
        return DuplicateGroup(self.key, self.members + (candidate,))

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self.members)
