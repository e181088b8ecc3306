"""
Module: candidates

Purpose:
    The Candidate dataclass - an immutable record of one discovered icon.
    Candidates are produced only by the discovery pipeline, enriched by
    consistency analysis and markings (always by creating new instances),
    and discarded at the end of a scan.

Key Classes:
    - CandidateStatus: unresolved / instance / master
    - Candidate: Discovered icon record

Dependencies:
    - dataclasses (std)
    - .nodes.NodeKind

Used By:
    - icon_toolkit.discovery: Producer
    - icon_toolkit.consolidation: Consumer
    - icon_toolkit.engine.handlers: JSON wire format
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple

from .nodes import NodeKind


class CandidateStatus(str, Enum):
    """Organisational state of a discovered icon."""
    UNRESOLVED = "unresolved"  # Loose vector/frame/group, not yet a master
    INSTANCE = "instance"      # References a discovered master
    MASTER = "master"          # Component or component set

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Candidate:
    """
    A discovered icon (immutable).

    Attributes:
        node_id: Id of the backing document node (possibly stale later)
        name: Node name at scan time
        kind: Node kind at scan time
        width: Floored bounding-box width
        height: Floored bounding-box height
        page: Name of the page the node lives on
        source: Library / origin label, e.g. "Lucide Library"
        status: unresolved, instance or master
        score: Classifier confidence score (0 for instances)
        frame_context: Semantic label of the immediate parent frame
        master_id: Resolved master id (instances only)
        inconsistency_reasons: Human-readable consistency findings
        has_inconsistency: True when any reason was recorded
        is_duplicate: Shares a name pattern with another icon on its page
        is_new: Looks detached from a master
        instance_count: Number of discovered instances (masters only)
        component_set: Name of the owning component set, if any
        variant_ids: Icon-sized variant ids (component sets only)
        is_ignored: User marked this icon to ignore
        is_marked_for_swap: User marked this icon for swapping

    Invariants:
        - status == INSTANCE  <=>  master_id is set

    Example:
        >>> c = Candidate("1:2", "home", NodeKind.VECTOR, 24, 24, "Page 1",
        ...               source="Icon Library", status=CandidateStatus.UNRESOLVED)
        >>> c.size_key
        '24x24'
    """

    node_id: str
    name: str
    kind: NodeKind
    width: int
    height: int
    page: str
    source: str = ""
    status: CandidateStatus = CandidateStatus.UNRESOLVED
    score: float = 0.0
    frame_context: Optional[str] = None
    master_id: Optional[str] = None
    inconsistency_reasons: Tuple[str, ...] = ()
    has_inconsistency: bool = False
    is_duplicate: bool = False
    is_new: bool = False
    instance_count: Optional[int] = None
    component_set: Optional[str] = None
    variant_ids: Tuple[str, ...] = field(default_factory=tuple)
    is_ignored: bool = False
    is_marked_for_swap: bool = False

    def __post_init__(self) -> None:
        if self.status == CandidateStatus.INSTANCE and not self.master_id:
            raise ValueError(f"Instance candidate {self.node_id} requires master_id")
        if self.status != CandidateStatus.INSTANCE and self.master_id:
            raise ValueError(
                f"Only instance candidates carry master_id ({self.node_id} is {self.status})"
            )

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def size_key(self) -> str:
        """Exact size bucket, e.g. "24x24"."""
        return f"{self.width}x{self.height}"

    @property
    def aspect_ratio(self) -> float:
        """width / height; a zero height is treated as 1px."""
        return self.width / (self.height or 1)

    @property
    def variants(self) -> Optional[int]:
        return len(self.variant_ids) if self.variant_ids else None

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the host's JSON shape (camelCase keys)."""
        data: dict[str, Any] = {
            "id": self.node_id,
            "name": self.name,
            "type": self.kind.value,
            "width": self.width,
            "height": self.height,
            "page": self.page,
            "source": self.source,
            "status": self.status.value,
            "score": self.score,
            "hasInconsistency": self.has_inconsistency,
            "inconsistencyReasons": list(self.inconsistency_reasons),
            "isDuplicate": self.is_duplicate,
            "isNew": self.is_new,
            "isIgnored": self.is_ignored,
            "isMarkedForSwap": self.is_marked_for_swap,
        }
        if self.frame_context is not None:
            data["frameContext"] = self.frame_context
        if self.master_id is not None:
            data["masterComponentId"] = self.master_id
        if self.instance_count is not None:
            data["instanceCount"] = self.instance_count
        if self.component_set is not None:
            data["componentSet"] = self.component_set
        if self.variant_ids:
            data["variants"] = len(self.variant_ids)
            data["variantIds"] = list(self.variant_ids)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Candidate:
        """
        Deserialize from the host's JSON shape.

        Raises:
            KeyError: If a required key is missing
            ValueError: If kind/status are unknown
        """
        return cls(
            node_id=data["id"],
            name=data["name"],
            kind=NodeKind(data["type"]),
            width=int(data["width"]),
            height=int(data["height"]),
            page=data["page"],
            source=data.get("source", ""),
            status=CandidateStatus(data.get("status", "unresolved")),
            score=float(data.get("score", 0.0)),
            frame_context=data.get("frameContext"),
            master_id=data.get("masterComponentId"),
            inconsistency_reasons=tuple(data.get("inconsistencyReasons", ())),
            has_inconsistency=bool(data.get("hasInconsistency", False)),
            is_duplicate=bool(data.get("isDuplicate", False)),
            is_new=bool(data.get("isNew", False)),
            instance_count=data.get("instanceCount"),
            component_set=data.get("componentSet"),
            variant_ids=tuple(data.get("variantIds", ())),
            is_ignored=bool(data.get("isIgnored", False)),
            is_marked_for_swap=bool(data.get("isMarkedForSwap", False)),
        )
