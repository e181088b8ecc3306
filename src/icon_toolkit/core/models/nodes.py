"""
Module: nodes

Purpose:
    Read snapshots of document tree nodes. The document owns the live
    nodes; the engine only ever holds a node id plus an immutable
    NodeSnapshot taken at lookup time.

Key Classes:
    - NodeKind: Closed set of node kinds the engine distinguishes
    - BoundingBox: Absolute width/height extent of a node
    - Paint: Coarse fill/stroke descriptor (type only)
    - NodeSnapshot: Immutable view of one node

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - icon_toolkit.document: Produces snapshots
    - icon_toolkit.discovery.classifier: Classifies snapshots
    - icon_toolkit.consolidation.similarity: Visual attribute proxy
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple


class NodeKind(str, Enum):
    """Kind tag of a document node."""
    PAGE = "PAGE"
    COMPONENT = "COMPONENT"
    COMPONENT_SET = "COMPONENT_SET"
    FRAME = "FRAME"
    INSTANCE = "INSTANCE"
    GROUP = "GROUP"
    VECTOR = "VECTOR"
    BOOLEAN_OPERATION = "BOOLEAN_OPERATION"
    RECTANGLE = "RECTANGLE"
    ELLIPSE = "ELLIPSE"
    POLYGON = "POLYGON"
    STAR = "STAR"
    LINE = "LINE"
    TEXT = "TEXT"

    def __str__(self) -> str:
        return self.value


# Children of these kinds count as "vector content" inside an icon container
SHAPE_KINDS = frozenset({
    NodeKind.VECTOR,
    NodeKind.BOOLEAN_OPERATION,
    NodeKind.GROUP,
    NodeKind.ELLIPSE,
    NodeKind.RECTANGLE,
    NodeKind.POLYGON,
    NodeKind.STAR,
})

# Kinds that may own children
CONTAINER_KINDS = frozenset({
    NodeKind.PAGE,
    NodeKind.COMPONENT,
    NodeKind.COMPONENT_SET,
    NodeKind.FRAME,
    NodeKind.INSTANCE,
    NodeKind.GROUP,
    NodeKind.BOOLEAN_OPERATION,
})

MASTER_KINDS = frozenset({NodeKind.COMPONENT, NodeKind.COMPONENT_SET})


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """
    Axis-aligned extent of a node in absolute coordinates.

    Attributes:
        width: Width in pixels (>= 0)
        height: Height in pixels (>= 0)

    Example:
        >>> BoundingBox(24, 24).aspect_ratio
        1.0
        >>> BoundingBox(24, 0).aspect_ratio is None
        True
    """
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0:
            raise ValueError(f"width must be >= 0, got {self.width}")
        if self.height < 0:
            raise ValueError(f"height must be >= 0, got {self.height}")

    @property
    def max_side(self) -> float:
        return max(self.width, self.height)

    @property
    def aspect_ratio(self) -> Optional[float]:
        """width / height, or None for a degenerate (zero-height) box."""
        if self.height == 0:
            return None
        return self.width / self.height

    def to_dict(self) -> dict[str, float]:
        return {"width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BoundingBox:
        return cls(width=float(data["width"]), height=float(data["height"]))


@dataclass(frozen=True, slots=True)
class Paint:
    """Fill or stroke paint; only its type matters to the engine."""
    type: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Paint:
        return cls(type=str(data.get("type", "SOLID")))


@dataclass(frozen=True, slots=True)
class NodeSnapshot:
    """
    Immutable read snapshot of one document node.

    The parent link is a weak back-reference (an id lookup), never an
    ownership edge; ``child_ids`` is the ordered ownership list.

    Attributes:
        id: Stable node identifier
        name: Layer name as authored
        kind: Node kind tag
        parent_id: Id of the parent node (None for pages)
        child_ids: Ordered child ids
        bounding_box: Absolute extent; None when the node has no geometry
        x, y: Position relative to the parent
        rotation: Rotation in degrees
        opacity: 0.0 - 1.0
        visible: Visibility flag
        fills: Fill paints
        strokes: Stroke paints
        main_component_id: Master id for INSTANCE nodes
    """
    id: str
    name: str
    kind: NodeKind
    parent_id: Optional[str] = None
    child_ids: Tuple[str, ...] = ()
    bounding_box: Optional[BoundingBox] = None
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    opacity: float = 1.0
    visible: bool = True
    fills: Tuple[Paint, ...] = field(default_factory=tuple)
    strokes: Tuple[Paint, ...] = field(default_factory=tuple)
    main_component_id: Optional[str] = None

    @property
    def width(self) -> Optional[float]:
        return self.bounding_box.width if self.bounding_box else None

    @property
    def height(self) -> Optional[float]:
        return self.bounding_box.height if self.bounding_box else None

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_KINDS

    @property
    def is_master(self) -> bool:
        return self.kind in MASTER_KINDS

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.kind.value,
            "x": self.x,
            "y": self.y,
        }
        if self.bounding_box is not None:
            data["absoluteBoundingBox"] = self.bounding_box.to_dict()
        if self.rotation:
            data["rotation"] = self.rotation
        if self.opacity != 1.0:
            data["opacity"] = self.opacity
        if not self.visible:
            data["visible"] = False
        if self.fills:
            data["fills"] = [p.to_dict() for p in self.fills]
        if self.strokes:
            data["strokes"] = [p.to_dict() for p in self.strokes]
        if self.main_component_id:
            data["mainComponentId"] = self.main_component_id
        return data
