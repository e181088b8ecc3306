"""
Module: document.memory

Purpose:
    Reference DocumentAccess implementation backed by an arena: a dict of
    node id -> mutable record, ordered child-id lists and parent lookups by
    id. Used by the CLI (documents loaded from JSON) and by tests.

Key Classes:
    - InMemoryDocument: Arena-backed document

Dependencies:
    - icon_toolkit.document.access: Interface and errors
    - icon_toolkit.document.preview: Thumbnail rendering (Pillow)

Used By:
    - icon_toolkit.core.utils.serialization: load/save
    - icon_toolkit.cli: Command line entry point
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional

from icon_toolkit.core.models import BoundingBox, NodeKind, NodeSnapshot, Paint
from icon_toolkit.core.models.nodes import CONTAINER_KINDS

from .access import (
    CloneFailureError,
    DocumentAccess,
    DocumentError,
    ImportFailureError,
    InvalidParentError,
    NodeInaccessibleError,
    NodeNotFoundError,
)
from .preview import render_preview

logger = logging.getLogger(__name__)

_UPDATABLE = frozenset({
    "name", "x", "y", "width", "height", "rotation", "opacity", "visible",
    "main_component_id",
})


@dataclass
class _NodeRecord:
    """Mutable arena slot. Never handed out; callers get NodeSnapshot."""
    id: str
    name: str
    kind: NodeKind
    parent_id: Optional[str] = None
    child_ids: List[str] = field(default_factory=list)
    width: Optional[float] = None
    height: Optional[float] = None
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    opacity: float = 1.0
    visible: bool = True
    fills: tuple = ()
    strokes: tuple = ()
    main_component_id: Optional[str] = None
    inaccessible: bool = False

    def snapshot(self) -> NodeSnapshot:
        box = None
        if self.width is not None and self.height is not None:
            box = BoundingBox(self.width, self.height)
        return NodeSnapshot(
            id=self.id,
            name=self.name,
            kind=self.kind,
            parent_id=self.parent_id,
            child_ids=tuple(self.child_ids),
            bounding_box=box,
            x=self.x,
            y=self.y,
            rotation=self.rotation,
            opacity=self.opacity,
            visible=self.visible,
            fills=self.fills,
            strokes=self.strokes,
            main_component_id=self.main_component_id,
        )


class InMemoryDocument(DocumentAccess):
    """
    Arena-backed document.

    Pages are roots (``parent_id`` None) listed in ``_page_ids``; detached
    nodes (fresh clones and instances) also have no parent until inserted.

    Example:
        >>> doc = InMemoryDocument("Design")
        >>> page = doc.add_page("Page 1")
        >>> icon = doc.add_node(page, "home-icon", NodeKind.VECTOR, width=24, height=24)
        >>> doc.get_node(icon).bounding_box.width
        24
    """

    def __init__(self, name: str = "Untitled", id_prefix: str = "1"):
        self._name = name
        self._id_prefix = id_prefix
        self._records: Dict[str, _NodeRecord] = {}
        self._page_ids: List[str] = []
        self._current_page_id: Optional[str] = None
        self._counter = itertools.count(1)

    # ─────────────────────────────────────────────────────────────────────────
    # Building
    # ─────────────────────────────────────────────────────────────────────────

    def _new_id(self) -> str:
        while True:
            node_id = f"{self._id_prefix}:{next(self._counter)}"
            if node_id not in self._records:
                return node_id

    def add_page(self, name: str, node_id: Optional[str] = None) -> str:
        """Append a page and return its id. The first page becomes current."""
        node_id = node_id or self._new_id()
        if node_id in self._records:
            raise ValueError(f"Duplicate node id: {node_id}")
        self._records[node_id] = _NodeRecord(id=node_id, name=name, kind=NodeKind.PAGE)
        self._page_ids.append(node_id)
        if self._current_page_id is None:
            self._current_page_id = node_id
        return node_id

    def add_node(
        self,
        parent_id: str,
        name: str,
        kind: NodeKind,
        *,
        width: Optional[float] = None,
        height: Optional[float] = None,
        x: float = 0.0,
        y: float = 0.0,
        rotation: float = 0.0,
        opacity: float = 1.0,
        visible: bool = True,
        fills: Iterable[Paint] = (),
        strokes: Iterable[Paint] = (),
        main_component_id: Optional[str] = None,
        inaccessible: bool = False,
        node_id: Optional[str] = None,
    ) -> str:
        """
        Append a node under ``parent_id`` and return its id.

        Raises:
            InvalidParentError: If the parent is missing or not a container
            ValueError: If ``node_id`` is already taken or kind is PAGE
        """
        if kind == NodeKind.PAGE:
            raise ValueError("Use add_page() for pages")
        parent = self._records.get(parent_id)
        if parent is None or parent.kind not in CONTAINER_KINDS:
            raise InvalidParentError(f"Cannot add child to {parent_id}")
        node_id = node_id or self._new_id()
        if node_id in self._records:
            raise ValueError(f"Duplicate node id: {node_id}")
        self._records[node_id] = _NodeRecord(
            id=node_id,
            name=name,
            kind=kind,
            parent_id=parent_id,
            width=width,
            height=height,
            x=x,
            y=y,
            rotation=rotation,
            opacity=opacity,
            visible=visible,
            fills=tuple(fills),
            strokes=tuple(strokes),
            main_component_id=main_component_id,
            inaccessible=inaccessible,
        )
        parent.child_ids.append(node_id)
        return node_id

    def set_current_page(self, page_id: Optional[str]) -> None:
        if page_id is not None and page_id not in self._page_ids:
            raise NodeNotFoundError(page_id)
        self._current_page_id = page_id

    def is_inaccessible(self, node_id: str) -> bool:
        record = self._records.get(node_id)
        return bool(record and record.inaccessible)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._records

    # ─────────────────────────────────────────────────────────────────────────
    # DocumentAccess: properties and reads
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def document_name(self) -> str:
        return self._name

    @property
    def current_page_id(self) -> Optional[str]:
        return self._current_page_id

    def _record(self, node_id: str) -> _NodeRecord:
        record = self._records.get(node_id)
        if record is None:
            raise NodeNotFoundError(node_id)
        if record.inaccessible:
            raise NodeInaccessibleError(node_id)
        return record

    def get_node(self, node_id: str) -> NodeSnapshot:
        return self._record(node_id).snapshot()

    def pages(self) -> List[NodeSnapshot]:
        return [self._records[pid].snapshot() for pid in self._page_ids]

    def children(self, node_id: str) -> List[NodeSnapshot]:
        record = self._record(node_id)
        result = []
        for child_id in record.child_ids:
            child = self._records[child_id]
            if not child.inaccessible:
                result.append(child.snapshot())
        return result

    def ancestors(self, node_id: str) -> List[NodeSnapshot]:
        record = self._records.get(node_id)
        if record is None:
            raise NodeNotFoundError(node_id)
        result = []
        parent_id = record.parent_id
        while parent_id is not None:
            parent = self._records[parent_id]
            result.append(parent.snapshot())
            parent_id = parent.parent_id
        return result

    def _walk(self, root_id: str) -> Iterator[_NodeRecord]:
        # Explicit stack keeps deep trees off the recursion limit
        stack = list(reversed(self._records[root_id].child_ids))
        while stack:
            record = self._records[stack.pop()]
            if record.inaccessible:
                logger.debug(f"Skipping inaccessible node {record.id}")
                continue
            yield record
            stack.extend(reversed(record.child_ids))

    def find_all(
        self,
        root_id: str,
        kinds: Optional[Iterable[NodeKind]] = None,
    ) -> List[NodeSnapshot]:
        self._record(root_id)
        wanted = frozenset(kinds) if kinds is not None else None
        return [
            record.snapshot()
            for record in self._walk(root_id)
            if wanted is None or record.kind in wanted
        ]

    def find_page(self, name: str) -> Optional[NodeSnapshot]:
        for page_id in self._page_ids:
            if self._records[page_id].name == name:
                return self._records[page_id].snapshot()
        return None

    def resolve_main_component(self, instance_id: str) -> Optional[NodeSnapshot]:
        record = self._record(instance_id)
        if record.kind != NodeKind.INSTANCE or not record.main_component_id:
            return None
        master = self._records.get(record.main_component_id)
        if master is None or master.inaccessible:
            return None
        return master.snapshot()

    def export_preview(self, node_id: str) -> Optional[bytes]:
        self._record(node_id)
        return render_preview(self, node_id)

    # ─────────────────────────────────────────────────────────────────────────
    # DocumentAccess: mutations
    # ─────────────────────────────────────────────────────────────────────────

    def _copy_subtree(self, node_id: str, parent_id: Optional[str]) -> str:
        source = self._records[node_id]
        new_id = self._new_id()
        self._records[new_id] = _NodeRecord(
            id=new_id,
            name=source.name,
            kind=source.kind,
            parent_id=parent_id,
            width=source.width,
            height=source.height,
            x=source.x,
            y=source.y,
            rotation=source.rotation,
            opacity=source.opacity,
            visible=source.visible,
            fills=source.fills,
            strokes=source.strokes,
            main_component_id=source.main_component_id,
        )
        self._records[new_id].child_ids = [
            self._copy_subtree(child_id, new_id) for child_id in source.child_ids
        ]
        return new_id

    def clone_subtree(self, node_id: str) -> NodeSnapshot:
        try:
            record = self._record(node_id)
        except DocumentError as e:
            raise CloneFailureError(f"Cannot clone {node_id}: {e}") from e
        if record.kind == NodeKind.PAGE:
            raise CloneFailureError(f"Cannot clone page {node_id}")
        if any(r.inaccessible for r in self._iter_subtree(node_id)):
            raise CloneFailureError(f"Subtree of {node_id} contains inaccessible nodes")
        clone_id = self._copy_subtree(node_id, None)
        logger.debug(f"Cloned {node_id} -> {clone_id}")
        return self._records[clone_id].snapshot()

    def _iter_subtree(self, node_id: str) -> Iterator[_NodeRecord]:
        stack = [node_id]
        while stack:
            record = self._records[stack.pop()]
            yield record
            stack.extend(record.child_ids)

    def create_master_container(self, name: str, page_id: str) -> NodeSnapshot:
        page = self._records.get(page_id)
        if page is None or page.kind != NodeKind.PAGE:
            raise InvalidParentError(f"Master container needs a page, got {page_id}")
        node_id = self.add_node(page_id, name, NodeKind.COMPONENT, width=0, height=0)
        return self._records[node_id].snapshot()

    def create_reference_instance(self, master_id: str) -> NodeSnapshot:
        master = self._record(master_id)
        if master.kind != NodeKind.COMPONENT:
            raise DocumentError(f"Cannot instantiate {master.kind} {master_id}")
        instance_id = self._new_id()
        self._records[instance_id] = _NodeRecord(
            id=instance_id,
            name=master.name,
            kind=NodeKind.INSTANCE,
            width=master.width,
            height=master.height,
            fills=master.fills,
            strokes=master.strokes,
            main_component_id=master_id,
        )
        self._records[instance_id].child_ids = [
            self._copy_subtree(child_id, instance_id) for child_id in master.child_ids
        ]
        return self._records[instance_id].snapshot()

    def create_page(self, name: str) -> NodeSnapshot:
        return self._records[self.add_page(name)].snapshot()

    def _detach(self, record: _NodeRecord) -> None:
        if record.parent_id is not None:
            parent = self._records.get(record.parent_id)
            if parent is not None and record.id in parent.child_ids:
                parent.child_ids.remove(record.id)
            record.parent_id = None

    def insert_at_index(self, parent_id: str, index: int, node_id: str) -> None:
        parent = self._records.get(parent_id)
        if parent is None or parent.kind not in CONTAINER_KINDS:
            raise InvalidParentError(f"Cannot insert into {parent_id}")
        record = self._record(node_id)
        if record.kind == NodeKind.PAGE:
            raise InvalidParentError(f"Pages cannot be re-parented: {node_id}")
        if any(r.id == parent_id for r in self._iter_subtree(node_id)):
            raise InvalidParentError(f"Cannot insert {node_id} into its own subtree")
        self._detach(record)
        index = max(0, min(index, len(parent.child_ids)))
        parent.child_ids.insert(index, node_id)
        record.parent_id = parent_id

    def delete_node(self, node_id: str) -> None:
        record = self._records.get(node_id)
        if record is None:
            raise NodeNotFoundError(node_id)
        if record.kind == NodeKind.PAGE:
            self._page_ids.remove(node_id)
            if self._current_page_id == node_id:
                self._current_page_id = self._page_ids[0] if self._page_ids else None
        self._detach(record)
        for doomed in list(self._iter_subtree(node_id)):
            del self._records[doomed.id]
        logger.debug(f"Deleted {node_id}")

    def update_node(self, node_id: str, **attrs) -> NodeSnapshot:
        unknown = set(attrs) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unsupported node attributes: {sorted(unknown)}")
        record = self._record(node_id)
        for key, value in attrs.items():
            setattr(record, key, value)
        return record.snapshot()

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def _node_to_dict(self, node_id: str) -> Dict[str, Any]:
        record = self._records[node_id]
        data = record.snapshot().to_dict()
        if record.inaccessible:
            data["inaccessible"] = True
        if record.child_ids:
            data["children"] = [self._node_to_dict(cid) for cid in record.child_ids]
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Nested JSON form; detached nodes are not persisted."""
        data: Dict[str, Any] = {
            "name": self._name,
            "pages": [self._node_to_dict(pid) for pid in self._page_ids],
        }
        if self._current_page_id is not None:
            data["currentPageId"] = self._current_page_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> InMemoryDocument:
        """
        Build a document from its nested JSON form.

        Ids missing from the input are generated.
        """
        doc = cls(data.get("name", "Untitled"))
        for page in data.get("pages", []):
            page_id = doc.add_page(page["name"], node_id=page.get("id"))
            for child in page.get("children", []):
                doc._load_node(page_id, child)
        if data.get("currentPageId"):
            doc.set_current_page(data["currentPageId"])
        return doc

    def _load_node(self, parent_id: str, data: Dict[str, Any]) -> None:
        node_id = self.add_node(
            parent_id,
            data.get("name", ""),
            NodeKind(data["type"]),
            inaccessible=bool(data.get("inaccessible", False)),
            node_id=data.get("id"),
            **_node_attrs(data),
        )
        for child in data.get("children", []):
            self._load_node(node_id, child)

    # ─────────────────────────────────────────────────────────────────────────
    # DocumentAccess: imports
    # ─────────────────────────────────────────────────────────────────────────

    def import_subtree(self, data: Dict[str, Any]) -> NodeSnapshot:
        try:
            _check_importable(data)
        except (KeyError, ValueError, TypeError) as e:
            raise ImportFailureError(f"Cannot import node: {e}") from e
        root_id = self._build_imported(data, None)
        logger.debug(f"Imported {data.get('name', '')!r} as {root_id}")
        return self._records[root_id].snapshot()

    def _build_imported(self, data: Dict[str, Any], parent_id: Optional[str]) -> str:
        node_id = self._new_id()
        self._records[node_id] = _NodeRecord(
            id=node_id,
            name=data.get("name", ""),
            kind=NodeKind(data["type"]),
            parent_id=parent_id,
            **_node_attrs(data),
        )
        if parent_id is not None:
            self._records[parent_id].child_ids.append(node_id)
        for child in data.get("children", []):
            self._build_imported(child, node_id)
        return node_id


def _node_attrs(data: Dict[str, Any]) -> Dict[str, Any]:
    """Geometry and paint fields of one node in nested JSON form."""
    box = data.get("absoluteBoundingBox")
    return {
        "width": float(box["width"]) if box else None,
        "height": float(box["height"]) if box else None,
        "x": float(data.get("x", 0.0)),
        "y": float(data.get("y", 0.0)),
        "rotation": float(data.get("rotation", 0.0)),
        "opacity": float(data.get("opacity", 1.0)),
        "visible": bool(data.get("visible", True)),
        "fills": tuple(Paint.from_dict(p) for p in data.get("fills", [])),
        "strokes": tuple(Paint.from_dict(p) for p in data.get("strokes", [])),
        "main_component_id": data.get("mainComponentId"),
    }


def _check_importable(data: Dict[str, Any]) -> None:
    """Raise ValueError for data that would build an invalid subtree."""
    stack = [data]
    while stack:
        node = stack.pop()
        kind = NodeKind(node["type"])
        if kind == NodeKind.PAGE:
            raise ValueError("pages cannot be imported")
        _node_attrs(node)
        children = node.get("children", [])
        if children and kind not in CONTAINER_KINDS:
            raise ValueError(f"{kind.value} {node.get('name', '')!r} cannot have children")
        stack.extend(children)
