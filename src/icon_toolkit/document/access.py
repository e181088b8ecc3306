"""
Module: document.access

Purpose:
    Abstract Tree Mutation Interface. The engine never touches live nodes;
    it reads immutable snapshots and requests mutations through this
    interface, which makes the host document the single effect boundary.

Key Classes:
    - DocumentAccess: Abstract base class for document reads and mutations
    - DocumentError: Base class of all document failures
    - NodeNotFoundError: Id no longer resolves to a node
    - NodeInaccessibleError: Node exists but cannot be read
    - InvalidParentError: Target parent missing or cannot hold children
    - CloneFailureError: Subtree could not be cloned
    - ExportFailureError: Preview could not be rendered
    - ImportFailureError: Imported node data could not be built

Dependencies:
    - icon_toolkit.core.models.nodes: NodeSnapshot, NodeKind

Used By:
    - icon_toolkit.discovery: Read-only traversal
    - icon_toolkit.consolidation: Tree rewrites
    - icon_toolkit.engine: Session wiring
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from icon_toolkit.core.models import NodeKind, NodeSnapshot


class DocumentError(Exception):
    """Base class for failures reported by the document."""
    pass


class NodeNotFoundError(DocumentError):
    """Node id does not resolve (deleted or never existed)."""

    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id


class NodeInaccessibleError(DocumentError):
    """Node exists but its properties cannot be read (e.g. remote library)."""

    def __init__(self, node_id: str):
        super().__init__(f"Node is not accessible: {node_id}")
        self.node_id = node_id


class InvalidParentError(DocumentError):
    """Parent is missing or is not a container."""
    pass


class CloneFailureError(DocumentError):
    """Subtree clone failed."""
    pass


class ExportFailureError(DocumentError):
    """Preview export failed."""
    pass


class ImportFailureError(DocumentError):
    """Imported node data is malformed or cannot be built."""
    pass


class DocumentAccess(ABC):
    """
    Abstract interface over a hierarchical design document.

    All reads return immutable ``NodeSnapshot`` values; a snapshot is never
    refreshed, so callers re-read by id before acting on it. Mutations are
    synchronous and take effect immediately.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Document-level properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    @abstractmethod
    def document_name(self) -> str:
        """Display name of the document."""

    @property
    @abstractmethod
    def current_page_id(self) -> Optional[str]:
        """Id of the page the user is looking at, if any."""

    # ─────────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────────

    @abstractmethod
    def get_node(self, node_id: str) -> NodeSnapshot:
        """
        Get a snapshot of a node.

        Raises:
            NodeNotFoundError: If the id does not resolve
            NodeInaccessibleError: If the node cannot be read
        """

    @abstractmethod
    def pages(self) -> List[NodeSnapshot]:
        """All pages in document order."""

    @abstractmethod
    def children(self, node_id: str) -> List[NodeSnapshot]:
        """Direct children in sibling order."""

    @abstractmethod
    def ancestors(self, node_id: str) -> List[NodeSnapshot]:
        """Ancestors from the parent up to and including the page."""

    @abstractmethod
    def find_all(
        self,
        root_id: str,
        kinds: Optional[Iterable[NodeKind]] = None,
    ) -> List[NodeSnapshot]:
        """
        Descendants of ``root_id`` in pre-order, root excluded.

        Args:
            root_id: Subtree root (usually a page)
            kinds: Restrict results to these kinds; None means all

        Note:
            Descendants that cannot be read are skipped.
        """

    @abstractmethod
    def find_page(self, name: str) -> Optional[NodeSnapshot]:
        """First page with exactly this name."""

    @abstractmethod
    def resolve_main_component(self, instance_id: str) -> Optional[NodeSnapshot]:
        """
        Master of an instance.

        Returns:
            Snapshot of the master, or None when the instance is detached or
            its master lives outside this document
        """

    @abstractmethod
    def export_preview(self, node_id: str) -> Optional[bytes]:
        """
        PNG bytes for a thumbnail of the node.

        Raises:
            ExportFailureError: If rendering fails
        """

    # ─────────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────────

    @abstractmethod
    def clone_subtree(self, node_id: str) -> NodeSnapshot:
        """
        Deep-copy a subtree with fresh ids; the copy is detached.

        Raises:
            CloneFailureError: If the subtree cannot be copied
        """

    @abstractmethod
    def import_subtree(self, data: Dict[str, Any]) -> NodeSnapshot:
        """
        Build a detached subtree from nested node JSON (an imported icon).

        Ids in ``data`` are ignored; every node gets a fresh id.

        Raises:
            ImportFailureError: If a kind is unknown or a non-container
                node has children
        """

    @abstractmethod
    def create_master_container(self, name: str, page_id: str) -> NodeSnapshot:
        """Create an empty COMPONENT appended to ``page_id``."""

    @abstractmethod
    def create_reference_instance(self, master_id: str) -> NodeSnapshot:
        """Create a detached INSTANCE of ``master_id``."""

    @abstractmethod
    def create_page(self, name: str) -> NodeSnapshot:
        """Append a new page."""

    @abstractmethod
    def insert_at_index(self, parent_id: str, index: int, node_id: str) -> None:
        """
        Move ``node_id`` under ``parent_id`` at sibling position ``index``.

        Raises:
            InvalidParentError: If the parent is missing or not a container
        """

    @abstractmethod
    def delete_node(self, node_id: str) -> None:
        """
        Remove a node and its subtree.

        Raises:
            NodeNotFoundError: If the id does not resolve
        """

    @abstractmethod
    def update_node(self, node_id: str, **attrs) -> NodeSnapshot:
        """
        Set geometry/visual attributes and return the new snapshot.

        Supported attributes: name, x, y, width, height, rotation, opacity,
        visible, main_component_id.
        """

    # ─────────────────────────────────────────────────────────────────────────
    # Convenience helpers
    # ─────────────────────────────────────────────────────────────────────────

    def try_get_node(self, node_id: str) -> Optional[NodeSnapshot]:
        """``get_node`` that returns None instead of raising DocumentError."""
        try:
            return self.get_node(node_id)
        except DocumentError:
            return None

    def exists(self, node_id: str) -> bool:
        return self.try_get_node(node_id) is not None

    def index_in_parent(self, node_id: str) -> int:
        """Sibling index of a node (-1 for pages and detached nodes)."""
        node = self.get_node(node_id)
        if node.parent_id is None:
            return -1
        parent = self.get_node(node.parent_id)
        try:
            return parent.child_ids.index(node_id)
        except ValueError:
            return -1

    def page_of(self, node_id: str) -> Optional[NodeSnapshot]:
        """Page containing the node (the node itself for pages)."""
        node = self.get_node(node_id)
        if node.kind == NodeKind.PAGE:
            return node
        for ancestor in self.ancestors(node_id):
            if ancestor.kind == NodeKind.PAGE:
                return ancestor
        return None
