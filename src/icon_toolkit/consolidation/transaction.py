"""
Module: consolidation.transaction

Purpose:
    Consolidate one duplicate group into a canonical master:

    1. Pick the representative member and clone its subtree
    2. Materialize a master on the icon library page (grid placement)
    3. Rewrite every other member into an instance of the master,
       preserving position, transform and sibling order

    Each member rewrite is independent: a failing member is logged, removed
    best-effort and not counted. The group fails only when no member was
    replaced, and its master is then removed again. Nothing is deleted
    before the master exists.

Key Functions:
    - consolidate_cluster(): Run the transaction for one group
    - replace_with_instance(): Swap one node for an instance in place
    - select_representative(): Choose the member that seeds the master
    - ensure_library_page(): Find or create the library page

Dependencies:
    - icon_toolkit.document: DocumentAccess and errors
    - icon_toolkit.common.naming: generate_smart_name

Used By:
    - consolidation.runner
    - consolidation.conversion
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from icon_toolkit.common.naming import generate_smart_name
from icon_toolkit.common.thresholds import LIBRARY_LAYOUT, LibraryLayout
from icon_toolkit.core.models import Candidate, ClusterOutcome, DuplicateGroup, NodeKind, NodeSnapshot
from icon_toolkit.core.models.nodes import CONTAINER_KINDS, MASTER_KINDS
from icon_toolkit.document.access import DocumentAccess, DocumentError, InvalidParentError

logger = logging.getLogger(__name__)


def representative_score(name: str) -> int:
    """Longer names win; names mentioning "icon" get a bonus."""
    return len(name) + (10 if "icon" in name else 0)


def select_representative(members: Sequence[Candidate]) -> Candidate:
    """
    Member whose name scores highest; the first one wins ties.

    Example:
        >>> [m.name for m in members]
        ['home-icon', 'home_icon2', 'HomeIcon']
        >>> select_representative(members).name
        'home_icon2'
    """
    best = members[0]
    for member in members[1:]:
        if representative_score(member.name) > representative_score(best.name):
            best = member
    return best


def ensure_library_page(
    document: DocumentAccess,
    layout: LibraryLayout = LIBRARY_LAYOUT,
) -> NodeSnapshot:
    page = document.find_page(layout.page_name)
    if page is None:
        page = document.create_page(layout.page_name)
        logger.info(f"Created library page {layout.page_name!r}")
    return page


def materialize_master(
    document: DocumentAccess,
    source_id: str,
    library_page_id: str,
    grid_position: int,
    layout: LibraryLayout = LIBRARY_LAYOUT,
) -> NodeSnapshot:
    """
    Clone ``source_id`` into a new master on the library page.

    A clone that already is a COMPONENT becomes the master directly;
    anything else is wrapped in a new master sized to the clone, with the
    clone at (0, 0). On failure the clone and any partial master are
    removed again.

    Raises:
        DocumentError: If the source cannot be cloned or placed
    """
    clone = document.clone_subtree(source_id)
    created: List[str] = [clone.id]
    try:
        if clone.kind == NodeKind.COMPONENT:
            master = clone
            library = document.get_node(library_page_id)
            document.insert_at_index(library_page_id, len(library.child_ids), master.id)
        else:
            name = generate_smart_name(clone.name, clone.bounding_box, fallback_suffix=str(grid_position + 1))
            master = document.create_master_container(name, library_page_id)
            created.insert(0, master.id)
            if clone.bounding_box is not None:
                document.update_node(master.id, width=clone.bounding_box.width, height=clone.bounding_box.height)
            document.update_node(clone.id, x=0, y=0)
            document.insert_at_index(master.id, 0, clone.id)

        x, y = layout.cell_position(grid_position)
        master = document.update_node(master.id, x=x, y=y)
    except DocumentError:
        discard_nodes(document, created)
        raise
    logger.info(f"Created component: {master.name!r} at position ({x}, {y})")
    return master


def discard_nodes(document: DocumentAccess, node_ids: Sequence[str]) -> None:
    """Delete nodes created by an operation that did not complete."""
    for node_id in node_ids:
        node = document.try_get_node(node_id)
        if node is None or node.kind == NodeKind.PAGE:
            continue
        try:
            document.delete_node(node_id)
            logger.debug(f"Discarded {node.name!r} ({node_id})")
        except DocumentError as e:
            logger.error(f"Failed to discard {node.name!r}: {e}")


def replace_with_instance(document: DocumentAccess, node_id: str, master_id: str) -> Optional[NodeSnapshot]:
    """
    Replace a node with an instance of ``master_id`` at the same place.

    Copies x, y, rotation, opacity and visibility; inserts at the original
    sibling index, then removes the original.

    Returns:
        Snapshot of the new instance; None if the node is a master and
        was left alone

    Raises:
        NodeNotFoundError: If the node or master no longer exists
        InvalidParentError: If the node's parent cannot hold children
        DocumentError: For pages and any other document failure
    """
    original = document.get_node(node_id)
    if original.kind == NodeKind.PAGE:
        raise DocumentError(f"Cannot replace page {node_id}")
    if original.kind in MASTER_KINDS:
        logger.info(f"Skipping replacement of master component: {original.name!r}")
        return None

    parent = document.try_get_node(original.parent_id) if original.parent_id else None
    if parent is None or parent.kind not in CONTAINER_KINDS:
        raise InvalidParentError(
            f"Invalid parent for {original.name!r}: "
            f"{'not a container' if parent else 'missing'}"
        )
    index = parent.child_ids.index(node_id) if node_id in parent.child_ids else len(parent.child_ids)

    instance = document.create_reference_instance(master_id)
    instance = document.update_node(
        instance.id,
        x=original.x,
        y=original.y,
        rotation=original.rotation,
        opacity=original.opacity,
        visible=original.visible,
    )
    try:
        document.insert_at_index(parent.id, index, instance.id)
    except DocumentError:
        document.delete_node(instance.id)
        raise
    document.delete_node(node_id)
    logger.debug(f"Replaced {original.name!r} with instance {instance.id}")
    return document.get_node(instance.id)


def _remove_quietly(document: DocumentAccess, node_id: str) -> None:
    node = document.try_get_node(node_id)
    if node is None or node.kind == NodeKind.PAGE:
        return
    try:
        document.delete_node(node_id)
        logger.warning(f"Manually removed failed icon: {node.name!r}")
    except DocumentError as e:
        logger.error(f"Failed to manually remove {node.name!r}: {e}")


def consolidate_cluster(
    document: DocumentAccess,
    group: DuplicateGroup,
    library_page_id: str,
    grid_position: int,
    layout: LibraryLayout = LIBRARY_LAYOUT,
) -> ClusterOutcome:
    """
    Consolidate one duplicate group into a single master.

    For multi-member groups the representative's source node is consumed
    (removed, counted as replaced) and every other member becomes an
    instance. A singleton's source is replaced with an instance in place.

    Args:
        document: Document to mutate
        group: Members to consolidate
        library_page_id: Page that receives the master
        grid_position: Grid cell index for the master

    Returns:
        ClusterOutcome; ``success`` iff at least one member was replaced
    """
    outcome = ClusterOutcome()
    best = select_representative(group.members)
    logger.info(f"Creating component from group of {len(group)} icons, best icon: {best.name!r}")

    source = document.try_get_node(best.node_id)
    if source is None or source.kind == NodeKind.PAGE:
        outcome.errors.append(f"Failed to get original node for {best.name}")
        logger.error(outcome.errors[-1])
        return outcome

    try:
        master = materialize_master(document, best.node_id, library_page_id, grid_position, layout)
    except DocumentError as e:
        outcome.errors.append(f"Failed to create master for {best.name}: {e}")
        logger.error(outcome.errors[-1])
        return outcome
    outcome.master_id = master.id

    consume_source = not group.is_singleton
    for member in group.members:
        if consume_source and member.node_id == best.node_id:
            node = document.try_get_node(member.node_id)
            if node is not None and node.kind not in (NodeKind.PAGE, NodeKind.COMPONENT):
                try:
                    document.delete_node(member.node_id)
                    outcome.icons_replaced += 1
                    outcome.pages_affected.add(member.page)
                except DocumentError as e:
                    outcome.errors.append(f"Failed to remove source node {member.name}: {e}")
                    logger.error(outcome.errors[-1])
            continue

        try:
            if replace_with_instance(document, member.node_id, master.id):
                outcome.icons_replaced += 1
                outcome.pages_affected.add(member.page)
        except DocumentError as e:
            outcome.errors.append(f"Failed to replace {member.name}: {e}")
            logger.warning(outcome.errors[-1])
            _remove_quietly(document, member.node_id)

    outcome.success = outcome.icons_replaced > 0
    if outcome.success:
        logger.info(f"Group processing successful: {outcome.icons_replaced}/{len(group)} icons processed")
    else:
        # Frees the grid cell for the next group
        logger.error("Group processing failed: no icons were successfully replaced")
        discard_nodes(document, [master.id])
        outcome.master_id = None
    return outcome


def master_for(document: DocumentAccess, node_id: str) -> Optional[NodeSnapshot]:
    """Resolve a master reference: a component set resolves to its first variant."""
    node = document.try_get_node(node_id)
    if node is None:
        return None
    if node.kind == NodeKind.COMPONENT_SET:
        variants = [c for c in document.children(node_id) if c.kind == NodeKind.COMPONENT]
        return variants[0] if variants else None
    return node if node.kind == NodeKind.COMPONENT else None
