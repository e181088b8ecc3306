"""
Module: consolidation.swap

Purpose:
    Swap an icon for a different master. Every use of the swapped icon is
    replaced by an instance of the replacement:

    - A master: all of its instances across all pages are repointed, the
      master is archived as "[Archived] <name>" and then removed.
    - Anything else: the node itself is replaced in place; top-level
      nodes are archived first.

    The replacement may be promoted to a master on the library page first.

Key Functions:
    - swap_icons(): Run one swap
    - archive_node(): Copy a node onto the archive page

Dependencies:
    - consolidation.transaction: master materialization and replacement

Used By:
    - icon_toolkit.engine.handlers: swap-icons
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Set

from icon_toolkit.common.thresholds import LIBRARY_LAYOUT, LibraryLayout
from icon_toolkit.core.models import BoundingBox, NodeKind, NodeSnapshot, SwapResult
from icon_toolkit.document.access import DocumentAccess, DocumentError

from .conversion import ConversionError
from .transaction import discard_nodes, ensure_library_page, materialize_master, replace_with_instance

logger = logging.getLogger(__name__)

ARCHIVE_PAGE_NAME = "🗄️ Archived Icons"
ARCHIVE_PREFIX = "[Archived] "


class SizingMode(str, Enum):
    """Size given to each new instance."""
    SCALE_TO_FIT = "scale-to-fit"  # Size of the icon being replaced
    KEEP_SIZE = "keep-size"  # Size of the replacement

    def __str__(self) -> str:
        return self.value


def archive_node(document: DocumentAccess, node: NodeSnapshot) -> NodeSnapshot:
    """
    Append a renamed copy of ``node`` to the archive page.

    Raises:
        DocumentError: If the copy cannot be made or placed
    """
    page = document.find_page(ARCHIVE_PAGE_NAME) or document.create_page(ARCHIVE_PAGE_NAME)
    copy = document.clone_subtree(node.id)
    try:
        document.update_node(copy.id, name=f"{ARCHIVE_PREFIX}{node.name}")
        document.insert_at_index(page.id, len(page.child_ids), copy.id)
    except DocumentError:
        discard_nodes(document, [copy.id])
        raise
    logger.info(f"Archived {node.name!r} to {ARCHIVE_PAGE_NAME!r}")
    return document.get_node(copy.id)


def _resolve_replacement(
    document: DocumentAccess,
    replacement: NodeSnapshot,
    needs_conversion: bool,
    layout: LibraryLayout,
) -> NodeSnapshot:
    if replacement.kind == NodeKind.COMPONENT:
        return replacement
    if not needs_conversion:
        raise ConversionError("Replacement is not a component")
    if replacement.kind == NodeKind.COMPONENT_SET:
        raise ConversionError(f"Component set {replacement.name!r} cannot be converted")

    library_page = ensure_library_page(document, layout)
    try:
        return materialize_master(document, replacement.id, library_page.id, len(library_page.child_ids), layout)
    except DocumentError as e:
        raise ConversionError(f"Failed to convert {replacement.name!r}: {e}") from e


def _swap_one(
    document: DocumentAccess,
    node_id: str,
    master_id: str,
    size: Optional[BoundingBox],
) -> None:
    instance = replace_with_instance(document, node_id, master_id)
    if instance is None:
        raise DocumentError("target is a master component")
    if size is not None:
        document.update_node(instance.id, width=size.width, height=size.height)


def _instances_of(document: DocumentAccess, master_id: str):
    """(page, instance) pairs for every instance of ``master_id``."""
    for page in document.pages():
        for instance in document.find_all(page.id, [NodeKind.INSTANCE]):
            try:
                master = document.resolve_main_component(instance.id)
            except DocumentError as e:
                logger.warning(f"Could not get master of instance {instance.id}: {e}")
                continue
            if master is not None and master.id == master_id:
                yield page, instance


def swap_icons(
    document: DocumentAccess,
    original_id: str,
    replacement_id: str,
    sizing_mode: SizingMode = SizingMode.SCALE_TO_FIT,
    needs_conversion: bool = False,
    layout: LibraryLayout = LIBRARY_LAYOUT,
) -> SwapResult:
    """
    Replace an icon (and, for a master, all of its instances) with
    instances of another master.

    Args:
        document: Document to mutate
        original_id: Icon being swapped out
        replacement_id: Master (or, with ``needs_conversion``, any icon)
            swapped in
        sizing_mode: Size for the new instances
        needs_conversion: Promote a non-master replacement first

    Returns:
        SwapResult; per-instance failures are collected, not raised

    Raises:
        ConversionError: If either icon is missing or invalid, or the
            replacement cannot be converted or the master archived
    """
    original = document.try_get_node(original_id)
    if original is None or original.kind == NodeKind.PAGE:
        raise ConversionError("Original icon not found")
    if original.kind == NodeKind.COMPONENT_SET:
        raise ConversionError("Component sets cannot be swapped")
    replacement = document.try_get_node(replacement_id)
    if replacement is None or replacement.kind == NodeKind.PAGE:
        raise ConversionError("Replacement icon not found")
    if replacement_id == original_id:
        raise ConversionError("Cannot swap an icon with itself")

    master = _resolve_replacement(document, replacement, needs_conversion, layout)
    converted = master.id != replacement.id
    size = original.bounding_box if sizing_mode == SizingMode.SCALE_TO_FIT else replacement.bounding_box

    success_count = 0
    errors: List[str] = []
    pages: Set[str] = set()

    if original.kind == NodeKind.COMPONENT:
        for page, instance in list(_instances_of(document, original.id)):
            if not document.exists(instance.id):
                continue
            try:
                _swap_one(document, instance.id, master.id, size)
                success_count += 1
                pages.add(page.name)
            except DocumentError as e:
                errors.append(f"Failed to replace instance: {e}")
                logger.warning(errors[-1])

        try:
            archive_node(document, original)
            document.delete_node(original.id)
        except DocumentError as e:
            raise ConversionError(f"Failed to archive {original.name!r}: {e}") from e
        success_count += 1
    else:
        parent = document.try_get_node(original.parent_id) if original.parent_id else None
        page = document.page_of(original.id)
        archived: Optional[NodeSnapshot] = None
        try:
            if parent is not None and parent.kind == NodeKind.PAGE:
                archived = archive_node(document, original)
            _swap_one(document, original.id, master.id, size)
            success_count += 1
            if page is not None:
                pages.add(page.name)
        except DocumentError as e:
            if archived is not None:
                discard_nodes(document, [archived.id])
            errors.append(f"Failed to replace icon: {e}")
            logger.warning(errors[-1])

    message = "Successfully swapped icons! "
    if converted:
        message += f'Converted "{replacement.name}" to component and '
    message += f"replaced {success_count} instance{'s' if success_count != 1 else ''}"
    if errors:
        message += f" with {len(errors)} error{'s' if len(errors) != 1 else ''}"
    logger.info(message)

    return SwapResult(
        success_count=success_count,
        errors=tuple(errors),
        converted=converted,
        new_component_name=master.name,
        pages_affected=len(pages),
        message=message,
    )
