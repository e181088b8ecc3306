"""
Module: consolidation.conversion

Purpose:
    Single-icon operations the user triggers from the icon list:
    promote one icon to a master, repoint an unresolved icon at an
    existing master, and give an icon a clean name.

Key Functions:
    - convert_single_icon(): Icon -> master on the library page + instance
    - replace_unresolved_with_instance(): Icon -> instance of a chosen master
    - smart_rename(): Rename an icon with generate_smart_name()

Dependencies:
    - consolidation.transaction: master materialization and replacement

Used By:
    - icon_toolkit.engine.handlers
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from icon_toolkit.common.naming import generate_smart_name
from icon_toolkit.common.thresholds import LIBRARY_LAYOUT, LibraryLayout
from icon_toolkit.core.models import NodeKind
from icon_toolkit.document.access import DocumentAccess, DocumentError

from .transaction import ensure_library_page, master_for, materialize_master, replace_with_instance

logger = logging.getLogger(__name__)

# Instances are resized only past this difference from the original
RESIZE_TOLERANCE_PX = 2


class ConversionError(Exception):
    """A single-icon operation was refused or failed."""
    pass


@dataclass(frozen=True)
class ConversionOutcome:
    """Result of a single-icon operation."""
    icon_name: str
    component_id: str
    component_name: str
    message: str

    def to_dict(self) -> dict:
        return {
            "iconName": self.icon_name,
            "componentId": self.component_id,
            "componentName": self.component_name,
            "message": self.message,
        }


def convert_single_icon(
    document: DocumentAccess,
    node_id: str,
    layout: LibraryLayout = LIBRARY_LAYOUT,
) -> ConversionOutcome:
    """
    Promote one icon to a master on the library page.

    The icon is cloned into the next free library grid cell and the
    original is replaced by an instance of the new master.

    Raises:
        ConversionError: If the node is missing, a page, already a master,
            or has no geometry; or if any document step fails
    """
    node = document.try_get_node(node_id)
    if node is None:
        raise ConversionError("Icon not found")
    if node.kind == NodeKind.PAGE:
        raise ConversionError("Cannot convert a page")
    if node.kind == NodeKind.COMPONENT:
        raise ConversionError("Icon is already a master component")
    if node.kind == NodeKind.COMPONENT_SET:
        raise ConversionError("Icon is already a component set")
    if node.bounding_box is None:
        raise ConversionError(f"Icon {node.name!r} has no geometry")

    try:
        library_page = ensure_library_page(document, layout)
        grid_position = len(library_page.child_ids)
        master = materialize_master(document, node_id, library_page.id, grid_position, layout)
        replace_with_instance(document, node_id, master.id)
    except DocumentError as e:
        logger.error(f"Failed to convert {node.name!r}: {e}")
        raise ConversionError(f"Failed to convert {node.name!r}: {e}") from e

    return ConversionOutcome(
        icon_name=node.name,
        component_id=master.id,
        component_name=master.name,
        message=f'Successfully converted "{node.name}" to master component "{master.name}"',
    )


def replace_unresolved_with_instance(
    document: DocumentAccess,
    icon_id: str,
    master_id: str,
) -> ConversionOutcome:
    """
    Replace an unresolved icon with an instance of an existing master.

    A component set resolves to its first variant. The instance keeps the
    icon's position and sibling index and is resized to the icon's size
    when they differ by more than 2px on either side.

    Raises:
        ConversionError: If either node is missing or invalid, or the
            replacement fails
    """
    icon = document.try_get_node(icon_id)
    if icon is None or icon.kind == NodeKind.PAGE:
        raise ConversionError("Unresolved icon not found")

    requested = document.try_get_node(master_id)
    master = master_for(document, master_id)
    if master is None:
        if requested is not None and requested.kind == NodeKind.COMPONENT_SET:
            raise ConversionError("Component set has no valid variants")
        raise ConversionError("Master component not found or invalid")

    try:
        instance = replace_with_instance(document, icon_id, master.id)
        if instance is None:
            raise ConversionError(f"Icon {icon.name!r} is a master component and cannot be replaced")
        box, target = instance.bounding_box, icon.bounding_box
        if box is not None and target is not None and (
            abs(box.width - target.width) > RESIZE_TOLERANCE_PX
            or abs(box.height - target.height) > RESIZE_TOLERANCE_PX
        ):
            document.update_node(instance.id, width=target.width, height=target.height)
    except DocumentError as e:
        logger.error(f"Failed to replace {icon.name!r}: {e}")
        raise ConversionError(f"Failed to replace {icon.name!r}: {e}") from e

    display = requested.name if requested is not None else master.name
    logger.info(f"Replaced {icon.name!r} with instance of {display!r}")
    return ConversionOutcome(
        icon_name=icon.name,
        component_id=master.id,
        component_name=display,
        message=f'Successfully replaced "{icon.name}" with instance of "{display}"',
    )


def smart_rename(document: DocumentAccess, node_id: str) -> str:
    """Rename a node with a generated clean name; returns the new name."""
    node = document.try_get_node(node_id)
    if node is None or node.kind == NodeKind.PAGE:
        raise ConversionError("Icon not found")
    new_name = generate_smart_name(node.name, node.bounding_box)
    document.update_node(node_id, name=new_name)
    logger.info(f"Renamed {node.name!r} to {new_name!r}")
    return new_name
