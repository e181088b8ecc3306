"""
Module: consolidation.library_import

Purpose:
    Add an imported icon (a vector subtree parsed by the host, e.g. from an
    SVG file) to the icon library page as a master named "Icon/<file>".
    A master of that name is refreshed in place; otherwise a new one goes
    into the next free grid cell. Content that does not match the target
    size is scaled down to fit and centered.

Key Functions:
    - add_icon_to_library(): Import one icon
    - library_component_name(): "Icon/<clean file name>"

Used By:
    - icon_toolkit.engine.handlers: add-icon-to-library
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional, Tuple

from icon_toolkit.common.thresholds import LIBRARY_LAYOUT, LibraryLayout
from icon_toolkit.core.models import LibraryImportResult, NodeKind, NodeSnapshot
from icon_toolkit.document.access import DocumentAccess, DocumentError

from .conversion import ConversionError
from .transaction import discard_nodes, ensure_library_page

logger = logging.getLogger(__name__)

# Size differences up to this many px are left unscaled
FIT_TOLERANCE_PX = 1


def library_component_name(file_name: str) -> str:
    """
    Example:
        >>> library_component_name("arrow left.svg")
        'Icon/arrow-left'
    """
    stem = re.sub(r"\.svg$", "", file_name)
    return f"Icon/{re.sub(r'[^a-zA-Z0-9_-]', '-', stem)}"


def _fit(document: DocumentAccess, content: NodeSnapshot, width: float, height: float) -> None:
    """Scale ``content`` into a width x height box, centered."""
    box = content.bounding_box
    if box is None or box.width <= 0 or box.height <= 0:
        document.update_node(content.id, x=0, y=0)
        return
    if abs(box.width - width) <= FIT_TOLERANCE_PX and abs(box.height - height) <= FIT_TOLERANCE_PX:
        document.update_node(content.id, x=0, y=0)
        return
    scale = min(width / box.width, height / box.height)
    new_width, new_height = box.width * scale, box.height * scale
    document.update_node(
        content.id,
        width=new_width,
        height=new_height,
        x=(width - new_width) / 2,
        y=(height - new_height) / 2,
    )


def _target_size(content: NodeSnapshot, expected: Optional[Tuple[float, float]]) -> Tuple[float, float]:
    box = content.bounding_box
    width = expected[0] if expected and expected[0] else (box.width if box else 0)
    height = expected[1] if expected and expected[1] else (box.height if box else 0)
    if not width or not height:
        raise ConversionError("Imported icon has no size")
    return width, height


def add_icon_to_library(
    document: DocumentAccess,
    subtree: Dict[str, Any],
    file_name: str,
    expected_size: Optional[Tuple[float, float]] = None,
    layout: LibraryLayout = LIBRARY_LAYOUT,
) -> LibraryImportResult:
    """
    Place an imported icon on the library page as a master.

    Args:
        document: Document to mutate
        subtree: Nested node JSON of the imported icon
        file_name: Source file name; gives the master its name
        expected_size: (width, height) for the master; falls back to the
            imported icon's own size per side when zero or missing

    Raises:
        ConversionError: If the data cannot be imported or placed
    """
    name = library_component_name(file_name)
    library_page = ensure_library_page(document, layout)
    existing = next(
        (c for c in document.children(library_page.id) if c.kind == NodeKind.COMPONENT and c.name == name),
        None,
    )

    try:
        content = document.import_subtree(subtree)
    except DocumentError as e:
        raise ConversionError(f"Failed to import {file_name}: {e}") from e

    try:
        width, height = _target_size(content, expected_size)
    except ConversionError:
        discard_nodes(document, [content.id])
        raise

    created = [content.id]
    try:
        if existing is not None:
            master = existing
            for child in document.children(master.id):
                document.delete_node(child.id)
        else:
            grid_position = sum(1 for c in document.children(library_page.id) if c.kind == NodeKind.COMPONENT)
            master = document.create_master_container(name, library_page.id)
            created.insert(0, master.id)
            x, y = layout.cell_position(grid_position)
            document.update_node(master.id, x=x, y=y)
        document.update_node(master.id, width=width, height=height)
        document.insert_at_index(master.id, 0, content.id)
        _fit(document, document.get_node(content.id), width, height)
    except DocumentError as e:
        discard_nodes(document, created)
        raise ConversionError(f"Failed to add {name!r} to the library: {e}") from e

    if existing is not None:
        message = f'Updated existing icon "{name}" in Icon Library'
    else:
        message = f'Added new icon "{name}" to Icon Library'
    logger.info(message)
    return LibraryImportResult(
        component_id=master.id,
        component_name=name,
        updated=existing is not None,
        message=message,
    )
