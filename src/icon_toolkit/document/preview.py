"""
Module: document.preview

Purpose:
    Render schematic PNG thumbnails of icon subtrees for the review list.
    Each node with geometry is drawn as a box (ellipse for ELLIPSE nodes)
    at its accumulated offset, scaled to fit the thumbnail.

Key Functions:
    - render_preview: PNG bytes for a node subtree
    - preview_data_uri: Encode PNG bytes as a data URI

Dependencies:
    - PIL: Drawing and PNG encoding

Used By:
    - document.memory.InMemoryDocument.export_preview
    - engine.handlers: generate-previews
"""

from __future__ import annotations

import base64
import logging
from io import BytesIO
from typing import TYPE_CHECKING, Tuple

from PIL import Image, ImageDraw

from icon_toolkit.core.models import NodeKind

from .access import DocumentError, ExportFailureError

if TYPE_CHECKING:
    from .access import DocumentAccess

logger = logging.getLogger(__name__)

PREVIEW_SIZE = 64
PADDING = 4

# RGBA colors
COLORS = {
    "outline": (120, 120, 120, 255),
    "fill": (40, 40, 40, 255),
    "stroke": (40, 40, 40, 255),
    "background": (255, 255, 255, 0),
}


def render_preview(
    document: DocumentAccess,
    node_id: str,
    size: int = PREVIEW_SIZE,
) -> bytes:
    """
    Render a node subtree to PNG bytes.

    Args:
        document: Document to read from
        node_id: Subtree root
        size: Edge length of the square thumbnail in pixels

    Returns:
        PNG-encoded image

    Raises:
        ExportFailureError: If the root has no usable geometry or a read fails
    """
    try:
        root = document.get_node(node_id)
    except DocumentError as e:
        raise ExportFailureError(f"Cannot export {node_id}: {e}") from e

    box = root.bounding_box
    if box is None or box.max_side <= 0:
        raise ExportFailureError(f"Node {node_id} has no geometry to render")

    scale = (size - 2 * PADDING) / box.max_side
    offset = (
        PADDING + (size - 2 * PADDING - box.width * scale) / 2,
        PADDING + (size - 2 * PADDING - box.height * scale) / 2,
    )

    image = Image.new("RGBA", (size, size), COLORS["background"])
    draw = ImageDraw.Draw(image)
    _draw_box(draw, root.kind, offset, box.width * scale, box.height * scale, outline_only=True)

    stack = [(child, offset) for child in document.children(node_id)]
    while stack:
        node, origin = stack.pop()
        position = (origin[0] + node.x * scale, origin[1] + node.y * scale)
        if node.bounding_box is not None and node.visible:
            _draw_box(
                draw,
                node.kind,
                position,
                node.bounding_box.width * scale,
                node.bounding_box.height * scale,
                outline_only=not node.fills,
            )
        stack.extend((child, position) for child in document.children(node.id))

    buf = BytesIO()
    image.save(buf, format="PNG")
    logger.debug(f"Rendered preview for {node_id} ({len(buf.getvalue())} bytes)")
    return buf.getvalue()


def _draw_box(
    draw: ImageDraw.ImageDraw,
    kind: NodeKind,
    origin: Tuple[float, float],
    width: float,
    height: float,
    outline_only: bool,
) -> None:
    x0, y0 = origin
    # Pillow rejects x1 < x0, keep degenerate boxes one pixel wide
    xy = [x0, y0, x0 + max(width, 1), y0 + max(height, 1)]
    fill = None if outline_only else COLORS["fill"]
    outline = COLORS["outline"] if outline_only else COLORS["stroke"]
    if kind == NodeKind.ELLIPSE:
        draw.ellipse(xy, fill=fill, outline=outline)
    else:
        draw.rectangle(xy, fill=fill, outline=outline)


def preview_data_uri(png_bytes: bytes) -> str:
    """
    Encode PNG bytes as a data URI for the host UI.

    Example:
        >>> preview_data_uri(b"abc")
        'data:image/png;base64,YWJj'
    """
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")
