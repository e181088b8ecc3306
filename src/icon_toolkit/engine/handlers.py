"""
Module: engine.handlers

Purpose:
    Translate host messages into engine operations. Every request is
    validated against its JSON schema, dispatched through ``HANDLERS`` and
    answered with a list of response messages: progress events (if any)
    followed by exactly one completion or error message.

    Errors never escape as exceptions for expected failure modes; they are
    reported as ``{"type": "<request>-error", "data": {"error": ...}}``.

Key Functions:
    - handle_message(): Validate, dispatch, collect responses

Used By:
    - icon_toolkit.cli
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from icon_toolkit.consolidation import (
    ConversionError,
    SizingMode,
    add_icon_to_library,
    consolidate_icons,
    consolidate_library_duplicates,
    convert_single_icon,
    replace_unresolved_with_instance,
    smart_rename,
    swap_icons,
)
from icon_toolkit.core.models import MarkType, NodeKind, ProgressEvent
from icon_toolkit.core.schemas import ValidationError, validate_request
from icon_toolkit.core.utils.serialization import deserialize_candidates
from icon_toolkit.discovery import ScanError
from icon_toolkit.document.access import DocumentError
from icon_toolkit.document.preview import preview_data_uri

from .session import EngineContext

logger = logging.getLogger(__name__)

Response = Dict[str, Any]
Emit = Callable[[ProgressEvent], None]
Handler = Callable[[EngineContext, Dict[str, Any], Emit], Response]

# Expected failures reported back to the host
HANDLED_ERRORS = (ValidationError, ScanError, DocumentError, ConversionError, ValueError)

PREVIEW_KINDS = frozenset({
    NodeKind.COMPONENT,
    NodeKind.COMPONENT_SET,
    NodeKind.INSTANCE,
    NodeKind.FRAME,
    NodeKind.GROUP,
    NodeKind.VECTOR,
    NodeKind.BOOLEAN_OPERATION,
})

# Request type -> progress message type
PROGRESS_TYPES = {
    "scan": "scan-progress",
    "consolidate": "consolidation-progress",
    "consolidate-library-duplicates": "library-consolidation-progress",
}


def _response(message_type: str, data: Dict[str, Any]) -> Response:
    return {"type": message_type, "data": data}


def _icon_name(context: EngineContext, node_id: str) -> str:
    node = context.document.try_get_node(node_id)
    return node.name if node is not None else node_id


# ─────────────────────────────────────────────────────────────────────────────
# Handlers
# ─────────────────────────────────────────────────────────────────────────────

def _scan(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    context.reload_markings()
    result = context.scan(progress=emit)
    return _response("scan-complete", result.to_dict())


def _consolidate(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    candidates = deserialize_candidates(data["icons"])
    result = consolidate_icons(
        context.document,
        candidates,
        scope=data.get("scope", "all-pages"),
        current_page_name=data.get("currentPageName") or context.current_page_name,
        thresholds=context.config.clustering,
        layout=context.config.layout,
        progress=emit,
    )
    return _response("consolidation-complete", result.to_dict())


def _consolidate_library(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    candidates = deserialize_candidates(data["icons"])
    result = consolidate_library_duplicates(
        context.document,
        candidates,
        data.get("currentPageName") or context.current_page_name or "",
        grid=context.config.clustering.library_size_grid_px,
        progress=emit,
    )
    return _response("library-consolidation-complete", result.to_dict())


def _convert_single(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    outcome = convert_single_icon(context.document, data["icon"]["id"], context.config.layout)
    return _response("single-icon-convert-complete", outcome.to_dict())


def _replace_with_instance(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    outcome = replace_unresolved_with_instance(context.document, data["icon"]["id"], data["master"]["id"])
    return _response("replace-with-instance-complete", outcome.to_dict())


def _smart_rename(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    icon_id = data["iconId"]
    new_name = smart_rename(context.document, icon_id)
    return _response("icon-renamed", {
        "iconId": icon_id,
        "newName": new_name,
        "message": f'Renamed to "{new_name}"',
    })


def _generate_previews(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    previews: Dict[str, str] = {}
    for icon_id in data["iconIds"]:
        node = context.document.try_get_node(icon_id)
        if node is None or node.kind not in PREVIEW_KINDS:
            continue
        try:
            png = context.document.export_preview(icon_id)
        except DocumentError as e:
            logger.debug(f"Preview failed for {icon_id}: {e}")
            continue
        if png:
            previews[icon_id] = preview_data_uri(png)
    logger.info(f"Generated {len(previews)}/{len(data['iconIds'])} previews")
    return _response("previews-generated", {"previews": previews})


def _ignore(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    icon_id = data["iconId"]
    context.store.ignore(icon_id)
    context.reload_markings()
    name = _icon_name(context, icon_id)
    return _response("icon-ignored", {
        "iconId": icon_id,
        "message": f'"{name}" has been ignored and will not appear in future scans',
    })


def _unignore(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    icon_id = data["iconId"]
    context.store.unignore(icon_id)
    context.reload_markings()
    name = _icon_name(context, icon_id)
    return _response("icon-unignored", {
        "iconId": icon_id,
        "message": f'"{name}" has been restored and will appear in future scans',
    })


def _mark(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    icon_id = data["iconId"]
    mark_type = MarkType(data["markType"])
    context.store.mark(icon_id, mark_type)
    context.reload_markings()
    return _response("icon-marked", {
        "iconId": icon_id,
        "markType": mark_type.value,
        "message": mark_type.message,
    })


def _clear_markings(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    context.store.clear()
    context.reload_markings()
    return _response("markings-cleared", {"message": "All markings cleared"})


def _swap(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    original_id = data["originalIcon"]["id"]
    result = swap_icons(
        context.document,
        original_id,
        data["replacementIcon"]["id"],
        sizing_mode=SizingMode(data.get("sizingMode", SizingMode.SCALE_TO_FIT.value)),
        needs_conversion=bool(data.get("needsConversion", False)),
        layout=context.config.layout,
    )
    # Drop the marking of a removed icon
    if not context.document.exists(original_id):
        context.store.mark(original_id, MarkType.UNMARK)
        context.reload_markings()
    return _response("icon-swap-complete", result.to_dict())


def _add_to_library(context: EngineContext, data: Dict[str, Any], emit: Emit) -> Response:
    expected = data.get("expectedSize") or {}
    result = add_icon_to_library(
        context.document,
        data["icon"],
        data["fileName"],
        expected_size=(expected.get("width", 0), expected.get("height", 0)),
        layout=context.config.layout,
    )
    return _response("add-icon-complete", result.to_dict())


HANDLERS: Dict[str, Handler] = {
    "scan": _scan,
    "consolidate": _consolidate,
    "consolidate-library-duplicates": _consolidate_library,
    "convert-single-icon": _convert_single,
    "replace-with-instance": _replace_with_instance,
    "smart-rename-icon": _smart_rename,
    "generate-previews": _generate_previews,
    "ignore-icon": _ignore,
    "unignore-icon": _unignore,
    "mark-icon": _mark,
    "clear-all-markings": _clear_markings,
    "swap-icons": _swap,
    "add-icon-to-library": _add_to_library,
}


def handle_message(context: EngineContext, message: Dict[str, Any]) -> List[Response]:
    """
    Handle one host message.

    Args:
        context: Open engine session
        message: ``{"type": ..., "data": {...}}``

    Returns:
        Progress messages (in emission order) followed by one completion
        or ``<type>-error`` message

    Example:
        >>> handle_message(engine, {"type": "smart-rename-icon", "data": {"iconId": "1:4"}})
        [{'type': 'icon-renamed', 'data': {'iconId': '1:4', 'newName': 'Home', ...}}]
    """
    message_type = message.get("type") if isinstance(message, dict) else None
    label = message_type if isinstance(message_type, str) else "request"
    responses: List[Response] = []
    progress_type = PROGRESS_TYPES.get(label, "progress")

    def emit(event: ProgressEvent) -> None:
        responses.append(_response(progress_type, event.to_dict()))
        if context.progress is not None:
            context.progress(event)

    try:
        validate_request(message)
        handler = HANDLERS[message_type]
        responses.append(handler(context, message.get("data") or {}, emit))
    except HANDLED_ERRORS as e:
        logger.error(f"Request {label!r} failed: {e}")
        responses.append(_response(f"{label}-error", {"error": str(e)}))
    return responses
