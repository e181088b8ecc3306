"""
Module: engine.markings_store

Purpose:
    Persist user markings and ignored icon ids between sessions. The state
    lives in one JSON file shaped as::

        {
          "ignoredIds": ["1:2", ...],
          "markings": {"1:3": {"isIgnored": false, "isMarkedForSwap": true}}
        }

    Writes go through portalocker so two processes sharing a file cannot
    interleave. A store without a path keeps its state in memory only.

Key Classes:
    - MarkingStore: Load / update markings and ignored ids

Dependencies:
    - icon_toolkit.common.file_locking: portalocker-backed JSON helpers

Used By:
    - engine.session: Read once per scan
    - engine.handlers: ignore-icon / unignore-icon / mark-icon
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional

from icon_toolkit.common.file_locking import locked_read_json, locked_read_modify_write_json
from icon_toolkit.core.models import Marking, MarkingMap, MarkType

logger = logging.getLogger(__name__)


def _empty_state() -> Dict[str, Any]:
    return {"ignoredIds": [], "markings": {}}


class MarkingStore:
    """
    Ignored ids and per-icon markings, optionally backed by a JSON file.

    Example:
        >>> store = MarkingStore(Path("markings.json"))
        >>> store.ignore("1:2")
        >>> "1:2" in store.ignored_ids()
        True
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        self._state: Dict[str, Any] = _empty_state()

    def _read(self) -> Dict[str, Any]:
        if self.path is None:
            return self._state
        data = locked_read_json(self.path, default=_empty_state)
        data.setdefault("ignoredIds", [])
        data.setdefault("markings", {})
        return data

    def _update(self, modifier) -> Dict[str, Any]:
        if self.path is None:
            self._state = modifier(self._state)
            return self._state

        def apply(existing: Dict[str, Any]) -> Dict[str, Any]:
            existing.setdefault("ignoredIds", [])
            existing.setdefault("markings", {})
            return modifier(existing)

        return locked_read_modify_write_json(self.path, apply, default=_empty_state)

    # ─────────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────────

    def ignored_ids(self) -> FrozenSet[str]:
        return frozenset(self._read()["ignoredIds"])

    def markings(self) -> MarkingMap:
        return {
            node_id: Marking.from_dict(value)
            for node_id, value in self._read()["markings"].items()
        }

    def load(self) -> tuple[FrozenSet[str], MarkingMap]:
        """Both halves of the state from a single read."""
        data = self._read()
        markings = {node_id: Marking.from_dict(v) for node_id, v in data["markings"].items()}
        return frozenset(data["ignoredIds"]), markings

    # ─────────────────────────────────────────────────────────────────────────
    # Updates
    # ─────────────────────────────────────────────────────────────────────────

    def ignore(self, node_id: str) -> None:
        def add(data: Dict[str, Any]) -> Dict[str, Any]:
            if node_id not in data["ignoredIds"]:
                data["ignoredIds"].append(node_id)
            return data

        self._update(add)
        logger.info(f"Ignoring icon {node_id}")

    def unignore(self, node_id: str) -> None:
        def remove(data: Dict[str, Any]) -> Dict[str, Any]:
            data["ignoredIds"] = [i for i in data["ignoredIds"] if i != node_id]
            return data

        self._update(remove)
        logger.info(f"Restored icon {node_id}")

    def mark(self, node_id: str, mark_type: MarkType) -> None:
        """Set the marking for an icon; UNMARK removes it."""
        def apply(data: Dict[str, Any]) -> Dict[str, Any]:
            if mark_type == MarkType.UNMARK:
                data["markings"].pop(node_id, None)
            else:
                data["markings"][node_id] = Marking.for_type(mark_type).to_dict()
            return data

        self._update(apply)
        logger.info(f"Marked icon {node_id}: {mark_type}")

    def clear(self) -> None:
        """Remove all markings; ignored ids are kept."""
        def wipe(data: Dict[str, Any]) -> Dict[str, Any]:
            data["markings"] = {}
            return data

        self._update(wipe)
        logger.info("Cleared all icon markings")
