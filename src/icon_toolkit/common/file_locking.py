"""
Module: common.file_locking

Purpose:
    portalocker-guarded JSON state files shared between processes: the
    markings store and merged timing logs. A reader takes a shared lock,
    an updater holds an exclusive lock across read, modify and write.

Key Functions:
    - locked_read_json: Read a JSON object under a shared lock
    - locked_read_modify_write_json: Update a JSON object under an exclusive lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - engine.markings_store: Marking persistence
    - discovery.timing: Timing data merging
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict

import portalocker

logger = logging.getLogger(__name__)

JsonState = Dict[str, Any]


def _parse(content: str, default: Callable[[], JsonState]) -> JsonState:
    return json.loads(content) if content.strip() else default()


def locked_read_json(path: Path, default: Callable[[], JsonState] = dict) -> JsonState:
    """Read a JSON object under a shared lock; empty or missing files give ``default()``."""
    if not path.exists():
        return default()
    with open(path, "r", encoding="utf-8") as f:
        portalocker.lock(f, portalocker.LOCK_SH)
        try:
            return _parse(f.read(), default)
        finally:
            portalocker.unlock(f)


def locked_read_modify_write_json(
    path: Path,
    modifier: Callable[[JsonState], JsonState],
    default: Callable[[], JsonState] = dict,
) -> JsonState:
    """
    Apply ``modifier`` to the stored object and write the result back.

    The file (and its directory) is created from ``default()`` when
    missing. The exclusive lock is held for the whole update, so
    concurrent updaters serialize instead of losing writes.

    Returns:
        The object that was written

    Example:
        >>> def ignore(state):
        ...     state.setdefault("ignoredIds", []).append("1:2")
        ...     return state
        >>> locked_read_modify_write_json(markings_path, ignore)
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        path.write_text(json.dumps(default(), indent=2), encoding="utf-8")

    with open(path, "r+", encoding="utf-8") as f:
        portalocker.lock(f, portalocker.LOCK_EX)
        try:
            state = modifier(_parse(f.read(), default))
            f.seek(0)
            f.truncate()
            json.dump(state, f, indent=2, ensure_ascii=False)
        finally:
            portalocker.unlock(f)
    logger.debug(f"Updated {path.name}")
    return state
