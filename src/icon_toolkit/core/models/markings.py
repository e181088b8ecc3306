"""
Module: markings

Purpose:
    User markings (ignore / swap flags) keyed by node id. Markings are
    persisted by a collaborator and injected read-only into each scan.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping


class MarkType(str, Enum):
    """Marking command issued by the user."""
    IGNORE = "ignore"
    SWAP = "swap"
    UNMARK = "unmark"

    def __str__(self) -> str:
        return self.value

    @property
    def message(self) -> str:
        return _MARK_MESSAGES[self]


_MARK_MESSAGES = {
    MarkType.IGNORE: "Icon marked to ignore",
    MarkType.SWAP: "Icon marked for swap",
    MarkType.UNMARK: "Icon markings removed",
}


@dataclass(frozen=True, slots=True)
class Marking:
    """Per-icon marking flags."""
    is_ignored: bool = False
    is_marked_for_swap: bool = False

    @classmethod
    def for_type(cls, mark_type: MarkType) -> Marking:
        return cls(
            is_ignored=mark_type == MarkType.IGNORE,
            is_marked_for_swap=mark_type == MarkType.SWAP,
        )

    def to_dict(self) -> dict[str, bool]:
        return {"isIgnored": self.is_ignored, "isMarkedForSwap": self.is_marked_for_swap}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Marking:
        return cls(
            is_ignored=bool(data.get("isIgnored", False)),
            is_marked_for_swap=bool(data.get("isMarkedForSwap", False)),
        )


MarkingMap = Dict[str, Marking]
