"""
Module: results

Purpose:
    Result containers returned to the host. All of them serialize to the
    host's camelCase JSON shapes via ``to_dict()``.

Key Classes:
    - ProgressEvent: {percentage, message}
    - ScanResult: Response to a scan request
    - ClusterOutcome: Result of one consolidation transaction
    - ConsolidationResult: Aggregate of a consolidation run
    - LibraryConsolidationResult: Aggregate of library de-duplication
    - SwapResult: Result of an icon swap
    - LibraryImportResult: Result of an icon import
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Set, Tuple

from .candidates import Candidate


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification yielded to the host between phases."""
    percentage: float
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"percentage": round(self.percentage, 1), "message": self.message}


# Receives progress events; the host forwards them to its UI
ProgressCallback = Callable[[ProgressEvent], None]


@dataclass(frozen=True)
class ScanResult:
    """
    Result of a full scan.

    Attributes:
        total_icons: Number of active (non-ignored) icons
        inconsistencies: Active icons with at least one inconsistency
        discovered_icons: Active icons followed by ignored icons
        ignored_count: Number of ignored icons
        current_page_name: Page the host is currently showing
    """
    total_icons: int
    inconsistencies: int
    discovered_icons: Tuple[Candidate, ...]
    ignored_count: int = 0
    current_page_name: Optional[str] = None

    @classmethod
    def empty(cls, current_page_name: Optional[str] = None) -> ScanResult:
        return cls(0, 0, (), 0, current_page_name)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "totalIcons": self.total_icons,
            "inconsistencies": self.inconsistencies,
            "discoveredIcons": [c.to_dict() for c in self.discovered_icons],
            "ignoredCount": self.ignored_count,
        }
        if self.current_page_name is not None:
            data["currentPageName"] = self.current_page_name
        return data


@dataclass
class ClusterOutcome:
    """
    Outcome of consolidating one cluster.

    ``success`` is False only when no member was replaced.
    """
    success: bool = False
    icons_replaced: int = 0
    pages_affected: Set[str] = field(default_factory=set)
    master_id: Optional[str] = None
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ConsolidationResult:
    """Aggregate result of a consolidation run."""
    components_created: int
    icons_replaced: int
    pages_affected: int
    failed_operations: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "componentsCreated": self.components_created,
            "iconsReplaced": self.icons_replaced,
            "pagesAffected": self.pages_affected,
            "failedOperations": self.failed_operations,
            "message": self.message,
        }


@dataclass(frozen=True)
class LibraryConsolidationResult:
    """Aggregate result of de-duplicating the icon library page."""
    duplicates_removed: int
    error_details: Tuple[str, ...]
    message: str

    @property
    def errors(self) -> int:
        return len(self.error_details)

    def to_dict(self) -> dict[str, Any]:
        return {
            "duplicatesRemoved": self.duplicates_removed,
            "errors": self.errors,
            "errorDetails": list(self.error_details),
            "message": self.message,
        }


@dataclass(frozen=True)
class SwapResult:
    """
    Result of swapping an icon for another master.

    ``success_count`` counts replaced instances plus the archived master
    itself when the swapped icon was a master.
    """
    success_count: int
    errors: Tuple[str, ...]
    converted: bool
    new_component_name: str
    pages_affected: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "successCount": self.success_count,
            "errorCount": len(self.errors),
            "errors": list(self.errors[:3]),
            "converted": self.converted,
            "newComponentName": self.new_component_name,
            "instancesUpdated": self.success_count,
            "pagesAffected": self.pages_affected,
        }


@dataclass(frozen=True)
class LibraryImportResult:
    """Result of adding an imported icon to the library page."""
    component_id: str
    component_name: str
    updated: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "componentId": self.component_id,
            "componentName": self.component_name,
            "updated": self.updated,
            "message": self.message,
        }
