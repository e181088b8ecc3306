"""
Module: engine.session

Purpose:
    Engine context owning everything that outlives a single request: the
    document, the configuration bundle, the marking store and the most
    recent scan. Opened and closed as a context manager so ignored ids
    and markings are loaded once and timing data is flushed on exit.

Key Classes:
    - EngineConfig: Bundle of all tunable thresholds
    - EngineContext: Session state and the scan operation

Dependencies:
    - icon_toolkit.discovery: Scan and consistency analysis
    - engine.markings_store: Ignored ids and markings

Used By:
    - engine.handlers
    - icon_toolkit.cli
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Sequence

from icon_toolkit.common.thresholds import (
    CLASSIFIER_THRESHOLDS,
    CLUSTERING_THRESHOLDS,
    DISCOVERY_LIMITS,
    LIBRARY_LAYOUT,
    ClassifierThresholds,
    ClusteringThresholds,
    DiscoveryLimits,
    LibraryLayout,
)
from icon_toolkit.core.models import Candidate, MarkingMap, ProgressCallback, ScanResult
from icon_toolkit.discovery import DiscoveryResult, analyze_consistency, discover_icons
from icon_toolkit.document.access import DocumentAccess, DocumentError

from .markings_store import MarkingStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """
    All tunable settings for one engine session.

    Attributes:
        classifier: Per-kind classification thresholds
        limits: Discovery caps
        clustering: Duplicate clustering thresholds
        layout: Library page placement
        timing_path: Where to merge scan timings on close (None: don't)
    """
    classifier: ClassifierThresholds = CLASSIFIER_THRESHOLDS
    limits: DiscoveryLimits = DISCOVERY_LIMITS
    clustering: ClusteringThresholds = CLUSTERING_THRESHOLDS
    layout: LibraryLayout = LIBRARY_LAYOUT
    timing_path: Optional[Path] = None


def apply_markings(
    candidates: Sequence[Candidate],
    ignored_ids: FrozenSet[str],
    markings: MarkingMap,
) -> tuple[List[Candidate], List[Candidate]]:
    """
    Split candidates into (active, ignored) and copy marking flags on.

    Ignored candidates keep their relative order and get ``is_ignored``.
    """
    active: List[Candidate] = []
    ignored: List[Candidate] = []
    for candidate in candidates:
        marking = markings.get(candidate.node_id)
        if marking is not None:
            candidate = dataclasses.replace(
                candidate,
                is_ignored=marking.is_ignored,
                is_marked_for_swap=marking.is_marked_for_swap,
            )
        if candidate.node_id in ignored_ids:
            ignored.append(dataclasses.replace(candidate, is_ignored=True))
        else:
            active.append(candidate)
    return active, ignored


@dataclass
class EngineContext:
    """
    Session state for one document.

    Example:
        >>> with EngineContext(document, store=MarkingStore(path)) as engine:
        ...     result = engine.scan()
    """
    document: DocumentAccess
    config: EngineConfig = field(default_factory=EngineConfig)
    store: MarkingStore = field(default_factory=MarkingStore)
    progress: Optional[ProgressCallback] = None
    ignored_ids: FrozenSet[str] = frozenset()
    markings: MarkingMap = field(default_factory=dict)
    last_discovery: Optional[DiscoveryResult] = None
    last_scan: Optional[ScanResult] = None

    def __enter__(self) -> EngineContext:
        self.reload_markings()
        logger.debug(
            f"Engine opened for '{self.document.document_name}' "
            f"({len(self.ignored_ids)} ignored, {len(self.markings)} marked)"
        )
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self.config.timing_path is not None and self.last_discovery is not None:
            self.last_discovery.timing.save(self.config.timing_path)
        self.last_discovery = None

    def reload_markings(self) -> None:
        self.ignored_ids, self.markings = self.store.load()

    @property
    def current_page_name(self) -> Optional[str]:
        page_id = self.document.current_page_id
        if page_id is None:
            return None
        try:
            return self.document.get_node(page_id).name
        except DocumentError:
            return None

    def scan(self, progress: Optional[ProgressCallback] = None) -> ScanResult:
        """
        Discover icons, analyze consistency and apply user markings.

        Args:
            progress: Overrides the session progress callback for this scan

        Returns:
            ScanResult; ignored icons follow the active ones

        Raises:
            ScanError: If the document cannot be scanned at all
        """
        discovery = discover_icons(
            self.document,
            limits=self.config.limits,
            thresholds=self.config.classifier,
            progress=progress or self.progress,
        )
        analyzed = analyze_consistency(discovery.candidates)
        active, ignored = apply_markings(analyzed, self.ignored_ids, self.markings)

        result = ScanResult(
            total_icons=len(active),
            inconsistencies=sum(1 for c in active if c.has_inconsistency),
            discovered_icons=tuple(active + ignored),
            ignored_count=len(ignored),
            current_page_name=self.current_page_name,
        )
        self.last_discovery = discovery
        self.last_scan = result
        logger.info(
            f"Scan complete: {result.total_icons} icons, "
            f"{result.inconsistencies} inconsistencies, {result.ignored_count} ignored"
        )
        return result
