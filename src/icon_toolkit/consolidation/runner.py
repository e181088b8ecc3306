"""
Module: consolidation.runner

Purpose:
    Consolidation run over a scan's candidates: filter to unresolved icons
    in scope, drop stale ids, cluster, then run one transaction per group
    (multi-member groups first, then singletons), reporting progress.

Key Functions:
    - consolidate_icons(): Main entry point

Used By:
    - icon_toolkit.engine.handlers: consolidate requests
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from icon_toolkit.common.thresholds import (
    CLUSTERING_THRESHOLDS,
    LIBRARY_LAYOUT,
    ClusteringThresholds,
    LibraryLayout,
)
from icon_toolkit.core.models import (
    Candidate,
    CandidateStatus,
    ConsolidationResult,
    NodeKind,
    ProgressCallback,
    ProgressEvent,
)
from icon_toolkit.document.access import DocumentAccess, DocumentError

from .clustering import cluster_candidates
from .similarity import Scorer, SimilarityScorer
from .transaction import consolidate_cluster, ensure_library_page

logger = logging.getLogger(__name__)

SCOPE_ALL_PAGES = "all-pages"
SCOPE_CURRENT_PAGE = "current-page"

NO_CANDIDATES_MESSAGE = "No unresolved icons found to consolidate."
NO_VALID_CANDIDATES_MESSAGE = "No valid unresolved icons found to consolidate."


def _empty(message: str) -> ConsolidationResult:
    return ConsolidationResult(0, 0, 0, 0, message)


def _still_valid(document: DocumentAccess, candidates: Sequence[Candidate]) -> List[Candidate]:
    valid = []
    for candidate in candidates:
        node = document.try_get_node(candidate.node_id)
        if node is None or node.kind == NodeKind.PAGE:
            logger.info(f"Skipping invalid/deleted icon: {candidate.name!r} ({candidate.node_id})")
            continue
        valid.append(candidate)
    return valid


def consolidate_icons(
    document: DocumentAccess,
    candidates: Sequence[Candidate],
    *,
    scope: str = SCOPE_ALL_PAGES,
    current_page_name: Optional[str] = None,
    thresholds: ClusteringThresholds = CLUSTERING_THRESHOLDS,
    layout: LibraryLayout = LIBRARY_LAYOUT,
    scorer: Optional[Scorer] = None,
    progress: Optional[ProgressCallback] = None,
) -> ConsolidationResult:
    """
    Auto-create masters for unresolved icons and replace duplicates.

    Args:
        document: Document to mutate
        candidates: Candidates from the last scan (any status)
        scope: "all-pages" or "current-page"
        current_page_name: Page used by the "current-page" scope
        thresholds: Clustering thresholds
        layout: Library page placement
        scorer: Pairwise similarity; defaults to a document-aware scorer
        progress: Optional callback receiving ProgressEvent values

    Returns:
        ConsolidationResult with counts and a summary message

    Raises:
        ValueError: If scope is unknown
    """
    if scope not in (SCOPE_ALL_PAGES, SCOPE_CURRENT_PAGE):
        raise ValueError(f"Unknown consolidation scope: {scope!r}")

    def emit(percentage: float, message: str) -> None:
        if progress is not None:
            progress(ProgressEvent(percentage, message))

    emit(0, "Starting consolidation...")

    in_scope = [c for c in candidates if c.status == CandidateStatus.UNRESOLVED]
    if scope == SCOPE_CURRENT_PAGE and current_page_name:
        in_scope = [c for c in in_scope if c.page == current_page_name]
    if not in_scope:
        return _empty(NO_CANDIDATES_MESSAGE)

    valid = _still_valid(document, in_scope)
    if not valid:
        return _empty(NO_VALID_CANDIDATES_MESSAGE)
    emit(10, f"Validated {len(valid)} icons. Starting auto-create...")

    emit(20, "Analyzing visual similarity...")
    groups = cluster_candidates(
        valid,
        scorer=scorer or SimilarityScorer(document),
        threshold=thresholds.similarity_threshold,
        grid=thresholds.size_grid_px,
    )
    multi = [g for g in groups if not g.is_singleton]
    singles = [g for g in groups if g.is_singleton]

    library_page = ensure_library_page(document, layout)

    components_created = 0
    icons_replaced = 0
    failed = 0
    pages_affected: set = set()
    total = len(multi) + len(singles)

    for processed, group in enumerate(multi + singles):
        if group.is_singleton:
            label = f"Converting single icon {processed - len(multi) + 1}/{len(singles)}: {group.representative.name}..."
        else:
            label = f"Processing similar icons group {processed + 1}/{len(multi)} ({len(group)} icons)..."
        emit(30 + processed / total * 50, label)

        try:
            outcome = consolidate_cluster(document, group, library_page.id, components_created, layout)
        except DocumentError as e:
            logger.error(f"Failed to process group {group.key!r}: {e}")
            failed += 1
            continue

        if outcome.success:
            components_created += 1
            icons_replaced += outcome.icons_replaced
            pages_affected.update(outcome.pages_affected)
        else:
            failed += 1

    logger.info(
        f"Processing complete: {components_created} components created, "
        f"{icons_replaced} icons replaced, {failed} operations failed"
    )
    message = (
        f"Auto-create complete! Created {components_created} new components "
        f"and replaced {icons_replaced} icons."
    )
    if failed:
        message += f" {failed} operations failed - check the logs for details."
    return ConsolidationResult(
        components_created=components_created,
        icons_replaced=icons_replaced,
        pages_affected=len(pages_affected),
        failed_operations=failed,
        message=message,
    )
