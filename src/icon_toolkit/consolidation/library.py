"""
Module: consolidation.library

Purpose:
    De-duplicate the icon library page. Icons on the page are bucketed by
    normalized name plus size on a 4px grid; within a bucket the priority
    is Components > Instances > Frames. Master components are never
    deleted.

Key Functions:
    - consolidate_library_duplicates(): Main entry point
    - select_canonical_master(): Shortest clean name wins

Used By:
    - icon_toolkit.engine.handlers: consolidate-library-duplicates
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from icon_toolkit.common.naming import library_grouping_name
from icon_toolkit.common.thresholds import CLUSTERING_THRESHOLDS
from icon_toolkit.core.models import (
    Candidate,
    CandidateStatus,
    LibraryConsolidationResult,
    NodeKind,
    ProgressCallback,
    ProgressEvent,
)
from icon_toolkit.core.models.nodes import MASTER_KINDS
from icon_toolkit.document.access import DocumentAccess, DocumentError

from .clustering import snap
from .transaction import master_for, replace_with_instance

logger = logging.getLogger(__name__)

EMPTY_LIBRARY_MESSAGE = "No icons found in the Icon Library."
NOTHING_TO_DO_MESSAGE = "No duplicates were found to consolidate."


def library_key(candidate: Candidate, grid: int = CLUSTERING_THRESHOLDS.library_size_grid_px) -> str:
    size = f"{snap(candidate.width, grid)}x{snap(candidate.height, grid)}"
    return f"{library_grouping_name(candidate.name)}|{size}"


def select_canonical_master(components: Sequence[Candidate]) -> Candidate:
    """Shortest name wins; names containing "copy" are heavily penalized."""
    def score(c: Candidate) -> int:
        return len(c.name) + (100 if "copy" in c.name.lower() else 0)

    best = components[0]
    for component in components[1:]:
        if score(component) < score(best):
            best = component
    return best


class _LibraryPass:
    """Accumulates removals and error details across groups."""

    def __init__(self, document: DocumentAccess):
        self.document = document
        self.removed = 0
        self.errors: List[str] = []

    def remove_frames(self, frames: Sequence[Candidate]) -> None:
        for frame in frames:
            node = self.document.try_get_node(frame.node_id)
            if node is None or node.kind == NodeKind.PAGE:
                self.errors.append(f"Frame not found: {frame.name}")
                continue
            try:
                self.document.delete_node(frame.node_id)
                self.removed += 1
                logger.info(f"Removed duplicate frame: {frame.name!r}")
            except DocumentError as e:
                self.errors.append(f"Failed to remove frame {frame.name}: {e}")

    def repoint(self, instance: Candidate, master_id: str) -> None:
        try:
            if replace_with_instance(self.document, instance.node_id, master_id):
                self.removed += 1
        except DocumentError as e:
            self.errors.append(f"Failed to replace instance {instance.name}: {e}")

    def with_components(
        self,
        components: Sequence[Candidate],
        instances: Sequence[Candidate],
        frames: Sequence[Candidate],
    ) -> None:
        canonical = select_canonical_master(components)
        canonical_node = self.document.try_get_node(canonical.node_id)
        if canonical_node is None or canonical_node.kind not in MASTER_KINDS:
            self.errors.append(f"Canonical component not found or invalid: {canonical.name}")
            return
        target = master_for(self.document, canonical.node_id)
        if target is None:
            self.errors.append(f"Canonical component has no usable variant: {canonical.name}")
            return

        group_master_ids = {c.node_id for c in components}
        for instance in instances:
            node = self.document.try_get_node(instance.node_id)
            if node is None or node.kind != NodeKind.INSTANCE:
                self.errors.append(f"Instance not found or invalid: {instance.name}")
                continue
            try:
                master = self.document.resolve_main_component(instance.node_id)
            except DocumentError as e:
                self.errors.append(f"Failed to process instance {instance.name}: {e}")
                continue
            if master is None:
                continue
            if master.id == canonical.node_id:
                logger.debug(f"Keeping legitimate instance: {instance.name!r}")
                continue
            if master.id not in group_master_ids:
                logger.debug(f"Keeping instance with external master: {instance.name!r}")
                continue
            logger.info(f"Replacing duplicate instance: {instance.name!r} -> {canonical.name!r}")
            self.repoint(instance, target.id)

        self.remove_frames(frames)

    def with_instances(self, instances: Sequence[Candidate], frames: Sequence[Candidate]) -> None:
        keep = instances[0]
        node = self.document.try_get_node(keep.node_id)
        if node is None or node.kind != NodeKind.INSTANCE:
            self.errors.append(f"Instance to keep not found: {keep.name}")
            return
        master = self.document.resolve_main_component(keep.node_id)
        if master is None:
            self.errors.append(f"Instance has no master component: {keep.name}")
            return
        for instance in instances[1:]:
            other = self.document.try_get_node(instance.node_id)
            if other is None or other.kind != NodeKind.INSTANCE:
                continue
            self.repoint(instance, master.id)
        self.remove_frames(frames)


def consolidate_library_duplicates(
    document: DocumentAccess,
    candidates: Sequence[Candidate],
    current_page_name: str,
    *,
    grid: int = CLUSTERING_THRESHOLDS.library_size_grid_px,
    progress: Optional[ProgressCallback] = None,
) -> LibraryConsolidationResult:
    """
    Remove duplicates among the icons on the library page.

    Args:
        document: Document to mutate
        candidates: Candidates from the last scan
        current_page_name: Name of the library page being cleaned
        grid: Size rounding for bucket keys
        progress: Optional callback receiving ProgressEvent values

    Returns:
        LibraryConsolidationResult with removal count and error details
    """
    def emit(percentage: float, message: str) -> None:
        if progress is not None:
            progress(ProgressEvent(percentage, message))

    emit(0, "Analyzing library duplicates with priority hierarchy...")
    on_page = [c for c in candidates if c.page == current_page_name]
    if not on_page:
        return LibraryConsolidationResult(0, (), EMPTY_LIBRARY_MESSAGE)

    buckets: Dict[str, List[Candidate]] = {}
    for candidate in on_page:
        buckets.setdefault(library_key(candidate, grid), []).append(candidate)
    groups = [(k, v) for k, v in buckets.items() if len(v) > 1]

    state = _LibraryPass(document)
    for processed, (key, group) in enumerate(groups):
        emit(processed / len(groups) * 90, f"Processing group {processed + 1}/{len(groups)}...")
        components = [c for c in group if c.status == CandidateStatus.MASTER]
        instances = [c for c in group if c.status == CandidateStatus.INSTANCE]
        frames = [c for c in group if c.status == CandidateStatus.UNRESOLVED]
        logger.debug(
            f"Group {key}: {len(components)} components, {len(instances)} instances, {len(frames)} frames"
        )
        try:
            if components:
                state.with_components(components, instances, frames)
            elif instances:
                state.with_instances(instances, frames)
            elif len(frames) > 1:
                state.remove_frames(frames[1:])
        except DocumentError as e:
            state.errors.append(f"Failed to process group {key}: {e}")

    for error in state.errors:
        logger.warning(error)
    message = (
        f"Successfully consolidated {state.removed} duplicate items using priority "
        f"hierarchy (Components > Instances > Frames)."
        if state.removed
        else NOTHING_TO_DO_MESSAGE
    )
    return LibraryConsolidationResult(state.removed, tuple(state.errors), message)
