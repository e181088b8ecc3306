"""
Module: discovery.pipeline

Purpose:
    Three-phase scan that turns a document into icon candidates:

    1. Masters: classify every Component / ComponentSet on every page
    2. Instances: every Instance whose master was accepted in phase 1
    3. Unresolved: loose Frame / Group / Vector / BooleanOp icons that are
       not already inside a master or an instance

    Phase 2 needs the complete master set, so it starts only after phase 1
    has finished on all pages. Caps truncate the scan, they never abort it.

Key Functions:
    - discover_icons(): Main entry point for a scan
    - attach_instance_counts(): Count discovered instances per master

Key Classes:
    - DiscoveryResult: Candidates plus scan metadata
    - ScanError: Whole-scan failure

Dependencies:
    - icon_toolkit.document: DocumentAccess
    - icon_toolkit.discovery.classifier: classify
    - icon_toolkit.discovery.timing: Phase timing

Used By:
    - icon_toolkit.engine.session: Scan requests
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from icon_toolkit.common.naming import frame_context, is_archive_page, parse_icon_source
from icon_toolkit.common.thresholds import (
    CLASSIFIER_THRESHOLDS,
    DISCOVERY_LIMITS,
    ClassifierThresholds,
    DiscoveryLimits,
    in_band,
)
from icon_toolkit.core.models import (
    Candidate,
    CandidateStatus,
    NodeKind,
    NodeSnapshot,
    ProgressCallback,
    ProgressEvent,
)
from icon_toolkit.document.access import DocumentAccess, DocumentError

from .classifier import classify
from .timing import TimingLog, timed_phase

logger = logging.getLogger(__name__)

MASTER_KINDS = (NodeKind.COMPONENT, NodeKind.COMPONENT_SET)
UNRESOLVED_KINDS = (NodeKind.FRAME, NodeKind.GROUP, NodeKind.VECTOR, NodeKind.BOOLEAN_OPERATION)


class ScanError(Exception):
    """The scan could not run at all (e.g. pages could not be listed)."""
    pass


@dataclass(frozen=True)
class DiscoveryResult:
    """
    Result of a discovery scan.

    Attributes:
        candidates: Masters, then instances, then unresolved icons
        master_ids: Accepted master ids, including icon-sized variants
        pages_scanned: Names of the pages that were visited
        truncated: True when a page or candidate cap was hit
        timing: Per-phase and per-page durations
    """
    candidates: Tuple[Candidate, ...]
    master_ids: FrozenSet[str] = frozenset()
    pages_scanned: Tuple[str, ...] = ()
    truncated: bool = False
    timing: TimingLog = field(default_factory=TimingLog, compare=False, repr=False)

    def by_status(self, status: CandidateStatus) -> List[Candidate]:
        return [c for c in self.candidates if c.status == status]

    @property
    def masters(self) -> List[Candidate]:
        return self.by_status(CandidateStatus.MASTER)

    @property
    def instances(self) -> List[Candidate]:
        return self.by_status(CandidateStatus.INSTANCE)

    @property
    def unresolved(self) -> List[Candidate]:
        return self.by_status(CandidateStatus.UNRESOLVED)


class _Scan:
    """Mutable state of one scan run. Discarded when the scan returns."""

    def __init__(
        self,
        document: DocumentAccess,
        limits: DiscoveryLimits,
        thresholds: ClassifierThresholds,
        progress: Optional[ProgressCallback],
    ):
        self.document = document
        self.limits = limits
        self.thresholds = thresholds
        self.progress = progress
        self.candidates: List[Candidate] = []
        self.master_ids: Set[str] = set()
        self.truncated = False
        self.timing = TimingLog()

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    def emit(self, percentage: float, message: str = "") -> None:
        if self.progress is not None:
            self.progress(ProgressEvent(percentage, message))

    @property
    def full(self) -> bool:
        if len(self.candidates) >= self.limits.max_candidates:
            if not self.truncated:
                logger.warning(f"Candidate cap reached ({self.limits.max_candidates}); stopping scan early")
            self.truncated = True
            return True
        return False

    def make_candidate(
        self,
        node: NodeSnapshot,
        ancestors: Sequence[NodeSnapshot],
        page: NodeSnapshot,
        status: CandidateStatus,
        **extra,
    ) -> Candidate:
        parent = ancestors[0] if ancestors else None
        context = frame_context(parent.name) if parent and parent.kind == NodeKind.FRAME else None
        return Candidate(
            node_id=node.id,
            name=node.name,
            kind=node.kind,
            width=math.floor(node.bounding_box.width),
            height=math.floor(node.bounding_box.height),
            page=page.name,
            source=parse_icon_source(node.name, self.document.document_name),
            status=status,
            frame_context=context,
            **extra,
        )

    def _child_kinds(self, node_id: str) -> List[NodeKind]:
        return [child.kind for child in self.document.children(node_id)]

    # ─────────────────────────────────────────────────────────────────────────
    # Phase 1: masters
    # ─────────────────────────────────────────────────────────────────────────

    def collect_masters(self, page: NodeSnapshot) -> None:
        for node in self.document.find_all(page.id, MASTER_KINDS):
            if self.full:
                return
            try:
                ancestors = self.document.ancestors(node.id)
                result = classify(node, ancestors, self._child_kinds(node.id), self.thresholds)
                if not result.is_icon:
                    continue
                variant_ids: Tuple[str, ...] = ()
                component_set = None
                if node.kind == NodeKind.COMPONENT_SET:
                    variant_ids = self._icon_variants(node)
                    component_set = node.name
                elif ancestors and ancestors[0].kind == NodeKind.COMPONENT_SET:
                    component_set = ancestors[0].name
                self.master_ids.add(node.id)
                self.master_ids.update(variant_ids)
                self.candidates.append(self.make_candidate(
                    node, ancestors, page, CandidateStatus.MASTER,
                    score=result.score,
                    instance_count=0,
                    component_set=component_set,
                    variant_ids=variant_ids,
                ))
                logger.debug(f"Master {node.name!r} on {page.name!r} (score {result.score})")
            except DocumentError as e:
                logger.debug(f"Skipping unreadable master {node.id}: {e}")

    def _icon_variants(self, component_set: NodeSnapshot) -> Tuple[str, ...]:
        t = self.thresholds
        variants = []
        for variant in self.document.children(component_set.id):
            box = variant.bounding_box
            if variant.kind != NodeKind.COMPONENT or box is None or box.aspect_ratio is None:
                continue
            if in_band(box.max_side, t.variant_size) and in_band(box.aspect_ratio, t.variant_aspect):
                variants.append(variant.id)
        return tuple(variants)

    # ─────────────────────────────────────────────────────────────────────────
    # Phase 2: instances
    # ─────────────────────────────────────────────────────────────────────────

    def collect_instances(self, page: NodeSnapshot) -> None:
        for node in self.document.find_all(page.id, (NodeKind.INSTANCE,)):
            if self.full:
                return
            try:
                master = self.document.resolve_main_component(node.id)
                if master is None or master.id not in self.master_ids:
                    continue
                if node.bounding_box is None:
                    continue
                component_set = None
                if master.parent_id is not None:
                    owner = self.document.try_get_node(master.parent_id)
                    if owner is not None and owner.kind == NodeKind.COMPONENT_SET:
                        component_set = owner.name
                self.candidates.append(self.make_candidate(
                    node, self.document.ancestors(node.id), page, CandidateStatus.INSTANCE,
                    master_id=master.id,
                    component_set=component_set,
                ))
            except DocumentError as e:
                logger.debug(f"Skipping unreadable instance {node.id}: {e}")

    # ─────────────────────────────────────────────────────────────────────────
    # Phase 3: unresolved
    # ─────────────────────────────────────────────────────────────────────────

    def _is_organized(self, ancestors: Sequence[NodeSnapshot]) -> bool:
        """True if any non-page ancestor is a known master or an instance."""
        for ancestor in ancestors:
            if ancestor.kind == NodeKind.PAGE:
                break
            if ancestor.id in self.master_ids or ancestor.kind == NodeKind.INSTANCE:
                return True
        return False

    def collect_unresolved(self, page: NodeSnapshot) -> Optional[str]:
        """
        Collect unresolved icons on one page.

        Returns:
            A progress message when the per-page cap was applied
        """
        if self.full:
            return None
        limit = self.limits.max_unresolved_per_page
        window = self.document.find_all(page.id, UNRESOLVED_KINDS)[: self.limits.unresolved_search_window]

        eligible = []
        for node in window:
            try:
                ancestors = self.document.ancestors(node.id)
            except DocumentError as e:
                logger.debug(f"Skipping unreadable node {node.id}: {e}")
                continue
            if not self._is_organized(ancestors):
                eligible.append((node, ancestors))

        note = None
        if len(eligible) > limit:
            self.truncated = True
            note = f'"{page.name}": Processing {limit} of {len(eligible)} potential icons'
            logger.info(f"{note} (per-page cap)")

        for node, ancestors in eligible[:limit]:
            if self.full:
                break
            try:
                # Re-read: the window snapshot may be stale
                node = self.document.get_node(node.id)
                result = classify(node, ancestors, self._child_kinds(node.id), self.thresholds)
                if result.is_icon:
                    self.candidates.append(self.make_candidate(
                        node, ancestors, page, CandidateStatus.UNRESOLVED, score=result.score,
                    ))
            except DocumentError as e:
                logger.debug(f"Skipping unreadable node {node.id}: {e}")
        return note

    # ─────────────────────────────────────────────────────────────────────────
    # Driver
    # ─────────────────────────────────────────────────────────────────────────

    def _run_phase(self, name: str, pages: Sequence[NodeSnapshot], start: float, span: float, label: str, collect) -> None:
        with timed_phase(self.timing, name):
            for index, page in enumerate(pages):
                if self.full:
                    break
                percentage = start + (index / len(pages)) * span
                self.emit(percentage, f'{label}: "{page.name}"')
                try:
                    with timed_phase(self.timing, name, page=page.name):
                        note = collect(page)
                except DocumentError as e:
                    logger.error(f"Error scanning page {page.name!r} ({name}): {e}")
                    continue
                if note:
                    self.emit(percentage, note)

    def run(self) -> DiscoveryResult:
        self.emit(0)
        try:
            all_pages = self.document.pages()
        except DocumentError as e:
            raise ScanError(f"Failed to load pages: {e}") from e

        pages = all_pages
        if len(all_pages) > self.limits.max_pages:
            self.truncated = True
            message = (
                f"Large file detected ({len(all_pages)} pages). "
                f"Scanning first {self.limits.max_pages} pages for performance..."
            )
            logger.warning(message)
            self.emit(5, message)
            pages = all_pages[: self.limits.max_pages]

        scanned = []
        for page in pages:
            if is_archive_page(page.name):
                logger.info(f"Skipping archive page: {page.name!r}")
            else:
                scanned.append(page)
        logger.info(f"Pages to scan: {', '.join(p.name for p in scanned)}")

        if scanned:
            self.emit(10, "Scanning for master icon components...")
            self._run_phase("masters", scanned, 10, 40, "Scanning components in", self.collect_masters)
            logger.info(f"Found {len(self.master_ids)} master icon components")

            self.emit(50, f"Finding instances of {len(self.master_ids)} master components...")
            self._run_phase("instances", scanned, 50, 25, "Scanning instances in", self.collect_instances)

            self.emit(75, "Finding unresolved icons...")
            self._run_phase("unresolved", scanned, 75, 15, "Checking for unresolved icons in", self.collect_unresolved)

        self.emit(95, "Finalizing results...")
        candidates = attach_instance_counts(self.candidates)
        result = DiscoveryResult(
            candidates=tuple(candidates),
            master_ids=frozenset(self.master_ids),
            pages_scanned=tuple(p.name for p in scanned),
            truncated=self.truncated,
            timing=self.timing,
        )
        logger.info(
            f"Total icons found: {len(candidates)} ({len(result.masters)} masters, "
            f"{len(result.instances)} instances, {len(result.unresolved)} unresolved)"
        )
        logger.info(self.timing.summary())
        return result


def attach_instance_counts(candidates: Sequence[Candidate]) -> List[Candidate]:
    """Return candidates with ``instance_count`` set on every master."""
    counts: Dict[str, int] = {}
    for candidate in candidates:
        if candidate.master_id:
            counts[candidate.master_id] = counts.get(candidate.master_id, 0) + 1
    return [
        replace(c, instance_count=counts.get(c.node_id, 0)) if c.status == CandidateStatus.MASTER else c
        for c in candidates
    ]


def discover_icons(
    document: DocumentAccess,
    *,
    limits: DiscoveryLimits = DISCOVERY_LIMITS,
    thresholds: ClassifierThresholds = CLASSIFIER_THRESHOLDS,
    progress: Optional[ProgressCallback] = None,
) -> DiscoveryResult:
    """
    Scan a document for icons.

    Args:
        document: Document to scan (read-only during the scan)
        limits: Page / candidate caps
        thresholds: Classifier thresholds
        progress: Optional callback receiving ProgressEvent values

    Returns:
        DiscoveryResult; candidates are masters, then instances, then
        unresolved icons

    Raises:
        ScanError: If the document's pages cannot be listed
    """
    return _Scan(document, limits, thresholds, progress).run()
