"""
Module: discovery.consistency

Purpose:
    Flag inconsistencies across a scan's candidates: size outliers,
    non-conforming names, same-page duplicates, likely duplicates on other
    pages and frames that look detached from a master. Works only on the
    candidate list; never touches the document.

Key Functions:
    - analyze_consistency(): Return enriched copies of the candidates

Used By:
    - icon_toolkit.engine.session: After discovery, before markings
"""

from __future__ import annotations

import logging
import re
from collections import Counter, defaultdict
from dataclasses import replace
from typing import Dict, List, Sequence

from icon_toolkit.common.naming import consistency_pattern, follows_naming_convention
from icon_toolkit.core.models import Candidate, CandidateStatus, NodeKind

logger = logging.getLogger(__name__)

DETACHED = "Appears to be detached from component"
INCONSISTENT_NAMING = "Inconsistent naming convention"

_COPY_RE = re.compile(r"\s*copy\s*\d*")


def analyze_consistency(candidates: Sequence[Candidate]) -> List[Candidate]:
    """
    Annotate candidates with consistency findings.

    Reasons are appended in a fixed order: detached, same-page duplicate,
    size outlier, naming, cross-page duplicate.

    Args:
        candidates: Candidates from one scan

    Returns:
        New Candidate instances, same order as the input
    """
    size_counts = Counter(c.size_key for c in candidates)
    # Counter.most_common keeps first-seen order among ties
    common_size, common_count = size_counts.most_common(1)[0] if size_counts else ("", 0)

    patterns = {c.node_id: consistency_pattern(c.name) for c in candidates}
    pattern_counts = Counter(patterns.values())
    page_patterns: Dict[str, Counter] = defaultdict(Counter)
    for c in candidates:
        page_patterns[c.page][patterns[c.node_id]] += 1

    master_names = [c.name.lower() for c in candidates if c.status == CandidateStatus.MASTER]

    result = []
    for c in candidates:
        reasons: List[str] = []
        pattern = patterns[c.node_id]

        is_new = False
        if c.status == CandidateStatus.UNRESOLVED and c.kind == NodeKind.FRAME:
            lowered = c.name.lower()
            stem = _COPY_RE.sub("", lowered, count=1).strip()
            if "copy" in lowered or (stem and any(stem in name for name in master_names)):
                is_new = True
                reasons.append(DETACHED)

        same_page = page_patterns[c.page][pattern]
        is_duplicate = same_page > 1
        if is_duplicate:
            reasons.append(f"Duplicate on page ({same_page} total)")

        if common_count > 1 and c.size_key != common_size and size_counts[c.size_key] < common_count / 2:
            reasons.append(f"Non-standard size ({c.size_key}, most common: {common_size})")

        if not follows_naming_convention(c.name):
            reasons.append(INCONSISTENT_NAMING)

        if pattern_counts[pattern] > 1 and not is_duplicate:
            reasons.append(f"Potential duplicate across pages ({pattern_counts[pattern]} similar icons found)")

        result.append(replace(
            c,
            inconsistency_reasons=tuple(reasons),
            has_inconsistency=bool(reasons),
            is_duplicate=is_duplicate,
            is_new=is_new,
        ))

    flagged = sum(1 for c in result if c.has_inconsistency)
    logger.info(f"Consistency analysis: {flagged}/{len(result)} icons flagged")
    return result
