"""
Module: consolidation.clustering

Purpose:
    Partition unresolved candidates into duplicate groups.

    Pass 1 buckets by an exact key (normalized name, size on an 8px grid,
    source, page). Pass 2 lets each singleton join the best-scoring
    multi-member group on the same page. The page is part of the key and
    of the pass-2 filter so unrelated icons on different pages never merge.

Key Functions:
    - cluster_candidates(): Build the partition
    - exact_key(): Pass-1 bucket key

Used By:
    - consolidation.runner
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence

from icon_toolkit.common.naming import grouping_name
from icon_toolkit.common.thresholds import CLUSTERING_THRESHOLDS
from icon_toolkit.core.models import Candidate, DuplicateGroup

from .similarity import Scorer, SimilarityScorer

logger = logging.getLogger(__name__)


def snap(value: float, grid: int) -> int:
    """Round to the nearest grid multiple, halves rounding up."""
    return int(math.floor(value / grid + 0.5)) * grid


def exact_key(candidate: Candidate, grid: int = CLUSTERING_THRESHOLDS.size_grid_px) -> str:
    """
    Pass-1 bucket key: ``name|WxH|source|page``.

    Example:
        >>> exact_key(Candidate("1:2", "home_icon2", NodeKind.VECTOR, 23, 25, "P"))
        'home|24x24||P'
    """
    size = f"{snap(candidate.width, grid)}x{snap(candidate.height, grid)}"
    return f"{grouping_name(candidate.name)}|{size}|{candidate.source}|{candidate.page}"


def cluster_candidates(
    candidates: Sequence[Candidate],
    *,
    scorer: Optional[Scorer] = None,
    threshold: float = CLUSTERING_THRESHOLDS.similarity_threshold,
    grid: int = CLUSTERING_THRESHOLDS.size_grid_px,
) -> List[DuplicateGroup]:
    """
    Cluster candidates so every candidate lands in exactly one group.

    Args:
        candidates: Candidates to partition (ids assumed unique)
        scorer: Pairwise similarity; defaults to a document-less scorer
        threshold: Inclusive pass-2 merge threshold
        grid: Size rounding for the exact key

    Returns:
        Multi-member groups first (pass-1 order), then singletons

    Note:
        A scorer exception for one pair is logged and the pair skipped.
    """
    scorer = scorer or SimilarityScorer()

    buckets: Dict[str, List[Candidate]] = {}
    for candidate in candidates:
        buckets.setdefault(exact_key(candidate, grid), []).append(candidate)

    groups: Dict[str, List[Candidate]] = {k: v for k, v in buckets.items() if len(v) > 1}
    placed = {c.node_id for members in groups.values() for c in members}
    singles: Dict[str, List[Candidate]] = {}

    for key, members in buckets.items():
        if len(members) != 1:
            continue
        single = members[0]
        if single.node_id in placed:
            continue

        best_key, best_score = None, None
        for group_key, group in groups.items():
            representative = group[0]
            if representative.page != single.page:
                continue
            try:
                score = scorer(single, representative)
            except Exception as e:
                logger.warning(
                    f"Similarity failed for {single.name!r} vs {representative.name!r}: {e}"
                )
                continue
            if score >= threshold and (best_score is None or score > best_score):
                best_key, best_score = group_key, score

        if best_key is not None:
            groups[best_key].append(single)
            logger.debug(f"Merged {single.name!r} into group {best_key!r} (similarity {best_score})")
        else:
            singles[f"single|{key}"] = [single]
        placed.add(single.node_id)

    # Reconciliation: nothing may be lost
    for candidate in candidates:
        if candidate.node_id not in placed:
            logger.warning(f"Candidate {candidate.name!r} was not clustered; adding fallback group")
            singles[f"fallback|{candidate.node_id}"] = [candidate]
            placed.add(candidate.node_id)

    result = [DuplicateGroup(k, tuple(v)) for k, v in groups.items()]
    result.extend(DuplicateGroup(k, tuple(v)) for k, v in singles.items())
    logger.info(
        f"Grouping results: {len(result)} total groups, "
        f"{sum(len(v) for v in groups.values())} icons in groups, {len(singles)} single icons"
    )
    return result
