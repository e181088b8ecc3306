"""
Module: consolidation.similarity

Purpose:
    Pairwise similarity score (0-100) between two candidates, combining
    size, aspect ratio, name edit distance, source and a cheap visual
    proxy (node kind plus fill/stroke paint types).

Key Classes:
    - SimilarityScorer: Callable scorer bound to an optional document

Key Functions:
    - levenshtein(): Edit distance (numpy row DP)
    - name_similarity(): 0-30 name score, library-aware
    - visual_similarity(): 0-20 score from two node snapshots

Dependencies:
    - numpy: Vectorized edit-distance rows

Used By:
    - consolidation.clustering: Pass 2 merges
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

import numpy as np

from icon_toolkit.common.naming import (
    normalize_icon_token,
    normalize_library_token,
    split_library_name,
)
from icon_toolkit.core.models import Candidate, NodeSnapshot
from icon_toolkit.document.access import DocumentAccess

logger = logging.getLogger(__name__)

# Maximum points per term
SIZE_POINTS = 30
ASPECT_POINTS = 20
NAME_POINTS = 30
SOURCE_POINTS = 20
VISUAL_POINTS = 20
CROSS_LIBRARY_POINTS = 5

Scorer = Callable[[Candidate, Candidate], float]


def levenshtein(a: str, b: str) -> int:
    """
    Edit distance between two strings.

    Each DP row is computed with numpy: substitutions and deletions
    vectorized, insertions folded in with a running minimum.

    Example:
        >>> levenshtein("kitten", "sitting")
        3
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    b_codes = np.array([ord(ch) for ch in b], dtype=np.int64)
    offsets = np.arange(len(b) + 1, dtype=np.int64)
    row = offsets.copy()
    for i, ch in enumerate(a, start=1):
        cost = (b_codes != ord(ch)).astype(np.int64)
        candidate = np.empty_like(row)
        candidate[0] = i
        candidate[1:] = np.minimum(row[:-1] + cost, row[1:] + 1)
        # new[j] = min(candidate[j], new[j-1] + 1)
        row = np.minimum.accumulate(candidate - offsets) + offsets
    return int(row[-1])


def _ratio_points(norm1: str, norm2: str) -> int:
    if norm1 == norm2:
        return NAME_POINTS
    if not norm1 or not norm2:
        return 0
    distance = levenshtein(norm1, norm2)
    return math.floor((1 - distance / max(len(norm1), len(norm2))) * NAME_POINTS)


def name_similarity(name1: str, name2: str) -> int:
    """
    Name score in [0, 30].

    Two library names ("lucide/home") from the same library compare only
    their suffixes; from different libraries they score a flat 5. All
    other names are compared after full normalization.

    Example:
        >>> name_similarity("home-icon", "HomeIcon")
        30
        >>> name_similarity("lucide/home", "feather/home")
        5
    """
    lib1 = split_library_name(name1)
    lib2 = split_library_name(name2)
    if lib1 and lib2:
        if lib1[0].lower() != lib2[0].lower():
            return CROSS_LIBRARY_POINTS
        return _ratio_points(normalize_library_token(lib1[1]), normalize_library_token(lib2[1]))
    return _ratio_points(normalize_icon_token(name1), normalize_icon_token(name2))


def visual_similarity(node1: NodeSnapshot, node2: NodeSnapshot) -> int:
    """Score in [0, 20]: same kind +10, then fills and strokes +5/+5 each."""
    score = 0
    if node1.kind == node2.kind:
        score += 10
    for paints1, paints2 in ((node1.fills, node2.fills), (node1.strokes, node2.strokes)):
        if len(paints1) == len(paints2):
            score += 5
            if paints1 and paints1[0].type == paints2[0].type:
                score += 5
    return min(VISUAL_POINTS, score)


class SimilarityScorer:
    """
    Candidate similarity scorer.

    Symmetric by construction: every term compares the two sides the same
    way. When a document is given, both nodes are re-read to add the visual
    term; unreadable nodes skip it.

    Example:
        >>> scorer = SimilarityScorer()
        >>> scorer(candidate_a, candidate_b)
        80
    """

    def __init__(self, document: Optional[DocumentAccess] = None):
        self.document = document

    def _visual(self, a: Candidate, b: Candidate) -> int:
        if self.document is None:
            return 0
        node1 = self.document.try_get_node(a.node_id)
        node2 = self.document.try_get_node(b.node_id)
        if node1 is None or node2 is None:
            return 0
        return visual_similarity(node1, node2)

    def score(self, a: Candidate, b: Candidate) -> int:
        size = max(0, SIZE_POINTS - abs(a.width - b.width) - abs(a.height - b.height))
        aspect = max(0.0, ASPECT_POINTS - abs(a.aspect_ratio - b.aspect_ratio) * 100)
        name = name_similarity(a.name, b.name)
        source = SOURCE_POINTS if a.source == b.source else 0
        total = size + aspect + name + source + self._visual(a, b)
        return min(100, math.floor(total))

    __call__ = score


def similarity(a: Candidate, b: Candidate, document: Optional[DocumentAccess] = None) -> int:
    """Functional form of ``SimilarityScorer(document)(a, b)``."""
    return SimilarityScorer(document).score(a, b)
