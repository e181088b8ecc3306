"""
Unit Tests for Similarity Scoring

Tests for levenshtein(), name_similarity() and SimilarityScorer.
"""

import pytest

from icon_toolkit.consolidation.similarity import (
    SimilarityScorer,
    levenshtein,
    name_similarity,
    similarity,
    visual_similarity,
)
from icon_toolkit.core.models import NodeKind, NodeSnapshot, Paint


class TestLevenshtein:
    """Tests for levenshtein()."""

    @pytest.mark.parametrize("a,b,expected", [
        ("kitten", "sitting", 3),
        ("", "abc", 3),
        ("abc", "", 3),
        ("home", "home", 0),
        ("flaw", "lawn", 2),
    ])
    def test_levenshtein_when_pair_then_edit_distance(self, a, b, expected):
        assert levenshtein(a, b) == expected

    def test_levenshtein_when_swapped_then_symmetric(self):
        assert levenshtein("arrow", "narrow") == levenshtein("narrow", "arrow")


class TestNameSimilarity:
    """Tests for name_similarity()."""

    def test_name_when_only_separators_differ_then_full_points(self):
        assert name_similarity("home-icon", "HomeIcon") == 30

    def test_name_when_different_libraries_then_flat_five(self):
        assert name_similarity("lucide/home", "feather/home") == 5

    def test_name_when_same_library_then_suffix_compared(self):
        assert name_similarity("lucide/home", "Lucide/home-2") == 30

    def test_name_when_partially_similar_then_ratio(self):
        """home vs house: distance 2 over length 5."""
        assert name_similarity("home", "house") == 18

    def test_name_when_nothing_left_after_normalizing_then_zero(self):
        assert name_similarity("icon", "star") == 0


class TestVisualSimilarity:
    """Tests for visual_similarity()."""

    def test_visual_when_same_kind_and_paints_then_twenty(self):
        a = NodeSnapshot("1:1", "a", NodeKind.VECTOR, fills=(Paint("SOLID"),))
        b = NodeSnapshot("1:2", "b", NodeKind.VECTOR, fills=(Paint("SOLID"),))

        assert visual_similarity(a, b) == 20

    def test_visual_when_different_kind_and_fill_type_then_partial(self):
        a = NodeSnapshot("1:1", "a", NodeKind.VECTOR, fills=(Paint("SOLID"),))
        b = NodeSnapshot("1:2", "b", NodeKind.FRAME, fills=(Paint("GRADIENT_LINEAR"),))

        # fill count matches (+5), strokes both empty (+5)
        assert visual_similarity(a, b) == 10


class TestSimilarityScorer:
    """Tests for SimilarityScorer."""

    def test_score_when_identical_then_hundred(self, make_candidate):
        a = make_candidate("1:1", "home")
        b = make_candidate("1:2", "home")

        assert SimilarityScorer()(a, b) == 100

    def test_score_when_swapped_then_symmetric(self, make_candidate):
        a = make_candidate("1:1", "home", width=24, height=24, source="Icon Library")
        b = make_candidate("1:2", "house", width=32, height=20, source="Material Icons")

        scorer = SimilarityScorer()
        assert scorer(a, b) == scorer(b, a)

    def test_score_when_any_pair_then_within_range(self, make_candidate):
        a = make_candidate("1:1", "home", width=8, height=200)
        b = make_candidate("1:2", "zebra", width=200, height=8, source="")

        assert 0 <= SimilarityScorer()(a, b) <= 100

    def test_score_when_document_given_then_visual_term_added(self, document, page_id, make_candidate):
        first = document.add_node(page_id, "home", NodeKind.VECTOR, width=24, height=24)
        second = document.add_node(page_id, "house", NodeKind.VECTOR, width=24, height=24)
        a = make_candidate(first, "home")
        b = make_candidate(second, "house")

        without = similarity(a, b)
        with_document = similarity(a, b, document)

        assert with_document == min(100, without + 20)

    def test_score_when_node_missing_then_visual_skipped(self, document, make_candidate):
        a = make_candidate("9:1", "home")
        b = make_candidate("9:2", "house")

        assert similarity(a, b, document) == similarity(a, b)
