"""
Unit Tests for Duplicate Clustering

Tests for snap(), exact_key() and the two-pass cluster_candidates().
"""

import pytest

from icon_toolkit.consolidation.clustering import cluster_candidates, exact_key, snap
from icon_toolkit.core.models import Candidate, NodeKind


def fixed_scorer(value):
    """Scorer stub returning the same score for every pair."""
    def score(a, b):
        return value
    return score


class TestSnap:
    """Tests for snap()."""

    @pytest.mark.parametrize("value,expected", [(11, 8), (12, 16), (23, 24), (25, 24), (3, 0)])
    def test_snap_when_value_then_nearest_multiple(self, value, expected):
        assert snap(value, 8) == expected


class TestExactKey:
    """Tests for exact_key()."""

    def test_key_when_name_variants_then_same_key(self, make_candidate):
        keys = {exact_key(make_candidate(str(i), name)) for i, name in
                enumerate(["home-icon", "home_icon2", "HomeIcon"])}

        assert keys == {"home|24x24|Icon Library|Page 1"}

    def test_key_when_sizes_within_grid_then_same_key(self):
        candidate = Candidate("1:2", "home_icon2", NodeKind.VECTOR, 23, 25, "P")

        assert exact_key(candidate) == "home|24x24||P"


class TestClusterCandidates:
    """Tests for cluster_candidates()."""

    def test_cluster_when_exact_duplicates_then_one_group(self, make_candidate):
        candidates = [
            make_candidate("1:1", "home-icon"),
            make_candidate("1:2", "home_icon2"),
            make_candidate("1:3", "HomeIcon"),
        ]

        groups = cluster_candidates(candidates)

        assert len(groups) == 1
        assert [c.node_id for c in groups[0].members] == ["1:1", "1:2", "1:3"]

    def test_cluster_when_any_input_then_every_candidate_once(self, make_candidate):
        """The groups partition the input."""
        candidates = [
            make_candidate("1:1", "home"),
            make_candidate("1:2", "home"),
            make_candidate("1:3", "star"),
            make_candidate("1:4", "bell", page="Page 2"),
            make_candidate("1:5", "bell", width=48, height=48),
        ]

        groups = cluster_candidates(candidates)

        ids = [c.node_id for g in groups for c in g.members]
        assert sorted(ids) == ["1:1", "1:2", "1:3", "1:4", "1:5"]

    def test_cluster_when_multi_and_singles_then_multi_first(self, make_candidate):
        candidates = [
            make_candidate("1:1", "star"),
            make_candidate("1:2", "home"),
            make_candidate("1:3", "home"),
        ]

        groups = cluster_candidates(candidates, scorer=fixed_scorer(0))

        assert [len(g) for g in groups] == [2, 1]
        assert groups[1].key.startswith("single|")

    def test_cluster_when_score_at_threshold_then_merged(self, make_candidate):
        """A score of exactly 70 is enough to join a group."""
        candidates = [
            make_candidate("1:1", "home"),
            make_candidate("1:2", "home"),
            make_candidate("1:3", "house"),
        ]

        groups = cluster_candidates(candidates, scorer=fixed_scorer(70))

        assert len(groups) == 1
        assert len(groups[0]) == 3

    def test_cluster_when_score_below_threshold_then_separate(self, make_candidate):
        candidates = [
            make_candidate("1:1", "home"),
            make_candidate("1:2", "home"),
            make_candidate("1:3", "house"),
        ]

        groups = cluster_candidates(candidates, scorer=fixed_scorer(69))

        assert [len(g) for g in groups] == [2, 1]

    def test_cluster_when_singleton_on_other_page_then_never_merged(self, make_candidate):
        candidates = [
            make_candidate("1:1", "home"),
            make_candidate("1:2", "home"),
            make_candidate("1:3", "home", page="Page 2"),
        ]

        groups = cluster_candidates(candidates, scorer=fixed_scorer(100))

        assert [len(g) for g in groups] == [2, 1]
        assert groups[1].members[0].page == "Page 2"

    def test_cluster_when_several_groups_match_then_best_score_wins(self, make_candidate):
        candidates = [
            make_candidate("1:1", "home"),
            make_candidate("1:2", "home"),
            make_candidate("1:3", "star"),
            make_candidate("1:4", "star"),
            make_candidate("1:5", "stars"),
        ]

        def scorer(single, representative):
            return 95 if representative.name == "star" else 75

        groups = cluster_candidates(candidates, scorer=scorer)

        star_group = next(g for g in groups if g.representative.name == "star")
        assert [c.node_id for c in star_group.members] == ["1:3", "1:4", "1:5"]

    def test_cluster_when_scorer_raises_then_pair_skipped(self, make_candidate):
        candidates = [
            make_candidate("1:1", "home"),
            make_candidate("1:2", "home"),
            make_candidate("1:3", "house"),
        ]

        def broken(a, b):
            raise RuntimeError("no geometry")

        groups = cluster_candidates(candidates, scorer=broken)

        assert [len(g) for g in groups] == [2, 1]

    def test_cluster_when_empty_then_no_groups(self):
        assert cluster_candidates([]) == []
