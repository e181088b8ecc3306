"""
Unit Tests for Threshold Configuration

Tests for validation and helpers of the threshold dataclasses.
"""

import pytest

from icon_toolkit.common.thresholds import (
    CLUSTERING_THRESHOLDS,
    ClassifierThresholds,
    ClusteringThresholds,
    DiscoveryLimits,
    LibraryLayout,
    in_band,
)


class TestClassifierThresholds:
    """Tests for ClassifierThresholds."""

    def test_init_when_inverted_band_then_raises_error(self):
        with pytest.raises(ValueError, match="frame_aspect lower bound"):
            ClassifierThresholds(frame_aspect=(2.0, 1.0))

    def test_init_when_no_canonical_sizes_then_raises_error(self):
        with pytest.raises(ValueError, match="canonical_sizes"):
            ClassifierThresholds(canonical_sizes=())

    @pytest.mark.parametrize("size,expected", [(24, True), (23, True), (26, True), (52, False)])
    def test_is_canonical_size_when_size_then_within_tolerance(self, size, expected):
        assert ClassifierThresholds().is_canonical_size(size) is expected

    def test_is_canonical_box_when_sides_differ_then_false(self):
        """Both sides must match the same canonical size."""
        t = ClassifierThresholds()

        assert t.is_canonical_box(24, 24)
        assert not t.is_canonical_box(24, 40)

    def test_in_band_when_on_boundary_then_inclusive(self):
        assert in_band(0.75, (0.75, 1.33))
        assert in_band(1.33, (0.75, 1.33))


class TestDiscoveryLimits:
    """Tests for DiscoveryLimits."""

    def test_init_when_zero_pages_then_raises_error(self):
        with pytest.raises(ValueError, match="max_pages must be positive"):
            DiscoveryLimits(max_pages=0)

    def test_search_window_when_defaults_then_three_times_cap(self):
        assert DiscoveryLimits().unresolved_search_window == 600


class TestClusteringThresholds:
    """Tests for ClusteringThresholds."""

    def test_defaults_when_created_then_seventy_inclusive(self):
        assert CLUSTERING_THRESHOLDS.similarity_threshold == 70
        assert CLUSTERING_THRESHOLDS.size_grid_px == 8

    def test_init_when_threshold_out_of_range_then_raises_error(self):
        with pytest.raises(ValueError, match="similarity_threshold"):
            ClusteringThresholds(similarity_threshold=101)

    def test_init_when_zero_grid_then_raises_error(self):
        with pytest.raises(ValueError, match="grid sizes"):
            ClusteringThresholds(size_grid_px=0)


class TestLibraryLayout:
    """Tests for LibraryLayout."""

    def test_cell_position_when_second_row_then_wraps(self):
        """Cells fill row by row, ten per row."""
        layout = LibraryLayout()

        assert layout.cell_position(0) == (0, 0)
        assert layout.cell_position(9) == (720, 0)
        assert layout.cell_position(11) == (80, 80)

    def test_init_when_zero_columns_then_raises_error(self):
        with pytest.raises(ValueError, match="icons_per_row"):
            LibraryLayout(icons_per_row=0)
