"""Centralized threshold and magic number configuration.

This module contains all tunable thresholds, ratios and caps used by the
classifier, the discovery scan, clustering and consolidation. The values
were tuned empirically: loosening them trades missed icons (false
negatives, unrecoverable) for noise (false positives, corrected later by
consistency analysis and user markings). Keep that trade-off in mind when
adjusting them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Band = Tuple[float, float]

CANONICAL_ICON_SIZES: Tuple[int, ...] = (
    12, 14, 16, 18, 20, 22, 24, 28, 32, 36, 40, 44, 48, 56, 64, 72, 80, 96, 128,
)


def in_band(value: float, band: Band) -> bool:
    """Inclusive range check."""
    return band[0] <= value <= band[1]


def _check_band(name: str, band: Band) -> None:
    if band[0] > band[1]:
        raise ValueError(f"{name} lower bound must be <= upper bound: {band}")


@dataclass(frozen=True)
class ClassifierThresholds:
    """Thresholds for per-kind icon classification."""

    canonical_sizes: Tuple[int, ...] = CANONICAL_ICON_SIZES
    size_tolerance_px: float = 2  # Allowed deviation from a canonical size
    min_score: int = 1  # Additive kinds accept at score >= this

    # Component / ComponentSet
    component_max_size: float = 800  # Larger masters are layouts, not icons
    component_aspect_limits: Band = (0.05, 20.0)  # Outside = extreme aspect ratio
    component_good_size: Band = (6, 300)  # +2
    component_ok_size: Band = (6, 800)  # +1 when not in the good range
    component_aspect_band: Band = (0.3, 3.0)  # +1
    square_band: Band = (0.95, 1.05)  # Near-perfect square

    # Instance
    instance_max_size: float = 120  # Larger instances need an icon-ish name
    instance_hard_max_size: float = 300  # Only "icon/" library instances beyond this
    instance_named_aspect: Band = (0.3, 3.0)
    instance_unnamed_aspect: Band = (0.5, 2.0)
    instance_small_size: float = 64  # +1
    instance_tiny_size: float = 32  # +1 more

    # Frame (conjunctive gate)
    frame_aspect: Band = (0.75, 1.33)
    frame_max_children: int = 5

    # Vector / BooleanOp / Group (conjunctive gate)
    shape_size: Band = (8, 200)
    shape_aspect: Band = (0.5, 2.0)
    ancestor_frame_aspect: Band = (0.5, 2.0)  # Ancestor frame absorbs the icon
    ancestor_frame_max_size: float = 200

    # Component set variants
    variant_size: Band = (8, 200)
    variant_aspect: Band = (0.5, 2.0)

    def __post_init__(self) -> None:
        if self.min_score < 0:
            raise ValueError(f"min_score must be non-negative: {self.min_score}")
        if self.size_tolerance_px < 0:
            raise ValueError(f"size_tolerance_px must be non-negative: {self.size_tolerance_px}")
        if not self.canonical_sizes:
            raise ValueError("canonical_sizes must not be empty")
        for name in (
            "component_aspect_limits", "component_good_size", "component_ok_size",
            "component_aspect_band", "square_band", "instance_named_aspect",
            "instance_unnamed_aspect", "frame_aspect", "shape_size", "shape_aspect",
            "ancestor_frame_aspect", "variant_size", "variant_aspect",
        ):
            _check_band(name, getattr(self, name))

    def is_canonical_size(self, size: float) -> bool:
        """True if ``size`` is within tolerance of a canonical icon size."""
        return any(abs(size - s) <= self.size_tolerance_px for s in self.canonical_sizes)

    def is_canonical_box(self, width: float, height: float) -> bool:
        """True if both sides match the same canonical size within tolerance."""
        tol = self.size_tolerance_px
        return any(
            abs(width - s) <= tol and abs(height - s) <= tol
            for s in self.canonical_sizes
        )


@dataclass(frozen=True)
class DiscoveryLimits:
    """Backpressure caps for the discovery scan (truncate, never abort)."""

    max_pages: int = 100
    max_candidates: int = 2000
    max_unresolved_per_page: int = 200
    unresolved_search_multiplier: int = 3  # Search more, process less

    def __post_init__(self) -> None:
        for name in ("max_pages", "max_candidates", "max_unresolved_per_page",
                     "unresolved_search_multiplier"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive: {value}")

    @property
    def unresolved_search_window(self) -> int:
        return self.max_unresolved_per_page * self.unresolved_search_multiplier


@dataclass(frozen=True)
class ClusteringThresholds:
    """Thresholds for duplicate clustering."""

    similarity_threshold: float = 70  # Inclusive: >= merges
    size_grid_px: int = 8  # Exact-key size rounding
    library_size_grid_px: int = 4  # Library de-duplication size rounding

    def __post_init__(self) -> None:
        if not 0 <= self.similarity_threshold <= 100:
            raise ValueError(
                f"similarity_threshold must be within [0, 100]: {self.similarity_threshold}"
            )
        if self.size_grid_px <= 0 or self.library_size_grid_px <= 0:
            raise ValueError("grid sizes must be positive")


@dataclass(frozen=True)
class LibraryLayout:
    """Placement of newly created masters on the library page."""

    page_name: str = "🎯 Icon Library"
    grid_size: int = 80  # Cell size in px
    icons_per_row: int = 10

    def __post_init__(self) -> None:
        if self.grid_size <= 0:
            raise ValueError(f"grid_size must be positive: {self.grid_size}")
        if self.icons_per_row <= 0:
            raise ValueError(f"icons_per_row must be positive: {self.icons_per_row}")

    def cell_position(self, grid_position: int) -> Tuple[int, int]:
        """(x, y) of the ``grid_position``-th cell, filled row by row."""
        row, col = divmod(grid_position, self.icons_per_row)
        return col * self.grid_size, row * self.grid_size


# Global instances for easy import
CLASSIFIER_THRESHOLDS = ClassifierThresholds()
DISCOVERY_LIMITS = DiscoveryLimits()
CLUSTERING_THRESHOLDS = ClusteringThresholds()
LIBRARY_LAYOUT = LibraryLayout()
