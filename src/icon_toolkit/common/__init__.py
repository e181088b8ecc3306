"""Common thresholds and name heuristics shared across the toolkit."""

from __future__ import annotations

from . import naming
from .thresholds import (
    CLASSIFIER_THRESHOLDS,
    CLUSTERING_THRESHOLDS,
    DISCOVERY_LIMITS,
    LIBRARY_LAYOUT,
    ClassifierThresholds,
    ClusteringThresholds,
    DiscoveryLimits,
    LibraryLayout,
)

__all__ = [
    "CLASSIFIER_THRESHOLDS",
    "CLUSTERING_THRESHOLDS",
    "DISCOVERY_LIMITS",
    "LIBRARY_LAYOUT",
    "ClassifierThresholds",
    "ClusteringThresholds",
    "DiscoveryLimits",
    "LibraryLayout",
    # module references
    "naming",
]
