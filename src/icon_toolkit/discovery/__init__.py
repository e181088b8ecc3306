"""
Discovery Package

Classifier, three-phase scan pipeline and consistency analysis.
"""

from .classifier import Classification, classify
from .consistency import analyze_consistency
from .pipeline import DiscoveryResult, ScanError, attach_instance_counts, discover_icons
from .timing import TimingLog, timed_phase

__all__ = [
    "Classification",
    "classify",
    "analyze_consistency",
    "DiscoveryResult",
    "ScanError",
    "attach_instance_counts",
    "discover_icons",
    "TimingLog",
    "timed_phase",
]
