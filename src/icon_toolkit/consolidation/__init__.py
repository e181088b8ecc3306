"""
Consolidation: clustering duplicates into masters, library de-duplication,
single-icon conversions, icon swaps and library imports.
"""

from .clustering import cluster_candidates, exact_key, snap
from .conversion import (
    ConversionError,
    ConversionOutcome,
    convert_single_icon,
    replace_unresolved_with_instance,
    smart_rename,
)
from .library import consolidate_library_duplicates
from .library_import import add_icon_to_library, library_component_name
from .runner import SCOPE_ALL_PAGES, SCOPE_CURRENT_PAGE, consolidate_icons
from .similarity import SimilarityScorer, levenshtein, name_similarity, similarity
from .swap import ARCHIVE_PAGE_NAME, SizingMode, archive_node, swap_icons
from .transaction import consolidate_cluster, replace_with_instance, select_representative

__all__ = [
    "cluster_candidates",
    "exact_key",
    "snap",
    "ConversionError",
    "ConversionOutcome",
    "convert_single_icon",
    "replace_unresolved_with_instance",
    "smart_rename",
    "consolidate_library_duplicates",
    "add_icon_to_library",
    "library_component_name",
    "SCOPE_ALL_PAGES",
    "SCOPE_CURRENT_PAGE",
    "consolidate_icons",
    "SimilarityScorer",
    "levenshtein",
    "name_similarity",
    "similarity",
    "ARCHIVE_PAGE_NAME",
    "SizingMode",
    "archive_node",
    "swap_icons",
    "consolidate_cluster",
    "replace_with_instance",
    "select_representative",
]
