"""
Unit Tests for Library De-duplication

Tests for consolidate_library_duplicates() and its priority rules
(Components > Instances > Frames).
"""

import pytest

from icon_toolkit.consolidation.library import (
    EMPTY_LIBRARY_MESSAGE,
    NOTHING_TO_DO_MESSAGE,
    consolidate_library_duplicates,
    library_key,
    select_canonical_master,
)
from icon_toolkit.core.models import CandidateStatus, NodeKind

LIBRARY = "🎯 Icon Library"


@pytest.fixture
def library_id(document):
    return document.add_page(LIBRARY)


@pytest.fixture
def library_candidate(make_candidate):
    """Candidate on the library page with status derived from its kind."""
    statuses = {
        NodeKind.COMPONENT: CandidateStatus.MASTER,
        NodeKind.INSTANCE: CandidateStatus.INSTANCE,
    }

    def _make(node_id, name, kind, **extra):
        status = statuses.get(kind, CandidateStatus.UNRESOLVED)
        return make_candidate(node_id, name, kind=kind, status=status, page=LIBRARY, **extra)
    return _make


class TestLibraryKey:
    """Tests for library_key()."""

    def test_key_when_copy_suffix_then_same_key(self, make_candidate):
        assert library_key(make_candidate("1:1", "lucide/home copy")) == \
            library_key(make_candidate("1:2", "lucide/home"))

    def test_key_when_size_within_grid_then_same_key(self, make_candidate):
        assert library_key(make_candidate("1:1", "star", width=23, height=25)) == "star|24x24"


class TestSelectCanonicalMaster:
    """Tests for select_canonical_master()."""

    def test_select_when_copy_in_name_then_penalized(self, make_candidate):
        components = [
            make_candidate("1:1", "home copy"),
            make_candidate("1:2", "home-outline-large"),
        ]

        assert select_canonical_master(components).node_id == "1:2"

    def test_select_when_clean_names_then_shortest(self, make_candidate):
        components = [make_candidate("1:1", "home-24"), make_candidate("1:2", "home")]

        assert select_canonical_master(components).node_id == "1:2"


class TestConsolidateLibraryDuplicates:
    """Tests for consolidate_library_duplicates()."""

    def test_consolidate_when_components_instance_and_frame_then_two_removed(
        self, document, library_id, library_candidate
    ):
        canonical = document.add_node(library_id, "lucide/home", NodeKind.COMPONENT, width=24, height=24)
        duplicate = document.add_node(library_id, "lucide/home copy", NodeKind.COMPONENT,
                                      width=24, height=24, x=80)
        instance = document.add_node(library_id, "lucide/home copy", NodeKind.INSTANCE, width=24,
                                     height=24, x=160, main_component_id=duplicate)
        frame = document.add_node(library_id, "lucide/home", NodeKind.FRAME, width=24, height=24, x=240)
        candidates = [
            library_candidate(canonical, "lucide/home", NodeKind.COMPONENT),
            library_candidate(duplicate, "lucide/home copy", NodeKind.COMPONENT),
            library_candidate(instance, "lucide/home copy", NodeKind.INSTANCE),
            library_candidate(frame, "lucide/home", NodeKind.FRAME),
        ]

        result = consolidate_library_duplicates(document, candidates, LIBRARY)

        assert result.duplicates_removed == 2
        assert result.errors == 0
        assert result.message.startswith("Successfully consolidated 2 duplicate items")
        assert frame not in document
        assert instance not in document
        # Masters are never deleted
        assert canonical in document and duplicate in document
        repointed = document.children(library_id)[2]
        assert repointed.kind == NodeKind.INSTANCE
        assert repointed.main_component_id == canonical
        assert repointed.x == 160

    def test_consolidate_when_instance_of_canonical_then_kept(self, document, library_id, library_candidate):
        canonical = document.add_node(library_id, "star", NodeKind.COMPONENT, width=24, height=24)
        document.add_node(library_id, "star copy", NodeKind.COMPONENT, width=24, height=24)
        instance = document.add_node(library_id, "star", NodeKind.INSTANCE, width=24, height=24,
                                     main_component_id=canonical)
        candidates = [
            library_candidate(canonical, "star", NodeKind.COMPONENT),
            library_candidate(instance, "star", NodeKind.INSTANCE),
        ]

        result = consolidate_library_duplicates(document, candidates, LIBRARY)

        assert result.duplicates_removed == 0
        assert result.message == NOTHING_TO_DO_MESSAGE
        assert instance in document

    def test_consolidate_when_only_instances_then_repointed_to_first_master(
        self, document, page_id, library_id, library_candidate
    ):
        first_master = document.add_node(page_id, "bell-a", NodeKind.COMPONENT, width=24, height=24)
        second_master = document.add_node(page_id, "bell-b", NodeKind.COMPONENT, width=24, height=24)
        keep = document.add_node(library_id, "bell", NodeKind.INSTANCE, width=24, height=24,
                                 main_component_id=first_master)
        other = document.add_node(library_id, "bell", NodeKind.INSTANCE, width=24, height=24,
                                  main_component_id=second_master)
        candidates = [
            library_candidate(keep, "bell", NodeKind.INSTANCE),
            library_candidate(other, "bell", NodeKind.INSTANCE),
        ]

        result = consolidate_library_duplicates(document, candidates, LIBRARY)

        assert result.duplicates_removed == 1
        assert keep in document
        assert [c.main_component_id for c in document.children(library_id)] == [first_master] * 2

    def test_consolidate_when_only_frames_then_first_kept(self, document, library_id, library_candidate):
        frames = [
            document.add_node(library_id, "grid", NodeKind.FRAME, width=24, height=24)
            for _ in range(3)
        ]
        candidates = [library_candidate(f, "grid", NodeKind.FRAME) for f in frames]

        result = consolidate_library_duplicates(document, candidates, LIBRARY)

        assert result.duplicates_removed == 2
        assert [c.id for c in document.children(library_id)] == frames[:1]

    def test_consolidate_when_frame_already_gone_then_error_detail(
        self, document, library_id, library_candidate
    ):
        kept = document.add_node(library_id, "grid", NodeKind.FRAME, width=24, height=24)
        candidates = [
            library_candidate(kept, "grid", NodeKind.FRAME),
            library_candidate("404:1", "grid", NodeKind.FRAME),
        ]

        result = consolidate_library_duplicates(document, candidates, LIBRARY)

        assert result.error_details == ("Frame not found: grid",)
        assert result.duplicates_removed == 0

    def test_consolidate_when_no_icons_on_page_then_empty_message(self, document, make_candidate):
        result = consolidate_library_duplicates(document, [make_candidate("1:1", "home")], LIBRARY)

        assert result.message == EMPTY_LIBRARY_MESSAGE
        assert result.duplicates_removed == 0

    def test_consolidate_when_progress_given_then_below_ninety(self, document, library_id, library_candidate):
        frames = [
            document.add_node(library_id, name, NodeKind.FRAME, width=24, height=24)
            for name in ("grid", "grid", "list", "list")
        ]
        candidates = [
            library_candidate(f, name, NodeKind.FRAME)
            for f, name in zip(frames, ("grid", "grid", "list", "list"))
        ]
        events = []

        consolidate_library_duplicates(document, candidates, LIBRARY, progress=events.append)

        assert [e.percentage for e in events] == [0, 0, 45]
