"""
Unit Tests for InMemoryDocument

Tests for the arena-backed DocumentAccess implementation.
"""

import pytest

from icon_toolkit.core.models import NodeKind, Paint
from icon_toolkit.document.access import (
    CloneFailureError,
    DocumentError,
    ImportFailureError,
    InvalidParentError,
    NodeInaccessibleError,
    NodeNotFoundError,
)
from icon_toolkit.document.memory import InMemoryDocument


class TestBuilding:
    """Tests for add_page / add_node."""

    def test_add_page_when_first_then_becomes_current(self):
        doc = InMemoryDocument("D")

        page = doc.add_page("Page 1")
        doc.add_page("Page 2")

        assert doc.current_page_id == page

    def test_add_node_when_parent_not_container_then_raises_error(self, document, page_id):
        vector = document.add_node(page_id, "v", NodeKind.VECTOR, width=4, height=4)

        with pytest.raises(InvalidParentError):
            document.add_node(vector, "child", NodeKind.VECTOR)

    def test_add_node_when_duplicate_id_then_raises_error(self, document, page_id):
        document.add_node(page_id, "a", NodeKind.FRAME, node_id="9:9")

        with pytest.raises(ValueError, match="Duplicate node id"):
            document.add_node(page_id, "b", NodeKind.FRAME, node_id="9:9")


class TestReads:
    """Tests for read operations."""

    def test_get_node_when_missing_then_raises_not_found(self, document):
        with pytest.raises(NodeNotFoundError):
            document.get_node("404:1")

    def test_get_node_when_inaccessible_then_raises_inaccessible(self, document, page_id):
        node = document.add_node(page_id, "remote", NodeKind.VECTOR, inaccessible=True)

        with pytest.raises(NodeInaccessibleError):
            document.get_node(node)
        assert document.try_get_node(node) is None

    def test_ancestors_when_nested_then_nearest_first_ending_at_page(self, document, page_id):
        outer = document.add_node(page_id, "outer", NodeKind.FRAME)
        inner = document.add_node(outer, "inner", NodeKind.GROUP)
        leaf = document.add_node(inner, "leaf", NodeKind.VECTOR)

        names = [a.name for a in document.ancestors(leaf)]

        assert names == ["inner", "outer", "Page 1"]

    def test_find_all_when_kinds_given_then_preorder_filtered(self, document, page_id):
        frame = document.add_node(page_id, "f", NodeKind.FRAME)
        document.add_node(frame, "v1", NodeKind.VECTOR)
        document.add_node(page_id, "v2", NodeKind.VECTOR)
        document.add_node(page_id, "hidden", NodeKind.VECTOR, inaccessible=True)

        names = [n.name for n in document.find_all(page_id, [NodeKind.VECTOR])]

        assert names == ["v1", "v2"]

    def test_resolve_main_component_when_master_missing_then_none(self, document, page_id):
        instance = document.add_node(page_id, "i", NodeKind.INSTANCE, main_component_id="77:1")

        assert document.resolve_main_component(instance) is None

    def test_index_in_parent_when_third_child_then_two(self, document, page_id):
        for name in ("a", "b", "c"):
            last = document.add_node(page_id, name, NodeKind.VECTOR)

        assert document.index_in_parent(last) == 2
        assert document.page_of(last).id == page_id


class TestMutations:
    """Tests for mutation operations."""

    def test_clone_subtree_when_called_then_detached_copy_with_new_ids(self, document, page_id):
        frame = document.add_node(page_id, "f", NodeKind.FRAME, width=24, height=24,
                                  fills=[Paint("SOLID")])
        document.add_node(frame, "v", NodeKind.VECTOR, width=20, height=20)

        clone = document.clone_subtree(frame)

        assert clone.id != frame
        assert clone.parent_id is None
        assert clone.fills == (Paint("SOLID"),)
        assert len(clone.child_ids) == 1
        assert clone.child_ids[0] != document.get_node(frame).child_ids[0]
        assert len(document.children(page_id)) == 1

    def test_clone_subtree_when_page_then_raises_error(self, document, page_id):
        with pytest.raises(CloneFailureError):
            document.clone_subtree(page_id)

    def test_insert_at_index_when_moved_then_old_parent_updated(self, document, page_id):
        a = document.add_node(page_id, "a", NodeKind.FRAME)
        b = document.add_node(page_id, "b", NodeKind.VECTOR)

        document.insert_at_index(a, 0, b)

        assert document.get_node(page_id).child_ids == (a,)
        assert document.get_node(b).parent_id == a

    def test_insert_at_index_when_into_own_subtree_then_raises_error(self, document, page_id):
        outer = document.add_node(page_id, "outer", NodeKind.FRAME)
        inner = document.add_node(outer, "inner", NodeKind.FRAME)

        with pytest.raises(InvalidParentError, match="own subtree"):
            document.insert_at_index(inner, 0, outer)

    def test_insert_at_index_when_index_too_large_then_appended(self, document, page_id):
        a = document.add_node(page_id, "a", NodeKind.VECTOR)
        clone = document.clone_subtree(a)

        document.insert_at_index(page_id, 99, clone.id)

        assert document.get_node(page_id).child_ids == (a, clone.id)

    def test_delete_node_when_subtree_then_descendants_removed(self, document, page_id):
        frame = document.add_node(page_id, "f", NodeKind.FRAME)
        child = document.add_node(frame, "v", NodeKind.VECTOR)

        document.delete_node(frame)

        assert frame not in document
        assert child not in document
        assert document.get_node(page_id).child_ids == ()

    def test_create_reference_instance_when_not_component_then_raises_error(self, document, page_id):
        frame = document.add_node(page_id, "f", NodeKind.FRAME)

        with pytest.raises(DocumentError, match="Cannot instantiate"):
            document.create_reference_instance(frame)

    def test_create_reference_instance_when_component_then_copies_size(self, document, page_id):
        master = document.add_node(page_id, "m", NodeKind.COMPONENT, width=24, height=24)
        document.add_node(master, "p", NodeKind.VECTOR, width=20, height=20)

        instance = document.create_reference_instance(master)

        assert instance.kind == NodeKind.INSTANCE
        assert instance.main_component_id == master
        assert instance.bounding_box.width == 24
        assert len(instance.child_ids) == 1

    def test_create_master_container_when_not_page_then_raises_error(self, document, page_id):
        frame = document.add_node(page_id, "f", NodeKind.FRAME)

        with pytest.raises(InvalidParentError):
            document.create_master_container("m", frame)

    def test_update_node_when_unsupported_attribute_then_raises_error(self, document, page_id):
        node = document.add_node(page_id, "v", NodeKind.VECTOR)

        with pytest.raises(ValueError, match="Unsupported node attributes"):
            document.update_node(node, kind=NodeKind.FRAME)

    def test_delete_node_when_current_page_then_current_moves(self, document, page_id):
        second = document.add_page("Page 2")

        document.delete_node(page_id)

        assert document.current_page_id == second


class TestImportSubtree:
    """Tests for import_subtree()."""

    def test_import_when_nested_then_detached_with_fresh_ids(self, document):
        data = {
            "id": "9:1",
            "name": "home",
            "type": "GROUP",
            "absoluteBoundingBox": {"width": 24, "height": 24},
            "children": [{"id": "9:2", "name": "roof", "type": "VECTOR", "fills": [{"type": "SOLID"}]}],
        }

        root = document.import_subtree(data)

        assert root.parent_id is None
        assert root.id != "9:1"
        assert "9:2" not in document
        child = document.children(root.id)[0]
        assert child.name == "roof"
        assert child.fills == (Paint("SOLID"),)

    @pytest.mark.parametrize("data", [
        {"type": "VECTOR", "children": [{"type": "VECTOR"}]},
        {"type": "PAGE"},
        {"type": "WIDGET"},
        {"type": "VECTOR", "absoluteBoundingBox": {"width": 24}},
    ])
    def test_import_when_invalid_then_raises_and_nothing_built(self, document, data):
        node_count = len(document)

        with pytest.raises(ImportFailureError):
            document.import_subtree(data)

        assert len(document) == node_count
