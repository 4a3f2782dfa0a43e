"""Tests for the in-memory document tree."""

from __future__ import annotations

import pytest

from pagemarks.errors import TreeMutationError
from pagemarks.tree.nodes import (
    Document,
    ElementNode,
    TextNode,
    iter_visible_nodes,
)
from tests.helpers.documents import build_document, el


class TestTextNode:
    """Text leaf behaviour."""

    def test_split_keeps_head_and_inserts_tail(self) -> None:
        text = TextNode("Hello")
        p = el("p", text)

        tail = text.split_text(2)

        assert text.data == "He"
        assert tail.data == "llo"
        assert p.children == [text, tail]
        assert tail.parent is p

    def test_split_at_end_yields_empty_tail(self) -> None:
        text = TextNode("abc")
        el("p", text)
        tail = text.split_text(3)
        assert tail.data == ""
        assert text.data == "abc"

    def test_split_detached_node_returns_tail_only(self) -> None:
        text = TextNode("abc")
        tail = text.split_text(1)
        assert tail.parent is None
        assert text.data == "a"

    def test_split_out_of_range_raises(self) -> None:
        with pytest.raises(TreeMutationError):
            TextNode("abc").split_text(4)


class TestElementNode:
    """Mutation primitives and text content."""

    def test_text_content_skips_script_and_style(self) -> None:
        div = el("div", "a", el("script", "var x;"), el("b", "b"), el("style", "p{}"))
        assert div.text_content == "ab"

    def test_skipped_element_has_no_text(self) -> None:
        assert el("script", "var x;").text_content == ""

    def test_append_moves_node_from_old_parent(self) -> None:
        child = el("b", "x")
        first = el("p", child)
        second = el("p")

        second.append_child(child)

        assert first.children == []
        assert second.children == [child]
        assert child.parent is second

    def test_cannot_insert_ancestor_into_descendant(self) -> None:
        inner = el("span")
        outer = el("div", inner)
        with pytest.raises(TreeMutationError):
            inner.append_child(outer)

    def test_insert_before_reference(self) -> None:
        a, c = TextNode("a"), TextNode("c")
        p = el("p", a, c)
        b = TextNode("b")

        p.insert_before(b, c)

        assert [n.text_content for n in p.children] == ["a", "b", "c"]

    def test_insert_before_none_appends(self) -> None:
        p = el("p", "a")
        p.insert_before(TextNode("b"), None)
        assert p.text_content == "ab"

    def test_insert_before_foreign_reference_raises(self) -> None:
        p = el("p")
        with pytest.raises(TreeMutationError):
            p.insert_before(TextNode("x"), TextNode("y"))

    def test_replace_child_detaches_old(self) -> None:
        old = TextNode("old")
        p = el("p", "a", old, "c")
        new = el("mark")

        returned = p.replace_child(new, old)

        assert returned is old
        assert old.parent is None
        assert p.children[1] is new
        assert new.parent is p

    def test_remove_child_of_other_parent_raises(self) -> None:
        p = el("p")
        with pytest.raises(TreeMutationError):
            p.remove_child(TextNode("x"))

    def test_normalize_merges_and_drops_empty_text(self) -> None:
        inner = el("i", "c", "d")
        p = el("p", "a", "", "b", inner, "")

        p.normalize()

        assert len(p.children) == 2
        assert isinstance(p.children[0], TextNode)
        assert p.children[0].data == "ab"
        assert p.children[1] is inner
        assert len(inner.children) == 1
        assert p.text_content == "abcd"

    def test_index_in_parent_requires_parent(self) -> None:
        with pytest.raises(TreeMutationError):
            TextNode("x").index_in_parent()

    def test_is_inside_skipped(self) -> None:
        text = TextNode("x")
        el("noscript", el("p", text))
        assert text.is_inside_skipped()
        assert not TextNode("y").is_inside_skipped()


class TestIterVisibleNodes:
    """Document-order walk over the visible text model."""

    def test_pre_order_without_skipped_subtrees(self) -> None:
        b = el("b", "2")
        script = el("script", "no")
        root = el("div", "1", b, script, "3")

        walked = list(iter_visible_nodes(root))

        assert root not in walked
        assert script not in walked
        assert [n.text_content for n in walked] == ["1", "2", "2", "3"]
        assert walked[1] is b

    def test_text_root_yields_nothing(self) -> None:
        assert list(iter_visible_nodes(TextNode("x"))) == []


class TestDocumentAddressing:
    """Structural paths with transparent markers."""

    def test_path_counts_element_children_only(self) -> None:
        target = el("p", "b")
        doc = build_document("text", el("p", "a"), "more", el("div", target))

        assert doc.path_of(target) == (0, 1, 1, 0)
        assert doc.resolve_path((0, 1, 1, 0)) is target

    def test_markers_are_transparent(self) -> None:
        bold = el("b", "y")
        marker = el("mark", bold, data_annotation_id="ann_1")
        after = el("i", "z")
        doc = build_document(el("p", "x", marker, after))

        assert doc.is_marker(marker)
        assert doc.path_of(bold) == (0, 1, 0, 0)
        assert doc.path_of(after) == (0, 1, 0, 1)
        assert doc.resolve_path((0, 1, 0, 0)) is bold
        assert doc.path_of(marker) is None

    def test_path_identical_with_and_without_markers(self) -> None:
        plain_target = el("em", "w")
        plain = build_document(el("p", el("b", "v"), plain_target))

        marked_target = el("em", "w")
        marked = build_document(
            el(
                "p",
                el("mark", el("b", "v"), data_annotation_id="ann_1"),
                marked_target,
            )
        )

        assert plain.path_of(plain_target) == marked.path_of(marked_target)

    def test_resolve_missing_step_returns_none(self) -> None:
        doc = build_document(el("p", "a"))
        assert doc.resolve_path((0, 1, 5)) is None
        assert doc.resolve_path((0, -1)) is None

    def test_empty_path_is_the_document(self) -> None:
        doc = build_document(el("p", "a"))
        assert doc.resolve_path(()) is doc
        assert doc.path_of(doc) == ()

    def test_detached_node_has_no_path(self) -> None:
        doc = build_document(el("p", "a"))
        assert doc.path_of(el("p")) is None
        assert not doc.contains(el("p"))

    def test_nearest_addressable_skips_markers(self) -> None:
        text = TextNode("y")
        p = el("p", "x", el("mark", text, data_annotation_id="ann_1"))
        doc = build_document(p)
        assert doc.nearest_addressable(text) is p

    def test_search_root_is_body(self) -> None:
        doc = build_document(el("p", "a"))
        assert doc.body is not None
        assert doc.search_root is doc.body

    def test_search_root_without_body_is_document(self) -> None:
        doc = Document([el("p", "a")])
        assert doc.body is None
        assert doc.search_root is doc

    def test_custom_marker_attribute(self) -> None:
        marker = el("mark", "x", data_hl="1")
        doc = Document([el("p", marker)], marker_attribute="data-hl")
        assert doc.is_marker(marker)
        assert not doc.is_marker(ElementNode("mark", {"data-annotation-id": "1"}))
