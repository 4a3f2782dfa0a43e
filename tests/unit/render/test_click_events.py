"""Tests for delegated highlight click dispatch."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pagemarks.render.events import HighlightClickDispatcher
from pagemarks.render.renderer import HighlightRenderer
from pagemarks.render.styles import style_for
from pagemarks.tree.nodes import ElementNode, TextNode
from tests.helpers.documents import build_document, el, select

if TYPE_CHECKING:
    import pytest


def _rendered():
    doc = build_document(el("p", "Hello ", el("b", "world"), ", foo"))
    renderer = HighlightRenderer(doc)
    dispatcher = HighlightClickDispatcher(renderer.registry)
    return doc, renderer, dispatcher


class TestHighlightClickDispatcher:
    """Mapping clicks back to annotations."""

    def test_click_inside_marker_notifies_listener(self) -> None:
        doc, renderer, dispatcher = _rendered()
        result = renderer.wrap(select(doc, "world"), "ann_1", style_for("yellow"))
        clicks: list[tuple[str, ElementNode]] = []
        dispatcher.subscribe(lambda aid, marker: clicks.append((aid, marker)))

        target = result.markers[0].children[0]
        assert isinstance(target, TextNode)
        hit = dispatcher.dispatch(target)

        assert hit
        assert clicks == [("ann_1", result.markers[0])]

    def test_click_outside_markers(self) -> None:
        doc, renderer, dispatcher = _rendered()
        renderer.wrap(select(doc, "world"), "ann_1", style_for("yellow"))
        clicks: list[str] = []
        dispatcher.subscribe(lambda aid, _marker: clicks.append(aid))

        assert not dispatcher.dispatch(doc.search_root)
        assert clicks == []

    def test_innermost_marker_wins(self) -> None:
        doc, renderer, dispatcher = _rendered()
        renderer.wrap(select(doc, "world"), "ann_a", style_for("yellow"))
        outer = renderer.wrap(select(doc, "Hello world"), "ann_b", style_for("blue"))

        hit = dispatcher.marker_at(outer.markers[1].children[0])

        assert hit is not None
        assert hit[0] == "ann_b"

    def test_unsubscribe_stops_notifications(self) -> None:
        doc, renderer, dispatcher = _rendered()
        result = renderer.wrap(select(doc, "foo"), "ann_1", style_for("yellow"))
        clicks: list[str] = []
        unsubscribe = dispatcher.subscribe(lambda aid, _m: clicks.append(aid))

        unsubscribe()
        unsubscribe()
        dispatcher.dispatch(result.markers[0])

        assert clicks == []

    def test_unwrapped_marker_no_longer_dispatches(self) -> None:
        doc, renderer, dispatcher = _rendered()
        result = renderer.wrap(select(doc, "foo"), "ann_1", style_for("yellow"))
        renderer.unwrap("ann_1")

        assert dispatcher.marker_at(result.markers[0]) is None

    def test_failing_listener_does_not_block_others(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        doc, renderer, dispatcher = _rendered()
        result = renderer.wrap(select(doc, "foo"), "ann_1", style_for("yellow"))
        clicks: list[str] = []

        def broken(_aid: str, _marker: ElementNode) -> None:
            msg = "listener bug"
            raise RuntimeError(msg)

        dispatcher.subscribe(broken)
        dispatcher.subscribe(lambda aid, _m: clicks.append(aid))

        with caplog.at_level(logging.ERROR, logger="pagemarks.render.events"):
            assert dispatcher.dispatch(result.markers[0])

        assert clicks == ["ann_1"]
        assert "listener failed" in caplog.text
