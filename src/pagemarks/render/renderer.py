"""Highlight rendering: wrap live spans in marker elements and unwrap them.

A span may cross element boundaries (``Hello <b>world</b>, foo``), so one
annotation can need several markers: one per contiguous text segment,
recorded in document order.  Unwrapping replaces each marker with its
text and normalises the parent, leaving a text model identical to the
one before wrapping.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pagemarks.errors import TreeMutationError
from pagemarks.render.registry import RenderRegistry
from pagemarks.tree.nodes import ElementNode, TextNode
from pagemarks.tree.range import (
    Span,
    extract_contents,
    insert_node,
    surround_contents,
)
from pagemarks.tree.text_map import TextMap

if TYPE_CHECKING:
    from pagemarks.render.styles import HighlightStyle
    from pagemarks.tree.nodes import Document

logger = logging.getLogger(__name__)

DEFAULT_MARKER_TAG = "mark"
DEFAULT_MARKER_CLASS = "pagemarks-highlight"


@dataclass(frozen=True)
class SegmentFailure:
    """A text segment that could not be wrapped by either strategy."""

    text: str
    reason: str


@dataclass(frozen=True)
class WrapResult:
    """Outcome of :meth:`HighlightRenderer.wrap`.

    On failure ``markers`` is empty and nothing was left in the tree.
    """

    annotation_id: str
    markers: tuple[ElementNode, ...] = ()
    failures: tuple[SegmentFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return bool(self.markers) and not self.failures

    @property
    def text(self) -> str:
        return "".join(m.text_content for m in self.markers)


class HighlightRenderer:
    """Inserts and removes highlight markers in a :class:`Document`.

    Marker identity is tracked in a :class:`RenderRegistry`; the registry
    is the only record of what was rendered, so deletion always removes
    every marker of an annotation.
    """

    def __init__(
        self,
        document: Document,
        *,
        registry: RenderRegistry | None = None,
        marker_tag: str = DEFAULT_MARKER_TAG,
        marker_class: str = DEFAULT_MARKER_CLASS,
    ) -> None:
        self.document = document
        self.registry = registry if registry is not None else RenderRegistry()
        self.marker_tag = marker_tag
        self.marker_class = marker_class

    # -- markers -----------------------------------------------------------

    def create_marker(self, annotation_id: str, style: HighlightStyle) -> ElementNode:
        return ElementNode(
            self.marker_tag,
            {
                "class": self.marker_class,
                self.document.marker_attribute: annotation_id,
                "style": style.css(),
            },
        )

    def is_rendered(self, annotation_id: str) -> bool:
        return annotation_id in self.registry

    def markers_for(self, annotation_id: str) -> tuple[ElementNode, ...]:
        return self.registry.get(annotation_id)

    # -- wrap --------------------------------------------------------------

    def _pieces(self, span: Span) -> list[tuple[TextNode, int, int]]:
        """Text leaves covered by *span*, computed from the live tree.

        Each piece is ``(leaf, local_start, local_end)`` in document order:
        the first leaf from the span start to its end, interior leaves
        whole, the last leaf from 0 to the span end.  Empty slices are
        dropped.
        """
        start, end = span.start, span.end
        if start.node is end.node and isinstance(start.node, TextNode):
            if start.offset < end.offset:
                return [(start.node, start.offset, end.offset)]
            return []

        ancestor = span.common_ancestor()
        if ancestor is None:
            return []
        if isinstance(ancestor, TextNode):
            ancestor = ancestor.parent
        if not isinstance(ancestor, ElementNode):
            return []

        text_map = TextMap(ancestor)
        lo = text_map.offset_of(start)
        hi = text_map.offset_of(end)
        if lo is None or hi is None or hi <= lo:
            return []
        return [(seg.node, a, b) for seg, a, b in text_map.segments_in(lo, hi)]

    def _extract_and_reinsert(
        self, piece: Span, marker: ElementNode
    ) -> ElementNode:
        nodes, point = extract_contents(piece)
        for node in nodes:
            marker.append_child(node)
        try:
            insert_node(point, marker)
        except TreeMutationError:
            # Put the detached content back where it came from
            parent = point.node
            assert isinstance(parent, ElementNode)
            children = parent.children
            reference = children[point.offset] if point.offset < len(children) else None
            for node in list(marker.children):
                parent.insert_before(node, reference)
            raise
        return marker

    def _wrap_piece(
        self,
        leaf: TextNode,
        start: int,
        end: int,
        annotation_id: str,
        style: HighlightStyle,
    ) -> ElementNode | SegmentFailure:
        piece = Span.within(leaf, start, end)
        try:
            return surround_contents(piece, self.create_marker(annotation_id, style))
        except TreeMutationError as exc:
            logger.debug("In-place wrap rejected (%s); extracting instead", exc)

        try:
            return self._extract_and_reinsert(
                piece, self.create_marker(annotation_id, style)
            )
        except TreeMutationError as exc:
            logger.warning(
                "Could not wrap segment %r of annotation %s: %s",
                leaf.data[start:end],
                annotation_id,
                exc,
            )
            return SegmentFailure(text=leaf.data[start:end], reason=str(exc))

    def wrap(
        self, span: Span, annotation_id: str, style: HighlightStyle
    ) -> WrapResult:
        """Wrap every text segment of *span* in a marker for *annotation_id*.

        Leaves are recomputed from the live span on every call, so markers
        inserted earlier in the same pass are never wrapped twice.  If any
        segment cannot be wrapped, the markers already inserted by this
        call are removed again and the failure is reported in the result;
        nothing is raised and the registry is left untouched.  Any other
        exception also removes those markers before it propagates.

        Wrapping an id that is already rendered returns its markers as-is.
        """
        if annotation_id in self.registry:
            logger.debug("Annotation %s already rendered; not wrapping", annotation_id)
            return WrapResult(annotation_id, self.registry.get(annotation_id))

        pieces = self._pieces(span)
        if not pieces:
            failure = SegmentFailure(text="", reason="span covers no text")
            return WrapResult(annotation_id, failures=(failure,))

        markers: list[ElementNode] = []
        try:
            for leaf, start, end in pieces:
                outcome = self._wrap_piece(leaf, start, end, annotation_id, style)
                if isinstance(outcome, SegmentFailure):
                    self._rollback(markers)
                    return WrapResult(annotation_id, failures=(outcome,))
                markers.append(outcome)
        except Exception:
            logger.exception("Unexpected error wrapping annotation %s", annotation_id)
            self._rollback(markers)
            raise

        self.registry.record(annotation_id, markers)
        logger.debug(
            "Rendered annotation %s with %d marker(s)", annotation_id, len(markers)
        )
        return WrapResult(annotation_id, tuple(markers))

    # -- unwrap ------------------------------------------------------------

    def _rollback(self, markers: list[ElementNode]) -> None:
        for marker in reversed(markers):
            self._remove_marker(marker)

    def _remove_marker(self, marker: ElementNode) -> bool:
        parent = marker.parent
        if parent is None:
            # The host page already removed it
            return False
        if all(isinstance(child, TextNode) for child in marker.children):
            parent.replace_child(TextNode(marker.text_content), marker)
        else:
            # Nested markers of other annotations survive the unwrap
            for child in list(marker.children):
                parent.insert_before(child, marker)
            parent.remove_child(marker)
        parent.normalize()
        return True

    def unwrap(self, annotation_id: str) -> int:
        """Remove every marker recorded for *annotation_id*.

        Returns:
            Number of markers removed from the tree (0 for unknown ids).
        """
        markers = self.registry.pop(annotation_id)
        removed = sum(1 for marker in markers if self._remove_marker(marker))
        if markers:
            logger.debug(
                "Removed %d marker(s) of annotation %s", removed, annotation_id
            )
        return removed

    def restyle(self, annotation_id: str, style: HighlightStyle) -> int:
        """Apply *style* to the live markers of *annotation_id*."""
        markers = self.registry.get(annotation_id)
        for marker in markers:
            marker.set("style", style.css())
        return len(markers)
