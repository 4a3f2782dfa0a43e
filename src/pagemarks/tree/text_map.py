"""Character-offset map over a subtree's text content.

Pass 1 of every anchoring operation: walk the subtree in document order
and record where each text leaf's characters fall in the concatenated
text.  Offsets into ``TextMap.text`` can then be turned back into live
boundaries, and live boundaries into offsets.
"""

# Pattern: Functional Core (read-only walk over the tree)

from __future__ import annotations

from dataclasses import dataclass

from pagemarks.tree.nodes import ElementNode, Node, TextNode, iter_visible_nodes
from pagemarks.tree.range import Boundary, Span


@dataclass(frozen=True)
class TextSegment:
    """One text leaf's contribution to the character stream."""

    node: TextNode
    start: int  # Starting char index in the stream
    end: int  # Ending char index (exclusive)


class TextMap:
    """Document-order text of *root* with per-leaf offsets."""

    def __init__(self, root: ElementNode) -> None:
        self.root = root
        segments: list[TextSegment] = []
        parts: list[str] = []
        pos = 0
        for node in iter_visible_nodes(root):
            if isinstance(node, TextNode):
                segments.append(TextSegment(node, pos, pos + len(node.data)))
                parts.append(node.data)
                pos += len(node.data)
        self.segments = segments
        self.text = "".join(parts)

    def __len__(self) -> int:
        return len(self.text)

    def _offset_before(self, target: Node) -> int | None:
        total = 0
        for node in iter_visible_nodes(self.root):
            if node is target:
                return total
            if isinstance(node, TextNode):
                total += len(node.data)
        return None

    def offset_of(self, boundary: Boundary) -> int | None:
        """Character offset of *boundary* within this map, or ``None``.

        ``None`` means the boundary is outside ``root`` or inside a skipped
        (script/style) subtree.
        """
        node, offset = boundary.node, boundary.offset
        if isinstance(node, TextNode):
            base = self._offset_before(node)
            if base is None:
                return None
            return base + max(0, min(offset, len(node.data)))

        if not isinstance(node, ElementNode):
            return None
        if node is self.root:
            base = 0
        else:
            base = self._offset_before(node)
            if base is None:
                return None
        offset = max(0, min(offset, len(node.children)))
        return base + sum(len(child.text_content) for child in node.children[:offset])

    def boundary_at(self, offset: int, *, prefer_next: bool) -> Boundary | None:
        """Live boundary for a character offset.

        At a position shared by two leaves (end of one, start of the next),
        ``prefer_next`` picks the later leaf; span starts use it so the
        span does not begin with an empty slice of the previous leaf.
        Empty leaves are never chosen.
        """
        filled = [s for s in self.segments if s.end > s.start]
        if not filled or not 0 <= offset <= len(self.text):
            return None
        if prefer_next:
            for seg in filled:
                if seg.start <= offset < seg.end:
                    return Boundary(seg.node, offset - seg.start)
            last = filled[-1]
            return Boundary(last.node, offset - last.start)
        for seg in filled:
            if seg.start < offset <= seg.end:
                return Boundary(seg.node, offset - seg.start)
        first = filled[0]
        return Boundary(first.node, 0)

    def span(self, start: int, end: int) -> Span | None:
        """Live span covering ``text[start:end]``, or ``None`` if out of range."""
        if not 0 <= start <= end <= len(self.text):
            return None
        start_b = self.boundary_at(start, prefer_next=True)
        end_b = start_b if start == end else self.boundary_at(end, prefer_next=False)
        if start_b is None or end_b is None:
            return None
        return Span(start_b, end_b)

    def segments_in(self, start: int, end: int) -> list[tuple[TextSegment, int, int]]:
        """Leaves overlapping ``[start, end)`` with leaf-local sub-ranges.

        Each entry is ``(segment, local_start, local_end)``; empty overlaps
        are omitted.
        """
        hits: list[tuple[TextSegment, int, int]] = []
        for seg in self.segments:
            lo = max(start, seg.start)
            hi = min(end, seg.end)
            if lo < hi:
                hits.append((seg, lo - seg.start, hi - seg.start))
        return hits


def span_text(span: Span) -> str:
    """String value of a live span (empty when it cannot be mapped)."""
    ancestor = span.common_ancestor()
    if ancestor is None:
        return ""
    if isinstance(ancestor, TextNode):
        return ancestor.data[span.start.offset : span.end.offset]
    assert isinstance(ancestor, ElementNode)
    text_map = TextMap(ancestor)
    start = text_map.offset_of(span.start)
    end = text_map.offset_of(span.end)
    if start is None or end is None or end < start:
        return ""
    return text_map.text[start:end]
