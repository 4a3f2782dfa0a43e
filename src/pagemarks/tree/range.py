"""Live spans over the tree and the range mutations used for wrapping.

A :class:`Span` is the Python counterpart of a DOM ``Range``: two
boundary points, each either ``(TextNode, char_offset)`` or
``(ElementNode, child_index)``.  A user selection is just a span.
"""

from __future__ import annotations

from dataclasses import dataclass

from pagemarks.errors import TreeMutationError
from pagemarks.tree.nodes import ElementNode, Node, TextNode


@dataclass(frozen=True)
class Boundary:
    """One end of a span."""

    node: Node
    offset: int


@dataclass(frozen=True)
class Span:
    """A live range between two boundary points, start before end."""

    start: Boundary
    end: Boundary

    @classmethod
    def within(cls, node: TextNode, start: int, end: int) -> Span:
        """Span covering ``node.data[start:end]``."""
        return cls(Boundary(node, start), Boundary(node, end))

    @property
    def collapsed(self) -> bool:
        return self.start.node is self.end.node and self.start.offset == self.end.offset

    def common_ancestor(self) -> Node | None:
        """Deepest node containing both boundaries, or ``None`` if disjoint."""
        start_chain = [self.start.node, *self.start.node.ancestors()]
        end_chain = {id(n) for n in (self.end.node, *self.end.node.ancestors())}
        for node in start_chain:
            if id(node) in end_chain:
                return node
        return None


def _check_offset(node: Node, offset: int) -> None:
    if isinstance(node, TextNode):
        limit = len(node.data)
    elif isinstance(node, ElementNode):
        limit = len(node.children)
    else:
        msg = f"unsupported boundary node {node!r}"
        raise TreeMutationError(msg)
    if not 0 <= offset <= limit:
        msg = f"boundary offset {offset} outside 0..{limit}"
        raise TreeMutationError(msg)


def _container(node: Node) -> ElementNode | None:
    """Element whose children a boundary on *node* indexes into."""
    if isinstance(node, TextNode):
        return node.parent
    return node if isinstance(node, ElementNode) else None


def surround_contents(span: Span, wrapper: ElementNode) -> ElementNode:
    """Move the span's contents into *wrapper* and put it in their place.

    Only spans that select whole nodes or part of a single text node are
    accepted, as with DOM ``Range.surroundContents``.

    Raises:
        TreeMutationError: If the span partially selects a non-text node,
            is detached, or *wrapper* is not an empty, detached element.
    """
    if wrapper.parent is not None or wrapper.children:
        msg = "wrapper must be a detached, empty element"
        raise TreeMutationError(msg)
    start, end = span.start, span.end
    _check_offset(start.node, start.offset)
    _check_offset(end.node, end.offset)

    if start.node is end.node and isinstance(start.node, TextNode):
        text = start.node
        parent = text.parent
        if parent is None:
            msg = "cannot surround text in a detached node"
            raise TreeMutationError(msg)
        if start.offset > end.offset:
            msg = "span start is after span end"
            raise TreeMutationError(msg)
        text.split_text(end.offset)
        middle = text.split_text(start.offset)
        parent.replace_child(wrapper, middle)
        wrapper.append_child(middle)
        return wrapper

    if start.node is end.node and isinstance(start.node, ElementNode):
        parent = start.node
        if start.offset > end.offset:
            msg = "span start is after span end"
            raise TreeMutationError(msg)
        moved = parent.children[start.offset : end.offset]
        reference = (
            parent.children[end.offset] if end.offset < len(parent.children) else None
        )
        parent.insert_before(wrapper, reference)
        for node in moved:
            wrapper.append_child(node)
        return wrapper

    msg = "span partially selects a non-text node"
    raise TreeMutationError(msg)


def extract_contents(span: Span) -> tuple[list[Node], Boundary]:
    """Detach the span's contents.

    Returns the detached nodes, in order, and the boundary where they used
    to be, suitable for :func:`insert_node`.  Text nodes at either edge are
    split so only the covered characters are removed.  Both boundaries must
    share a parent (or be the same text node).

    Raises:
        TreeMutationError: If the span crosses element boundaries or is
            detached.
    """
    start, end = span.start, span.end
    _check_offset(start.node, start.offset)
    _check_offset(end.node, end.offset)

    parent = _container(start.node)
    end_parent = _container(end.node)
    if parent is None or end_parent is not parent:
        msg = "extracted span must start and end under the same parent"
        raise TreeMutationError(msg)

    # Split the end first so a shared text node keeps valid start offsets.
    if isinstance(end.node, TextNode):
        end.node.split_text(end.offset)
        last: Node | None = end.node
    else:
        last = parent.children[end.offset - 1] if end.offset > 0 else None

    if isinstance(start.node, TextNode):
        first = start.node.split_text(start.offset)
        if last is start.node:
            last = first
    else:
        first = (
            parent.children[start.offset]
            if start.offset < len(parent.children)
            else None
        )

    if first is None or last is None:
        point = len(parent.children) if first is None else first.index_in_parent()
        return [], Boundary(parent, point)

    first_idx = first.index_in_parent()
    last_idx = last.index_in_parent()
    if last_idx < first_idx:
        return [], Boundary(parent, first_idx)

    extracted = parent.children[first_idx : last_idx + 1]
    for node in extracted:
        parent.remove_child(node)
    return extracted, Boundary(parent, first_idx)


def insert_node(boundary: Boundary, node: Node) -> Node:
    """Insert *node* at *boundary*, splitting a text boundary if needed."""
    target = boundary.node
    _check_offset(target, boundary.offset)
    if isinstance(target, TextNode):
        parent = target.parent
        if parent is None:
            msg = "cannot insert next to a detached text node"
            raise TreeMutationError(msg)
        tail = target.split_text(boundary.offset)
        return parent.insert_before(node, tail)
    assert isinstance(target, ElementNode)
    children = target.children
    reference = children[boundary.offset] if boundary.offset < len(children) else None
    return target.insert_before(node, reference)
