"""In-memory document tree: elements, text leaves, and the addressable root.

The tree mirrors the subset of the browser DOM that anchoring and
highlighting need: ordered children, per-node text content, structural
addressing, and the mutation primitives used to insert and remove
highlight markers.  Nodes compare by identity.
"""

# Pattern: Imperative Shell (mutable tree, mutation primitives)

from __future__ import annotations

from typing import TYPE_CHECKING

from pagemarks.errors import TreeMutationError

if TYPE_CHECKING:
    from collections.abc import Iterator

# Subtrees whose text is not part of the visible text model.
SKIP_TAGS = frozenset(("script", "style", "noscript", "template"))

DEFAULT_MARKER_ATTRIBUTE = "data-annotation-id"


class Node:
    """Base class for tree nodes."""

    __slots__ = ("parent",)

    def __init__(self) -> None:
        self.parent: ElementNode | None = None

    @property
    def text_content(self) -> str:
        raise NotImplementedError

    def ancestors(self) -> Iterator[ElementNode]:
        """Yield ancestors from the parent up to the topmost node."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def index_in_parent(self) -> int:
        """Position of this node among its parent's children.

        Raises:
            TreeMutationError: If the node is detached.
        """
        if self.parent is None:
            msg = "node has no parent"
            raise TreeMutationError(msg)
        for i, child in enumerate(self.parent.children):
            if child is self:
                return i
        msg = "node is not listed among its parent's children"
        raise TreeMutationError(msg)

    def is_inside_skipped(self) -> bool:
        """True when the node sits inside a script/style-like subtree."""
        return any(a.tag in SKIP_TAGS for a in self.ancestors())


class TextNode(Node):
    """A text-bearing leaf."""

    __slots__ = ("data",)

    def __init__(self, data: str = "") -> None:
        super().__init__()
        self.data = data

    def __repr__(self) -> str:
        return f"TextNode({self.data!r})"

    @property
    def text_content(self) -> str:
        return self.data

    def __len__(self) -> int:
        return len(self.data)

    def split_text(self, offset: int) -> TextNode:
        """Split at *offset*; this node keeps the head, the tail is returned.

        The tail is inserted right after this node when it has a parent,
        matching DOM ``Text.splitText``.
        """
        if not 0 <= offset <= len(self.data):
            msg = f"split offset {offset} outside text of length {len(self.data)}"
            raise TreeMutationError(msg)
        tail = TextNode(self.data[offset:])
        self.data = self.data[:offset]
        if self.parent is not None:
            parent = self.parent
            idx = self.index_in_parent()
            tail.parent = parent
            parent.children.insert(idx + 1, tail)
        return tail


class ElementNode(Node):
    """An element with a tag, attributes and ordered children."""

    __slots__ = ("attrs", "children", "tag")

    def __init__(
        self,
        tag: str,
        attrs: dict[str, str] | None = None,
        children: list[Node] | None = None,
    ) -> None:
        super().__init__()
        self.tag = tag
        self.attrs: dict[str, str] = dict(attrs or {})
        self.children: list[Node] = []
        for child in children or ():
            self.append_child(child)

    def __repr__(self) -> str:
        return f"ElementNode({self.tag!r}, {len(self.children)} children)"

    @property
    def text_content(self) -> str:
        if self.tag in SKIP_TAGS:
            return ""
        return "".join(
            node.data for node in iter_visible_nodes(self) if isinstance(node, TextNode)
        )

    @property
    def element_children(self) -> list[ElementNode]:
        return [c for c in self.children if isinstance(c, ElementNode)]

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attrs.get(name, default)

    def set(self, name: str, value: str) -> None:
        self.attrs[name] = value

    # -- mutation ----------------------------------------------------------

    def _adopt(self, node: Node) -> None:
        if node is self or any(a is node for a in self.ancestors()):
            msg = "cannot insert a node into its own subtree"
            raise TreeMutationError(msg)
        if node.parent is not None:
            node.parent.remove_child(node)
        node.parent = self

    def append_child(self, node: Node) -> Node:
        self._adopt(node)
        self.children.append(node)
        return node

    def insert_before(self, node: Node, reference: Node | None) -> Node:
        """Insert *node* before *reference* (append when it is ``None``)."""
        if reference is None:
            return self.append_child(node)
        if reference.parent is not self:
            msg = "reference node is not a child of this element"
            raise TreeMutationError(msg)
        self._adopt(node)
        self.children.insert(reference.index_in_parent(), node)
        return node

    def remove_child(self, node: Node) -> Node:
        if node.parent is not self:
            msg = "node is not a child of this element"
            raise TreeMutationError(msg)
        del self.children[node.index_in_parent()]
        node.parent = None
        return node

    def replace_child(self, new: Node, old: Node) -> Node:
        """Put *new* where *old* was; returns *old*, now detached."""
        if old.parent is not self:
            msg = "node to replace is not a child of this element"
            raise TreeMutationError(msg)
        if new is old:
            return old
        self._adopt(new)
        idx = old.index_in_parent()
        self.children[idx] = new
        old.parent = None
        return old

    def normalize(self) -> None:
        """Coalesce adjacent text children and drop empty ones, recursively."""
        merged: list[Node] = []
        for child in self.children:
            if isinstance(child, TextNode):
                if not child.data:
                    child.parent = None
                    continue
                if merged and isinstance(merged[-1], TextNode):
                    merged[-1].data += child.data
                    child.parent = None
                    continue
            elif isinstance(child, ElementNode):
                child.normalize()
            merged.append(child)
        self.children = merged

    def iter_descendants(self) -> Iterator[Node]:
        """Pre-order walk of every descendant (skipped subtrees included)."""
        for child in self.children:
            yield child
            if isinstance(child, ElementNode):
                yield from child.iter_descendants()


def iter_visible_nodes(root: Node) -> Iterator[Node]:
    """Pre-order walk over the visible text model rooted at *root*.

    Yields elements and text nodes in document order, never entering
    script/style-like subtrees (those elements are not yielded either).
    *root* itself is not yielded.
    """
    if not isinstance(root, ElementNode):
        return
    for child in root.children:
        if isinstance(child, ElementNode):
            if child.tag in SKIP_TAGS:
                continue
            yield child
            yield from iter_visible_nodes(child)
        else:
            yield child


class Document(ElementNode):
    """The addressable document root.

    Structural paths count element children only, and highlight markers
    (elements carrying ``marker_attribute``) are transparent: their
    element children are addressed as if they belonged to the marker's
    parent.  Paths therefore stay stable while highlights come and go.
    """

    __slots__ = ("marker_attribute",)

    def __init__(
        self,
        children: list[Node] | None = None,
        *,
        marker_attribute: str = DEFAULT_MARKER_ATTRIBUTE,
    ) -> None:
        super().__init__("#document", children=children)
        self.marker_attribute = marker_attribute

    @property
    def body(self) -> ElementNode | None:
        for node in self.iter_descendants():
            if isinstance(node, ElementNode) and node.tag == "body":
                return node
        return None

    @property
    def search_root(self) -> ElementNode:
        """Root of the document-wide text used for global search."""
        return self.body or self

    def is_marker(self, node: Node) -> bool:
        return isinstance(node, ElementNode) and self.marker_attribute in node.attrs

    def contains(self, node: Node) -> bool:
        return node is self or any(a is self for a in node.ancestors())

    def _addressable_children(self, element: ElementNode) -> Iterator[ElementNode]:
        for child in element.children:
            if not isinstance(child, ElementNode):
                continue
            if self.is_marker(child):
                yield from self._addressable_children(child)
            else:
                yield child

    def _addressable_parent(self, node: Node) -> ElementNode | None:
        parent = node.parent
        while parent is not None and self.is_marker(parent):
            parent = parent.parent
        return parent

    def path_of(self, node: Node) -> tuple[int, ...] | None:
        """Structural path from this root to *node*, or ``None``.

        Only non-marker elements attached to this document are addressable.
        """
        if not isinstance(node, ElementNode) or self.is_marker(node):
            return None
        if not self.contains(node):
            return None

        steps: list[int] = []
        current: ElementNode = node
        while current is not self:
            parent = self._addressable_parent(current)
            if parent is None:
                return None
            for i, sibling in enumerate(self._addressable_children(parent)):
                if sibling is current:
                    steps.append(i)
                    break
            else:
                return None
            current = parent
        steps.reverse()
        return tuple(steps)

    def resolve_path(self, path: tuple[int, ...] | list[int]) -> ElementNode | None:
        """Follow *path* from this root; ``None`` when any step is missing."""
        current: ElementNode = self
        for step in path:
            if step < 0:
                return None
            for i, child in enumerate(self._addressable_children(current)):
                if i == step:
                    current = child
                    break
            else:
                return None
        return current

    def nearest_addressable(self, node: Node) -> ElementNode | None:
        """Closest non-marker element at or above *node*."""
        current: Node | None = node
        while current is not None:
            if isinstance(current, ElementNode) and not self.is_marker(current):
                return current
            current = current.parent
        return None
