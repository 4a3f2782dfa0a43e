"""Protocol defining the addressable document interface.

Anchoring only needs structural addressing and a notion of which
elements are highlight markers.  ``Document`` implements this protocol;
other tree bindings can be substituted as long as they expose the same
node model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pagemarks.tree.nodes import ElementNode, Node


class DocumentTree(Protocol):
    """An ordered, addressable tree with per-node text content."""

    marker_attribute: str

    @property
    def search_root(self) -> ElementNode:
        """Element whose text is scanned by document-wide search."""
        ...

    def is_marker(self, node: Node) -> bool:
        """True when *node* is a highlight marker element."""
        ...

    def contains(self, node: Node) -> bool:
        """True when *node* is attached to this tree."""
        ...

    def path_of(self, node: Node) -> tuple[int, ...] | None:
        """Structural path from the root to *node*, or ``None``."""
        ...

    def resolve_path(self, path: tuple[int, ...] | list[int]) -> ElementNode | None:
        """Element addressed by *path*, or ``None`` if it no longer exists."""
        ...

    def nearest_addressable(self, node: Node) -> ElementNode | None:
        """Closest non-marker element at or above *node*."""
        ...
