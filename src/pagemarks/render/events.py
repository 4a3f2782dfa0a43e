"""Delegated click handling for highlight markers.

A single listener sits at the document root.  An interaction on any node
is mapped back to an annotation by walking up to the innermost marker the
registry knows about, so markers never carry listeners of their own and
nothing needs detaching when they are unwrapped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pagemarks.tree.nodes import ElementNode

if TYPE_CHECKING:
    from collections.abc import Callable

    from pagemarks.render.registry import RenderRegistry
    from pagemarks.tree.nodes import Node

logger = logging.getLogger(__name__)


class HighlightClickDispatcher:
    """Routes clicks inside markers to ``listener(annotation_id, marker)``."""

    def __init__(self, registry: RenderRegistry) -> None:
        self._registry = registry
        self._listeners: list[Callable[[str, ElementNode], None]] = []

    def subscribe(
        self, listener: Callable[[str, ElementNode], None]
    ) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def marker_at(self, target: Node) -> tuple[str, ElementNode] | None:
        """Innermost rendered marker at or above *target*, with its owner."""
        node: Node | None = target
        while node is not None:
            if isinstance(node, ElementNode):
                owner = self._registry.owner_of(node)
                if owner is not None:
                    return owner, node
            node = node.parent
        return None

    def dispatch(self, target: Node) -> bool:
        """Handle a click on *target*; returns whether a marker was hit."""
        hit = self.marker_at(target)
        if hit is None:
            return False
        annotation_id, marker = hit
        for listener in list(self._listeners):
            try:
                listener(annotation_id, marker)
            except Exception:
                logger.exception(
                    "Highlight click listener failed for annotation %s", annotation_id
                )
        return True
