"""Position capture: live selection -> anchor descriptor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pagemarks.anchoring.models import DEFAULT_CONTEXT_LENGTH, AnchorDescriptor
from pagemarks.tree.nodes import SKIP_TAGS
from pagemarks.tree.text_map import TextMap

if TYPE_CHECKING:
    from pagemarks.tree.protocol import DocumentTree
    from pagemarks.tree.range import Span

logger = logging.getLogger(__name__)


def capture_selection(
    document: DocumentTree,
    selection: Span,
    *,
    context_length: int = DEFAULT_CONTEXT_LENGTH,
) -> AnchorDescriptor | None:
    """Describe *selection* so it can be found again after a reload.

    The container is the nearest addressable element enclosing both
    boundaries; offsets, text and context are all relative to that
    container's text content.  The result depends only on the selection
    and the tree, so capturing the same selection twice yields equal
    descriptors (and byte-identical JSON).

    Returns:
        The descriptor, or ``None`` when the selection cannot be anchored
        (collapsed, empty, detached, or inside a script/style subtree).
        Callers should ask the user to reselect; this never raises.
    """
    if selection.collapsed:
        logger.debug("Capture rejected: selection is collapsed")
        return None

    ancestor = selection.common_ancestor()
    if ancestor is None or not document.contains(ancestor):
        logger.debug("Capture rejected: selection is not inside the document")
        return None

    container = document.nearest_addressable(ancestor)
    if container is None or container.tag in SKIP_TAGS or container.is_inside_skipped():
        logger.debug("Capture rejected: no addressable container")
        return None

    path = document.path_of(container)
    if path is None:
        logger.debug("Capture rejected: container has no structural path")
        return None

    text_map = TextMap(container)
    start = text_map.offset_of(selection.start)
    end = text_map.offset_of(selection.end)
    if start is None or end is None:
        logger.debug("Capture rejected: boundary outside the visible text")
        return None
    if end <= start:
        logger.debug("Capture rejected: empty or reversed range (%d, %d)", start, end)
        return None

    full_text = text_map.text
    return AnchorDescriptor(
        structural_path=path,
        start_offset=start,
        end_offset=end,
        text=full_text[start:end],
        context_before=full_text[max(0, start - context_length) : start],
        context_after=full_text[end : end + context_length],
    )
