"""Position resolution: anchor descriptor + current tree -> live span.

Three tiers, each tried only when the previous one is unavailable or
fails verification:

1. **Exact** -- replay the structural path and check that the stored
   offsets still slice out the captured text.
2. **Local** -- the path resolves but the content shifted: search the
   same container for every occurrence of the text and keep the one whose
   surroundings best match the stored context.
3. **Global** -- the path no longer resolves (or its element no longer
   holds the text): run the same scored search over the whole document,
   bounded by a scan limit.

When the text occurs nowhere the anchor is orphaned for this load and
``resolve_anchor`` returns ``None``.
"""

# Pattern: Functional Core (pure search over a snapshot of the text)

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from pagemarks.tree.text_map import TextMap

if TYPE_CHECKING:
    from pagemarks.anchoring.models import AnchorDescriptor
    from pagemarks.tree.nodes import ElementNode
    from pagemarks.tree.protocol import DocumentTree
    from pagemarks.tree.range import Span

logger = logging.getLogger(__name__)

# Upper bound on document characters scanned by the global tier
DEFAULT_SCAN_LIMIT = 2_000_000


class MatchTier(StrEnum):
    """Which resolution strategy produced a match."""

    EXACT = "exact"
    LOCAL = "local"
    GLOBAL = "global"


@dataclass(frozen=True)
class Resolution:
    """A successfully resolved anchor.

    Attributes:
        span: Live span over the current tree.
        tier: Strategy that matched.
        container: Element whose text was searched.
        start: Start offset of the match in ``container``'s text.
        end: End offset of the match (exclusive).
        score: Context-similarity score of the chosen occurrence
            (``None`` for exact replays, which are not scored).
    """

    span: Span
    tier: MatchTier
    container: ElementNode
    start: int
    end: int
    score: int | None = None


def context_score(
    haystack: str,
    start: int,
    end: int,
    context_before: str,
    context_after: str,
) -> int:
    """Score how well the text around ``haystack[start:end]`` matches context.

    The score is the number of trailing characters of ``context_before``
    equal to the characters immediately preceding *start*, plus the number
    of leading characters of ``context_after`` equal to those immediately
    following *end*.
    """
    before = 0
    limit = min(len(context_before), start)
    while (
        before < limit
        and context_before[-1 - before] == haystack[start - 1 - before]
    ):
        before += 1

    after = 0
    limit = min(len(context_after), len(haystack) - end)
    while after < limit and context_after[after] == haystack[end + after]:
        after += 1

    return before + after


def find_occurrences(
    haystack: str, needle: str, *, limit: int | None = None
) -> list[int]:
    """Start offsets of every occurrence of *needle*, overlaps included.

    With *limit*, only occurrences ending within the first *limit*
    characters are returned.
    """
    if not needle:
        return []
    window = haystack if limit is None else haystack[:limit]
    hits: list[int] = []
    idx = window.find(needle)
    while idx != -1:
        hits.append(idx)
        idx = window.find(needle, idx + 1)
    return hits


def best_occurrence(
    haystack: str, anchor: AnchorDescriptor, *, limit: int | None = None
) -> tuple[int, int] | None:
    """Pick the occurrence of ``anchor.text`` with the highest context score.

    Ties go to the earliest occurrence in document order, so the result
    is deterministic.

    Returns:
        ``(start_offset, score)`` or ``None`` if the text does not occur.
    """
    best: tuple[int, int] | None = None
    length = len(anchor.text)
    for idx in find_occurrences(haystack, anchor.text, limit=limit):
        score = context_score(
            haystack, idx, idx + length, anchor.context_before, anchor.context_after
        )
        # Strictly greater: an equal score never displaces an earlier hit
        if best is None or score > best[1]:
            best = (idx, score)
    return best


def _scored_match(
    root: ElementNode,
    anchor: AnchorDescriptor,
    tier: MatchTier,
    limit: int | None,
) -> Resolution | None:
    text_map = TextMap(root)
    hit = best_occurrence(text_map.text, anchor, limit=limit)
    if hit is None:
        return None
    start, score = hit
    end = start + len(anchor.text)
    span = text_map.span(start, end)
    if span is None:
        return None
    return Resolution(span, tier, root, start, end, score)


def resolve_anchor(
    document: DocumentTree,
    anchor: AnchorDescriptor,
    *,
    scan_limit: int = DEFAULT_SCAN_LIMIT,
) -> Resolution | None:
    """Map *anchor* onto the current tree.

    Returns:
        The resolution, or ``None`` when the anchor is orphaned.  Orphaning
        is an expected outcome on changed pages, not an error.
    """
    container = document.resolve_path(anchor.structural_path)

    if container is not None:
        text_map = TextMap(container)
        if text_map.text[anchor.start_offset : anchor.end_offset] == anchor.text:
            span = text_map.span(anchor.start_offset, anchor.end_offset)
            if span is not None:
                logger.debug("Anchor %r resolved by exact replay", anchor.text[:30])
                return Resolution(
                    span,
                    MatchTier.EXACT,
                    container,
                    anchor.start_offset,
                    anchor.end_offset,
                )

        local = _scored_match(container, anchor, MatchTier.LOCAL, None)
        if local is not None:
            logger.debug(
                "Anchor %r resolved by local search at %d (score %s)",
                anchor.text[:30],
                local.start,
                local.score,
            )
            return local

    result = _scored_match(document.search_root, anchor, MatchTier.GLOBAL, scan_limit)
    if result is None:
        logger.debug("Anchor %r is orphaned: text not found", anchor.text[:30])
        return None

    logger.debug(
        "Anchor %r resolved by global search at %d (score %s)",
        anchor.text[:30],
        result.start,
        result.score,
    )
    return result
