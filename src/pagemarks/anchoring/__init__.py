"""Anchoring: capture live selections and resolve them on later loads."""

from pagemarks.anchoring.capture import capture_selection
from pagemarks.anchoring.models import DEFAULT_CONTEXT_LENGTH, AnchorDescriptor
from pagemarks.anchoring.resolve import (
    DEFAULT_SCAN_LIMIT,
    MatchTier,
    Resolution,
    best_occurrence,
    context_score,
    find_occurrences,
    resolve_anchor,
)

__all__ = [
    "DEFAULT_CONTEXT_LENGTH",
    "DEFAULT_SCAN_LIMIT",
    "AnchorDescriptor",
    "MatchTier",
    "Resolution",
    "best_occurrence",
    "capture_selection",
    "context_score",
    "find_occurrences",
    "resolve_anchor",
]
