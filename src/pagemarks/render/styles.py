"""Highlight colours and their inline marker styles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

AnnotationColor = Literal["yellow", "green", "blue", "pink", "purple"]

DEFAULT_COLOR: AnnotationColor = "yellow"


@dataclass(frozen=True)
class HighlightStyle:
    """Visual style applied to every marker of one annotation."""

    background: str
    border: str
    label: str

    def css(self) -> str:
        """Inline ``style`` attribute value for a marker element."""
        return (
            f"background-color: {self.background}; "
            f"border-bottom: 2px solid {self.border}; "
            "padding: 0 2px; border-radius: 2px; cursor: pointer"
        )


ANNOTATION_COLORS: dict[str, HighlightStyle] = {
    "yellow": HighlightStyle(
        background="rgba(250, 204, 21, 0.4)",
        border="rgba(250, 204, 21, 0.8)",
        label="Yellow",
    ),
    "green": HighlightStyle(
        background="rgba(34, 197, 94, 0.4)",
        border="rgba(34, 197, 94, 0.8)",
        label="Green",
    ),
    "blue": HighlightStyle(
        background="rgba(59, 130, 246, 0.4)",
        border="rgba(59, 130, 246, 0.8)",
        label="Blue",
    ),
    "pink": HighlightStyle(
        background="rgba(236, 72, 153, 0.4)",
        border="rgba(236, 72, 153, 0.8)",
        label="Pink",
    ),
    "purple": HighlightStyle(
        background="rgba(168, 85, 247, 0.4)",
        border="rgba(168, 85, 247, 0.8)",
        label="Purple",
    ),
}


def style_for(color: str) -> HighlightStyle:
    """Style for *color*, falling back to yellow for unknown names."""
    return ANNOTATION_COLORS.get(color, ANNOTATION_COLORS[DEFAULT_COLOR])
