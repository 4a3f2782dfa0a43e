"""Highlight rendering: markers, the render registry, and click dispatch."""

from pagemarks.render.events import HighlightClickDispatcher
from pagemarks.render.registry import RenderRegistry
from pagemarks.render.renderer import (
    HighlightRenderer,
    SegmentFailure,
    WrapResult,
)
from pagemarks.render.styles import (
    ANNOTATION_COLORS,
    DEFAULT_COLOR,
    AnnotationColor,
    HighlightStyle,
    style_for,
)

__all__ = [
    "ANNOTATION_COLORS",
    "DEFAULT_COLOR",
    "AnnotationColor",
    "HighlightClickDispatcher",
    "HighlightRenderer",
    "HighlightStyle",
    "RenderRegistry",
    "SegmentFailure",
    "WrapResult",
    "style_for",
]
