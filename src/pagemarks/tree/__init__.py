"""Abstract, addressable document tree and its in-memory implementation."""

from pagemarks.tree.html_tree import inner_html, parse_html, to_html
from pagemarks.tree.nodes import (
    DEFAULT_MARKER_ATTRIBUTE,
    SKIP_TAGS,
    Document,
    ElementNode,
    Node,
    TextNode,
)
from pagemarks.tree.protocol import DocumentTree
from pagemarks.tree.range import (
    Boundary,
    Span,
    extract_contents,
    insert_node,
    surround_contents,
)
from pagemarks.tree.text_map import TextMap, TextSegment, span_text

__all__ = [
    "DEFAULT_MARKER_ATTRIBUTE",
    "SKIP_TAGS",
    "Boundary",
    "Document",
    "DocumentTree",
    "ElementNode",
    "Node",
    "Span",
    "TextMap",
    "TextNode",
    "TextSegment",
    "extract_contents",
    "inner_html",
    "insert_node",
    "parse_html",
    "span_text",
    "surround_contents",
    "to_html",
]
