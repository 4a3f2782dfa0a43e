"""HTML parsing into the in-memory tree, and serialisation back to HTML.

Parsing walks the selectolax Lexbor tree via child/next iteration (which
exposes text nodes), copying elements and text into :class:`Document`.
Comments and doctypes carry no text and are dropped.
"""

from __future__ import annotations

import html as html_module
from typing import Any

from selectolax.lexbor import LexborHTMLParser

from pagemarks.tree.nodes import (
    DEFAULT_MARKER_ATTRIBUTE,
    SKIP_TAGS,
    Document,
    ElementNode,
    Node,
    TextNode,
)

# Elements serialised without a closing tag
VOID_TAGS = frozenset(
    (
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    )
)


def _attrs(node: Any) -> dict[str, str]:
    return {k: v if v is not None else "" for k, v in node.attributes.items()}


def _copy_children(source: Any, target: ElementNode) -> None:
    child = source.child
    while child is not None:
        tag = child.tag
        # Text node: selectolax uses "-text" as the tag
        if tag == "-text":
            text = child.text_content
            if text:
                target.append_child(TextNode(text))
        elif tag and tag[0].isalpha():
            element = ElementNode(tag.lower(), _attrs(child))
            target.append_child(element)
            _copy_children(child, element)
        child = child.next


def parse_html(
    html: str, *, marker_attribute: str = DEFAULT_MARKER_ATTRIBUTE
) -> Document:
    """Parse *html* into a :class:`Document`.

    Fragments are completed by the parser into ``html/head/body``.
    """
    document = Document(marker_attribute=marker_attribute)
    if not html:
        return document

    tree = LexborHTMLParser(html)
    root = tree.root
    if root is None:
        return document

    element = ElementNode(root.tag.lower(), _attrs(root))
    document.append_child(element)
    _copy_children(root, element)
    return document


def _format_attrs(attrs: dict[str, str]) -> str:
    return "".join(
        f' {name}="{html_module.escape(value, quote=True)}"'
        for name, value in attrs.items()
    )


def _serialise(node: Node, parts: list[str], raw: bool) -> None:
    if isinstance(node, TextNode):
        parts.append(node.data if raw else html_module.escape(node.data, quote=False))
        return
    assert isinstance(node, ElementNode)
    if isinstance(node, Document):
        for child in node.children:
            _serialise(child, parts, raw)
        return
    parts.append(f"<{node.tag}{_format_attrs(node.attrs)}>")
    if node.tag in VOID_TAGS:
        return
    child_raw = raw or node.tag in SKIP_TAGS
    for child in node.children:
        _serialise(child, parts, child_raw)
    parts.append(f"</{node.tag}>")


def to_html(node: Node) -> str:
    """Serialise *node* (and its subtree) to an HTML string."""
    parts: list[str] = []
    _serialise(node, parts, raw=False)
    return "".join(parts)


def inner_html(element: ElementNode) -> str:
    """Serialise only the children of *element*."""
    parts: list[str] = []
    for child in element.children:
        _serialise(child, parts, raw=element.tag in SKIP_TAGS)
    return "".join(parts)
