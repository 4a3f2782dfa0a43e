"""Annotation records as stored by an annotation store.

The record owns one anchor descriptor, which is never modified after
creation; the note, colour and AI result change independently through
``update_annotation``.
"""

from __future__ import annotations

import secrets
import string
import time
from typing import Literal
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from pagemarks.anchoring.models import AnchorDescriptor
from pagemarks.render.styles import DEFAULT_COLOR, AnnotationColor

AIResultType = Literal["translate", "explain", "summarize", "rewrite"]

_ID_ALPHABET = string.digits + string.ascii_lowercase

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_annotation_id() -> str:
    """Return a new id of the form ``ann_<epoch-ms>_<7 base36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"ann_{now_ms()}_{suffix}"


def normalize_url(url: str) -> str:
    """Reduce *url* to its page identity: origin plus path.

    Query string, fragment and credentials are dropped so the same page
    reached through different links shares its annotations.  Scheme and
    host are lowercased and the scheme's default port is omitted.  Input
    that does not look like an absolute URL is returned unchanged.
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return url
    host = parts.hostname
    if not parts.scheme or not host:
        return url
    if ":" in host:
        host = f"[{host}]"
    scheme = parts.scheme.lower()
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"
    return f"{scheme}://{host}{parts.path or '/'}"


class AnnotationAIResult(BaseModel):
    """AI output attached to an annotation."""

    type: AIResultType
    content: str
    thinking: str | None = None
    target_language: str | None = None  # For translate
    created_at: int = Field(default_factory=now_ms)


class Annotation(BaseModel):
    """A stored highlight with its anchor and user payload."""

    id: str = Field(default_factory=generate_annotation_id)
    url: str
    page_title: str = ""
    position: AnchorDescriptor
    highlight_text: str
    note: str | None = None
    color: AnnotationColor = DEFAULT_COLOR
    ai_result: AnnotationAIResult | None = None
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)


class AnnotationStorage(BaseModel):
    """On-disk shape of the JSON file store."""

    annotations: list[Annotation] = Field(default_factory=list)
