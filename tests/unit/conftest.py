"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest

from pagemarks.anchoring.models import AnchorDescriptor
from pagemarks.store.models import Annotation

PAGE_URL = "https://example.com/article"


@pytest.fixture
def make_annotation():
    """Factory for stored annotations with a valid anchor."""

    def _make(
        text: str = "world",
        *,
        path: tuple[int, ...] = (0, 1, 0),
        start: int = 0,
        before: str = "",
        after: str = "",
        url: str = PAGE_URL,
        **fields,
    ) -> Annotation:
        anchor = AnchorDescriptor(
            structural_path=path,
            start_offset=start,
            end_offset=start + len(text),
            text=text,
            context_before=before,
            context_after=after,
        )
        return Annotation(
            url=url, position=anchor, highlight_text=text, **fields
        )

    return _make
