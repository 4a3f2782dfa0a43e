"""Serializable anchor descriptor.

An anchor identifies one highlighted span independently of any live tree
state: a structural path to the container element, character offsets
into the container's text, the exact captured text, and a window of
surrounding context used to disambiguate repeated text on resolution.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator

# Characters of surrounding text captured on each side of a selection
DEFAULT_CONTEXT_LENGTH = 50


class AnchorDescriptor(BaseModel):
    """Immutable, persisted description of a highlighted span.

    Attributes:
        structural_path: Element-child index steps from the document root
            to the container element (highlight markers are transparent).
        start_offset: Start offset into the container's text (inclusive).
        end_offset: End offset into the container's text (exclusive).
        text: Exact captured substring; ground truth for matching.
        context_before: Up to the context window of text preceding the
            span, clipped at the container boundary.
        context_after: Up to the context window of text following the span.
    """

    model_config = ConfigDict(frozen=True)

    structural_path: tuple[NonNegativeInt, ...]
    start_offset: NonNegativeInt
    end_offset: NonNegativeInt
    text: str = Field(min_length=1)
    context_before: str = ""
    context_after: str = ""

    @model_validator(mode="after")
    def offsets_match_text(self) -> AnchorDescriptor:
        if self.start_offset > self.end_offset:
            msg = "start_offset must not exceed end_offset"
            raise ValueError(msg)
        if self.end_offset - self.start_offset != len(self.text):
            msg = "offset range length must equal len(text)"
            raise ValueError(msg)
        return self
