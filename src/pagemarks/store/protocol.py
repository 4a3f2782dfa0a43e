"""Protocol defining the annotation store interface.

Both the in-memory store and the JSON file store implement this protocol,
and any external persistence layer can be plugged in the same way.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pagemarks.render.styles import AnnotationColor
    from pagemarks.store.models import Annotation, AnnotationAIResult


class AnnotationStoreProtocol(Protocol):
    """Persistence for annotation records."""

    async def get_all_annotations(self) -> list[Annotation]:
        """Return every stored annotation."""
        ...

    async def get_annotations_for_url(self, url: str) -> list[Annotation]:
        """Return the annotations for one page, in no particular order.

        Args:
            url: Page URL; it is normalised before matching.
        """
        ...

    async def get_annotation(self, annotation_id: str) -> Annotation | None:
        """Return one annotation, or None if the id is unknown."""
        ...

    async def save_annotation(self, annotation: Annotation) -> None:
        """Persist a new annotation.

        Raises:
            AnnotationStoreError: If the record could not be persisted.
        """
        ...

    async def update_annotation(
        self,
        annotation_id: str,
        *,
        note: str | None = None,
        color: AnnotationColor | None = None,
        ai_result: AnnotationAIResult | None = None,
    ) -> Annotation | None:
        """Change the mutable fields of an annotation.

        Fields left as None are unchanged.

        Returns:
            The updated annotation, or None if the id is unknown.
        """
        ...

    async def delete_annotation(self, annotation_id: str) -> bool:
        """Delete an annotation; returns False if the id is unknown."""
        ...
