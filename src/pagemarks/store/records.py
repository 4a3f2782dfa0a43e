"""Shared CRUD logic for stores that load and rewrite a whole record list."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from pagemarks.errors import AnnotationStoreError
from pagemarks.store.models import normalize_url, now_ms

if TYPE_CHECKING:
    from pagemarks.render.styles import AnnotationColor
    from pagemarks.store.models import Annotation, AnnotationAIResult

logger = logging.getLogger(__name__)


class RecordListStore(ABC):
    """Implements the store protocol on top of ``_load``/``_dump``.

    Subclasses decide where the list lives.  Every mutation loads the
    current list, changes it, and writes it back in one step.
    """

    @abstractmethod
    def _load(self) -> list[Annotation]: ...

    @abstractmethod
    def _dump(self, annotations: list[Annotation]) -> None: ...

    async def get_all_annotations(self) -> list[Annotation]:
        return self._load()

    async def get_annotations_for_url(self, url: str) -> list[Annotation]:
        page = normalize_url(url)
        return [a for a in self._load() if a.url == page]

    async def get_annotation(self, annotation_id: str) -> Annotation | None:
        return next((a for a in self._load() if a.id == annotation_id), None)

    async def save_annotation(self, annotation: Annotation) -> None:
        annotations = self._load()
        if any(a.id == annotation.id for a in annotations):
            msg = f"annotation {annotation.id!r} already exists"
            raise AnnotationStoreError(msg)
        annotations.append(annotation)
        self._dump(annotations)
        logger.debug("Saved annotation %s for %s", annotation.id, annotation.url)

    async def update_annotation(
        self,
        annotation_id: str,
        *,
        note: str | None = None,
        color: AnnotationColor | None = None,
        ai_result: AnnotationAIResult | None = None,
    ) -> Annotation | None:
        annotations = self._load()
        for i, existing in enumerate(annotations):
            if existing.id != annotation_id:
                continue
            changes: dict[str, Any] = {"updated_at": now_ms()}
            if note is not None:
                changes["note"] = note
            if color is not None:
                changes["color"] = color
            if ai_result is not None:
                changes["ai_result"] = ai_result
            updated = existing.model_copy(update=changes)
            annotations[i] = updated
            self._dump(annotations)
            return updated
        return None

    async def delete_annotation(self, annotation_id: str) -> bool:
        annotations = self._load()
        remaining = [a for a in annotations if a.id != annotation_id]
        if len(remaining) == len(annotations):
            return False
        self._dump(remaining)
        logger.debug("Deleted annotation %s", annotation_id)
        return True
