"""In-memory annotation store for tests and throwaway sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pagemarks.store.records import RecordListStore

if TYPE_CHECKING:
    from pagemarks.store.models import Annotation


class InMemoryAnnotationStore(RecordListStore):
    """Keeps annotations in a list owned by the instance.

    Records are copied on the way in and out, so callers cannot mutate
    stored state behind the store's back.
    """

    def __init__(self, annotations: list[Annotation] | None = None) -> None:
        self._annotations = [a.model_copy() for a in annotations or ()]

    def _load(self) -> list[Annotation]:
        return [a.model_copy() for a in self._annotations]

    def _dump(self, annotations: list[Annotation]) -> None:
        self._annotations = [a.model_copy() for a in annotations]
