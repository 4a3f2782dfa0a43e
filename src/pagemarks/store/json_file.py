"""JSON file annotation store.

Keeps every annotation in one document of the form
``{"annotations": [...]}``.  Writes go to a temporary sibling file that
is then renamed over the original, so a crash never leaves a truncated
store behind.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from pydantic import ValidationError

from pagemarks.errors import AnnotationStoreError
from pagemarks.store.models import AnnotationStorage
from pagemarks.store.records import RecordListStore

if TYPE_CHECKING:
    from pathlib import Path

    from pagemarks.store.models import Annotation

logger = logging.getLogger(__name__)


class JsonFileAnnotationStore(RecordListStore):
    """Annotation store backed by a single JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> list[Annotation]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Could not read annotation store {self.path}: {exc}"
            raise AnnotationStoreError(msg) from exc
        if not raw.strip():
            return []
        try:
            return AnnotationStorage.model_validate_json(raw).annotations
        except ValidationError as exc:
            msg = f"Annotation store {self.path} is corrupt: {exc}"
            raise AnnotationStoreError(msg) from exc

    def _dump(self, annotations: list[Annotation]) -> None:
        payload = AnnotationStorage(annotations=annotations).model_dump_json(indent=2)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            msg = f"Could not write annotation store {self.path}: {exc}"
            raise AnnotationStoreError(msg) from exc
        logger.debug("Wrote %d annotation(s) to %s", len(annotations), self.path)
