"""Tests for the JSON file annotation store."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from pagemarks.errors import AnnotationStoreError
from pagemarks.store.json_file import JsonFileAnnotationStore

if TYPE_CHECKING:
    from pathlib import Path


class TestJsonFileAnnotationStore:
    """File-backed persistence."""

    async def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        store = JsonFileAnnotationStore(tmp_path / "none.json")
        assert await store.get_all_annotations() == []

    async def test_blank_file_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "blank.json"
        path.write_text("  \n", encoding="utf-8")
        assert await JsonFileAnnotationStore(path).get_all_annotations() == []

    async def test_records_survive_a_new_instance(
        self, tmp_path: Path, make_annotation
    ) -> None:
        path = tmp_path / "annotations.json"
        annotation = make_annotation(note="kept")
        await JsonFileAnnotationStore(path).save_annotation(annotation)

        reopened = JsonFileAnnotationStore(path)

        assert await reopened.get_annotation(annotation.id) == annotation

    async def test_file_shape(self, tmp_path: Path, make_annotation) -> None:
        path = tmp_path / "annotations.json"
        annotation = make_annotation()
        await JsonFileAnnotationStore(path).save_annotation(annotation)

        data = json.loads(path.read_text(encoding="utf-8"))

        assert list(data) == ["annotations"]
        assert data["annotations"][0]["id"] == annotation.id
        assert data["annotations"][0]["position"]["text"] == "world"
        assert not (tmp_path / "annotations.json.tmp").exists()

    async def test_creates_parent_directories(
        self, tmp_path: Path, make_annotation
    ) -> None:
        path = tmp_path / "nested" / "dir" / "annotations.json"
        await JsonFileAnnotationStore(path).save_annotation(make_annotation())
        assert path.is_file()

    async def test_delete_persists(self, tmp_path: Path, make_annotation) -> None:
        path = tmp_path / "annotations.json"
        store = JsonFileAnnotationStore(path)
        annotation = make_annotation()
        await store.save_annotation(annotation)

        assert await store.delete_annotation(annotation.id)
        assert await JsonFileAnnotationStore(path).get_all_annotations() == []

    async def test_corrupt_file_raises_store_error(self, tmp_path: Path) -> None:
        path = tmp_path / "annotations.json"
        path.write_text('{"annotations": [{"id": 1}]}', encoding="utf-8")

        with pytest.raises(AnnotationStoreError, match="corrupt"):
            await JsonFileAnnotationStore(path).get_all_annotations()

    async def test_unwritable_path_raises_store_error(
        self, tmp_path: Path, make_annotation
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = JsonFileAnnotationStore(blocker / "annotations.json")

        with pytest.raises(AnnotationStoreError, match="Could not write"):
            await store.save_annotation(make_annotation())
