"""Annotation persistence interface and reference implementations.

Usage:
    from pagemarks.store import get_annotation_store

    store = get_annotation_store()
    annotations = await store.get_annotations_for_url("https://example.com/a")
"""

from __future__ import annotations

from pagemarks.store.factory import clear_store_cache, get_annotation_store
from pagemarks.store.json_file import JsonFileAnnotationStore
from pagemarks.store.memory import InMemoryAnnotationStore
from pagemarks.store.models import (
    Annotation,
    AnnotationAIResult,
    generate_annotation_id,
    normalize_url,
)
from pagemarks.store.protocol import AnnotationStoreProtocol

__all__ = [
    "Annotation",
    "AnnotationAIResult",
    "AnnotationStoreProtocol",
    "InMemoryAnnotationStore",
    "JsonFileAnnotationStore",
    "clear_store_cache",
    "generate_annotation_id",
    "get_annotation_store",
    "normalize_url",
]
