"""Annotation store factory.

Provides a factory function to get the store selected by configuration
(in-memory or JSON file).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pagemarks.config import get_settings

if TYPE_CHECKING:
    from pagemarks.store.protocol import AnnotationStoreProtocol


# Cached instance so every caller in the process sees the same records
_store_instance: AnnotationStoreProtocol | None = None


def get_annotation_store() -> AnnotationStoreProtocol:
    """Get the annotation store configured by ``STORE__BACKEND``.

    ``memory`` returns a process-wide InMemoryAnnotationStore; ``json``
    returns a JsonFileAnnotationStore at ``STORE__PATH``.
    """
    global _store_instance  # noqa: PLW0603
    if _store_instance is not None:
        return _store_instance

    store_config = get_settings().store
    if store_config.backend == "json":
        from pagemarks.store.json_file import JsonFileAnnotationStore

        _store_instance = JsonFileAnnotationStore(store_config.path)
    else:
        from pagemarks.store.memory import InMemoryAnnotationStore

        _store_instance = InMemoryAnnotationStore()
    return _store_instance


def clear_store_cache() -> None:
    """Clear the configuration and store caches.

    Useful for testing when you need to reload configuration
    or start from an empty store.
    """
    global _store_instance  # noqa: PLW0603
    get_settings.cache_clear()
    _store_instance = None
