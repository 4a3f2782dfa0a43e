"""Shared pytest fixtures for pagemarks tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pagemarks.config import Settings
from pagemarks.store.factory import clear_store_cache
from pagemarks.store.memory import InMemoryAnnotationStore

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def settings() -> Settings:
    """Settings built from defaults only, ignoring any local .env file."""
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def memory_store() -> InMemoryAnnotationStore:
    return InMemoryAnnotationStore()


@pytest.fixture(autouse=True)
def _reset_store_factory() -> Iterator[None]:
    """Each test sees fresh settings and a fresh store singleton."""
    clear_store_cache()
    yield
    clear_store_cache()
