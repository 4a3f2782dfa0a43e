"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagemarks.tree.nodes import DEFAULT_MARKER_ATTRIBUTE

logger = logging.getLogger(__name__)

# src/pagemarks/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class AnchoringConfig(BaseModel):
    """Capture and resolution tuning."""

    context_length: int = Field(default=50, ge=0)
    global_scan_limit: int = Field(default=2_000_000, gt=0)


class RenderConfig(BaseModel):
    """Marker element shape."""

    marker_tag: str = "mark"
    marker_class: str = "pagemarks-highlight"
    id_attribute: str = DEFAULT_MARKER_ATTRIBUTE

    @model_validator(mode="after")
    def id_attribute_is_data_attr(self) -> RenderConfig:
        if not self.id_attribute.startswith("data-"):
            msg = "RENDER__ID_ATTRIBUTE must be a data-* attribute"
            raise ValueError(msg)
        return self


class StoreConfig(BaseModel):
    """Annotation store backend."""

    backend: Literal["memory", "json"] = "memory"
    path: Path = Path("annotations.json")


class AppConfig(BaseModel):
    """Application runtime configuration."""

    log_dir: Path = Path("logs")


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``ANCHORING__CONTEXT_LENGTH``, ``STORE__BACKEND``, ``STORE__PATH``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    anchoring: AnchoringConfig = AnchoringConfig()
    render: RenderConfig = RenderConfig()
    store: StoreConfig = StoreConfig()
    app: AppConfig = AppConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
