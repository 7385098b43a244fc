"""Runtime settings and store seeding.

Settings are read from ``FLIPPER_*`` environment variables (or ``.env``);
list values such as ``FLIPPER_ENABLED_FEATURES`` are JSON arrays.
A seed file, when configured, is a JSON document:

    {"features": [{"name": "beta", "enabled": false,
                   "enabled_actors": ["User:1"], "enabled_percentage": 25}]}
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from flipper.adapters.memory import InMemoryFeatureStore
from flipper.errors import FeatureSeedError
from flipper.types import ActorId, Feature, Features, Percentage, new_feature

logger = logging.getLogger(__name__)


class FlipperSettings(BaseSettings):
    ENABLED_FEATURES: List[str] = []
    SEED_FILE: Optional[str] = None

    LOG_LEVEL: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    JSON_LOGS: bool = False
    SERVICE_NAME: str = "feature-flipper"
    ENVIRONMENT: str = "production"

    model_config = SettingsConfigDict(
        env_prefix="FLIPPER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


class FeatureDocument(BaseModel):
    name: str = Field(min_length=1)
    enabled: bool = False
    enabled_actors: List[str] = []
    enabled_percentage: int = Field(default=0, ge=0, le=100)

    def to_feature(self) -> Feature:
        return Feature(
            name=self.name,
            enabled=self.enabled,
            enabled_actors=frozenset(ActorId.from_str(a) for a in self.enabled_actors),
            enabled_percentage=Percentage(self.enabled_percentage),
        )


class FeaturesDocument(BaseModel):
    features: List[FeatureDocument] = []

    def to_features(self) -> Features:
        # Repeated names in one document accumulate through the merge rule.
        features = Features()
        for document in self.features:
            features = features.upsert(document.to_feature())
        return features


_settings_cache: Optional[FlipperSettings] = None


def get_settings() -> FlipperSettings:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = FlipperSettings()
    return _settings_cache


def reset_settings() -> None:
    global _settings_cache
    _settings_cache = None


def load_seed_file(path: str, strict: bool = False) -> Features:
    """Load features from a JSON seed file.

    With ``strict=False`` a missing or invalid file is logged and yields an
    empty snapshot; with ``strict=True`` it raises FeatureSeedError.
    """
    seed_path = Path(path)
    if not seed_path.exists():
        if strict:
            raise FeatureSeedError(path, "file not found")
        logger.warning(f"Feature seed file not found: {path}")
        return Features()

    try:
        document = FeaturesDocument.model_validate(json.loads(seed_path.read_text()))
    except (json.JSONDecodeError, ValidationError) as e:
        if strict:
            raise FeatureSeedError(path, str(e)) from e
        logger.error(f"Failed to load feature seed from {path}: {e}")
        return Features()

    features = document.to_features()
    logger.info(f"Loaded {len(features)} features from {path}")
    return features


def features_from_settings(settings: Optional[FlipperSettings] = None) -> Features:
    """Seed file features, with ENABLED_FEATURES switched on."""
    settings = settings or get_settings()
    features = Features()
    if settings.SEED_FILE:
        features = load_seed_file(settings.SEED_FILE)

    for name in settings.ENABLED_FEATURES:
        features = features.alter(
            name, lambda f, n=name: replace(f or new_feature(n), enabled=True)
        )
    if settings.ENABLED_FEATURES:
        logger.info(f"Enabled features from settings: {settings.ENABLED_FEATURES}")
    return features


def build_store(settings: Optional[FlipperSettings] = None) -> InMemoryFeatureStore:
    """Create the in-memory store described by ``settings``."""
    return InMemoryFeatureStore(features_from_settings(settings))


__all__ = [
    "FeatureDocument",
    "FeaturesDocument",
    "FlipperSettings",
    "build_store",
    "features_from_settings",
    "get_settings",
    "load_seed_file",
    "reset_settings",
]
