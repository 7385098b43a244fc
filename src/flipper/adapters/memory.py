"""In-memory feature store.

Process-local reference backend, suitable for tests and single-process
deployments. Each call is atomic; sequences of calls are not.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from flipper.storage import FeatureStore
from flipper.types import Feature, FeatureName, Features

logger = logging.getLogger(__name__)


class InMemoryFeatureStore(FeatureStore):
    """Feature store holding a single Features value in memory."""

    def __init__(self, initial: Optional[Features] = None):
        self._features: Features = initial if initial is not None else Features()
        self._lock = threading.Lock()

    def get_features(self) -> Features:
        with self._lock:
            return self._features

    def get_feature(self, name: FeatureName) -> Optional[Feature]:
        with self._lock:
            return self._features.get(name)

    def update_features(self, features: Features) -> None:
        with self._lock:
            self._features = features
        logger.debug(f"Feature snapshot replaced ({len(features)} features)")

    def update_feature(self, name: FeatureName, feature: Feature) -> None:
        with self._lock:
            self._features = self._features.alter(name, lambda _: feature)
        logger.debug(f"Feature '{name}' stored")
