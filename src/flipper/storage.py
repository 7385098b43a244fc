"""Feature Storage Abstraction.

Backends implement one of two capabilities:
- FeatureReader: read access to the Features snapshot
- FeatureStore: read and write access

DelegatingFeatureStore forwards every call to a wrapped store so layers
(request scopes, instrumentation) can be stacked without reimplementing
storage.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from flipper.types import Feature, FeatureName, Features

logger = logging.getLogger(__name__)


class FeatureReader(ABC):
    """Read access to the feature store."""

    @abstractmethod
    def get_features(self) -> Features:
        """Get the whole feature snapshot."""
        pass

    def get_feature(self, name: FeatureName) -> Optional[Feature]:
        """Get a single feature, or None when absent."""
        return self.get_features().get(name)


class FeatureStore(FeatureReader):
    """Read and write access to the feature store."""

    @abstractmethod
    def update_features(self, features: Features) -> None:
        """Replace the whole snapshot."""
        pass

    @abstractmethod
    def update_feature(self, name: FeatureName, feature: Feature) -> None:
        """Insert or overwrite one feature without merging."""
        pass


class DelegatingFeatureStore(FeatureStore):
    """Store that forwards every call unchanged to ``delegate``."""

    def __init__(self, delegate: FeatureStore):
        self.delegate = delegate

    def get_features(self) -> Features:
        return self.delegate.get_features()

    def get_feature(self, name: FeatureName) -> Optional[Feature]:
        return self.delegate.get_feature(name)

    def update_features(self, features: Features) -> None:
        self.delegate.update_features(features)

    def update_feature(self, name: FeatureName, feature: Feature) -> None:
        self.delegate.update_feature(name, feature)


class RequestFeatureStore(DelegatingFeatureStore):
    """Request-scoped view over an application-wide store.

    Holds per-request identity for logging; all storage calls go straight to
    the backing store.
    """

    def __init__(self, delegate: FeatureStore, request_id: Optional[str] = None):
        super().__init__(delegate)
        self.request_id = request_id

    def update_features(self, features: Features) -> None:
        logger.debug(f"Request {self.request_id} replacing {len(features)} features")
        super().update_features(features)

    def update_feature(self, name: FeatureName, feature: Feature) -> None:
        logger.debug(f"Request {self.request_id} updating feature '{name}'")
        super().update_feature(name, feature)


__all__ = [
    "DelegatingFeatureStore",
    "FeatureReader",
    "FeatureStore",
    "RequestFeatureStore",
]
