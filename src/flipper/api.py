"""Feature Evaluation API.

Every function takes an optional ``store``; without one the current store
from ``flipper.context`` is used.

``enabled`` only answers whether a feature is globally on. Percentage
rollouts and actor allow-lists are evaluated by ``is_enabled_for`` and
``enabled_for``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional, TypeVar

from flipper.context import current_store
from flipper.storage import FeatureReader, FeatureStore
from flipper.structured_logging import feature_context
from flipper.types import Feature, FeatureName, HasActorId, is_enabled_for, new_feature

logger = logging.getLogger(__name__)

T = TypeVar("T")

UpdateFn = Callable[[Optional[Feature]], Optional[Feature]]


def _resolve(store: Optional[FeatureReader]) -> FeatureReader:
    return store if store is not None else current_store()


def _resolve_writable(store: Optional[FeatureStore]) -> FeatureStore:
    return store if store is not None else current_store()


def enabled(name: FeatureName, store: Optional[FeatureReader] = None) -> bool:
    """Check whether a feature is globally enabled.

    Returns False when the feature does not exist.
    """
    feature = _resolve(store).get_feature(name)
    return feature is not None and bool(feature.enabled)


def enabled_for(
    name: FeatureName, actor: HasActorId, store: Optional[FeatureReader] = None
) -> bool:
    """Check whether a feature is active for ``actor`` through any path.

    Returns False when the feature does not exist.
    """
    feature = _resolve(store).get_feature(name)
    if feature is None:
        return False
    return is_enabled_for(feature, actor)


def update(
    name: FeatureName, update_fn: UpdateFn, store: Optional[FeatureStore] = None
) -> None:
    """Apply ``update_fn`` to one feature and write the snapshot back.

    The read and the write are separate store calls; concurrent updates of
    the same store race and the last write wins.
    """
    target = _resolve_writable(store)
    with feature_context(name):
        features = target.get_features()
        target.update_features(features.alter(name, update_fn))


def upsert(feature: Feature, store: Optional[FeatureStore] = None) -> None:
    """Insert ``feature``, merging allowed actors with any existing definition."""
    target = _resolve_writable(store)
    with feature_context(feature.name):
        features = target.get_features()
        target.update_features(features.upsert(feature))
    logger.debug(f"Feature '{feature.name}' upserted")


def enable(name: FeatureName, store: Optional[FeatureStore] = None) -> None:
    """Enable a feature globally, creating it when absent."""
    update(
        name,
        lambda feature: replace(feature or new_feature(name), enabled=True),
        store,
    )
    logger.debug(f"Feature '{name}' enabled")


def disable(name: FeatureName, store: Optional[FeatureStore] = None) -> None:
    """Disable a feature globally, creating it when absent."""
    update(
        name,
        lambda feature: replace(feature or new_feature(name), enabled=False),
        store,
    )
    logger.debug(f"Feature '{name}' disabled")


def toggle(name: FeatureName, store: Optional[FeatureStore] = None) -> None:
    """Flip a feature's global state. An absent feature is created enabled."""

    def flip(feature: Optional[Feature]) -> Feature:
        if feature is None:
            return replace(new_feature(name), enabled=True)
        return replace(feature, enabled=not feature.enabled)

    update(name, flip, store)
    logger.debug(f"Feature '{name}' toggled")


def when_enabled(
    name: FeatureName,
    action: Callable[[], T],
    store: Optional[FeatureReader] = None,
) -> Optional[T]:
    """Call ``action`` only if the feature is globally enabled.

    The action is not called at all when the feature is disabled or absent.
    """
    if enabled(name, store):
        return action()
    return None


__all__ = [
    "disable",
    "enable",
    "enabled",
    "enabled_for",
    "is_enabled_for",
    "toggle",
    "update",
    "upsert",
    "when_enabled",
]
