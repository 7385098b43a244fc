"""Feature flipper: a minimally obtrusive feature flag library.

Provides:
- Global on/off switches per feature
- Deterministic percentage rollouts (CRC-32 actor buckets)
- Explicit actor allow-lists
- Pluggable storage with an in-memory reference backend
"""

from flipper.adapters.memory import InMemoryFeatureStore
from flipper.api import (
    disable,
    enable,
    enabled,
    enabled_for,
    toggle,
    update,
    upsert,
    when_enabled,
)
from flipper.context import current_store, request_scope, use_store
from flipper.decorators import feature_flag
from flipper.errors import (
    FeatureSeedError,
    FlipperError,
    InvalidFeatureError,
    InvalidPercentageError,
)
from flipper.storage import (
    DelegatingFeatureStore,
    FeatureReader,
    FeatureStore,
    RequestFeatureStore,
)
from flipper.types import (
    ActorId,
    Feature,
    FeatureName,
    Features,
    HasActorId,
    Percentage,
    is_enabled_for,
    merge_features,
    merge_stores,
    new_feature,
    new_store,
)

__version__ = "0.3.0"

__all__ = [
    # Types
    "ActorId",
    "Feature",
    "FeatureName",
    "Features",
    "HasActorId",
    "Percentage",
    "is_enabled_for",
    "merge_features",
    "merge_stores",
    "new_feature",
    "new_store",
    # Storage
    "DelegatingFeatureStore",
    "FeatureReader",
    "FeatureStore",
    "InMemoryFeatureStore",
    "RequestFeatureStore",
    # API
    "disable",
    "enable",
    "enabled",
    "enabled_for",
    "feature_flag",
    "toggle",
    "update",
    "upsert",
    "when_enabled",
    # Context
    "current_store",
    "request_scope",
    "use_store",
    # Errors
    "FeatureSeedError",
    "FlipperError",
    "InvalidFeatureError",
    "InvalidPercentageError",
]
