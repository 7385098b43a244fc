"""Feature Data Model.

Provides the values the rest of the package is built on:
- Actor identity (ActorId, HasActorId)
- Feature definitions with global, percentage and actor activation
- The Features store value and its merge rule
"""

from __future__ import annotations

import zlib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Protocol

from flipper.errors import InvalidFeatureError, InvalidPercentageError

FeatureName = str

BUCKET_COUNT = 100


@dataclass(frozen=True, order=True)
class ActorId:
    """Opaque byte identifier for one actor.

    Text conversion uses UTF-8 with ``surrogateescape`` so any byte string
    survives a round trip through ``str`` and ``from_str``.
    """

    value: bytes

    def __post_init__(self):
        if isinstance(self.value, str):
            object.__setattr__(
                self, "value", self.value.encode("utf-8", errors="surrogateescape")
            )

    @classmethod
    def from_str(cls, text: str) -> "ActorId":
        return cls(text.encode("utf-8", errors="surrogateescape"))

    def __str__(self) -> str:
        return self.value.decode("utf-8", errors="surrogateescape")


class HasActorId(Protocol):
    """Anything that can be evaluated against a feature.

    The returned ActorId must be unique among all actors that share a feature.
    If a feature is checked for both users and admins whose numeric ids can
    overlap, namespace them:

        class User:
            def actor_id(self) -> ActorId:
                return ActorId.from_str(f"User:{self.id}")

        class Admin:
            def actor_id(self) -> ActorId:
                return ActorId.from_str(f"Admin:{self.id}")

    Collisions are not detected; they silently skew allow-list and
    percentage evaluation.
    """

    def actor_id(self) -> ActorId:
        ...


class Percentage(int):
    """Rollout percentage, 0 <= value <= 100."""

    def __new__(cls, value: Any = 0) -> "Percentage":
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidPercentageError(value)
        if not 0 <= value <= 100:
            raise InvalidPercentageError(value)
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"Percentage({int(self)})"


@dataclass(frozen=True)
class Feature:
    """A named feature and its three activation paths."""

    name: FeatureName
    enabled: bool = False
    enabled_actors: FrozenSet[ActorId] = field(default_factory=frozenset)
    enabled_percentage: Percentage = Percentage(0)

    def __post_init__(self):
        if not isinstance(self.enabled, bool):
            raise InvalidFeatureError("enabled", self.enabled)
        object.__setattr__(self, "enabled_actors", frozenset(self.enabled_actors))
        if not isinstance(self.enabled_percentage, Percentage):
            object.__setattr__(
                self, "enabled_percentage", Percentage(self.enabled_percentage)
            )

    def with_actors(self, *actors: HasActorId) -> "Feature":
        """Return a copy that also allows the given actors."""
        added = {actor.actor_id() for actor in actors}
        return replace(self, enabled_actors=self.enabled_actors | added)

    def with_percentage(self, percentage: int) -> "Feature":
        return replace(self, enabled_percentage=Percentage(percentage))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "enabled": self.enabled,
            "enabled_actors": sorted(str(actor) for actor in self.enabled_actors),
            "enabled_percentage": int(self.enabled_percentage),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Feature":
        """Create from dictionary."""
        return cls(
            name=data["name"],
            enabled=data.get("enabled", False),
            enabled_actors=frozenset(
                ActorId.from_str(actor) for actor in data.get("enabled_actors", [])
            ),
            enabled_percentage=Percentage(data.get("enabled_percentage", 0)),
        )


def new_feature(name: FeatureName) -> Feature:
    """Feature with every activation path switched off."""
    return Feature(name=name)


def merge_features(new: Feature, old: Feature) -> Feature:
    """Combine two definitions of the same feature.

    Flags and percentage come from ``new``; allowed actors accumulate, so a
    merge never drops an actor that was already granted access.
    """
    return Feature(
        name=new.name,
        enabled=new.enabled,
        enabled_actors=old.enabled_actors | new.enabled_actors,
        enabled_percentage=new.enabled_percentage,
    )


class Features(Mapping):
    """Immutable snapshot of every known feature, keyed by name.

    The constructor stores features as given; when a name repeats, the last
    one wins. Use ``upsert`` or ``merge_stores`` to apply the merge rule.
    """

    def __init__(self, features: Optional[Iterable[Feature]] = None):
        self._features: Dict[FeatureName, Feature] = {}
        for feature in features or ():
            self._features[feature.name] = feature

    @classmethod
    def _wrap(cls, mapping: Dict[FeatureName, Feature]) -> "Features":
        features = cls()
        features._features = mapping
        return features

    def __getitem__(self, name: FeatureName) -> Feature:
        return self._features[name]

    def __iter__(self) -> Iterator[FeatureName]:
        return iter(self._features)

    def __len__(self) -> int:
        return len(self._features)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Features):
            return self._features == other._features
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Features({list(self._features.values())!r})"

    def names(self) -> List[FeatureName]:
        return list(self._features)

    def set(self, feature: Feature) -> "Features":
        """Return a copy with ``feature`` stored as-is under its name."""
        updated = dict(self._features)
        updated[feature.name] = feature
        return Features._wrap(updated)

    def upsert(self, feature: Feature) -> "Features":
        """Return a copy with ``feature`` inserted, merged with any existing entry."""
        existing = self._features.get(feature.name)
        if existing is None:
            return self.set(feature)
        return self.set(merge_features(feature, existing))

    def alter(
        self,
        name: FeatureName,
        update_fn: Callable[[Optional[Feature]], Optional[Feature]],
    ) -> "Features":
        """Apply ``update_fn`` to the entry at ``name``.

        The function receives None when the name is absent. Returning None
        removes the entry.
        """
        updated = dict(self._features)
        result = update_fn(updated.get(name))
        if result is None:
            updated.pop(name, None)
        else:
            updated[name] = result
        return Features._wrap(updated)

    def to_dict(self) -> Dict[str, Any]:
        return {"features": [feature.to_dict() for feature in self._features.values()]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Features":
        return cls(Feature.from_dict(item) for item in data.get("features", []))


def new_store() -> Features:
    return Features()


def merge_stores(a: Features, b: Features) -> Features:
    """Union of two snapshots; on shared names ``b`` is new and ``a`` is old."""
    merged = a
    for name, feature in b.items():
        merged = merged.alter(
            name,
            lambda old, new=feature: new if old is None else merge_features(new, old),
        )
    return merged


def actor_hash(actor: HasActorId) -> int:
    """Unsigned CRC-32 of the actor's id bytes."""
    return zlib.crc32(actor.actor_id().value) & 0xFFFFFFFF


def actor_bucket(actor: HasActorId) -> int:
    """Rollout bucket in 0..99. Independent of the feature being evaluated."""
    return actor_hash(actor) % BUCKET_COUNT


def is_enabled_for(feature: Feature, actor: HasActorId) -> bool:
    """Check whether ``feature`` is active for ``actor`` through any path."""
    if feature.enabled:
        return True
    if actor_bucket(actor) < feature.enabled_percentage:
        return True
    return actor.actor_id() in feature.enabled_actors


__all__ = [
    "ActorId",
    "BUCKET_COUNT",
    "Feature",
    "FeatureName",
    "Features",
    "HasActorId",
    "Percentage",
    "actor_bucket",
    "actor_hash",
    "is_enabled_for",
    "merge_features",
    "merge_stores",
    "new_feature",
    "new_store",
]
