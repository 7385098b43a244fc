"""Storage adapters for flipper."""

from flipper.adapters.memory import InMemoryFeatureStore

__all__ = ["InMemoryFeatureStore"]
