"""Errors raised by the flipper package.

Missing features are never an error: lookups return None and the API falls
back to default values.
"""

from __future__ import annotations

from typing import Any


class FlipperError(Exception):
    """Base class for flipper errors."""


class InvalidPercentageError(FlipperError, ValueError):
    """Rollout percentage outside the closed range [0, 100]."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Percentage must be an integer in [0, 100], got {value!r}")


class InvalidFeatureError(FlipperError, TypeError):
    """A feature field holds a value of the wrong type."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Feature field {field!r} has invalid value {value!r}")


class FeatureSeedError(FlipperError):
    """A feature seed document could not be read or validated."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid feature seed {source}: {reason}")


__all__ = [
    "FlipperError",
    "InvalidFeatureError",
    "InvalidPercentageError",
    "FeatureSeedError",
]
