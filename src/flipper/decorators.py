"""Feature Flag Decorators."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from flipper.api import enabled, enabled_for
from flipper.storage import FeatureReader
from flipper.types import FeatureName, HasActorId

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def feature_flag(
    name: FeatureName,
    fallback: Optional[Callable[..., Any]] = None,
    actor_extractor: Optional[Callable[..., HasActorId]] = None,
    store: Optional[FeatureReader] = None,
) -> Callable[[F], F]:
    """Decorator to gate function execution behind a feature.

    Args:
        name: Name of the feature
        fallback: Called with the same arguments when the feature is off
        actor_extractor: Derives the actor from the call arguments; when
            given, the feature is evaluated for that actor instead of globally
        store: Store to read from, defaults to the current store

    Example:
        @feature_flag("new_checkout", fallback=old_checkout)
        def new_checkout(cart):
            return checkout_v2(cart)

        @feature_flag("beta_search", actor_extractor=lambda request: request.user)
        def beta_search(request):
            return search_v2(request)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if actor_extractor is not None:
                actor = actor_extractor(*args, **kwargs)
                active = enabled_for(name, actor, store)
            else:
                active = enabled(name, store)

            if active:
                return func(*args, **kwargs)
            if fallback is not None:
                return fallback(*args, **kwargs)
            logger.debug(f"Feature '{name}' is disabled, skipping {func.__name__}")
            return None

        return wrapper  # type: ignore

    return decorator


__all__ = ["feature_flag"]
