"""Current Feature Store.

Resolves the store used when API calls are made without an explicit one:
- a request-scoped override set with ``use_store``
- otherwise the process-wide default store, built lazily from settings
"""

from __future__ import annotations

import contextvars
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from flipper.config import build_store
from flipper.storage import FeatureStore, RequestFeatureStore

logger = logging.getLogger(__name__)

_current_store: contextvars.ContextVar[Optional[FeatureStore]] = contextvars.ContextVar(
    "flipper_current_store", default=None
)

_default_store: Optional[FeatureStore] = None
_default_store_lock = threading.Lock()


def get_default_store() -> FeatureStore:
    """Get the process-wide store, creating it from settings on first use."""
    global _default_store
    with _default_store_lock:
        if _default_store is None:
            _default_store = build_store()
            logger.debug("Default feature store created from settings")
        return _default_store


def set_default_store(store: FeatureStore) -> None:
    global _default_store
    with _default_store_lock:
        _default_store = store


def reset_default_store() -> None:
    global _default_store
    with _default_store_lock:
        _default_store = None


def current_store() -> FeatureStore:
    """Store bound by the innermost ``use_store``, else the default store."""
    store = _current_store.get()
    if store is None:
        return get_default_store()
    return store


@contextmanager
def use_store(store: FeatureStore) -> Iterator[FeatureStore]:
    """Bind ``store`` as the current store for the enclosed block."""
    token = _current_store.set(store)
    try:
        yield store
    finally:
        _current_store.reset(token)


@contextmanager
def request_scope(
    request_id: Optional[str] = None, store: Optional[FeatureStore] = None
) -> Iterator[RequestFeatureStore]:
    """Layer a RequestFeatureStore over ``store`` (or the current store)."""
    scoped = RequestFeatureStore(store or current_store(), request_id=request_id)
    with use_store(scoped):
        yield scoped


__all__ = [
    "current_store",
    "get_default_store",
    "request_scope",
    "reset_default_store",
    "set_default_store",
    "use_store",
]
