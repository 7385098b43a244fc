import os

import pytest

from flipper import config, context

_ENV_VARS_TO_ISOLATE = [
    "FLIPPER_ENABLED_FEATURES",
    "FLIPPER_SEED_FILE",
    "FLIPPER_LOG_LEVEL",
    "FLIPPER_JSON_LOGS",
    "FLIPPER_SERVICE_NAME",
    "FLIPPER_ENVIRONMENT",
]


@pytest.fixture(autouse=True)
def env_isolation():
    """Isolate environment variables between tests."""
    backup = {k: os.environ.get(k) for k in _ENV_VARS_TO_ISOLATE}
    for k in _ENV_VARS_TO_ISOLATE:
        os.environ.pop(k, None)
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v


@pytest.fixture(autouse=True)
def store_isolation():
    """Reset cached settings and the default feature store between tests."""
    config.reset_settings()
    context.reset_default_store()
    try:
        yield
    finally:
        config.reset_settings()
        context.reset_default_store()
