import pytest

from sinklog.config import CONFIG_ENV_VAR, ENVIRONMENT_ENV_VARS
from sinklog.factory import default_logger


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the host's env vars and the cached default logger out of tests."""
    for var in (CONFIG_ENV_VAR, *ENVIRONMENT_ENV_VARS):
        monkeypatch.delenv(var, raising=False)
    default_logger.cache_clear()
    yield
    default_logger.cache_clear()
