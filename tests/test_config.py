import pytest

from config import Settings, require_database_url, require_queue_url
from core.exceptions import ConfigurationError


def bare_settings(**overrides):
    values = {"REDIS_URL": None, "CELERY_BROKER_URL": None, "CELERY_RESULT_BACKEND": None, "DATABASE_URL": None}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_defaults():
    config = bare_settings()

    assert config.AUDIT_QUEUE_NAME == "audit"
    assert config.WORKER_CONCURRENCY == 2
    assert config.WORKER_PREFETCH_MULTIPLIER == 1
    assert config.VIEWPORT_WIDTH == 1280
    assert config.VIEWPORT_HEIGHT == 800
    assert config.NAVIGATION_TIMEOUT_MS == 30000


def test_broker_and_backend_fall_back_to_redis_url():
    config = bare_settings(REDIS_URL="redis://cache:6379/0")

    assert config.celery_broker == "redis://cache:6379/0"
    assert config.celery_backend == "redis://cache:6379/0"


def test_explicit_broker_wins():
    config = bare_settings(REDIS_URL="redis://a:6379/0", CELERY_BROKER_URL="redis://b:6379/1")

    assert config.celery_broker == "redis://b:6379/1"


def test_missing_endpoints_raise_configuration_error():
    config = bare_settings()

    with pytest.raises(ConfigurationError, match="REDIS_URL"):
        require_queue_url(config)
    with pytest.raises(ConfigurationError, match="DATABASE_URL"):
        require_database_url(config)


def test_present_endpoints_are_returned():
    config = bare_settings(REDIS_URL="redis://cache:6379/0", DATABASE_URL="sqlite://")

    assert require_queue_url(config) == "redis://cache:6379/0"
    assert require_database_url(config) == "sqlite://"


def test_concurrency_must_be_positive():
    with pytest.raises(ValueError):
        bare_settings(WORKER_CONCURRENCY=0)
