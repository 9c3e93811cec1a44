"""Shared test fixtures for the Lianxin test suite."""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

from lianxin.config.resolver import DatabaseConfigResolver

PRODUCTION_ENV: dict[str, str] = {
    "DB_USER": "lianxin_app",
    "DB_PASSWORD": "s3cret",
    "DB_HOST": "db.internal",
    "DB_PORT": "3307",
    "DB_NAME_USER_SERVICE": "user_service_db",
    "DB_NAME_LOCATION_SERVICE": "location_service_db",
    "DB_NAME_MEDIA_SERVICE": "media_service_db",
    "DB_NAME_PLACE_SERVICE": "place_service_db",
}


@pytest.fixture
def production_env() -> dict[str, str]:
    """A fully populated DB_* snapshot for per-service environments."""
    return dict(PRODUCTION_ENV)


@pytest.fixture
def make_resolver() -> Callable[..., DatabaseConfigResolver]:
    """Factory fixture building a resolver from keyword overrides.

    Usage:
        def test_something(make_resolver):
            resolver = make_resolver(DB_POOL_MAX="20")
    """

    def _make(base: dict[str, str] | None = None, **overrides: str) -> DatabaseConfigResolver:
        environ = dict(base or {})
        environ.update(overrides)
        return DatabaseConfigResolver(environ)

    return _make


@pytest.fixture
def write_env_file(tmp_path: Path) -> Callable[[str], Path]:
    """Factory fixture writing a dotenv file and returning its path."""

    def _write(content: str) -> Path:
        env_file = tmp_path / ".env"
        env_file.write_text(content)
        return env_file

    return _write


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Restore structlog's default configuration and context after each test."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture(autouse=True)
def clear_config_cache() -> Generator[None, None, None]:
    """Clear cached settings and database configuration around each test."""
    from lianxin.config import get_database_configs, get_settings

    get_settings.cache_clear()
    get_database_configs.cache_clear()
    yield
    get_settings.cache_clear()
    get_database_configs.cache_clear()
