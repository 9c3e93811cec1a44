"""Configuration loading for Lianxin.

This module provides the central configuration system. Application settings
come from LIANXIN_* variables; database connection records are resolved from
the DB_* variables in a snapshot taken once per process.

Usage:
    from lianxin.config import get_database_config

    config = get_database_config("userServiceDB")
    pool_max = config.pool.max
"""

from functools import lru_cache

import structlog

from lianxin.config.errors import ConfigError, ConfigNotFoundError
from lianxin.config.loader import load_env_snapshot
from lianxin.config.models import (
    DatabaseConfigMap,
    Environment,
    ServiceDatabaseConfig,
    ServiceKey,
)
from lianxin.config.resolver import DatabaseConfigResolver, resolve_keys
from lianxin.config.settings import Settings
from lianxin.observability.logging import setup_logging


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    The result is cached for the lifetime of the process.
    Call `get_settings.cache_clear()` to reload configuration.
    """
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structured logging from the LIANXIN_LOG_* settings.

    The application name is bound to the logging context, so every event
    carries it.
    """
    settings = settings or get_settings()
    setup_logging(
        level=settings.log_level,
        format=settings.log_format,
        redact_secrets=settings.redact_secrets,
    )
    structlog.contextvars.bind_contextvars(app=settings.app_name)


@lru_cache(maxsize=1)
def get_database_configs() -> DatabaseConfigMap:
    """Get the resolved database configuration for every environment.

    The environment snapshot (dotenv file + process environment) is taken
    on first call and never re-read. A new process is needed to pick up
    changed values.
    """
    snapshot = load_env_snapshot(env_file=get_settings().env_file)
    return DatabaseConfigResolver(snapshot).resolve_all()


def get_database_config(
    service: ServiceKey | str | None = None,
    environment: Environment | str | None = None,
) -> ServiceDatabaseConfig:
    """Look up one resolved record from the cached mapping.

    Args:
        service: Service key; optional for the test environment
        environment: Defaults to the configured LIANXIN_ENVIRONMENT

    Raises:
        ConfigNotFoundError: Unknown environment or service key
    """
    env, key = resolve_keys(
        get_settings().environment if environment is None else environment,
        service,
    )
    configs = get_database_configs()

    if env is Environment.TEST or key is None:
        return configs.test

    per_service = configs.development if env is Environment.DEVELOPMENT else configs.production
    return per_service[key]


def reload() -> DatabaseConfigMap:
    """Clear cached settings and database configuration, then reload.

    Useful for testing. Running services should restart instead.
    """
    get_settings.cache_clear()
    get_database_configs.cache_clear()
    return get_database_configs()


__all__ = [
    "ConfigError",
    "ConfigNotFoundError",
    "Settings",
    "configure_logging",
    "get_database_config",
    "get_database_configs",
    "get_settings",
    "reload",
]
