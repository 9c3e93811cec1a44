"""Configuration model exports.

    from lianxin.config.models import ServiceDatabaseConfig, ServiceKey
"""

from lianxin.config.models.database import (
    RETRYABLE_ERROR_CODES,
    ConnectionPolicy,
    DatabaseConfigMap,
    MigrationTarget,
    PoolConfig,
    RetryConfig,
    ServiceDatabaseConfig,
    TLSConfig,
)
from lianxin.config.models.enums import Environment, ServiceKey

__all__ = [
    "RETRYABLE_ERROR_CODES",
    "ConnectionPolicy",
    "DatabaseConfigMap",
    "Environment",
    "MigrationTarget",
    "PoolConfig",
    "RetryConfig",
    "ServiceDatabaseConfig",
    "ServiceKey",
    "TLSConfig",
]
