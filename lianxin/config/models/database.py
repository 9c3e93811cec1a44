"""Database connection configuration models.

Every record here is frozen. A resolved configuration is built once and
then only read, so several consumers can safely share one instance.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_serializer,
    field_validator,
    model_validator,
)

from lianxin.config.models.enums import ServiceKey

RETRYABLE_ERROR_CODES: frozenset[str] = frozenset({
    "ECONNRESET",
    "ENOTFOUND",
    "ECONNREFUSED",
    "EHOSTUNREACH",
    "ETIMEDOUT",
    "ESOCKETTIMEDOUT",
})


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TLSConfig(_FrozenModel):
    """TLS material for the database connection.

    Only present when TLS is switched on. A disabled TLS block is the
    literal ``False`` on the owning policy, never an empty TLSConfig.
    """

    ca: str | None = Field(default=None, description="CA certificate (PEM or path)")
    key: str | None = Field(default=None, description="Client private key")
    cert: str | None = Field(default=None, description="Client certificate")
    reject_unauthorized: bool = Field(
        default=False,
        description="Verify the server certificate against the CA",
    )


class PoolConfig(_FrozenModel):
    """Connection pool bounds. Timeouts are in milliseconds."""

    max: int = Field(default=15, ge=0, description="Maximum live connections")
    min: int = Field(default=3, ge=0, description="Minimum live connections")
    acquire: int = Field(default=30000, ge=0, description="Acquire timeout (ms)")
    idle: int = Field(default=15000, ge=0, description="Idle timeout (ms)")
    evict: int = Field(default=60000, ge=0, description="Eviction interval (ms)")

    @model_validator(mode="after")
    def check_bounds(self) -> "PoolConfig":
        if self.min > self.max:
            raise ValueError(f"pool min ({self.min}) exceeds pool max ({self.max})")
        return self


class RetryConfig(_FrozenModel):
    """Retry metadata for the downstream connection client."""

    max: int = Field(default=3, ge=0, description="Maximum retry attempts")
    match: frozenset[str] = Field(
        default=RETRYABLE_ERROR_CODES,
        description="Network error codes eligible for retry",
    )


class ConnectionPolicy(_FrozenModel):
    """Connection policy shared by every service in an environment."""

    dialect: Literal["mysql"] = "mysql"
    timezone: Literal["+00:00"] = "+00:00"
    collate: str = Field(default="utf8mb4_unicode_ci", description="Table default collation")
    charset: str = "utf8mb4"
    date_strings: bool = Field(default=True, description="Return dates as strings")
    type_cast: bool = True
    tls: TLSConfig | Literal[False] = False
    pool: PoolConfig = Field(default_factory=PoolConfig)
    logging: bool = Field(default=False, description="Log executed statements")
    benchmark: bool = Field(default=False, description="Record statement timings")
    retry: RetryConfig = Field(default_factory=RetryConfig)

    @property
    def tls_enabled(self) -> bool:
        return self.tls is not False


class ServiceDatabaseConfig(ConnectionPolicy):
    """Fully resolved connection descriptor for one service."""

    username: str | None = None
    password: SecretStr | None = None
    database: str | None = None
    host: str | None = None
    port: int = Field(default=3306, gt=0, le=65535)


class DatabaseConfigMap(_FrozenModel):
    """Resolved configuration for every environment.

    Development and production are keyed by service. Test holds a
    single flat record shared by every service. The per-service mappings
    are read-only views, so the shared instance cannot be changed in place.
    """

    development: Mapping[ServiceKey, ServiceDatabaseConfig]
    test: ServiceDatabaseConfig
    production: Mapping[ServiceKey, ServiceDatabaseConfig]

    @field_validator("development", "production", mode="after")
    @classmethod
    def freeze_services(
        cls, services: Mapping[ServiceKey, ServiceDatabaseConfig]
    ) -> Mapping[ServiceKey, ServiceDatabaseConfig]:
        return MappingProxyType(dict(services))

    @field_serializer("development", "production")
    def serialize_services(
        self, services: Mapping[ServiceKey, ServiceDatabaseConfig]
    ) -> dict[ServiceKey, ServiceDatabaseConfig]:
        return dict(services)


class MigrationTarget(_FrozenModel):
    """Connection target used by the schema migration tool."""

    username: str
    password: SecretStr | None = None
    database: str
    host: str
    port: int = Field(default=3306, gt=0, le=65535)
    dialect: Literal["mysql"] = "mysql"
