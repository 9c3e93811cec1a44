"""Per-environment, per-service database configuration resolver.

Records are built in layers:
1. Base policy (charset, collation, TLS gate, pool bounds, retry policy)
2. Environment tier (production pool/retry defaults, test quietness)
3. Service tier (credentials, host, port and the service's database name)

Resolution is a pure function of the injected environment snapshot.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Literal, TypeVar

from lianxin.config.errors import ConfigNotFoundError
from lianxin.config.models import (
    ConnectionPolicy,
    DatabaseConfigMap,
    Environment,
    PoolConfig,
    RetryConfig,
    ServiceDatabaseConfig,
    ServiceKey,
    TLSConfig,
)
from lianxin.config.parsing import get_int, get_str, parse_flag
from lianxin.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PORT = 3306
MAX_PORT = 65535

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class TierDefaults:
    """Literal defaults applied when a variable is absent or malformed."""

    pool: PoolConfig
    retry_max: int
    quiet: bool = False


BASE_DEFAULTS = TierDefaults(
    pool=PoolConfig(max=15, min=3, acquire=30000, idle=15000, evict=60000),
    retry_max=3,
)

TIER_DEFAULTS: dict[Environment, TierDefaults] = {
    Environment.DEVELOPMENT: BASE_DEFAULTS,
    Environment.TEST: replace(BASE_DEFAULTS, quiet=True),
    Environment.PRODUCTION: TierDefaults(
        pool=PoolConfig(max=15, min=5, acquire=30000, idle=10000, evict=60000),
        retry_max=5,
    ),
}

TEST_USERNAME = "root"
TEST_DATABASE = "lianxin"
TEST_HOST = "localhost"


def coerce_key(enum_cls: type[E], value: object, kind: str) -> E:
    """Convert a raw key into a member of a closed key set."""
    try:
        return enum_cls(value)
    except ValueError:
        raise ConfigNotFoundError(value, kind, [member.value for member in enum_cls]) from None


def resolve_keys(
    environment: Environment | str,
    service: ServiceKey | str | None,
) -> tuple[Environment, ServiceKey | None]:
    """Validate an (environment, service) pair against the closed key sets.

    Test has a single flat record, so ``service`` is optional there but
    must still be a known key when given. The other environments require
    a service.

    Raises:
        ConfigNotFoundError: Unknown environment or service key, or no
            service given for a per-service environment
    """
    env = coerce_key(Environment, environment, "environment")
    if service is None:
        if env is Environment.TEST:
            return env, None
        raise ConfigNotFoundError(
            None,
            "service",
            [member.value for member in ServiceKey],
            context=f"the {env.value!r} environment",
        )
    return env, coerce_key(ServiceKey, service, "service")


class DatabaseConfigResolver:
    """Resolves connection descriptors from an environment snapshot.

    The snapshot is copied on construction, so later changes to the source
    mapping are not observed.
    """

    def __init__(self, environ: Mapping[str, str]) -> None:
        self._environ: dict[str, str] = dict(environ)

    def base_policy(self) -> ConnectionPolicy:
        """Policy shared by every environment before tier overrides."""
        return self._build_policy(BASE_DEFAULTS)

    def policy_for(self, environment: Environment | str) -> ConnectionPolicy:
        """Base policy with the environment tier applied."""
        env = coerce_key(Environment, environment, "environment")
        return self._build_policy(TIER_DEFAULTS[env])

    def resolve(
        self,
        environment: Environment | str,
        service: ServiceKey | str | None = None,
    ) -> ServiceDatabaseConfig:
        """Resolve the record for one (environment, service) pair.

        Raises:
            ConfigNotFoundError: See ``resolve_keys``
        """
        env, key = resolve_keys(environment, service)
        policy = self.policy_for(env)

        if env is Environment.TEST or key is None:
            config = self._test_record(policy)
        else:
            config = self._service_record(policy, key)

        logger.debug(
            "database_config_resolved",
            environment=env.value,
            service=key.value if key is not None else None,
            host=config.host,
            port=config.port,
            database=config.database,
            tls=config.tls_enabled,
        )
        return config

    def resolve_all(self) -> DatabaseConfigMap:
        """Resolve every environment and, where split, every service."""
        return DatabaseConfigMap(
            development=self._per_service(Environment.DEVELOPMENT),
            test=self._test_record(self.policy_for(Environment.TEST)),
            production=self._per_service(Environment.PRODUCTION),
        )

    def _per_service(self, env: Environment) -> dict[ServiceKey, ServiceDatabaseConfig]:
        policy = self.policy_for(env)
        return {service: self._service_record(policy, service) for service in ServiceKey}

    def _build_policy(self, defaults: TierDefaults) -> ConnectionPolicy:
        return ConnectionPolicy(
            tls=self._tls(),
            pool=self._pool(defaults.pool),
            logging=False if defaults.quiet else parse_flag(self._environ.get("DB_LOGGING_ENABLED")),
            benchmark=False if defaults.quiet else parse_flag(self._environ.get("DB_BENCHMARK_ENABLED")),
            retry=RetryConfig(max=get_int(self._environ, "DB_RETRY_MAX", defaults.retry_max)),
        )

    def _tls(self) -> TLSConfig | Literal[False]:
        if not parse_flag(self._environ.get("DB_SSL_ENABLED")):
            return False
        return TLSConfig(
            ca=get_str(self._environ, "DB_SSL_CA"),
            key=get_str(self._environ, "DB_SSL_KEY"),
            cert=get_str(self._environ, "DB_SSL_CERT"),
        )

    def _pool(self, defaults: PoolConfig) -> PoolConfig:
        env = self._environ
        pool_max = get_int(env, "DB_POOL_MAX", defaults.max)
        pool_min = get_int(env, "DB_POOL_MIN", defaults.min)
        if pool_min > pool_max:
            logger.warning("pool_min_clamped", min=pool_min, max=pool_max)
            pool_min = pool_max
        return PoolConfig(
            max=pool_max,
            min=pool_min,
            acquire=get_int(env, "DB_POOL_ACQUIRE", defaults.acquire),
            idle=get_int(env, "DB_POOL_IDLE", defaults.idle),
            evict=get_int(env, "DB_POOL_EVICT", defaults.evict),
        )

    def _service_record(
        self, policy: ConnectionPolicy, service: ServiceKey
    ) -> ServiceDatabaseConfig:
        env = self._environ
        return ServiceDatabaseConfig(
            **dict(policy),
            username=get_str(env, "DB_USER"),
            password=get_str(env, "DB_PASSWORD"),
            database=get_str(env, service.database_env_var),
            host=get_str(env, "DB_HOST"),
            port=get_int(env, "DB_PORT", DEFAULT_PORT, maximum=MAX_PORT),
        )

    def _test_record(self, policy: ConnectionPolicy) -> ServiceDatabaseConfig:
        env = self._environ
        return ServiceDatabaseConfig(
            **dict(policy),
            username=get_str(env, "DB_USER_TEST", TEST_USERNAME),
            password=get_str(env, "DB_PASSWORD_TEST"),
            database=get_str(env, "DB_NAME_TEST", TEST_DATABASE),
            host=get_str(env, "DB_HOST_TEST", TEST_HOST),
            port=get_int(env, "DB_PORT_TEST", DEFAULT_PORT, maximum=MAX_PORT),
        )


def build_database_configs(environ: Mapping[str, str]) -> DatabaseConfigMap:
    """Resolve the full configuration mapping from an environment snapshot."""
    return DatabaseConfigResolver(environ).resolve_all()
