"""Connection target for the schema migration tool.

Migrations run against the user service schema with a minimal record.
Unlike the runtime resolver, every field has a literal fallback, and the
same fallback chain applies to all three environments.
"""

from collections.abc import Mapping

from lianxin.config.models import Environment, MigrationTarget
from lianxin.config.parsing import get_int, get_str
from lianxin.config.resolver import DEFAULT_PORT, MAX_PORT, coerce_key


def resolve_migration_target(
    environment: Environment | str,
    environ: Mapping[str, str],
) -> MigrationTarget:
    """Resolve the migration target for an environment.

    Raises:
        ConfigNotFoundError: If the environment is not recognized
    """
    coerce_key(Environment, environment, "environment")

    password = get_str(environ, "DB_PASSWORD_USER_SERVICE") or get_str(
        environ, "MYSQL_ROOT_PASSWORD"
    )
    return MigrationTarget(
        username=get_str(environ, "DB_USER_USER_SERVICE", "root"),
        password=password,
        database=get_str(environ, "DB_NAME_USER_SERVICE", "user_service_db"),
        host=get_str(environ, "DB_HOST", "127.0.0.1"),
        port=get_int(environ, "DB_PORT", DEFAULT_PORT, maximum=MAX_PORT),
    )
