"""Enums for database configuration keys."""

from enum import Enum


class Environment(str, Enum):
    """Deployment tier selecting which configuration layer applies.

    - DEVELOPMENT: Per-service records, base pool and retry defaults
    - TEST: One flat record, logging and benchmarking forced off
    - PRODUCTION: Per-service records, production pool and retry defaults
    """

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


class ServiceKey(str, Enum):
    """Logical services that own a database schema.

    All services share host, port and credentials. Only the database
    name differs.
    """

    USER = "userServiceDB"
    LOCATION = "locationServiceDB"
    MEDIA = "mediaServiceDB"
    PLACE = "placeServiceDB"

    @property
    def database_env_var(self) -> str:
        """Environment variable holding this service's database name."""
        return _DATABASE_ENV_VARS[self]


_DATABASE_ENV_VARS: dict[ServiceKey, str] = {
    ServiceKey.USER: "DB_NAME_USER_SERVICE",
    ServiceKey.LOCATION: "DB_NAME_LOCATION_SERVICE",
    ServiceKey.MEDIA: "DB_NAME_MEDIA_SERVICE",
    ServiceKey.PLACE: "DB_NAME_PLACE_SERVICE",
}
