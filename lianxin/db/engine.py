"""SQLAlchemy engine construction from resolved connection records.

The config resolver only emits parameters. This module is the client
layer that turns a ServiceDatabaseConfig into an engine, and owns the
actual statement logging and benchmarking side effects.
"""

import errno
import socket
import time
from collections.abc import Callable, Iterator
from typing import Any

from sqlalchemy import URL, event
from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.engine import Engine

from lianxin.config.models import RetryConfig, ServiceDatabaseConfig
from lianxin.observability.logging import get_logger

logger = get_logger(__name__)

LogSink = Callable[..., Any]

DEFAULT_DRIVER = "pymysql"

# Python exception types that carry no errno but map onto a retryable code
_EXCEPTION_CODES: tuple[tuple[type[BaseException], str], ...] = (
    (socket.gaierror, "ENOTFOUND"),
    (ConnectionResetError, "ECONNRESET"),
    (ConnectionRefusedError, "ECONNREFUSED"),
    (TimeoutError, "ETIMEDOUT"),
)


def build_url(config: ServiceDatabaseConfig, driver: str = DEFAULT_DRIVER) -> URL:
    """Build the SQLAlchemy URL for a resolved record."""
    return URL.create(
        drivername=f"{config.dialect}+{driver}",
        username=config.username,
        password=config.password.get_secret_value() if config.password else None,
        host=config.host,
        port=config.port,
        database=config.database,
        query={"charset": config.charset},
    )


def build_connect_args(config: ServiceDatabaseConfig) -> dict[str, Any]:
    """DBAPI connect arguments: session timezone and TLS.

    TLS is all or nothing. A disabled record sets ``ssl_disabled`` so the
    driver never negotiates TLS on its own. An enabled record always sends
    a non-empty ``ssl`` dict, which makes TLS mandatory, and peer and
    hostname verification follow ``reject_unauthorized``.
    """
    connect_args: dict[str, Any] = {
        "init_command": f"SET time_zone = '{config.timezone}'",
    }
    if config.tls is False:
        connect_args["ssl_disabled"] = True
        return connect_args

    tls = config.tls
    ssl_params: dict[str, Any] = {
        name: value
        for name, value in (("ca", tls.ca), ("key", tls.key), ("cert", tls.cert))
        if value is not None
    }
    # PyMySQL maps bool and string verify_mode values; an ssl.VerifyMode
    # falls back to CERT_REQUIRED once a CA is present
    ssl_params["verify_mode"] = tls.reject_unauthorized
    ssl_params["check_hostname"] = tls.reject_unauthorized
    connect_args["ssl"] = ssl_params
    return connect_args


def engine_options(config: ServiceDatabaseConfig) -> dict[str, Any]:
    """Keyword arguments for ``sqlalchemy.create_engine``.

    Pool bounds map onto QueuePool: ``min`` connections are kept and up to
    ``max - min`` overflow connections are opened on demand. Millisecond
    timeouts are converted to seconds, and connections are recycled once
    they are older than the eviction interval. QueuePool has no idle
    timeout, so ``idle`` is not forwarded. Statement logging goes through
    ``attach_statement_logging``, never ``echo``.
    """
    pool = config.pool
    return {
        "pool_size": pool.min,
        "max_overflow": pool.max - pool.min,
        "pool_timeout": pool.acquire / 1000,
        "pool_recycle": pool.evict / 1000,
        "pool_pre_ping": True,
        "connect_args": build_connect_args(config),
    }


def create_engine(
    config: ServiceDatabaseConfig,
    *,
    driver: str = DEFAULT_DRIVER,
    log_sink: LogSink | None = None,
) -> Engine:
    """Create an engine for a resolved record.

    When the record's ``logging`` flag is on, every statement is passed to
    ``log_sink`` (a structlog logger's ``info`` by default). When
    ``benchmark`` is on, the statement's duration is included.
    """
    engine = sa_create_engine(build_url(config, driver), **engine_options(config))
    if config.logging:
        attach_statement_logging(
            engine,
            log_sink or get_logger("lianxin.db.sql").info,
            benchmark=config.benchmark,
        )
    logger.info(
        "database_engine_created",
        host=config.host,
        port=config.port,
        database=config.database,
        tls=config.tls_enabled,
    )
    return engine


def attach_statement_logging(engine: Engine, sink: LogSink, *, benchmark: bool = False) -> None:
    """Forward executed statements on ``engine`` to ``sink``.

    The start time lives on the statement's execution context, so a
    statement that fails leaves nothing behind on the pooled connection.
    """

    @event.listens_for(engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):  # noqa: ARG001
        if context is not None:
            context._lianxin_query_start = time.perf_counter()

    @event.listens_for(engine, "after_cursor_execute")
    def _log_statement(conn, cursor, statement, parameters, context, executemany):  # noqa: ARG001
        started = getattr(context, "_lianxin_query_start", None)
        if benchmark and started is not None:
            sink("sql_statement", statement=statement, duration_ms=(time.perf_counter() - started) * 1000)
        else:
            sink("sql_statement", statement=statement)


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        # SQLAlchemy wraps the DBAPI error in ``orig``
        orig = getattr(current, "orig", None)
        current = orig if isinstance(orig, BaseException) else current.__cause__ or current.__context__


def error_codes(exc: BaseException) -> set[str]:
    """Collect network error codes from an exception and its causes."""
    codes: set[str] = set()
    for item in _exception_chain(exc):
        number = getattr(item, "errno", None)
        if isinstance(number, int) and number in errno.errorcode:
            codes.add(errno.errorcode[number])
        code = getattr(item, "code", None)
        if isinstance(code, str):
            codes.add(code)
        for exc_type, name in _EXCEPTION_CODES:
            if isinstance(item, exc_type):
                codes.add(name)
    return codes


def is_retryable(exc: BaseException, retry: RetryConfig) -> bool:
    """Whether ``exc`` carries one of the retry policy's error codes."""
    return bool(error_codes(exc) & retry.match)
