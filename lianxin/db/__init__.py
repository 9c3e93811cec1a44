"""Database client helpers built on resolved connection records."""

from lianxin.db.engine import (
    build_connect_args,
    build_url,
    create_engine,
    engine_options,
    is_retryable,
)

__all__ = [
    "build_connect_args",
    "build_url",
    "create_engine",
    "engine_options",
    "is_retryable",
]
