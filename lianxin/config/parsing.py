"""Best-effort parsing of raw environment values.

Malformed values never raise. They are treated exactly like absent ones
and the caller's default is used instead.
"""

import re
from collections.abc import Mapping

from lianxin.observability.logging import get_logger

logger = get_logger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _leading_int(raw: str | None, maximum: int | None) -> int | None:
    if raw is None:
        return None
    match = _LEADING_INT.match(raw)
    if match is None:
        return None
    value = int(match.group(1))
    if value <= 0 or (maximum is not None and value > maximum):
        return None
    return value


def parse_int(raw: str | None, default: int, *, maximum: int | None = None) -> int:
    """Parse the leading integer of ``raw``.

    Trailing garbage is ignored (``"42ms"`` gives 42). Absent, empty,
    non-numeric, zero, negative and out-of-range values yield ``default``.
    """
    value = _leading_int(raw, maximum)
    return default if value is None else value


def parse_flag(raw: str | None) -> bool:
    """Only the literal string ``"true"`` switches a flag on."""
    return raw == "true"


def get_str(environ: Mapping[str, str], name: str, default: str | None = None) -> str | None:
    """Return a non-empty string value or ``default``."""
    return environ.get(name) or default


def get_int(
    environ: Mapping[str, str],
    name: str,
    default: int,
    *,
    maximum: int | None = None,
) -> int:
    """Read an integer variable, logging when a present value is rejected."""
    raw = environ.get(name)
    value = _leading_int(raw, maximum)
    if value is None:
        if raw:
            logger.warning("env_value_invalid", variable=name, raw=raw, default=default)
        return default
    return value
