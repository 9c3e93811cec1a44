"""Print resolved database configuration.

Usage:
    python -m lianxin.config --env production --service userServiceDB
    python -m lianxin.config --all --env-file deploy/.env

Secrets are always redacted in the output. Log events go to stderr and
follow LIANXIN_LOG_LEVEL and LIANXIN_LOG_FORMAT.
"""

import argparse
import json
import sys
from collections.abc import Sequence
from typing import Any

from lianxin.config import configure_logging, get_settings
from lianxin.config.errors import ConfigNotFoundError
from lianxin.config.loader import load_env_snapshot
from lianxin.config.models import Environment, ServiceKey
from lianxin.config.resolver import DatabaseConfigResolver
from lianxin.observability.logging import SecretRedactor


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m lianxin.config",
        description="Show resolved database connection configuration.",
    )
    parser.add_argument(
        "--env",
        default=Environment.DEVELOPMENT.value,
        help=f"Environment ({', '.join(e.value for e in Environment)})",
    )
    parser.add_argument(
        "--service",
        default=None,
        help=f"Service key ({', '.join(s.value for s in ServiceKey)})",
    )
    parser.add_argument("--all", action="store_true", help="Show every environment and service")
    parser.add_argument("--env-file", default=".env", help="Dotenv file to read DB_* values from")
    return parser


def render(payload: dict[str, Any]) -> str:
    return json.dumps(SecretRedactor().redact(payload), indent=2, sort_keys=True)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings())

    resolver = DatabaseConfigResolver(load_env_snapshot(env_file=args.env_file))
    try:
        if args.all:
            payload = resolver.resolve_all().model_dump(mode="json")
        else:
            payload = resolver.resolve(args.env, args.service).model_dump(mode="json")
    except ConfigNotFoundError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 2

    print(render(payload))
    return 0


if __name__ == "__main__":
    sys.exit(main())
