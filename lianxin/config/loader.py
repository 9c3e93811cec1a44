"""Environment snapshot loading.

The resolver never reads ``os.environ`` directly. Instead a snapshot is
taken once here, merging an optional ``.env`` file under the real process
environment, and passed in explicitly.
"""

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values

from lianxin.observability.logging import get_logger

logger = get_logger(__name__)


def load_env_file(file_path: Path) -> dict[str, str]:
    """Load key/value pairs from a dotenv file.

    A missing file yields an empty mapping. Keys declared without a value
    are dropped.

    Args:
        file_path: Path to the dotenv file

    Returns:
        Dictionary of the file's variables
    """
    if not file_path.is_file():
        return {}

    values = dotenv_values(file_path)
    return {key: value for key, value in values.items() if value is not None}


def load_env_snapshot(
    environ: Mapping[str, str] | None = None,
    env_file: Path | str = ".env",
) -> dict[str, str]:
    """Take a snapshot of configuration variables.

    Loading order (later wins):
    1. The dotenv file at ``env_file`` (optional)
    2. ``environ`` (defaults to the process environment)

    The process environment itself is never modified.

    Returns:
        Merged plain dictionary
    """
    path = Path(env_file)
    snapshot = load_env_file(path)
    snapshot.update(os.environ if environ is None else environ)

    logger.debug("env_snapshot_loaded", env_file=str(path), variables=len(snapshot))
    return snapshot
