"""Well-known paths used by opensrc outside the project cache."""

from os import getenv
from pathlib import Path

import platformdirs


def get_user_log_dir() -> Path:
    """Get the platform-specific directory opensrc writes logs to."""
    return platformdirs.user_log_path("opensrc")


def get_cli_log_file() -> Path:
    """Get the CLI log file path.

    ``OPENSRC_LOG_FILE`` overrides the default location.

    Returns:
        Path to the CLI log file. The file may not exist yet.
    """
    override = getenv("OPENSRC_LOG_FILE")
    if override:
        return Path(override)
    return get_user_log_dir() / "cli.log"
