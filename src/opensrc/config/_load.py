"""Configuration loading with error handling for the CLI."""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Any

from opensrc.exceptions import ConfigError

from ._loader import deep_merge
from ._models import Config

if TYPE_CHECKING:
    from pathlib import Path


def _fail_or_warn(error_msg: str, *, strict_mode: bool) -> None:
    if strict_mode:
        print(f"Error: {error_msg}", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    print(f"Warning: Failed to load config: {error_msg}", file=sys.stderr)  # noqa: T201


def safe_load_config(
    *,
    project_root: Path,
    config_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> tuple[Config, str | None]:
    """Load configuration, degrading to defaults on error.

    With ``OPENSRC_STRICT_CONFIG=1`` any error exits with status 1;
    otherwise a warning is printed to stderr and defaults are used. An
    explicit ``config_path`` must exist in either mode.

    Args:
        project_root: Project root directory.
        config_path: Explicit config file (``--config``); replaces the
            user and project files.
        cli_overrides: Values from command-line flags.

    Returns:
        Tuple of (Config, error_message). error_message is None on success.
    """
    strict_mode = os.environ.get("OPENSRC_STRICT_CONFIG", "0") == "1"

    try:
        if config_path is not None:
            if not config_path.exists():
                print(f"Error: Config file not found: {config_path}", file=sys.stderr)  # noqa: T201
                sys.exit(1)
            config = Config.from_file(config_path)
            if cli_overrides:
                config = Config.from_dict(
                    deep_merge(config.model_dump(mode="json"), cli_overrides),
                    sources=tuple(config.sources),
                )
            return config, None

        config = Config.load(project_root=project_root, cli_overrides=cli_overrides)
    except (ConfigError, OSError) as e:
        error_msg = str(e)
        _fail_or_warn(error_msg, strict_mode=strict_mode)
        return Config.from_dict({}), error_msg
    else:
        return config, None
