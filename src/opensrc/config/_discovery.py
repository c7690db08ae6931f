"""Config path discovery."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import platformdirs

from ._defaults import DEFAULT_CONFIG
from ._models import ConfigSource, ConfigSourceName

if TYPE_CHECKING:
    from pathlib import Path

PROJECT_CONFIG_NAME = ".opensrc.toml"


def get_user_config_path() -> Path:
    r"""Get the platform-specific user config file path.

    - Linux: ``~/.config/opensrc/config.toml``
    - macOS: ``~/Library/Application Support/opensrc/config.toml``
    - Windows: ``%APPDATA%\opensrc\config.toml``

    The file may not exist.
    """
    return platformdirs.user_config_path("opensrc") / "config.toml"


def get_project_config_path(project_root: Path) -> Path:
    """Get the project config file path, ``<root>/.opensrc.toml``."""
    return project_root / PROJECT_CONFIG_NAME


def _file_exists(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def discover_sources(
    project_root: Path,
    *,
    include_env: bool = True,
    cli_overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> list[ConfigSource]:
    """Discover all configuration sources, highest precedence first.

    File sources are included even when the file does not exist
    (``exists=False``) so callers can report where config is looked for.

    Args:
        project_root: Project root directory.
        include_env: Include environment variables as a source.
        cli_overrides: Values from command-line flags.

    Returns:
        List of ConfigSource objects, highest precedence first.
    """
    sources: list[ConfigSource] = []

    if cli_overrides is not None:
        sources.append(
            ConfigSource(
                name=ConfigSourceName.CLI,
                path=None,
                exists=bool(cli_overrides),
                values=cli_overrides,
            )
        )

    if include_env:
        # Values are parsed during loading
        sources.append(
            ConfigSource(name=ConfigSourceName.ENV, path=None, exists=True, values={})
        )

    project_path = get_project_config_path(project_root)
    sources.append(
        ConfigSource(
            name=ConfigSourceName.PROJECT,
            path=project_path,
            exists=_file_exists(project_path),
            values={},
        )
    )

    user_path = get_user_config_path()
    sources.append(
        ConfigSource(
            name=ConfigSourceName.USER,
            path=user_path,
            exists=_file_exists(user_path),
            values={},
        )
    )

    sources.append(
        ConfigSource(
            name=ConfigSourceName.DEFAULT,
            path=None,
            exists=True,
            values=DEFAULT_CONFIG,
        )
    )

    return sources
