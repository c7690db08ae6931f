"""Installed-version lookup across lockfiles."""

from __future__ import annotations

from typing import TYPE_CHECKING

import yaml

from opensrc.utils import create_cli_logger

from ._strategies import LOCKFILE_STRATEGIES

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from opensrc.enums import Ecosystem

    from ._strategies import LockfileStrategy

# UnicodeDecodeError, TOMLDecodeError and JSONDecodeError are ValueErrors
_READ_ERRORS = (OSError, ValueError, yaml.YAMLError)


def resolve_installed_version(
    ecosystem: Ecosystem,
    name: str,
    project_root: Path,
    *,
    strategies: tuple[LockfileStrategy, ...] | None = None,
    logger: FilteringBoundLogger | None = None,
) -> str | None:
    """Find the version of a package installed in a project.

    Strategies for the ecosystem are tried in order; the first one whose
    file exists and lists the package wins. A missing lockfile, a package
    that is not listed, and a malformed lockfile all yield None.

    Args:
        ecosystem: Ecosystem of the package.
        name: Exact package name (npm scope included).
        project_root: Directory containing the lockfiles.
        strategies: Override the strategy table for the ecosystem.
        logger: Logger for diagnostics.

    Returns:
        The installed version, or None if it cannot be determined.
    """
    log = logger if logger is not None else create_cli_logger()
    candidates = strategies if strategies is not None else LOCKFILE_STRATEGIES[ecosystem]

    for strategy in candidates:
        path = strategy.locate(project_root, name)
        if not path.is_file():
            continue

        try:
            version = strategy.read(path, name)
        except _READ_ERRORS as e:
            log.debug(
                "lockfile_unreadable",
                lockfile=strategy.label,
                path=str(path),
                error=str(e),
            )
            continue

        if version:
            log.debug(
                "lockfile_version_found",
                ecosystem=str(ecosystem),
                package=name,
                lockfile=strategy.label,
                version=version,
            )
            return version

    return None
