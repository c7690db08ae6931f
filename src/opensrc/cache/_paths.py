"""Cache directory layout.

All paths derive from an explicit project root::

    <root>/opensrc/
        sources.json
        packages/<ecosystem>/<name>          # @scope/name nests one level
        repos/<host>/<owner>/<repo>
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from opensrc.enums import Ecosystem

CACHE_DIR_NAME = "opensrc"
INDEX_FILE_NAME = "sources.json"
PACKAGES_DIR_NAME = "packages"
REPOS_DIR_NAME = "repos"


def get_opensrc_dir(project_root: Path) -> Path:
    """Get the cache root, ``<root>/opensrc``."""
    return project_root / CACHE_DIR_NAME


def get_index_path(project_root: Path) -> Path:
    """Get the index file, ``<root>/opensrc/sources.json``."""
    return get_opensrc_dir(project_root) / INDEX_FILE_NAME


def get_packages_dir(project_root: Path, ecosystem: Ecosystem | None = None) -> Path:
    """Get the packages directory, or one ecosystem's bucket within it."""
    packages_dir = get_opensrc_dir(project_root) / PACKAGES_DIR_NAME
    return packages_dir / str(ecosystem) if ecosystem is not None else packages_dir


def get_repos_dir(project_root: Path) -> Path:
    """Get the repositories directory."""
    return get_opensrc_dir(project_root) / REPOS_DIR_NAME


def get_package_relative_path(name: str, ecosystem: Ecosystem = Ecosystem.NPM) -> str:
    """Get a package path relative to the cache root.

    Example:
        >>> get_package_relative_path("@babel/core")
        'packages/npm/@babel/core'
    """
    return str(PurePosixPath(PACKAGES_DIR_NAME, str(ecosystem), *name.split("/")))


def get_package_path(
    project_root: Path, name: str, ecosystem: Ecosystem = Ecosystem.NPM
) -> Path:
    """Get the absolute directory a package is fetched into."""
    return get_opensrc_dir(project_root).joinpath(
        *get_package_relative_path(name, ecosystem).split("/")
    )


def get_repo_relative_path(identity: str) -> str:
    """Get a repository path relative to the cache root.

    Example:
        >>> get_repo_relative_path("github.com/vercel/ai")
        'repos/github.com/vercel/ai'
    """
    return str(PurePosixPath(REPOS_DIR_NAME, *identity.split("/")))


def get_repo_path(project_root: Path, identity: str) -> Path:
    """Get the absolute directory a repository is fetched into."""
    return get_opensrc_dir(project_root).joinpath(
        *get_repo_relative_path(identity).split("/")
    )
