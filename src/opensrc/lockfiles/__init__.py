"""Installed-version detection from project lockfiles.

Functions:
    resolve_installed_version: First version listed for a package across
        the ecosystem's lockfiles.
    normalize_name: PEP 503 name normalization.

Classes:
    LockfileStrategy: One lockfile format (locator plus reader).

Constants:
    LOCKFILE_STRATEGIES: Strategy order per ecosystem.
"""

from opensrc.lockfiles._pypi import normalize_name
from opensrc.lockfiles._resolver import resolve_installed_version
from opensrc.lockfiles._strategies import LOCKFILE_STRATEGIES, LockfileStrategy

__all__ = [
    "LOCKFILE_STRATEGIES",
    "LockfileStrategy",
    "normalize_name",
    "resolve_installed_version",
]
