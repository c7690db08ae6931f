"""Lockfile strategy table.

For each ecosystem, the lockfiles to consult in precedence order. Where a
strategy looks may depend on the package name (an installed
``node_modules`` manifest), so ``locate`` is a callable.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from opensrc.enums import Ecosystem

from ._crates import read_cargo_lock
from ._npm import (
    read_installed_package_json,
    read_package_lock,
    read_pnpm_lock,
    read_yarn_lock,
)
from ._pypi import (
    read_pipfile_lock,
    read_poetry_lock,
    read_requirements_txt,
    read_uv_lock,
)

if TYPE_CHECKING:
    from pathlib import Path

LockfileReader: TypeAlias = "Callable[[Path, str], str | None]"
LockfileLocator: TypeAlias = "Callable[[Path, str], Path]"


def _at_root(filename: str) -> LockfileLocator:
    def locate(project_root: Path, name: str) -> Path:  # noqa: ARG001
        return project_root / filename

    return locate


def _installed_manifest(project_root: Path, name: str) -> Path:
    return project_root.joinpath("node_modules", *name.split("/"), "package.json")


@dataclass(frozen=True, slots=True)
class LockfileStrategy:
    """One lockfile format to consult.

    Attributes:
        label: Short name used in logs, e.g. ``package-lock.json``.
        locate: Returns the file path for a project root and package name.
        read: Returns the version listed for a package, or None.
    """

    label: str
    locate: LockfileLocator
    read: LockfileReader


def _strategy(filename: str, read: LockfileReader) -> LockfileStrategy:
    return LockfileStrategy(label=filename, locate=_at_root(filename), read=read)


LOCKFILE_STRATEGIES: Mapping[Ecosystem, tuple[LockfileStrategy, ...]] = {
    Ecosystem.NPM: (
        _strategy("package-lock.json", read_package_lock),
        _strategy("pnpm-lock.yaml", read_pnpm_lock),
        _strategy("yarn.lock", read_yarn_lock),
        LockfileStrategy(
            label="node_modules",
            locate=_installed_manifest,
            read=read_installed_package_json,
        ),
    ),
    Ecosystem.PYPI: (
        _strategy("uv.lock", read_uv_lock),
        _strategy("poetry.lock", read_poetry_lock),
        _strategy("Pipfile.lock", read_pipfile_lock),
        _strategy("requirements.txt", read_requirements_txt),
    ),
    Ecosystem.CRATES: (_strategy("Cargo.lock", read_cargo_lock),),
}
