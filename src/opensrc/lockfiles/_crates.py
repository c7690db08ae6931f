"""Reader for Cargo.lock."""

from __future__ import annotations

import tomllib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


def read_cargo_lock(path: Path, name: str) -> str | None:
    """Read a version from Cargo.lock.

    A lockfile can list one crate at several versions; the first
    ``[[package]]`` entry with the name wins.
    """
    with path.open("rb") as f:
        data = tomllib.load(f)

    packages = data.get("package", [])
    if not isinstance(packages, list):
        return None

    for entry in packages:
        if isinstance(entry, dict) and entry.get("name") == name:
            version = entry.get("version")
            return str(version) if version is not None else None
    return None
