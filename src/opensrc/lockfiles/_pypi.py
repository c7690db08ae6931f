# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Readers for Python lockfiles.

Names are compared after PEP 503 normalization, so ``Django``,
``django`` and ``DJANGO`` all match the same entry.
"""

from __future__ import annotations

import re
import tomllib
from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from pathlib import Path

_NORMALIZE = re.compile(r"[-_.]+")

# name[extras] == version ; markers  # comment
_PINNED_REQUIREMENT = re.compile(
    r"^(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)\s*(?:\[[^\]]*\])?\s*==\s*(?P<version>[^\s;#,]+)"
)


def normalize_name(name: str) -> str:
    """Normalize a distribution name per PEP 503."""
    return _NORMALIZE.sub("-", name).lower()


def _read_toml_packages(path: Path, name: str) -> str | None:
    with path.open("rb") as f:
        data: Any = tomllib.load(f)

    wanted = normalize_name(name)
    for entry in data.get("package", []):
        if not isinstance(entry, dict):
            continue
        if normalize_name(str(entry.get("name", ""))) == wanted:
            version = entry.get("version")
            return str(version) if version is not None else None
    return None


def read_uv_lock(path: Path, name: str) -> str | None:
    """Read a version from uv.lock."""
    return _read_toml_packages(path, name)


def read_poetry_lock(path: Path, name: str) -> str | None:
    """Read a version from poetry.lock."""
    return _read_toml_packages(path, name)


def read_pipfile_lock(path: Path, name: str) -> str | None:
    """Read a version from Pipfile.lock, removing the ``==`` prefix."""
    data: Any = orjson.loads(path.read_bytes())
    if not isinstance(data, dict):
        return None

    wanted = normalize_name(name)
    for section in ("default", "develop"):
        packages = data.get(section)
        if not isinstance(packages, dict):
            continue
        for pkg_name, entry in packages.items():
            if normalize_name(pkg_name) != wanted or not isinstance(entry, dict):
                continue
            version = entry.get("version")
            if isinstance(version, str):
                return version.removeprefix("==")
    return None


def read_requirements_txt(path: Path, name: str) -> str | None:
    """Read an exactly pinned (``==``) version from requirements.txt."""
    wanted = normalize_name(name)
    for line in path.read_text(encoding="utf-8").splitlines():
        match = _PINNED_REQUIREMENT.match(line.strip())
        if match and normalize_name(match["name"]) == wanted:
            return match["version"]
    return None
