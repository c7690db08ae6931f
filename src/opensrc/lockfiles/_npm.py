# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Readers for npm-family lockfiles.

Each reader takes the lockfile path and an exact package name (including
any ``@scope/``) and returns the installed version, or None when the
package is not listed. Malformed files raise and are handled by the caller.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import orjson
import yaml

if TYPE_CHECKING:
    from pathlib import Path

# "1.2.3(react@18.2.0)" or v5 "1.2.3_react@18.2.0"
_PNPM_PEER_SUFFIX = re.compile(r"[(_].*$")
_PNPM_KEY_PEER_SUFFIX = re.compile(r"\(.*$")

# `  version "1.2.3"` (classic) or `  version: 1.2.3` (berry)
_YARN_VERSION = re.compile(r"""^\s+version:?\s+"?(?P<version>[^"\s]+)"?\s*$""")


def _strip_peer_suffix(version: str) -> str:
    return _PNPM_PEER_SUFFIX.sub("", version)


def _split_name_version(key: str) -> tuple[str, str] | None:
    """Split ``name@version`` on the last ``@`` that is not the scope marker."""
    at = key.rfind("@")
    if at <= 0:
        return None
    return key[:at], key[at + 1 :]


def read_package_lock(path: Path, name: str) -> str | None:
    """Read a version from package-lock.json (lockfile v1, v2 and v3)."""
    data: Any = orjson.loads(path.read_bytes())
    if not isinstance(data, dict):
        return None

    packages = data.get("packages")
    if isinstance(packages, dict):
        entry = packages.get(f"node_modules/{name}")
        if isinstance(entry, dict) and isinstance(entry.get("version"), str):
            return entry["version"]

    dependencies = data.get("dependencies")
    if isinstance(dependencies, dict):
        entry = dependencies.get(name)
        if isinstance(entry, dict) and isinstance(entry.get("version"), str):
            return entry["version"]

    return None


def _pnpm_importer_version(importer: dict[str, Any], name: str) -> str | None:
    for section in ("dependencies", "devDependencies", "optionalDependencies"):
        deps = importer.get(section)
        if not isinstance(deps, dict) or name not in deps:
            continue
        entry = deps[name]
        # v6+ stores {specifier, version}; v5 stores the version directly
        version = entry.get("version") if isinstance(entry, dict) else entry
        if version is not None:
            return _strip_peer_suffix(str(version))
    return None


def _pnpm_package_key_version(key: str, name: str) -> str | None:
    key = key.removeprefix("/")
    # v6 and v9: name@version
    if split := _split_name_version(_PNPM_KEY_PEER_SUFFIX.sub("", key)):
        pkg_name, version = split
        if pkg_name == name:
            return _strip_peer_suffix(version)
    # v5: name/version
    pkg_name, _, version = key.rpartition("/")
    if pkg_name == name and version:
        return _strip_peer_suffix(version)
    return None


def read_pnpm_lock(path: Path, name: str) -> str | None:
    """Read a version from pnpm-lock.yaml.

    The root importer is consulted first, then the ``packages`` keys.
    Peer dependency suffixes are removed from the version.
    """
    data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        return None

    importers = data.get("importers")
    root_importer = importers.get(".") if isinstance(importers, dict) else data
    if isinstance(root_importer, dict):
        version = _pnpm_importer_version(root_importer, name)
        if version:
            return version

    packages = data.get("packages")
    if isinstance(packages, dict):
        for key in packages:
            version = _pnpm_package_key_version(str(key), name)
            if version:
                return version

    return None


def _yarn_header_names(line: str) -> set[str]:
    names: set[str] = set()
    for descriptor in line.rstrip().removesuffix(":").split(","):
        descriptor = descriptor.strip().strip('"')
        if split := _split_name_version(descriptor):
            names.add(split[0])
    return names


def read_yarn_lock(path: Path, name: str) -> str | None:
    """Read a version from yarn.lock (classic v1 and berry formats)."""
    in_entry = False
    for line in path.read_text(encoding="utf-8").splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        if not line[0].isspace():
            in_entry = line.rstrip().endswith(":") and name in _yarn_header_names(line)
            continue
        if in_entry and (match := _YARN_VERSION.match(line)):
            return match["version"]
    return None


def read_installed_package_json(path: Path, name: str) -> str | None:  # noqa: ARG001
    """Read the version field of node_modules/<name>/package.json."""
    data: Any = orjson.loads(path.read_bytes())
    if isinstance(data, dict) and isinstance(data.get("version"), str):
        return data["version"]
    return None
