"""Registry metadata models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from opensrc.enums import Ecosystem
    from opensrc.specs import RepoSpec


@dataclass(frozen=True, slots=True)
class RegistryPackage:
    """What a registry knows about a package.

    Attributes:
        ecosystem: Registry the metadata came from.
        name: Package name as queried.
        latest_version: Latest (stable where the registry says so) version.
        repository: Normalized source repository, or None if absent or
            unparseable.
        repository_url: Raw repository URL as published, if any.
    """

    ecosystem: Ecosystem
    name: str
    latest_version: str | None
    repository: RepoSpec | None
    repository_url: str | None = None
