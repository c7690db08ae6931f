"""Fake registry for testing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from opensrc.exceptions import NoRepositoryError, NotFoundError

from ._models import RegistryPackage

if TYPE_CHECKING:
    from opensrc.enums import Ecosystem
    from opensrc.specs import RepoSpec


@dataclass(slots=True)
class FakeRegistry:
    """In-memory registry implementing RegistryProtocol.

    Example:
        >>> registry = FakeRegistry()
        >>> registry.add(Ecosystem.NPM, "zod", "3.22.4", RepoSpec("github.com", "colinhacks", "zod"))
        >>> registry.get_package(Ecosystem.NPM, "zod").latest_version
        '3.22.4'
    """  # noqa: E501

    packages: dict[tuple[Ecosystem, str], RegistryPackage] = field(default_factory=dict)
    errors: dict[tuple[Ecosystem, str], Exception] = field(default_factory=dict)
    calls: list[tuple[Ecosystem, str]] = field(default_factory=list)

    def add(
        self,
        ecosystem: Ecosystem,
        name: str,
        latest_version: str | None,
        repository: RepoSpec | None,
    ) -> RegistryPackage:
        """Register canned metadata for a package."""
        package = RegistryPackage(
            ecosystem=ecosystem,
            name=name,
            latest_version=latest_version,
            repository=repository,
            repository_url=f"https://{repository.identity}" if repository else None,
        )
        self.packages[ecosystem, name] = package
        return package

    def fail(self, ecosystem: Ecosystem, name: str, error: Exception) -> None:
        """Make lookups for a package raise ``error``."""
        self.errors[ecosystem, name] = error

    def get_package(self, ecosystem: Ecosystem, name: str) -> RegistryPackage:
        self.calls.append((ecosystem, name))
        if (ecosystem, name) in self.errors:
            raise self.errors[ecosystem, name]
        try:
            return self.packages[ecosystem, name]
        except KeyError:
            msg = f"Package '{name}' not found on {ecosystem}"
            raise NotFoundError(msg, ecosystem=str(ecosystem), name=name) from None

    def resolve_repository(self, ecosystem: Ecosystem, name: str) -> RepoSpec:
        package = self.get_package(ecosystem, name)
        if package.repository is None:
            msg = f"No repository URL found for {ecosystem} package '{name}'"
            raise NoRepositoryError(msg, ecosystem=str(ecosystem), name=name)
        return package.repository

    def close(self) -> None:
        pass
