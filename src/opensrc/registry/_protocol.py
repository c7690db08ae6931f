"""Registry protocol for dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from opensrc.enums import Ecosystem
    from opensrc.specs import RepoSpec

    from ._models import RegistryPackage


@runtime_checkable
class RegistryProtocol(Protocol):
    """Package registry lookups.

    RegistryClient talks to the public registries; FakeRegistry serves
    canned metadata in tests.
    """

    def get_package(self, ecosystem: Ecosystem, name: str) -> RegistryPackage:
        """Fetch package metadata.

        Raises:
            NotFoundError: If the registry has no such package.
            RegistryError: If the registry cannot be queried.
        """
        ...

    def resolve_repository(self, ecosystem: Ecosystem, name: str) -> RepoSpec:
        """Resolve the package's source repository.

        Raises:
            NotFoundError: If the registry has no such package.
            NoRepositoryError: If no usable repository URL is declared.
            RegistryError: If the registry cannot be queried.
        """
        ...

    def close(self) -> None:
        """Release network resources."""
        ...
