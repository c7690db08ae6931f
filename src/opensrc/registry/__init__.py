"""Package registry lookups.

Classes:
    RegistryClient: httpx client for npm, PyPI and crates.io.
    RegistryProtocol: Interface used by the fetch orchestrator.
    FakeRegistry: In-memory implementation for tests.
    RegistryPackage: Latest version and repository for a package.
"""

from opensrc.registry._client import (
    DEFAULT_CRATES_URL,
    DEFAULT_NPM_URL,
    DEFAULT_PYPI_URL,
    DEFAULT_TIMEOUT,
    RegistryClient,
)
from opensrc.registry._fake import FakeRegistry
from opensrc.registry._models import RegistryPackage
from opensrc.registry._protocol import RegistryProtocol

__all__ = [
    "DEFAULT_CRATES_URL",
    "DEFAULT_NPM_URL",
    "DEFAULT_PYPI_URL",
    "DEFAULT_TIMEOUT",
    "FakeRegistry",
    "RegistryClient",
    "RegistryPackage",
    "RegistryProtocol",
]
