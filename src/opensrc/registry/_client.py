# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""HTTP client for the npm, PyPI and crates.io registries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

import httpx
import orjson
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from opensrc.enums import Ecosystem
from opensrc.exceptions import NoRepositoryError, NotFoundError, RegistryError
from opensrc.specs import KNOWN_HOSTS, parse_repository_url
from opensrc.utils import create_cli_logger

from ._models import RegistryPackage

if TYPE_CHECKING:
    from types import TracebackType

    from structlog.typing import FilteringBoundLogger

    from opensrc.specs import RepoSpec

DEFAULT_NPM_URL = "https://registry.npmjs.org"
DEFAULT_PYPI_URL = "https://pypi.org"
DEFAULT_CRATES_URL = "https://crates.io"
DEFAULT_TIMEOUT = 30.0

USER_AGENT = "opensrc (https://github.com/vercel-labs/opensrc)"

# project_urls keys that name a source repository, in preference order
_PYPI_SOURCE_KEYS = ("source", "source code", "repository", "code", "github")
_PYPI_HOMEPAGE_KEYS = ("homepage",)


def _as_dict(value: object) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _str_or_none(value: object) -> str | None:
    return value if isinstance(value, str) and value.strip() else None


class RegistryClient:
    """Query package registries for versions and repository metadata.

    Connection failures and timeouts are retried three times with
    exponential backoff before surfacing as RegistryError.

    Example:
        >>> with RegistryClient() as client:
        ...     client.resolve_repository(Ecosystem.NPM, "zod").identity
        'github.com/colinhacks/zod'
    """

    def __init__(
        self,
        *,
        npm_url: str = DEFAULT_NPM_URL,
        pypi_url: str = DEFAULT_PYPI_URL,
        crates_url: str = DEFAULT_CRATES_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            npm_url: Base URL of the npm registry.
            pypi_url: Base URL of PyPI.
            crates_url: Base URL of crates.io.
            timeout: Request timeout in seconds.
            transport: Custom httpx transport, e.g. ``httpx.MockTransport``.
            logger: Logger for request diagnostics.
        """
        self._base_urls: dict[Ecosystem, str] = {
            Ecosystem.NPM: npm_url.rstrip("/"),
            Ecosystem.PYPI: pypi_url.rstrip("/"),
            Ecosystem.CRATES: crates_url.rstrip("/"),
        }
        self._client: httpx.Client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            follow_redirects=True,
        )
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else create_cli_logger()
        )

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._client.close()

    # =========================================================================
    # Public API
    # =========================================================================

    def get_package(self, ecosystem: Ecosystem, name: str) -> RegistryPackage:
        """Fetch version and repository metadata for a package.

        Args:
            ecosystem: Registry to query.
            name: Package name.

        Returns:
            RegistryPackage with the latest version and repository.

        Raises:
            NotFoundError: If the registry has no such package.
            RegistryError: If the registry cannot be queried or returns
                something other than a JSON object.
        """
        data = self._get_json(ecosystem, name, self._package_url(ecosystem, name))

        match ecosystem:
            case Ecosystem.NPM:
                latest, repository_url = _npm_metadata(data)
            case Ecosystem.PYPI:
                latest, repository_url = _pypi_metadata(data)
            case Ecosystem.CRATES:
                latest, repository_url = _crates_metadata(data)

        return RegistryPackage(
            ecosystem=ecosystem,
            name=name,
            latest_version=latest,
            repository=parse_repository_url(repository_url),
            repository_url=repository_url,
        )

    def resolve_repository(self, ecosystem: Ecosystem, name: str) -> RepoSpec:
        """Resolve a package's source repository.

        Args:
            ecosystem: Registry to query.
            name: Package name.

        Returns:
            The normalized repository, without a ref.

        Raises:
            NotFoundError: If the registry has no such package.
            NoRepositoryError: If no repository URL is declared or it
                cannot be parsed.
            RegistryError: If the registry cannot be queried.
        """
        package = self.get_package(ecosystem, name)
        if package.repository is None:
            if package.repository_url:
                msg = (
                    f"Cannot parse repository URL '{package.repository_url}' "
                    f"for {ecosystem} package '{name}'"
                )
            else:
                msg = f"No repository URL found for {ecosystem} package '{name}'"
            raise NoRepositoryError(msg, ecosystem=str(ecosystem), name=name)
        return package.repository

    # =========================================================================
    # HTTP
    # =========================================================================

    def _package_url(self, ecosystem: Ecosystem, name: str) -> str:
        base = self._base_urls[ecosystem]
        match ecosystem:
            case Ecosystem.NPM:
                return f"{base}/{name.replace('/', '%2F')}"
            case Ecosystem.PYPI:
                return f"{base}/pypi/{name}/json"
            case Ecosystem.CRATES:
                return f"{base}/api/v1/crates/{name}"

    @retry(
        retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
        reraise=True,
    )
    def _request(self, url: str) -> httpx.Response:
        """Make a GET request with retry logic.

        Raises:
            httpx.ConnectError: If connection fails after retries.
            httpx.TimeoutException: If request times out after retries.
        """
        return self._client.get(url)

    def _get_json(self, ecosystem: Ecosystem, name: str, url: str) -> dict[str, Any]:
        self._logger.debug("registry_request", ecosystem=str(ecosystem), url=url)
        try:
            response = self._request(url)
        except httpx.HTTPError as e:
            msg = f"Failed to query {ecosystem} registry for '{name}': {e}"
            raise RegistryError(msg, ecosystem=str(ecosystem), name=name, cause=e) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            msg = f"Package '{name}' not found on {ecosystem}"
            raise NotFoundError(msg, ecosystem=str(ecosystem), name=name)

        if response.is_error:
            msg = (
                f"{ecosystem} registry returned HTTP {response.status_code} "
                f"for '{name}'"
            )
            raise RegistryError(msg, ecosystem=str(ecosystem), name=name)

        try:
            data = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            msg = f"Invalid JSON from {ecosystem} registry for '{name}'"
            raise RegistryError(msg, ecosystem=str(ecosystem), name=name, cause=e) from e

        if not isinstance(data, dict):
            msg = f"Unexpected response from {ecosystem} registry for '{name}'"
            raise RegistryError(msg, ecosystem=str(ecosystem), name=name)

        return data


# =============================================================================
# Metadata extraction
# =============================================================================


def _npm_repository_url(manifest: dict[str, Any]) -> str | None:
    repository = manifest.get("repository")
    if isinstance(repository, dict):
        return _str_or_none(repository.get("url"))
    return _str_or_none(repository)


def _npm_metadata(data: dict[str, Any]) -> tuple[str | None, str | None]:
    latest = _str_or_none(_as_dict(data.get("dist-tags")).get("latest"))
    repository_url = _npm_repository_url(data)
    if repository_url is None and latest is not None:
        # Some packages only declare the repository per published version
        version_manifest = _as_dict(_as_dict(data.get("versions")).get(latest))
        repository_url = _npm_repository_url(version_manifest)
    return latest, repository_url


def _pypi_metadata(data: dict[str, Any]) -> tuple[str | None, str | None]:
    info = _as_dict(data.get("info"))
    latest = _str_or_none(info.get("version"))

    project_urls = {
        str(key).strip().lower(): value
        for key, value in _as_dict(info.get("project_urls")).items()
    }

    for key in _PYPI_SOURCE_KEYS:
        url = _str_or_none(project_urls.get(key))
        if url and parse_repository_url(url) is not None:
            return latest, url

    # Home pages are often documentation sites; only trust known git hosts
    homepages = [project_urls.get(key) for key in _PYPI_HOMEPAGE_KEYS]
    homepages.append(info.get("home_page"))
    for candidate in homepages:
        url = _str_or_none(candidate)
        repo = parse_repository_url(url)
        if url and repo is not None and repo.host in KNOWN_HOSTS:
            return latest, url

    return latest, None


def _crates_metadata(data: dict[str, Any]) -> tuple[str | None, str | None]:
    crate = _as_dict(data.get("crate"))
    latest = _str_or_none(crate.get("max_stable_version")) or _str_or_none(
        crate.get("max_version")
    )
    return latest, _str_or_none(crate.get("repository"))
