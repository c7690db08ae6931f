"""opensrc exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class OpensrcError(Exception):
    """Base exception for opensrc errors."""


# =============================================================================
# Specifier Exceptions
# =============================================================================


class ParseError(OpensrcError, ValueError):
    """Raised when a specifier cannot be parsed.

    Attributes:
        spec: The raw specifier that failed to parse.
    """

    def __init__(self, message: str, *, spec: str) -> None:
        """Initialize with error message and the offending specifier.

        Args:
            message: Human-readable error message.
            spec: The raw specifier string.
        """
        super().__init__(message)
        self.spec: str = spec


# =============================================================================
# Registry Exceptions
# =============================================================================


class RegistryError(OpensrcError):
    """Raised when a package registry cannot be queried.

    Attributes:
        ecosystem: The registry's ecosystem name.
        name: The package that was being looked up.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        ecosystem: str,
        name: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and lookup context."""
        super().__init__(message)
        self.ecosystem: str = ecosystem
        self.name: str = name
        self.cause: Exception | None = cause


class NotFoundError(RegistryError, LookupError):
    """Raised when the registry has no entry for a package."""


class NoRepositoryError(RegistryError):
    """Raised when a package declares no usable source repository."""


# =============================================================================
# Git Exceptions
# =============================================================================


class GitError(OpensrcError):
    """Raised when a remote git operation fails.

    Attributes:
        url: The remote repository URL.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and remote context."""
        super().__init__(message)
        self.url: str = url
        self.cause: Exception | None = cause


class CloneError(GitError):
    """Raised when cloning a repository fails.

    Attributes:
        ref: The ref that was being checked out.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str,
        ref: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message, remote and ref context."""
        super().__init__(message, url=url, cause=cause)
        self.ref: str | None = ref


class RefResolutionWarning(UserWarning):
    """No tag matched the requested version; the default branch was used.

    Attributes:
        version: The version that could not be matched.
        ref: The ref that was used instead.
    """

    def __init__(self, message: str, *, version: str, ref: str) -> None:
        """Initialize with warning message and resolution context."""
        super().__init__(message)
        self.version: str = version
        self.ref: str = ref


# =============================================================================
# Cache Exceptions
# =============================================================================


class CacheError(OpensrcError):
    """Base exception for cache store errors."""


class IndexWriteError(CacheError):
    """Raised when sources.json cannot be written.

    The fetched source may already be on disk even though its record
    was not stored.

    Attributes:
        path: Path to the index file.
        cause: The underlying exception.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and index path."""
        super().__init__(message)
        self.path: Path = path
        self.cause: Exception | None = cause


class CacheCleanError(CacheError):
    """Raised when a bucket directory could not be fully removed.

    Records for the affected buckets are kept.

    Attributes:
        paths: Bucket directories that are still present.
    """

    def __init__(self, message: str, *, paths: tuple[Path, ...]) -> None:
        """Initialize with error message and the directories left behind."""
        super().__init__(message)
        self.paths: tuple[Path, ...] = paths


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(OpensrcError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source
