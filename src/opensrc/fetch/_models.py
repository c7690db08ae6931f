# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Fetch result models."""

from dataclasses import dataclass, field
from pathlib import Path

from opensrc.enums import InputType, RefMatch, VersionSource
from opensrc.exceptions import RefResolutionWarning


@dataclass(frozen=True, slots=True)
class FetchResult:
    """A source that was fetched and recorded.

    Attributes:
        spec: The specifier as given.
        kind: Whether a package or a repository was fetched.
        name: Package name, or ``host/owner/repo`` for repositories.
        version: Version recorded in the index (the ref for repositories).
        version_source: Where the version came from.
        ref: Git ref that was checked out.
        ref_match: How the ref was chosen.
        path: Absolute directory the source now lives in.
        warnings: Non-fatal problems, such as a version with no matching tag.
    """

    spec: str
    kind: InputType
    name: str
    version: str
    version_source: VersionSource
    ref: str
    ref_match: RefMatch
    path: Path
    warnings: tuple[RefResolutionWarning, ...] = ()


@dataclass(frozen=True, slots=True)
class FetchOutcome:
    """Outcome of one specifier in a batch."""

    spec: str
    result: FetchResult | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None

    @property
    def error_kind(self) -> str | None:
        """Exception class name, e.g. ``NotFoundError``."""
        return type(self.error).__name__ if self.error is not None else None


@dataclass(frozen=True, slots=True)
class FetchReport:
    """Outcomes of a batch fetch, in input order."""

    outcomes: tuple[FetchOutcome, ...] = field(default_factory=tuple)

    @property
    def failed(self) -> bool:
        """Whether at least one specifier failed."""
        return any(not outcome.ok for outcome in self.outcomes)

    @property
    def succeeded(self) -> list[FetchResult]:
        return [o.result for o in self.outcomes if o.result is not None]

    @property
    def failures(self) -> list[FetchOutcome]:
        return [o for o in self.outcomes if not o.ok]
