# pyright: reportAny=false
"""Cache index models.

The index file stores records with camelCase keys
(``{"name", "version", "path", "fetchedAt"}``); these models convert to
and from that shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from opensrc.enums import Ecosystem


@dataclass(frozen=True, slots=True)
class SourceRecord:
    """One fetched source.

    Attributes:
        name: Package name, or ``host/owner/repo`` for repositories.
        version: Fetched version, or the checked-out ref for repositories.
        path: POSIX path relative to the cache root.
        fetched_at: ISO-8601 UTC timestamp of the fetch.
    """

    name: str
    version: str
    path: str
    fetched_at: str

    def to_dict(self) -> dict[str, str]:
        """Serialize to the index record shape."""
        return {
            "name": self.name,
            "version": self.version,
            "path": self.path,
            "fetchedAt": self.fetched_at,
        }

    @classmethod
    def from_dict(cls, data: object) -> SourceRecord | None:
        """Parse an index record, returning None if it is malformed."""
        if not isinstance(data, dict):
            return None
        name, version, path = data.get("name"), data.get("version"), data.get("path")
        if not all(isinstance(value, str) and value for value in (name, version, path)):
            return None
        fetched_at = data.get("fetchedAt")
        return cls(
            name=str(name),
            version=str(version),
            path=str(path),
            fetched_at=fetched_at if isinstance(fetched_at, str) else "",
        )


@dataclass(frozen=True, slots=True)
class ListedPackage:
    """A package record annotated with its ecosystem."""

    ecosystem: Ecosystem
    record: SourceRecord

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def version(self) -> str:
        return self.record.version

    def to_dict(self) -> dict[str, str]:
        return {**self.record.to_dict(), "ecosystem": str(self.ecosystem)}


def _empty_buckets() -> dict[Ecosystem, list[Any]]:
    return {ecosystem: [] for ecosystem in Ecosystem}


@dataclass(frozen=True, slots=True)
class SourcesListing:
    """Everything in the cache, grouped by kind.

    Every ecosystem bucket is present, even when empty.
    """

    packages: dict[Ecosystem, list[ListedPackage]] = field(default_factory=_empty_buckets)
    repos: list[SourceRecord] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.repos and not any(self.packages.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "packages": {
                str(ecosystem): [item.to_dict() for item in items]
                for ecosystem, items in self.packages.items()
            },
            "repos": [record.to_dict() for record in self.repos],
        }


@dataclass(slots=True)
class SourcesIndex:
    """In-memory form of ``sources.json``.

    Within an ecosystem bucket names are unique; repository names
    (``host/owner/repo``) are unique across ``repos``.
    """

    packages: dict[Ecosystem, list[SourceRecord]] = field(default_factory=_empty_buckets)
    repos: list[SourceRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "packages": {
                str(ecosystem): [record.to_dict() for record in self.packages.get(ecosystem, [])]
                for ecosystem in Ecosystem
            },
            "repos": [record.to_dict() for record in self.repos],
        }

    @classmethod
    def from_dict(cls, data: object) -> SourcesIndex:
        """Build an index from parsed JSON, skipping anything malformed."""
        index = cls()
        if not isinstance(data, dict):
            return index

        packages = data.get("packages")
        if isinstance(packages, dict):
            for ecosystem in Ecosystem:
                index.packages[ecosystem] = _parse_records(packages.get(str(ecosystem)))

        index.repos = _parse_records(data.get("repos"))
        return index


def _parse_records(items: object) -> list[SourceRecord]:
    if not isinstance(items, list):
        return []
    records: list[SourceRecord] = []
    seen: set[str] = set()
    for item in items:
        record = SourceRecord.from_dict(item)
        if record is None or record.name in seen:
            continue
        seen.add(record.name)
        records.append(record)
    return records
