"""Cache store: fetched source directories and their index.

The filesystem decides whether a source exists; the index only supplies
metadata (version, fetch time). Removal deletes the directory first, then
the record, then any ancestor directories left empty.
"""

from __future__ import annotations

import shutil
import threading
from typing import TYPE_CHECKING

import pendulum

from opensrc.enums import Ecosystem
from opensrc.exceptions import CacheCleanError
from opensrc.utils import create_cli_logger

from ._io import read_index, write_index
from ._models import ListedPackage, SourceRecord, SourcesIndex, SourcesListing
from ._paths import (
    get_index_path,
    get_opensrc_dir,
    get_package_path,
    get_package_relative_path,
    get_packages_dir,
    get_repo_path,
    get_repo_relative_path,
    get_repos_dir,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

# One lock per index file, shared by every CacheStore in the process
_INDEX_LOCKS: dict[Path, threading.Lock] = {}
_INDEX_LOCKS_GUARD = threading.Lock()


def _index_lock(index_path: Path) -> threading.Lock:
    key = index_path.absolute()
    with _INDEX_LOCKS_GUARD:
        return _INDEX_LOCKS.setdefault(key, threading.Lock())


def _now_iso() -> str:
    return pendulum.now("UTC").to_iso8601_string()


def prune_empty_ancestors(path: Path, stop_at: Path) -> list[Path]:
    """Remove empty directories above ``path``, strictly below ``stop_at``.

    Walks upward from the parent of ``path`` and stops at the first
    directory that is not empty, or at ``stop_at`` (never removed).

    Args:
        path: Directory whose ancestors may be pruned.
        stop_at: Boundary directory.

    Returns:
        The directories removed, innermost first.
    """
    removed: list[Path] = []
    current = path.parent
    while current != stop_at and stop_at in current.parents:
        try:
            if any(current.iterdir()):
                break
            current.rmdir()
        except FileNotFoundError:
            pass
        removed.append(current)
        current = current.parent
    return removed


class CacheStore:
    """Owns ``<root>/opensrc``: source directories and ``sources.json``.

    Index updates are read-modify-write with an atomic replace, serialized
    within the process. Separate processes writing the same index get
    last-writer-wins.

    Example:
        >>> store = CacheStore(Path("/project"))
        >>> store.get_package_path("zod", Ecosystem.NPM)
        PosixPath('/project/opensrc/packages/npm/zod')
    """

    def __init__(
        self,
        project_root: Path,
        *,
        logger: FilteringBoundLogger | None = None,
        clock: Callable[[], str] = _now_iso,
    ) -> None:
        """Initialize the store.

        Args:
            project_root: Directory that contains (or will contain) ``opensrc/``.
            logger: Logger for index and removal events.
            clock: Returns the ISO-8601 timestamp stored as ``fetchedAt``.
        """
        self.project_root: Path = project_root
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else create_cli_logger()
        )
        self._clock: Callable[[], str] = clock
        self._lock: threading.Lock = _index_lock(self.index_path)

    # =========================================================================
    # Paths
    # =========================================================================

    @property
    def opensrc_dir(self) -> Path:
        return get_opensrc_dir(self.project_root)

    @property
    def index_path(self) -> Path:
        return get_index_path(self.project_root)

    def get_packages_dir(self, ecosystem: Ecosystem | None = None) -> Path:
        return get_packages_dir(self.project_root, ecosystem)

    def get_repos_dir(self) -> Path:
        return get_repos_dir(self.project_root)

    def get_package_path(self, name: str, ecosystem: Ecosystem = Ecosystem.NPM) -> Path:
        return get_package_path(self.project_root, name, ecosystem)

    def get_repo_path(self, identity: str) -> Path:
        return get_repo_path(self.project_root, identity)

    # =========================================================================
    # Queries
    # =========================================================================

    def package_exists(self, name: str, ecosystem: Ecosystem = Ecosystem.NPM) -> bool:
        """Check whether a package directory exists. The index is not consulted."""
        return self.get_package_path(name, ecosystem).is_dir()

    def repo_exists(self, identity: str) -> bool:
        """Check whether a repository directory exists. The index is not consulted."""
        return self.get_repo_path(identity).is_dir()

    def read_index(self) -> SourcesIndex:
        """Read the index; missing or malformed files read as empty."""
        return read_index(self.index_path)

    def get_package_info(
        self, name: str, ecosystem: Ecosystem = Ecosystem.NPM
    ) -> SourceRecord | None:
        """Get the index record for a package, or None."""
        records = self.read_index().packages[ecosystem]
        return next((r for r in records if r.name == name), None)

    def get_repo_info(self, identity: str) -> SourceRecord | None:
        """Get the index record for a repository, or None."""
        return next((r for r in self.read_index().repos if r.name == identity), None)

    def is_fetched(self, name: str, ecosystem: Ecosystem | None = None) -> bool:
        """Check whether a source is fully fetched.

        Both the directory and its index record must exist. With no
        ecosystem, ``name`` is a repository identity.
        """
        if ecosystem is None:
            return self.repo_exists(name) and self.get_repo_info(name) is not None
        return (
            self.package_exists(name, ecosystem)
            and self.get_package_info(name, ecosystem) is not None
        )

    def list_sources(self) -> SourcesListing:
        """List every indexed source, packages annotated with their ecosystem."""
        index = self.read_index()
        return SourcesListing(
            packages={
                ecosystem: [
                    ListedPackage(ecosystem=ecosystem, record=record)
                    for record in index.packages[ecosystem]
                ]
                for ecosystem in Ecosystem
            },
            repos=list(index.repos),
        )

    # =========================================================================
    # Index updates
    # =========================================================================

    def _update_index(self, mutate: Callable[[SourcesIndex], None]) -> None:
        with self._lock:
            index = self.read_index()
            mutate(index)
            write_index(self.index_path, index)
        self._logger.debug("index_written", path=str(self.index_path))

    @staticmethod
    def _upsert(records: list[SourceRecord], record: SourceRecord) -> None:
        for i, existing in enumerate(records):
            if existing.name == record.name:
                records[i] = record
                return
        records.append(record)

    def upsert_package_record(
        self, name: str, version: str, ecosystem: Ecosystem = Ecosystem.NPM
    ) -> SourceRecord:
        """Create or update a package record with a fresh ``fetchedAt``.

        Raises:
            IndexWriteError: If the index cannot be written.
        """
        record = SourceRecord(
            name=name,
            version=version,
            path=get_package_relative_path(name, ecosystem),
            fetched_at=self._clock(),
        )
        self._update_index(lambda index: self._upsert(index.packages[ecosystem], record))
        return record

    def upsert_repo_record(self, identity: str, ref: str) -> SourceRecord:
        """Create or update a repository record with a fresh ``fetchedAt``.

        Raises:
            IndexWriteError: If the index cannot be written.
        """
        record = SourceRecord(
            name=identity,
            version=ref,
            path=get_repo_relative_path(identity),
            fetched_at=self._clock(),
        )
        self._update_index(lambda index: self._upsert(index.repos, record))
        return record

    def _drop_package_record(self, name: str, ecosystem: Ecosystem) -> bool:
        if self.get_package_info(name, ecosystem) is None:
            return False

        def drop(index: SourcesIndex) -> None:
            index.packages[ecosystem] = [
                r for r in index.packages[ecosystem] if r.name != name
            ]

        self._update_index(drop)
        return True

    def _drop_repo_record(self, identity: str) -> bool:
        if self.get_repo_info(identity) is None:
            return False

        def drop(index: SourcesIndex) -> None:
            index.repos = [r for r in index.repos if r.name != identity]

        self._update_index(drop)
        return True

    # =========================================================================
    # Removal
    # =========================================================================

    def remove_package_source(
        self, name: str, ecosystem: Ecosystem = Ecosystem.NPM
    ) -> bool:
        """Remove a fetched package.

        Deletes the directory, then the record, then empty ancestors
        strictly inside ``packages/<ecosystem>`` (an emptied npm scope
        directory goes away).

        Returns:
            False if the package directory did not exist. A leftover
            record for it is dropped either way.

        Raises:
            IndexWriteError: If the index cannot be written.
        """
        path = self.get_package_path(name, ecosystem)
        if not path.is_dir():
            if self._drop_package_record(name, ecosystem):
                self._logger.info("stale_record_dropped", ecosystem=str(ecosystem), name=name)
            return False

        shutil.rmtree(path)
        _ = self._drop_package_record(name, ecosystem)
        pruned = prune_empty_ancestors(path, self.get_packages_dir(ecosystem))
        self._logger.info(
            "package_removed",
            ecosystem=str(ecosystem),
            name=name,
            pruned=[str(p) for p in pruned],
        )
        return True

    def remove_repo_source(self, identity: str) -> bool:
        """Remove a fetched repository.

        Deletes the directory, then the record, then the owner and host
        directories if they are left empty. ``repos/`` itself is kept.

        Returns:
            False if the repository directory did not exist. A leftover
            record for it is dropped either way.

        Raises:
            IndexWriteError: If the index cannot be written.
        """
        path = self.get_repo_path(identity)
        if not path.is_dir():
            if self._drop_repo_record(identity):
                self._logger.info("stale_record_dropped", name=identity)
            return False

        shutil.rmtree(path)
        _ = self._drop_repo_record(identity)
        pruned = prune_empty_ancestors(path, self.get_repos_dir())
        self._logger.info("repo_removed", name=identity, pruned=[str(p) for p in pruned])
        return True

    def _remove_bucket(self, path: Path) -> bool:
        """Delete a bucket directory; True if it is gone afterwards."""
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self._logger.error("bucket_not_removed", path=str(path), error=str(e))
        return not path.exists()

    def clean(
        self,
        *,
        packages: bool = True,
        repos: bool = True,
        ecosystem: Ecosystem | None = None,
    ) -> int:
        """Remove whole buckets of sources.

        Records are dropped only for buckets whose directory was fully
        removed.

        Args:
            packages: Remove package buckets.
            repos: Remove all repositories.
            ecosystem: Limit package removal to one ecosystem.

        Returns:
            Number of index records dropped.

        Raises:
            CacheCleanError: If a bucket directory could not be removed.
                Buckets removed before the failure have their records
                dropped.
            IndexWriteError: If the index cannot be written.
        """
        ecosystems = [ecosystem] if ecosystem is not None else list(Ecosystem)

        cleared = [
            eco
            for eco in (ecosystems if packages else [])
            if self._remove_bucket(self.get_packages_dir(eco))
        ]
        repos_cleared = repos and self._remove_bucket(self.get_repos_dir())

        failed = [
            self.get_packages_dir(eco)
            for eco in ecosystems
            if packages and eco not in cleared
        ]
        if repos and not repos_cleared:
            failed.append(self.get_repos_dir())

        index = self.read_index()
        dropped = sum(len(index.packages[eco]) for eco in cleared)
        if repos_cleared:
            dropped += len(index.repos)

        if dropped:

            def drop(index: SourcesIndex) -> None:
                for eco in cleared:
                    index.packages[eco] = []
                if repos_cleared:
                    index.repos = []

            self._update_index(drop)

        self._logger.info(
            "cache_cleaned",
            packages=packages,
            repos=repos,
            ecosystem=str(ecosystem) if ecosystem else None,
            dropped=dropped,
        )

        if failed:
            names = ", ".join(str(path) for path in failed)
            msg = f"Could not remove {names}; their records were kept"
            raise CacheCleanError(msg, paths=tuple(failed))
        return dropped

    def drop_stale_records(self) -> int:
        """Delete records whose directory no longer exists.

        Returns:
            Number of records dropped.

        Raises:
            IndexWriteError: If the index cannot be written.
        """
        index = self.read_index()
        stale_packages = {
            eco: {r.name for r in index.packages[eco] if not self.package_exists(r.name, eco)}
            for eco in Ecosystem
        }
        stale_repos = {r.name for r in index.repos if not self.repo_exists(r.name)}
        count = sum(len(names) for names in stale_packages.values()) + len(stale_repos)
        if not count:
            return 0

        def drop(index: SourcesIndex) -> None:
            for eco, names in stale_packages.items():
                index.packages[eco] = [r for r in index.packages[eco] if r.name not in names]
            index.repos = [r for r in index.repos if r.name not in stale_repos]

        self._update_index(drop)
        self._logger.info("stale_records_dropped", count=count)
        return count
