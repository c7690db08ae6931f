"""Fetch orchestration.

One fetch cycle: parse the specifier, settle the version (explicit,
lockfile, then registry latest), find the repository and ref, clone into a
staging directory beside the target, swap it into place, record it.
"""

from __future__ import annotations

import shutil
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from opensrc.cache import CacheStore, prune_empty_ancestors
from opensrc.enums import InputType, RefMatch, VersionSource
from opensrc.exceptions import (
    CloneError,
    NoRepositoryError,
    RefResolutionWarning,
    RegistryError,
)
from opensrc.git import ResolvedRef, resolve_ref
from opensrc.lockfiles import resolve_installed_version
from opensrc.specs import detect_input_type, parse_package_spec, parse_repo_spec
from opensrc.utils import create_cli_logger

from ._models import FetchOutcome, FetchReport, FetchResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from structlog.typing import FilteringBoundLogger

    from opensrc.git import GitProtocol
    from opensrc.registry import RegistryProtocol
    from opensrc.specs import PackageSpec

DEFAULT_MAX_WORKERS = 4


class SourceFetcher:
    """Fetch packages and repositories into a project's cache.

    Example:
        >>> fetcher = SourceFetcher(Path.cwd(), registry=RegistryClient(), git=DulwichGit())
        >>> fetcher.fetch("zod").path
        PosixPath('.../opensrc/packages/npm/zod')
    """  # noqa: E501

    def __init__(
        self,
        project_root: Path,
        *,
        registry: RegistryProtocol,
        git: GitProtocol,
        store: CacheStore | None = None,
        clone_depth: int | None = 1,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            project_root: Project whose lockfiles are read and whose
                ``opensrc/`` directory receives sources.
            registry: Registry lookups.
            git: Remote git operations.
            store: Cache store; defaults to one rooted at ``project_root``.
            clone_depth: Shallow clone depth; 0 or None clones full history.
            logger: Logger for fetch events.
        """
        self.project_root: Path = project_root
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else create_cli_logger()
        )
        self.store: CacheStore = (
            store if store is not None else CacheStore(project_root, logger=self._logger)
        )
        self._registry: RegistryProtocol = registry
        self._git: GitProtocol = git
        self._clone_depth: int | None = clone_depth or None
        self._path_locks: dict[Path, threading.Lock] = {}
        self._path_locks_guard: threading.Lock = threading.Lock()

    # =========================================================================
    # Single fetch
    # =========================================================================

    def fetch(self, raw_spec: str) -> FetchResult:
        """Fetch one package or repository.

        Args:
            raw_spec: Specifier such as ``zod``, ``pypi:requests==2.31.0``
                or ``github:vercel/ai@main``.

        Returns:
            The fetched source.

        Raises:
            ParseError: If the specifier is malformed.
            NotFoundError: If the registry has no such package.
            NoRepositoryError: If the package declares no repository.
            RegistryError: If the registry cannot be queried.
            GitError: If remote refs cannot be listed.
            CloneError: If cloning fails. No directory or record is left.
            IndexWriteError: If the record cannot be stored. The cloned
                source stays on disk.
        """
        spec = raw_spec.strip()
        self._logger.info("fetch_started", spec=spec)
        if detect_input_type(spec) is InputType.REPO:
            result = self._fetch_repo(spec)
        else:
            result = self._fetch_package(spec)
        self._logger.info(
            "fetch_finished",
            spec=spec,
            name=result.name,
            version=result.version,
            ref=result.ref,
            ref_match=str(result.ref_match),
        )
        return result

    def _resolve_version(self, package: PackageSpec) -> tuple[str | None, VersionSource]:
        if package.version is not None:
            return package.version, VersionSource.EXPLICIT

        installed = resolve_installed_version(
            package.ecosystem, package.name, self.project_root, logger=self._logger
        )
        if installed is not None:
            return installed, VersionSource.LOCKFILE

        return None, VersionSource.REGISTRY

    def _fetch_package(self, spec: str) -> FetchResult:
        package = parse_package_spec(spec)
        version, version_source = self._resolve_version(package)

        metadata = self._registry.get_package(package.ecosystem, package.name)
        if metadata.repository is None:
            msg = f"No repository URL found for {package.ecosystem} package '{package.name}'"
            raise NoRepositoryError(msg, ecosystem=str(package.ecosystem), name=package.name)

        if version is None:
            version = metadata.latest_version
        if version is None:
            msg = f"Registry reports no version for {package.ecosystem} package '{package.name}'"
            raise RegistryError(msg, ecosystem=str(package.ecosystem), name=package.name)

        self._logger.debug(
            "version_resolved",
            ecosystem=str(package.ecosystem),
            name=package.name,
            version=version,
            source=str(version_source),
        )

        repo = metadata.repository
        resolved = resolve_ref(repo, version, git=self._git, package_name=package.name)
        warnings = self._ref_warnings(package.name, version, resolved)

        target = self.store.get_package_path(package.name, package.ecosystem)
        with self._path_lock(target):
            previous = self._clone_into(
                repo.clone_url,
                target,
                ref=resolved.ref,
                stop_at=self.store.get_packages_dir(package.ecosystem),
            )
            try:
                _ = self.store.upsert_package_record(
                    package.name, version, package.ecosystem
                )
            finally:
                self._discard(previous)

        return FetchResult(
            spec=spec,
            kind=InputType.PACKAGE,
            name=package.name,
            version=version,
            version_source=version_source,
            ref=resolved.ref,
            ref_match=resolved.match,
            path=target,
            warnings=warnings,
        )

    def _fetch_repo(self, spec: str) -> FetchResult:
        repo = parse_repo_spec(spec)
        if repo.ref is not None:
            resolved = ResolvedRef(ref=repo.ref, match=RefMatch.EXPLICIT)
            version_source = VersionSource.EXPLICIT
        else:
            resolved = resolve_ref(repo, None, git=self._git)
            version_source = VersionSource.REF

        target = self.store.get_repo_path(repo.identity)
        with self._path_lock(target):
            previous = self._clone_into(
                repo.clone_url,
                target,
                ref=resolved.ref,
                stop_at=self.store.get_repos_dir(),
            )
            try:
                _ = self.store.upsert_repo_record(repo.identity, resolved.ref)
            finally:
                self._discard(previous)

        return FetchResult(
            spec=spec,
            kind=InputType.REPO,
            name=repo.identity,
            version=resolved.ref,
            version_source=version_source,
            ref=resolved.ref,
            ref_match=resolved.match,
            path=target,
        )

    def _ref_warnings(
        self, name: str, version: str, resolved: ResolvedRef
    ) -> tuple[RefResolutionWarning, ...]:
        if not resolved.is_fallback:
            return ()
        self._logger.warning("ref_fallback", name=name, version=version, ref=resolved.ref)
        msg = (
            f"No tag found for {name}@{version}; "
            f"using default branch '{resolved.ref}'"
        )
        return (RefResolutionWarning(msg, version=version, ref=resolved.ref),)

    # =========================================================================
    # Cloning
    # =========================================================================

    def _path_lock(self, path: Path) -> threading.Lock:
        with self._path_locks_guard:
            return self._path_locks.setdefault(path, threading.Lock())

    def _make_staging(self, url: str, target: Path, *, ref: str, stop_at: Path) -> Path:
        """Create the staging directory beside ``target``.

        Runs under the bucket lock so a concurrent prune cannot remove a
        shared scope or owner directory between mkdir and mkdtemp.
        """
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            return Path(
                tempfile.mkdtemp(
                    dir=target.parent, prefix=f".{target.name}.", suffix=".partial"
                )
            )
        except OSError as e:
            _ = prune_empty_ancestors(target, stop_at)
            msg = f"Cannot create staging directory for {target}: {e}"
            raise CloneError(msg, url=url, ref=ref, cause=e) from e

    @staticmethod
    def _swap_into_place(staging: Path, target: Path) -> Path | None:
        """Move ``staging`` to ``target``, keeping any previous copy aside.

        Returns:
            The renamed previous copy, or None. The caller deletes it once
            the record is stored.
        """
        if not target.exists():
            _ = staging.rename(target)
            return None

        backup = staging.with_name(staging.name.removesuffix(".partial") + ".old")
        _ = target.rename(backup)
        try:
            _ = staging.rename(target)
        except BaseException:
            _ = backup.rename(target)
            raise
        return backup

    def _clone_into(
        self, url: str, target: Path, *, ref: str, stop_at: Path
    ) -> Path | None:
        """Clone into a staging directory, then swap it in for ``target``.

        On any failure or interrupt before the swap completes, the staging
        directory and any empty ancestors up to ``stop_at`` are removed and
        an existing ``target`` is left as it was.

        Returns:
            The previous copy of ``target`` moved aside, or None.
        """
        bucket_lock = self._path_lock(stop_at)
        with bucket_lock:
            staging = self._make_staging(url, target, ref=ref, stop_at=stop_at)

        try:
            self._git.clone(url, staging, ref=ref, depth=self._clone_depth)
            return self._swap_into_place(staging, target)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            with bucket_lock:
                _ = prune_empty_ancestors(staging, stop_at)
            self._logger.warning("clone_aborted", url=url, ref=ref, target=str(target))
            raise

    def _discard(self, backup: Path | None) -> None:
        if backup is None:
            return
        shutil.rmtree(backup, ignore_errors=True)
        if backup.exists():
            self._logger.warning("previous_copy_not_removed", path=str(backup))

    # =========================================================================
    # Batch fetch
    # =========================================================================

    def _fetch_outcome(self, raw_spec: str) -> FetchOutcome:
        try:
            return FetchOutcome(spec=raw_spec, result=self.fetch(raw_spec))
        except Exception as e:  # noqa: BLE001
            self._logger.error(
                "fetch_failed",
                spec=raw_spec,
                error=str(e),
                error_kind=type(e).__name__,
            )
            return FetchOutcome(spec=raw_spec, error=e)

    def fetch_many(
        self,
        raw_specs: Iterable[str],
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> FetchReport:
        """Fetch several specifiers with bounded parallelism.

        Each specifier succeeds or fails on its own. Specifiers that map
        to the same cache directory are serialized.

        Args:
            raw_specs: Specifiers to fetch.
            max_workers: Maximum concurrent fetches.

        Returns:
            FetchReport with one outcome per specifier, in input order.

        Raises:
            KeyboardInterrupt: Re-raised after pending specifiers are
                cancelled and running ones have finished.
        """
        specs = list(raw_specs)
        if not specs:
            return FetchReport()

        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
            futures = [executor.submit(self._fetch_outcome, spec) for spec in specs]
            try:
                outcomes = tuple(future.result() for future in futures)
            except KeyboardInterrupt:
                cancelled = sum(future.cancel() for future in futures)
                self._logger.warning("fetch_cancelled", cancelled=cancelled)
                executor.shutdown(wait=True, cancel_futures=True)
                raise

        return FetchReport(outcomes=outcomes)
