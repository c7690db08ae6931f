import tempfile
import threading
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from opensrc.cache import CacheStore
from opensrc.enums import Ecosystem, InputType, RefMatch, VersionSource
from opensrc.exceptions import (
    CloneError,
    GitError,
    IndexWriteError,
    NoRepositoryError,
    NotFoundError,
    ParseError,
    RefResolutionWarning,
    RegistryError,
)
from opensrc.fetch import SourceFetcher
from opensrc.git import FakeGit, RemoteRefs
from opensrc.registry import FakeRegistry
from opensrc.specs import RepoSpec

ZOD_URL = "https://github.com/colinhacks/zod.git"


@pytest.fixture
def fetcher(project_root: Path, fake_registry: FakeRegistry, fake_git: FakeGit) -> SourceFetcher:
    return SourceFetcher(project_root, registry=fake_registry, git=fake_git)


def cache_entries(project_root: Path) -> list[str]:
    opensrc_dir = project_root / "opensrc"
    return sorted(p.relative_to(opensrc_dir).as_posix() for p in opensrc_dir.rglob("*"))


class GatedFailureGit:
    """Fails clones of one URL once ``gate`` is set; delegates the rest."""

    def __init__(self, git: FakeGit, failing_url: str, gate: threading.Event) -> None:
        self._git = git
        self._failing_url = failing_url
        self._gate = gate

    def ls_remote(self, url: str) -> RemoteRefs:
        return self._git.ls_remote(url)

    def clone(
        self,
        url: str,
        target: Path,
        *,
        ref: str | None = None,
        depth: int | None = None,
    ) -> None:
        if url == self._failing_url:
            _ = self._gate.wait(5)
            msg = "remote hung up"
            raise CloneError(msg, url=url, ref=ref)
        self._git.clone(url, target, ref=ref, depth=depth)


class TestFetchPackage:
    def test_latest_from_registry(
        self, fetcher: SourceFetcher, project_root: Path, fake_git: FakeGit
    ) -> None:
        result = fetcher.fetch("zod")

        assert result.kind is InputType.PACKAGE
        assert result.version == "3.22.4"
        assert result.version_source is VersionSource.REGISTRY
        assert result.ref == "v3.22.4"
        assert result.ref_match is RefMatch.V_PREFIX
        assert result.path == project_root / "opensrc" / "packages" / "npm" / "zod"
        assert (result.path / "README.md").is_file()
        assert (result.path / ".opensrc-ref").read_text() == "v3.22.4\n"
        assert fake_git.clones[0][2:] == ("v3.22.4", 1)

    def test_explicit_version(self, fetcher: SourceFetcher) -> None:
        result = fetcher.fetch("zod@3.21.0")

        assert result.version == "3.21.0"
        assert result.version_source is VersionSource.EXPLICIT
        assert result.ref == "v3.21.0"

    def test_version_from_lockfile(self, fetcher: SourceFetcher, project_root: Path) -> None:
        (project_root / "package-lock.json").write_text(
            '{"packages": {"node_modules/zod": {"version": "3.21.0"}}}'
        )

        result = fetcher.fetch("zod")

        assert result.version == "3.21.0"
        assert result.version_source is VersionSource.LOCKFILE

    def test_explicit_version_beats_lockfile(
        self, fetcher: SourceFetcher, project_root: Path
    ) -> None:
        (project_root / "package-lock.json").write_text(
            '{"packages": {"node_modules/zod": {"version": "3.21.0"}}}'
        )

        assert fetcher.fetch("zod@3.22.4").version_source is VersionSource.EXPLICIT

    def test_records_package_in_index(self, fetcher: SourceFetcher) -> None:
        _ = fetcher.fetch("pypi:requests==2.31.0")

        record = fetcher.store.get_package_info("requests", Ecosystem.PYPI)
        assert record is not None
        assert record.version == "2.31.0"
        assert record.path == "packages/pypi/requests"

    def test_scoped_package(self, fetcher: SourceFetcher, project_root: Path) -> None:
        result = fetcher.fetch("@babel/core")

        assert result.path == project_root / "opensrc" / "packages" / "npm" / "@babel" / "core"
        assert fetcher.store.is_fetched("@babel/core", Ecosystem.NPM)

    def test_crate(self, fetcher: SourceFetcher) -> None:
        result = fetcher.fetch("cargo:serde")

        assert result.path.parts[-2:] == ("crates", "serde")
        assert result.ref == "v1.0.193"

    def test_missing_tag_falls_back_with_warning(
        self, fetcher: SourceFetcher, fake_registry: FakeRegistry
    ) -> None:
        result = fetcher.fetch("zod@9.9.9")

        assert result.ref == "main"
        assert result.ref_match is RefMatch.FALLBACK
        assert result.version == "9.9.9"
        assert len(result.warnings) == 1
        assert isinstance(result.warnings[0], RefResolutionWarning)
        assert result.warnings[0].ref == "main"
        assert fetcher.store.get_package_info("zod") is not None

    def test_refetch_replaces_directory_and_record(
        self, project_root: Path, fake_registry: FakeRegistry, fake_git: FakeGit
    ) -> None:
        times = iter(["2026-01-01T00:00:00Z", "2026-02-01T00:00:00Z"])
        store = CacheStore(project_root, clock=lambda: next(times))
        fetcher = SourceFetcher(project_root, registry=fake_registry, git=fake_git, store=store)

        first = fetcher.fetch("zod@3.21.0")
        (first.path / "stale.txt").write_text("old")
        second = fetcher.fetch("zod")

        assert second.path == first.path
        assert not (second.path / "stale.txt").exists()
        record = store.get_package_info("zod")
        assert record is not None
        assert (record.version, record.fetched_at) == ("3.22.4", "2026-02-01T00:00:00Z")
        assert len(store.read_index().packages[Ecosystem.NPM]) == 1

    def test_clone_depth_zero_means_full_history(
        self, project_root: Path, fake_registry: FakeRegistry, fake_git: FakeGit
    ) -> None:
        fetcher = SourceFetcher(
            project_root, registry=fake_registry, git=fake_git, clone_depth=0
        )

        _ = fetcher.fetch("zod")

        assert fake_git.clones[0][3] is None


class TestFetchPackageErrors:
    def test_unknown_package(self, fetcher: SourceFetcher, project_root: Path) -> None:
        with pytest.raises(NotFoundError):
            _ = fetcher.fetch("does-not-exist")

        assert not (project_root / "opensrc").exists()

    def test_package_without_repository(
        self, fetcher: SourceFetcher, fake_registry: FakeRegistry
    ) -> None:
        _ = fake_registry.add(Ecosystem.NPM, "closed", "1.0.0", None)

        with pytest.raises(NoRepositoryError):
            _ = fetcher.fetch("closed")

    def test_registry_without_version(
        self, fetcher: SourceFetcher, fake_registry: FakeRegistry
    ) -> None:
        repository = fake_registry.packages[Ecosystem.NPM, "zod"].repository
        _ = fake_registry.add(Ecosystem.NPM, "zod", None, repository)

        with pytest.raises(RegistryError, match="no version"):
            _ = fetcher.fetch("zod")

    def test_malformed_spec(self, fetcher: SourceFetcher) -> None:
        with pytest.raises(ParseError):
            _ = fetcher.fetch("zod@")

    def test_clone_failure_leaves_nothing_behind(
        self, fetcher: SourceFetcher, fake_git: FakeGit, project_root: Path
    ) -> None:
        fake_git.fail_clone(ZOD_URL, CloneError("network down", url=ZOD_URL))

        with pytest.raises(CloneError):
            _ = fetcher.fetch("zod")

        assert cache_entries(project_root) == ["packages", "packages/npm"]
        assert fetcher.store.get_package_info("zod") is None

    def test_clone_failure_keeps_previous_fetch(
        self, fetcher: SourceFetcher, fake_git: FakeGit
    ) -> None:
        first = fetcher.fetch("zod@3.21.0")
        fake_git.fail_clone(ZOD_URL, CloneError("network down", url=ZOD_URL))

        with pytest.raises(CloneError):
            _ = fetcher.fetch("zod@3.22.4")

        assert (first.path / ".opensrc-ref").read_text() == "v3.21.0\n"
        record = fetcher.store.get_package_info("zod")
        assert record is not None
        assert record.version == "3.21.0"

    def test_interrupt_during_clone_cleans_up(
        self, fetcher: SourceFetcher, fake_git: FakeGit, project_root: Path
    ) -> None:
        fake_git.fail_clone(ZOD_URL, KeyboardInterrupt())

        with pytest.raises(KeyboardInterrupt):
            _ = fetcher.fetch("zod")

        assert cache_entries(project_root) == ["packages", "packages/npm"]

    def test_interrupt_while_swapping_keeps_previous_fetch(
        self, fetcher: SourceFetcher, mocker: MockerFixture, project_root: Path
    ) -> None:
        first = fetcher.fetch("zod@3.21.0")
        real_rename = Path.rename

        def rename(self: Path, target: Path) -> Path:
            if self.name.endswith(".partial"):
                raise KeyboardInterrupt
            return real_rename(self, target)

        mocker.patch.object(Path, "rename", autospec=True, side_effect=rename)

        with pytest.raises(KeyboardInterrupt):
            _ = fetcher.fetch("zod@3.22.4")

        assert (first.path / "README.md").is_file()
        assert (first.path / ".opensrc-ref").read_text() == "v3.21.0\n"
        record = fetcher.store.get_package_info("zod")
        assert record is not None
        assert record.version == "3.21.0"
        assert cache_entries(project_root) == [
            "packages",
            "packages/npm",
            "packages/npm/zod",
            "packages/npm/zod/.opensrc-ref",
            "packages/npm/zod/README.md",
            "sources.json",
        ]

    def test_interrupt_while_discarding_previous_copy_keeps_new_fetch(
        self, fetcher: SourceFetcher, mocker: MockerFixture
    ) -> None:
        _ = fetcher.fetch("zod@3.21.0")
        mocker.patch(
            "opensrc.fetch._orchestrator.shutil.rmtree", side_effect=KeyboardInterrupt
        )

        with pytest.raises(KeyboardInterrupt):
            _ = fetcher.fetch("zod@3.22.4")

        path = fetcher.store.get_package_path("zod")
        assert (path / ".opensrc-ref").read_text() == "v3.22.4\n"
        record = fetcher.store.get_package_info("zod")
        assert record is not None
        assert record.version == "3.22.4"

    def test_staging_failure_prunes_created_scope(
        self, fetcher: SourceFetcher, mocker: MockerFixture, project_root: Path
    ) -> None:
        mocker.patch(
            "opensrc.fetch._orchestrator.tempfile.mkdtemp",
            side_effect=PermissionError("read-only"),
        )

        with pytest.raises(CloneError, match="staging directory"):
            _ = fetcher.fetch("@babel/core")

        assert cache_entries(project_root) == ["packages", "packages/npm"]

    def test_index_write_failure_keeps_source(
        self, fetcher: SourceFetcher, mocker: MockerFixture, project_root: Path
    ) -> None:
        mocker.patch(
            "opensrc.cache._store.write_index",
            side_effect=IndexWriteError(
                "disk full", path=project_root / "opensrc" / "sources.json"
            ),
        )

        with pytest.raises(IndexWriteError):
            _ = fetcher.fetch("zod")

        assert fetcher.store.package_exists("zod")


class TestFetchRepo:
    def test_default_branch(self, fetcher: SourceFetcher, project_root: Path) -> None:
        result = fetcher.fetch("vercel/ai")

        assert result.kind is InputType.REPO
        assert result.name == "github.com/vercel/ai"
        assert result.ref == "main"
        assert result.ref_match is RefMatch.DEFAULT_BRANCH
        assert result.version_source is VersionSource.REF
        assert result.path == project_root / "opensrc" / "repos" / "github.com" / "vercel" / "ai"

    def test_explicit_ref_skips_ls_remote(self, fetcher: SourceFetcher, fake_git: FakeGit) -> None:
        result = fetcher.fetch("github:vercel/ai#ai@5.0.0")

        assert result.ref == "ai@5.0.0"
        assert result.ref_match is RefMatch.EXPLICIT
        assert fake_git.ls_remote_calls == []

    def test_records_repo_in_index(self, fetcher: SourceFetcher) -> None:
        _ = fetcher.fetch("https://github.com/vercel/ai/tree/canary")

        record = fetcher.store.get_repo_info("github.com/vercel/ai")
        assert record is not None
        assert record.version == "canary"
        assert record.path == "repos/github.com/vercel/ai"

    def test_unknown_remote(self, fetcher: SourceFetcher, project_root: Path) -> None:
        with pytest.raises(GitError):
            _ = fetcher.fetch("nobody/nothing")

        assert not (project_root / "opensrc").exists()

    def test_failed_clone_prunes_owner_and_host(
        self, fetcher: SourceFetcher, fake_git: FakeGit, project_root: Path
    ) -> None:
        url = "https://github.com/vercel/ai.git"
        fake_git.fail_clone(url, CloneError("boom", url=url))

        with pytest.raises(CloneError):
            _ = fetcher.fetch("vercel/ai#main")

        assert cache_entries(project_root) == ["repos"]


class TestFetchMany:
    def test_outcomes_in_input_order(self, fetcher: SourceFetcher) -> None:
        specs = ["zod", "does-not-exist", "pypi:requests", "vercel/ai", "zod@"]

        report = fetcher.fetch_many(specs, max_workers=3)

        assert [o.spec for o in report.outcomes] == specs
        assert [o.ok for o in report.outcomes] == [True, False, True, True, False]
        assert report.failed
        assert [o.error_kind for o in report.failures] == ["NotFoundError", "ParseError"]
        assert len(report.succeeded) == 3

    def test_all_records_survive_concurrent_writes(self, fetcher: SourceFetcher) -> None:
        report = fetcher.fetch_many(
            ["zod", "@babel/core", "pypi:requests", "cargo:serde", "vercel/ai"], max_workers=5
        )

        assert not report.failed
        listing = fetcher.store.list_sources()
        assert len(listing.packages[Ecosystem.NPM]) == 2
        assert len(listing.packages[Ecosystem.PYPI]) == 1
        assert len(listing.packages[Ecosystem.CRATES]) == 1
        assert len(listing.repos) == 1

    def test_same_target_is_serialized(self, fetcher: SourceFetcher) -> None:
        report = fetcher.fetch_many(["zod", "zod@3.21.0", "npm:zod"], max_workers=3)

        assert not report.failed
        assert len(fetcher.store.read_index().packages[Ecosystem.NPM]) == 1
        leftovers = [p.name for p in fetcher.store.get_packages_dir(Ecosystem.NPM).iterdir()]
        assert leftovers == ["zod"]

    def test_failed_sibling_does_not_prune_shared_scope(
        self,
        project_root: Path,
        fake_registry: FakeRegistry,
        fake_git: FakeGit,
        mocker: MockerFixture,
    ) -> None:
        for name in ("a", "b"):
            _ = fake_registry.add(
                Ecosystem.NPM, f"@s/{name}", "1.0.0", RepoSpec("github.com", "s", name)
            )
            fake_git.add_remote(f"https://github.com/s/{name}.git", tags={"v1.0.0"})
        b_staging = threading.Event()
        git = GatedFailureGit(fake_git, "https://github.com/s/a.git", b_staging)

        real_mkdtemp = tempfile.mkdtemp

        def mkdtemp(*, dir: Path, prefix: str, suffix: str) -> str:  # noqa: A002
            if prefix == ".b.":
                b_staging.set()
                _ = threading.Event().wait(0.5)
            return real_mkdtemp(dir=dir, prefix=prefix, suffix=suffix)

        mocker.patch("opensrc.fetch._orchestrator.tempfile.mkdtemp", side_effect=mkdtemp)
        fetcher = SourceFetcher(project_root, registry=fake_registry, git=git)

        report = fetcher.fetch_many(["@s/a", "@s/b"], max_workers=2)

        assert [o.ok for o in report.outcomes] == [False, True]
        assert report.outcomes[0].error_kind == "CloneError"
        assert fetcher.store.is_fetched("@s/b", Ecosystem.NPM)

    def test_empty_input(self, fetcher: SourceFetcher) -> None:
        report = fetcher.fetch_many([])

        assert report.outcomes == ()
        assert not report.failed

    def test_failure_does_not_stop_others(
        self, fetcher: SourceFetcher, fake_registry: FakeRegistry
    ) -> None:
        fake_registry.fail(
            Ecosystem.PYPI,
            "requests",
            RegistryError("503", ecosystem="pypi", name="requests"),
        )

        report = fetcher.fetch_many(["pypi:requests", "zod"], max_workers=1)

        assert [o.ok for o in report.outcomes] == [False, True]

    def test_interrupt_propagates(
        self, fetcher: SourceFetcher, mocker: MockerFixture
    ) -> None:
        started = threading.Event()

        def interrupt(raw_spec: str) -> object:
            started.set()
            raise KeyboardInterrupt

        mocker.patch.object(fetcher, "_fetch_outcome", side_effect=interrupt)

        with pytest.raises(KeyboardInterrupt):
            _ = fetcher.fetch_many(["zod", "pypi:requests"], max_workers=1)

        assert started.is_set()
