"""Fetch against real git repositories on the local filesystem."""

from pathlib import Path

import pytest
from dulwich.repo import Repo

from opensrc.cache import CacheStore
from opensrc.enums import Ecosystem, RefMatch
from opensrc.exceptions import CloneError, GitError
from opensrc.fetch import SourceFetcher
from opensrc.git import DulwichGit, RemoteRefs
from opensrc.registry import FakeRegistry
from opensrc.specs import RepoSpec


class LocalMirrorGit(DulwichGit):
    """DulwichGit that serves https clone URLs from local directories."""

    def __init__(self, mirrors: dict[str, Path]) -> None:
        super().__init__()
        self.mirrors: dict[str, Path] = mirrors

    def _local(self, url: str) -> str:
        return str(self.mirrors.get(url, url))

    def ls_remote(self, url: str) -> RemoteRefs:
        return super().ls_remote(self._local(url))

    def clone(
        self,
        url: str,
        target: Path,
        *,
        ref: str | None = None,
        depth: int | None = None,
    ) -> None:
        super().clone(self._local(url), target, ref=ref, depth=depth)


UPSTREAM = RepoSpec("github.com", "acme", "widget")


@pytest.fixture
def mirror_git(upstream_repo: Path) -> LocalMirrorGit:
    return LocalMirrorGit({UPSTREAM.clone_url: upstream_repo})


class TestDulwichGit:
    def test_ls_remote_lists_tags_and_default_branch(self, upstream_repo: Path) -> None:
        remote = DulwichGit().ls_remote(str(upstream_repo))

        assert remote.tags >= {"v1.0.0", "v2.0.0"}
        assert remote.default_branch == "main"
        assert "main" in remote.branches

    def test_clone_tag(self, upstream_repo: Path, tmp_path: Path) -> None:
        target = tmp_path / "clone"

        DulwichGit().clone(str(upstream_repo), target, ref="v1.0.0")

        assert (target / "VERSION").read_text() == "1.0.0\n"

    def test_clone_branch(self, upstream_repo: Path, tmp_path: Path) -> None:
        target = tmp_path / "clone"

        DulwichGit().clone(str(upstream_repo), target, ref="main")

        assert (target / "VERSION").read_text() == "2.0.0\n"

    def test_clone_commit_sha(self, upstream_repo: Path, tmp_path: Path) -> None:
        with Repo(str(upstream_repo)) as repo:
            first = repo.refs[b"refs/tags/v1.0.0"].decode()
        target = tmp_path / "clone"

        DulwichGit().clone(str(upstream_repo), target, ref=first)

        assert (target / "VERSION").read_text() == "1.0.0\n"

    def test_clone_missing_repository(self, tmp_path: Path) -> None:
        with pytest.raises(CloneError):
            DulwichGit().clone(str(tmp_path / "missing"), tmp_path / "clone")

    def test_ls_remote_missing_repository(self, tmp_path: Path) -> None:
        with pytest.raises(GitError):
            _ = DulwichGit().ls_remote(str(tmp_path / "missing"))


class TestSourceFetcherWithDulwich:
    def test_package_version_tag_is_checked_out(
        self, project_root: Path, mirror_git: LocalMirrorGit
    ) -> None:
        registry = FakeRegistry()
        _ = registry.add(Ecosystem.NPM, "widget", "2.0.0", UPSTREAM)
        fetcher = SourceFetcher(
            project_root, registry=registry, git=mirror_git, clone_depth=0
        )

        result = fetcher.fetch("widget@1.0.0")

        assert result.ref == "v1.0.0"
        assert result.ref_match is RefMatch.V_PREFIX
        assert (result.path / "VERSION").read_text() == "1.0.0\n"
        assert CacheStore(project_root).is_fetched("widget", Ecosystem.NPM)

    def test_refetch_replaces_checkout(
        self, project_root: Path, mirror_git: LocalMirrorGit
    ) -> None:
        registry = FakeRegistry()
        _ = registry.add(Ecosystem.NPM, "widget", "2.0.0", UPSTREAM)
        fetcher = SourceFetcher(
            project_root, registry=registry, git=mirror_git, clone_depth=0
        )

        _ = fetcher.fetch("widget@1.0.0")
        result = fetcher.fetch("widget")

        assert (result.path / "VERSION").read_text() == "2.0.0\n"
        record = CacheStore(project_root).get_package_info("widget", Ecosystem.NPM)
        assert record is not None
        assert record.version == "2.0.0"
        assert sorted(p.name for p in result.path.parent.iterdir()) == ["widget"]

    def test_repository_default_branch(
        self, project_root: Path, mirror_git: LocalMirrorGit
    ) -> None:
        fetcher = SourceFetcher(
            project_root, registry=FakeRegistry(), git=mirror_git, clone_depth=0
        )

        result = fetcher.fetch("acme/widget")

        assert result.ref == "main"
        assert result.path == project_root / "opensrc/repos/github.com/acme/widget"
        assert (result.path / "VERSION").read_text() == "2.0.0\n"
