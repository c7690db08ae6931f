# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Fake git for testing."""

from dataclasses import dataclass, field
from pathlib import Path

from opensrc.exceptions import CloneError, GitError

from ._models import RemoteRefs


@dataclass(slots=True)
class FakeGit:
    """In-memory GitProtocol implementation.

    Remotes are registered with their tags; cloning writes a small
    file tree into the target so callers see a populated directory.

    Example:
        >>> git = FakeGit()
        >>> git.add_remote("https://github.com/colinhacks/zod.git", tags={"v3.22.4"})
        >>> git.ls_remote("https://github.com/colinhacks/zod.git").default_branch
        'main'
    """

    remotes: dict[str, RemoteRefs] = field(default_factory=dict)
    files: dict[str, dict[str, str]] = field(default_factory=dict)
    clone_errors: dict[str, Exception | BaseException] = field(default_factory=dict)
    ls_remote_calls: list[str] = field(default_factory=list)
    clones: list[tuple[str, Path, str | None, int | None]] = field(default_factory=list)

    def add_remote(
        self,
        url: str,
        *,
        tags: set[str] | frozenset[str] = frozenset(),
        default_branch: str = "main",
        files: dict[str, str] | None = None,
    ) -> None:
        """Register a remote with tags and the files a clone produces."""
        self.remotes[url] = RemoteRefs(
            tags=frozenset(tags),
            default_branch=default_branch,
            branches=frozenset({default_branch}),
        )
        self.files[url] = files if files is not None else {"README.md": f"# {url}\n"}

    def fail_clone(self, url: str, error: Exception | BaseException) -> None:
        """Make clones of ``url`` write a partial tree and raise ``error``."""
        self.clone_errors[url] = error

    def ls_remote(self, url: str) -> RemoteRefs:
        self.ls_remote_calls.append(url)
        try:
            return self.remotes[url]
        except KeyError:
            msg = f"Repository not found: {url}"
            raise GitError(msg, url=url) from None

    def clone(
        self,
        url: str,
        target: Path,
        *,
        ref: str | None = None,
        depth: int | None = None,
    ) -> None:
        self.clones.append((url, target, ref, depth))
        if url not in self.remotes:
            msg = f"Repository not found: {url}"
            raise CloneError(msg, url=url, ref=ref)

        target.mkdir(parents=True, exist_ok=True)
        if url in self.clone_errors:
            (target / ".git").mkdir(exist_ok=True)
            (target / ".git" / "partial").write_text("incomplete\n")
            raise self.clone_errors[url]

        for relative, content in self.files[url].items():
            path = target / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        (target / ".opensrc-ref").write_text(f"{ref or ''}\n")
