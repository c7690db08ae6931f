# ruff: noqa: TC003  # Path needed at runtime for Protocol method bodies
"""Git protocol for dependency injection."""

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ._models import RemoteRefs


@runtime_checkable
class GitProtocol(Protocol):
    """Remote git operations needed to fetch sources.

    DulwichGit implements this against real remotes; FakeGit keeps
    everything in memory for tests.
    """

    def ls_remote(self, url: str) -> "RemoteRefs":  # noqa: UP037
        """List the tags and default branch of a remote.

        Raises:
            GitError: If the remote cannot be listed.
        """
        ...

    def clone(
        self,
        url: str,
        target: Path,
        *,
        ref: str | None = None,
        depth: int | None = None,
    ) -> None:
        """Clone a remote into ``target`` and check out ``ref``.

        Args:
            url: Remote repository URL.
            target: Empty directory to clone into.
            ref: Branch, tag or commit; None for the remote HEAD.
            depth: History depth; None for a full clone.

        Raises:
            CloneError: If the clone fails. ``target`` may hold partial data.
        """
        ...
