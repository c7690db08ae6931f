"""Git operations backed by dulwich."""

from __future__ import annotations

import io
import re
from typing import TYPE_CHECKING

from dulwich import porcelain
from dulwich.errors import GitProtocolError, NotGitRepository

from opensrc.exceptions import CloneError, GitError
from opensrc.utils import create_cli_logger

from ._models import RemoteRefs

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

_HEADS = "refs/heads/"
_TAGS = "refs/tags/"
_PEELED_SUFFIX = "^{}"
_FALLBACK_BRANCH = "main"

_COMMIT_SHA = re.compile(r"^[0-9a-f]{7,40}$")

_DULWICH_ERRORS = (GitProtocolError, NotGitRepository, OSError, KeyError, ValueError)


def _decode(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode()
    return value


def _split_ls_remote(
    result: object,
) -> tuple[Mapping[bytes | str, bytes | None], Mapping[bytes | str, bytes]]:
    """Return (refs, symrefs) from any ``porcelain.ls_remote`` result shape."""
    refs = getattr(result, "refs", result)
    symrefs = getattr(result, "symrefs", None) or {}
    return refs, symrefs  # pyright: ignore[reportReturnType]


def parse_remote_refs(
    refs: Mapping[bytes | str, bytes | None],
    symrefs: Mapping[bytes | str, bytes] | None = None,
) -> RemoteRefs:
    """Build RemoteRefs from raw ls-remote output.

    The default branch comes from the ``HEAD`` symref when advertised,
    otherwise from the branch whose commit equals ``HEAD``, otherwise
    ``main``.

    Args:
        refs: Mapping of ref name to commit sha.
        symrefs: Mapping of symbolic ref name to target ref.

    Returns:
        RemoteRefs with tag and branch names.
    """
    decoded = {_decode(name): sha for name, sha in refs.items()}

    tags = frozenset(
        name.removeprefix(_TAGS).removesuffix(_PEELED_SUFFIX)
        for name in decoded
        if name.startswith(_TAGS)
    )
    branches = frozenset(
        name.removeprefix(_HEADS) for name in decoded if name.startswith(_HEADS)
    )

    default_branch: str | None = None
    head_target = {_decode(k): _decode(v) for k, v in (symrefs or {}).items()}.get("HEAD")
    if head_target and head_target.startswith(_HEADS):
        default_branch = head_target.removeprefix(_HEADS)

    head_sha = decoded.get("HEAD")
    if default_branch is None and head_sha is not None:
        matching = sorted(
            name.removeprefix(_HEADS)
            for name, sha in decoded.items()
            if name.startswith(_HEADS) and sha == head_sha
        )
        for preferred in ("main", "master"):
            if preferred in matching:
                default_branch = preferred
                break
        else:
            default_branch = matching[0] if matching else None

    return RemoteRefs(
        tags=tags,
        default_branch=default_branch or _FALLBACK_BRANCH,
        branches=branches,
    )


class DulwichGit:
    """GitProtocol implementation using dulwich porcelain."""

    def __init__(self, *, logger: FilteringBoundLogger | None = None) -> None:
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else create_cli_logger()
        )

    def ls_remote(self, url: str) -> RemoteRefs:
        """List the tags and default branch of a remote.

        Raises:
            GitError: If the remote cannot be reached or listed.
        """
        self._logger.debug("ls_remote", url=url)
        try:
            result = porcelain.ls_remote(url)
        except _DULWICH_ERRORS as e:
            msg = f"Failed to list refs for {url}: {e}"
            raise GitError(msg, url=url, cause=e) from e

        refs, symrefs = _split_ls_remote(result)
        return parse_remote_refs(refs, symrefs)

    def _is_commit(self, url: str, ref: str) -> bool:
        if _COMMIT_SHA.match(ref) is None:
            return False
        remote = self.ls_remote(url)
        return ref not in remote.tags and ref not in remote.branches

    def clone(
        self,
        url: str,
        target: Path,
        *,
        ref: str | None = None,
        depth: int | None = None,
    ) -> None:
        """Clone ``url`` into ``target`` with ``ref`` checked out.

        Branches and tags are cloned shallowly when ``depth`` is set. A
        commit sha needs full history, so it is cloned without depth and
        then checked out with a hard reset. A hex-looking ref that the
        remote lists as a tag or branch (``20240101``) is not a sha.

        Raises:
            CloneError: If dulwich fails to clone or check out the ref.
        """
        try:
            is_commit = ref is not None and self._is_commit(url, ref)
        except GitError as e:
            raise CloneError(str(e), url=url, ref=ref, cause=e) from e
        self._logger.debug("clone_started", url=url, ref=ref, depth=depth, target=str(target))

        try:
            if is_commit:
                repo = porcelain.clone(url, str(target), errstream=io.BytesIO())
                try:
                    porcelain.reset(repo, "hard", ref)
                finally:
                    repo.close()
            else:
                repo = porcelain.clone(
                    url,
                    str(target),
                    depth=depth,
                    branch=ref.encode() if ref is not None else None,
                    errstream=io.BytesIO(),
                )
                repo.close()
        except _DULWICH_ERRORS as e:
            msg = f"Failed to clone {url} at {ref or 'HEAD'}: {e}"
            raise CloneError(msg, url=url, ref=ref, cause=e) from e

        self._logger.debug("clone_finished", url=url, ref=ref)
