"""Map a package version to a git ref."""

from __future__ import annotations

from typing import TYPE_CHECKING

from opensrc.enums import RefMatch

from ._models import ResolvedRef

if TYPE_CHECKING:
    from opensrc.specs import RepoSpec

    from ._protocol import GitProtocol


def tag_candidates(version: str, package_name: str | None = None) -> list[tuple[str, RefMatch]]:
    """Build the tag names to try for a version, in precedence order.

    Args:
        version: Version string, e.g. ``4.17.21``.
        package_name: Package name for monorepo conventions
            (``name@version`` and ``name-version``).

    Returns:
        List of (tag, match kind) pairs.
    """
    candidates = [
        (version, RefMatch.EXACT),
        (f"v{version}", RefMatch.V_PREFIX),
    ]
    if package_name:
        candidates.append((f"{package_name}@{version}", RefMatch.NAME_AT))
        candidates.append((f"{package_name}-{version}", RefMatch.NAME_DASH))
    return candidates


def resolve_ref(
    repo: RepoSpec,
    version: str | None,
    *,
    git: GitProtocol,
    package_name: str | None = None,
) -> ResolvedRef:
    """Pick the ref to check out for a version.

    The remote is listed once. Tags are tried as ``version``,
    ``v{version}``, ``{name}@{version}`` then ``{name}-{version}``. With no
    version the default branch is used. When nothing matches, the default
    branch is returned with ``RefMatch.FALLBACK`` so callers can warn.

    Args:
        repo: Repository to inspect.
        version: Version to find, or None.
        git: Git implementation used to list remote refs.
        package_name: Package name for monorepo tag conventions.

    Returns:
        The chosen ref and how it matched.

    Raises:
        GitError: If the remote cannot be listed.
    """
    remote = git.ls_remote(repo.clone_url)

    if version is None:
        return ResolvedRef(ref=remote.default_branch, match=RefMatch.DEFAULT_BRANCH)

    for tag, match in tag_candidates(version, package_name):
        if tag in remote.tags:
            return ResolvedRef(ref=tag, match=match)

    return ResolvedRef(ref=remote.default_branch, match=RefMatch.FALLBACK)
