"""Git ref resolution and cloning.

Functions:
    resolve_ref: Choose the tag (or default branch) for a version.
    tag_candidates: Tag names tried for a version, in order.
    parse_remote_refs: Build RemoteRefs from raw ls-remote output.

Classes:
    GitProtocol: Remote operations used by the fetch orchestrator.
    DulwichGit: dulwich-backed implementation.
    FakeGit: In-memory implementation for tests.
    RemoteRefs: Tags and default branch of a remote.
    ResolvedRef: Chosen ref and the rule that chose it.
"""

from opensrc.git._dulwich import DulwichGit, parse_remote_refs
from opensrc.git._fake import FakeGit
from opensrc.git._models import RemoteRefs, ResolvedRef
from opensrc.git._protocol import GitProtocol
from opensrc.git._refs import resolve_ref, tag_candidates

__all__ = [
    "DulwichGit",
    "FakeGit",
    "GitProtocol",
    "RemoteRefs",
    "ResolvedRef",
    "parse_remote_refs",
    "resolve_ref",
    "tag_candidates",
]
