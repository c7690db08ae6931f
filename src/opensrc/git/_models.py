"""Git ref models."""

from dataclasses import dataclass, field

from opensrc.enums import RefMatch


@dataclass(frozen=True, slots=True)
class RemoteRefs:
    """Refs advertised by a remote repository.

    Attributes:
        tags: Tag names without the ``refs/tags/`` prefix.
        default_branch: Branch the remote HEAD points at.
        branches: Branch names without the ``refs/heads/`` prefix.
    """

    tags: frozenset[str]
    default_branch: str
    branches: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class ResolvedRef:
    """A ref chosen to check out, and how it was chosen.

    Attributes:
        ref: Tag, branch or commit name.
        match: Which rule selected the ref.
    """

    ref: str
    match: RefMatch

    @property
    def is_fallback(self) -> bool:
        """Whether a requested version had no matching tag."""
        return self.match is RefMatch.FALLBACK
