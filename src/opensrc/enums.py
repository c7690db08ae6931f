"""Enumeration types for opensrc."""

from enum import StrEnum


class Ecosystem(StrEnum):
    """Package registry namespaces."""

    NPM = "npm"
    PYPI = "pypi"
    CRATES = "crates"


class InputType(StrEnum):
    """Kinds of specifiers accepted on the command line."""

    PACKAGE = "package"
    REPO = "repo"


class RefMatch(StrEnum):
    """How a git ref was chosen for a requested version.

    Values are listed in precedence order. DEFAULT_BRANCH is used when no
    version was requested; FALLBACK when a version was requested but no tag
    matched it.
    """

    EXPLICIT = "explicit"
    EXACT = "exact"
    V_PREFIX = "v_prefix"
    NAME_AT = "name_at"
    NAME_DASH = "name_dash"
    DEFAULT_BRANCH = "default_branch"
    FALLBACK = "fallback"


class VersionSource(StrEnum):
    """Where the version of a fetched source came from."""

    EXPLICIT = "explicit"
    LOCKFILE = "lockfile"
    REGISTRY = "registry"
    REF = "ref"
