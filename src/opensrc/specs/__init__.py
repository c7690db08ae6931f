"""Specifier parsing for opensrc.

Functions:
    detect_ecosystem: Strip an ecosystem prefix from a package specifier.
    parse_package_spec: Parse ``[prefix:]name[@version]`` into a PackageSpec.
    detect_input_type: Decide whether a specifier names a package or a repo.
    parse_repo_spec: Parse a repository specifier into a RepoSpec.
    parse_repository_url: Normalize registry repository metadata.

Models:
    PackageSpec: A package in a registry, with optional version.
    RepoSpec: A source repository, with optional ref.
    EcosystemMatch: Result of ecosystem detection.
"""

from opensrc.specs._models import EcosystemMatch, PackageSpec, RepoSpec
from opensrc.specs._parser import (
    ECOSYSTEM_PREFIXES,
    KNOWN_HOSTS,
    detect_ecosystem,
    detect_input_type,
    parse_package_spec,
    parse_repo_spec,
    split_ref,
)
from opensrc.specs._urls import parse_repository_url

__all__ = [
    "ECOSYSTEM_PREFIXES",
    "KNOWN_HOSTS",
    "EcosystemMatch",
    "PackageSpec",
    "RepoSpec",
    "detect_ecosystem",
    "detect_input_type",
    "parse_package_spec",
    "parse_repo_spec",
    "parse_repository_url",
    "split_ref",
]
