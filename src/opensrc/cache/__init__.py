"""Project-local source cache.

Layout under ``<root>/opensrc``: ``packages/<ecosystem>/<name>``,
``repos/<host>/<owner>/<repo>`` and the ``sources.json`` index.

Classes:
    CacheStore: Existence checks, records, listing and removal.
    SourceRecord: One index entry.
    SourcesIndex: In-memory form of ``sources.json``.
    SourcesListing: Listing with every bucket present.
    ListedPackage: Package record annotated with its ecosystem.
"""

from opensrc.cache._io import read_index, write_index
from opensrc.cache._models import (
    ListedPackage,
    SourceRecord,
    SourcesIndex,
    SourcesListing,
)
from opensrc.cache._paths import (
    CACHE_DIR_NAME,
    INDEX_FILE_NAME,
    get_index_path,
    get_opensrc_dir,
    get_package_path,
    get_package_relative_path,
    get_packages_dir,
    get_repo_path,
    get_repo_relative_path,
    get_repos_dir,
)
from opensrc.cache._store import CacheStore, prune_empty_ancestors

__all__ = [
    "CACHE_DIR_NAME",
    "INDEX_FILE_NAME",
    "CacheStore",
    "ListedPackage",
    "SourceRecord",
    "SourcesIndex",
    "SourcesListing",
    "get_index_path",
    "get_opensrc_dir",
    "get_package_path",
    "get_package_relative_path",
    "get_packages_dir",
    "get_repo_path",
    "get_repo_relative_path",
    "get_repos_dir",
    "prune_empty_ancestors",
    "read_index",
    "write_index",
]
