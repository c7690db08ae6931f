"""Fetching sources into the project cache.

Classes:
    SourceFetcher: Single and batch fetch orchestration.
    FetchResult: A fetched, recorded source.
    FetchOutcome: Result or error for one specifier in a batch.
    FetchReport: All outcomes of a batch.
"""

from opensrc.fetch._models import FetchOutcome, FetchReport, FetchResult
from opensrc.fetch._orchestrator import DEFAULT_MAX_WORKERS, SourceFetcher

__all__ = [
    "DEFAULT_MAX_WORKERS",
    "FetchOutcome",
    "FetchReport",
    "FetchResult",
    "SourceFetcher",
]
