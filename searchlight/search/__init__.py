"""
Search package - Scoring, query routing, ranking and the engine facade.

Queries are routed to a keyword plus a provider filter, scored against the
selected providers' snapshots, deduplicated and ranked.
"""

from .engine import QueryCache, SearchEngine
from .models import Candidate, ProviderType, SearchResult
from .ranker import Ranker
from .router import QueryRouter

__all__ = [
    "SearchEngine",
    "QueryCache",
    "QueryRouter",
    "Ranker",
    "Candidate",
    "SearchResult",
    "ProviderType",
]
