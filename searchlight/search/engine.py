"""
Search Engine - Single entry point for the presentation layer.

Per query:
  1. Route the raw text to a keyword and a provider filter
  2. Score every candidate of the selected providers
  3. Drop zero scores, keep the first occurrence of each identity
  4. Rank and keep the top results

Provider order is part of the contract: when two providers produce the same
identity, the one consulted first wins. A provider that fails contributes
nothing; the search itself never fails because of one provider.
"""

import asyncio
import time
from typing import Optional, Sequence

from loguru import logger

from searchlight.search.models import (
    AllFilter,
    Candidate,
    IDEConfig,
    IDEProjectFilter,
    ProviderFilter,
    ProviderType,
    QueryFilter,
    SearchResult,
)
from searchlight.search.providers.base import Provider
from searchlight.search.ranker import Ranker
from searchlight.search.router import QueryRouter
from searchlight.search.scorer import score_fields
from searchlight.services.usage import UsageLedger

MAX_RESULTS = 10


class QueryCache:
    """Remembers the result of the immediately preceding query only."""

    def __init__(self):
        self._query: Optional[str] = None
        self._results: list[SearchResult] = []

    def get(self, query: str) -> Optional[list[SearchResult]]:
        if self._query is not None and query == self._query:
            return list(self._results)
        return None

    def put(self, query: str, results: list[SearchResult]) -> None:
        self._query = query
        self._results = list(results)

    def clear(self) -> None:
        self._query = None
        self._results = []


class SearchEngine:
    """
    Federated search over injected providers.

    Args:
        providers: Providers in query order for unfiltered searches
        router: Resolves raw queries to (keyword, filter)
        ranker: Orders scored results
        ledger: Usage history, fed by record_selection
        max_results: Result cap
    """

    def __init__(
        self,
        providers: Sequence[Provider],
        router: QueryRouter,
        ranker: Ranker,
        ledger: UsageLedger,
        max_results: int = MAX_RESULTS,
    ):
        self.providers = list(providers)
        self.router = router
        self.ranker = ranker
        self.ledger = ledger
        self.max_results = max_results
        self.cache = QueryCache()

    def provider(self, kind: ProviderType) -> Optional[Provider]:
        for provider in self.providers:
            if provider.kind == kind:
                return provider
        return None

    async def search(self, query: str) -> list[SearchResult]:
        """
        Search all relevant providers.

        Args:
            query: Raw query text as typed

        Returns:
            At most max_results results, unique by identity, all with score > 0
        """
        if not query or not query.strip():
            return []

        cached = self.cache.get(query)
        if cached is not None:
            return cached

        started = time.perf_counter()
        keyword, query_filter = self.router.parse(query)

        scored = await self._collect(keyword, query_filter)
        matched = [r for r in scored if r.score > 0]

        seen = set()
        unique = []
        for result in matched:
            if result.identity in seen:
                continue
            seen.add(result.identity)
            unique.append(result)

        results = self.ranker.rank(unique)[:self.max_results]
        self.cache.put(query, results)

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"Search '{query}' took {elapsed_ms:.2f}ms, {len(results)} results")
        return list(results)

    async def _collect(self, keyword: str, query_filter: QueryFilter) -> list[SearchResult]:
        if isinstance(query_filter, IDEProjectFilter):
            return await self._search_ide_projects(keyword, query_filter.config)

        if isinstance(query_filter, ProviderFilter):
            provider = self.provider(query_filter.kind)
            providers = [provider] if provider is not None else []
        elif isinstance(query_filter, AllFilter):
            providers = self.providers
        else:
            raise TypeError(f"Unknown query filter: {query_filter!r}")

        # gather keeps provider order in its result list
        batches = await asyncio.gather(
            *(self._query_provider(p, keyword) for p in providers)
        )
        return [result for batch in batches for result in batch]

    async def _query_provider(self, provider: Provider, keyword: str) -> list[SearchResult]:
        try:
            candidates = await provider.candidates(keyword)
            return [
                SearchResult(candidate=c, score=score_fields(keyword, c.match_fields()))
                for c in candidates
            ]
        except Exception:
            logger.exception(f"Provider {provider.name} failed during search")
            return []

    async def _search_ide_projects(self, keyword: str, config: IDEConfig) -> list[SearchResult]:
        """
        List one IDE's projects.

        With a keyword projects are scored normally. Without one every
        project is listed, scored by recency position (100, 99, ...).
        """
        provider = self.provider(ProviderType.IDE_PROJECT)
        if provider is None:
            return []

        try:
            candidates: list[Candidate] = await asyncio.to_thread(
                provider.list_projects, config, keyword
            )
        except Exception:
            logger.exception(f"Listing {config.name} projects failed")
            return []

        if not keyword.strip():
            return [
                SearchResult(candidate=c, score=100.0 - index)
                for index, c in enumerate(candidates)
            ]
        return [
            SearchResult(candidate=c, score=score_fields(keyword, c.match_fields()))
            for c in candidates
        ]

    async def record_selection(self, identity: str) -> None:
        """Count a user's choice of a result towards its usage weight."""
        await asyncio.to_thread(self.ledger.record_usage, identity)
        # Cached ordering no longer reflects usage
        self.cache.clear()

    async def invalidate_provider(self, kind: ProviderType) -> bool:
        """
        Force a provider to reload, e.g. after a configuration change.

        Returns:
            True if the reload published a new snapshot
        """
        provider = self.provider(kind)
        if provider is None:
            logger.warning(f"No provider registered for {kind.value}")
            return False

        self.cache.clear()
        reloaded = await asyncio.to_thread(provider.invalidate)
        logger.info(f"Provider {provider.name} invalidated (reloaded={reloaded})")
        return reloaded

    async def load_providers(self) -> None:
        """Initial load of every provider, in parallel."""
        await asyncio.gather(*(asyncio.to_thread(p.refresh) for p in self.providers))
        self.cache.clear()
        logger.info(
            "Providers loaded: "
            + ", ".join(f"{p.name} {len(p.snapshot)}" for p in self.providers)
        )
