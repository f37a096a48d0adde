"""
Search Debouncer - Runs a search once typing pauses.

Every keystroke calls submit(). The search runs after a quiet interval
(150 ms by default); a newer keystroke cancels the pending search, whether it
is still waiting or already running. Results of a superseded search are
never delivered.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from loguru import logger

from searchlight.search.models import SearchResult

DEFAULT_DELAY_MS = 150

ResultsCallback = Callable[[str, list[SearchResult]], None]


class SearchDebouncer:
    """
    Debounce keystrokes into searches.

    Args:
        search: Coroutine function performing the search (engine.search)
        on_results: Called with (query, results) for the latest search only
        delay_ms: Quiet interval before searching
        sleep: Injectable for tests
    """

    def __init__(
        self,
        search: Callable[[str], Awaitable[list[SearchResult]]],
        on_results: ResultsCallback,
        delay_ms: int = DEFAULT_DELAY_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._search = search
        self._on_results = on_results
        self.delay = delay_ms / 1000.0
        self._sleep = sleep
        self._generation = 0
        self._pending: Optional[asyncio.Task] = None

    @property
    def pending(self) -> Optional[asyncio.Task]:
        return self._pending

    def submit(self, query: str) -> asyncio.Task:
        """Schedule a search for query, replacing any pending one."""
        self.cancel()
        self._generation += 1
        self._pending = asyncio.create_task(self._run(query, self._generation))
        return self._pending

    def cancel(self) -> None:
        """Cancel the pending search, if any."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _run(self, query: str, generation: int) -> None:
        await self._sleep(self.delay)
        if generation != self._generation:
            return

        results = await self._search(query)

        # A newer keystroke may have arrived while the search was running
        if generation != self._generation:
            logger.debug(f"Discarding stale results for '{query}'")
            return
        self._on_results(query, results)

    async def flush(self) -> None:
        """Wait for the pending search to finish (or be canceled)."""
        task = self._pending
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
