"""
Refresh Scheduler - Periodic snapshot refresh for volatile providers.

Each registered provider gets its own background task that sleeps for the
provider's interval and then refreshes it. Refreshes run in a worker thread
so that blocking I/O never stalls queries on the event loop.

Clock, sleep and the blocking-call runner are injectable. run_due() drives
refreshes from the clock alone, which lets tests advance time by hand.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from loguru import logger

from searchlight.search.providers.base import Provider


@dataclass
class RefreshJob:
    provider: Provider
    interval: float
    next_due: float
    runs: int = 0
    failures: int = 0


class RefreshScheduler:
    """Owns one refresh loop per volatile provider."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        run_blocking: Callable[..., Awaitable] = asyncio.to_thread,
    ):
        self.clock = clock
        self._sleep = sleep
        self._run_blocking = run_blocking
        self.jobs: list[RefreshJob] = []
        self._tasks: list[asyncio.Task] = []

    def add(self, provider: Provider, interval: Optional[float] = None) -> RefreshJob:
        """
        Register a provider for periodic refresh.

        Args:
            provider: Provider to refresh
            interval: Seconds between refreshes (defaults to provider.refresh_interval)
        """
        interval = interval if interval is not None else provider.refresh_interval
        if not interval or interval <= 0:
            raise ValueError(f"Provider {provider.name} has no refresh interval")

        job = RefreshJob(provider=provider, interval=interval, next_due=self.clock() + interval)
        self.jobs.append(job)
        logger.debug(f"Scheduled {provider.name} refresh every {interval:g}s")
        return job

    async def refresh(self, job: RefreshJob) -> bool:
        """Refresh one job's provider now and push its next due time."""
        ok = await self._run_blocking(job.provider.refresh)
        job.runs += 1
        if not ok:
            job.failures += 1
        job.next_due = self.clock() + job.interval
        return ok

    async def run_due(self) -> list[RefreshJob]:
        """Refresh every job whose due time has passed. Returns those jobs."""
        now = self.clock()
        due = [job for job in self.jobs if job.next_due <= now]
        for job in due:
            await self.refresh(job)
        return due

    async def _loop(self, job: RefreshJob) -> None:
        while True:
            await self._sleep(job.interval)
            try:
                await self.refresh(job)
            except Exception:
                # Provider.refresh already logs its own failures
                logger.exception(f"Refresh loop for {job.provider.name} hit an error")

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        """Start one background task per job."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._loop(job), name=f"refresh-{job.provider.name}")
            for job in self.jobs
        ]
        logger.debug(f"Refresh scheduler started with {len(self._tasks)} jobs")

    async def stop(self) -> None:
        """Cancel all background tasks and wait for them to finish."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.debug("Refresh scheduler stopped")
