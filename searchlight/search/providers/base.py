"""
Provider base - Snapshot ownership shared by all data sources.

A provider turns some backing source into a list of Candidates. The engine
never reads the backing source directly; it reads the provider's current
ProviderSnapshot, which is immutable and replaced wholesale on every
successful refresh.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from loguru import logger

from searchlight.search.models import Candidate, ProviderType

DEFAULT_SANITY_LIMIT = 10000


class ProviderUnavailableError(Exception):
    """The provider's backing source is missing or unreachable."""


@dataclass(frozen=True)
class ProviderSnapshot:
    """Complete candidate list of one provider at one point in time."""
    items: tuple[Candidate, ...]
    captured_at: float

    def __len__(self) -> int:
        return len(self.items)


EMPTY_SNAPSHOT = ProviderSnapshot(items=(), captured_at=0.0)


class Provider(ABC):
    """
    Base class for all candidate providers.

    Subclasses implement load_or_refresh(). Everything else (atomic snapshot
    swap, failure handling, the sanity check) lives here.
    """

    kind: ProviderType
    # Volatile providers get a periodic refresh from the scheduler
    refresh_interval: Optional[float] = None

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        sanity_limit: int = DEFAULT_SANITY_LIMIT,
    ):
        self.clock = clock
        self.sanity_limit = sanity_limit
        self._snapshot = EMPTY_SNAPSHOT
        self._snapshot_lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def snapshot(self) -> ProviderSnapshot:
        with self._snapshot_lock:
            return self._snapshot

    @abstractmethod
    def load_or_refresh(self) -> list[Candidate]:
        """
        Fetch the full candidate list from the backing source.

        Raises:
            ProviderUnavailableError: backing source missing or unreachable
        """
        ...

    def refresh(self) -> bool:
        """
        Reload from the backing source and publish a new snapshot.

        Returns:
            True if a new snapshot was published. On failure the previous
            snapshot stays in place.
        """
        previous = self.snapshot
        try:
            items = self.load_or_refresh()
        except ProviderUnavailableError as e:
            logger.warning(f"Provider {self.name} unavailable: {e}")
            return False
        except Exception:
            logger.exception(f"Provider {self.name} failed to refresh")
            return False

        if len(items) > self.sanity_limit:
            logger.warning(
                f"Provider {self.name} returned {len(items)} items "
                f"(limit {self.sanity_limit}), resetting snapshot"
            )
            items = []

        self._publish(ProviderSnapshot(items=tuple(items), captured_at=self.clock()))
        logger.debug(f"Provider {self.name} refreshed: {len(previous)} -> {len(items)} items")
        return True

    def _publish(self, snapshot: ProviderSnapshot) -> None:
        with self._snapshot_lock:
            self._snapshot = snapshot

    def invalidate(self) -> bool:
        """Drop cached state and reload now. Static providers override to clear caches."""
        return self.refresh()

    async def candidates(self, keyword: str) -> Sequence[Candidate]:
        """Candidates to score for a keyword. Snapshot-backed by default."""
        return self.snapshot.items
