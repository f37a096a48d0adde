"""
Usage Ledger - Track selected results and weight them by recency.

  usage_weight = use_count * time_decay
  time_decay   = max(0.1, 1.0 - days_since_last_use * 0.1)

Same-day selections get full weight, decaying 10% per day down to a floor
of 0.1 so that historically frequent items are never fully discounted.

The ledger is capped (default 1000 entries). When a save finds it over the
cap, only the most used identities are kept.
"""

import json
import threading
import time
from typing import Callable, Optional

from loguru import logger

from searchlight.services.store import KeyValueStore, MemoryKeyValueStore, StoreError

COUNTS_KEY = "usage_count"
LAST_USED_KEY = "last_used_at"
DEFAULT_MAX_ENTRIES = 1000
SECONDS_PER_DAY = 24 * 3600


class UsageLedger:
    """
    Per-identity usage counters persisted through a KeyValueStore.

    Methods:
        record_usage(identity): Count one selection
        get_weight(identity): Decayed usage weight used by the ranker
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store if store is not None else MemoryKeyValueStore()
        self.max_entries = max_entries
        self.clock = clock

        # Single writer; readers see the last committed dicts
        self._lock = threading.Lock()
        self._counts: dict[str, int] = {}
        self._last_used: dict[str, float] = {}
        self._load()

    def _load(self):
        """Read both documents from the store, starting empty on any failure."""
        try:
            raw_counts = self._read_json(COUNTS_KEY)
            raw_last_used = self._read_json(LAST_USED_KEY)
            counts = {str(k): int(v) for k, v in raw_counts.items()}
            last_used = {
                str(k): float(v) for k, v in raw_last_used.items() if k in counts
            }
        except (StoreError, ValueError, TypeError):
            logger.exception("Failed to load usage history, starting empty")
            return

        self._counts, self._last_used = counts, last_used
        logger.debug(f"Loaded usage history: {len(self._counts)} entries")

    def _read_json(self, key: str) -> dict:
        raw = self.store.get(key)
        if raw is None:
            return {}
        data = json.loads(raw.decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Expected object under '{key}'")
        return data

    def record_usage(self, identity: str) -> None:
        """
        Count one selection of an item.

        Args:
            identity: Candidate identity (path, URL, ide://..., dict://...)
        """
        with self._lock:
            counts = dict(self._counts)
            last_used = dict(self._last_used)
            counts[identity] = counts.get(identity, 0) + 1
            last_used[identity] = self.clock()

            counts, last_used = self._evict(counts, last_used)
            self._counts, self._last_used = counts, last_used
            self._save()

        logger.debug(f"Recorded usage for {identity}, count {self._counts.get(identity, 0)}")

    def _evict(self, counts: dict, last_used: dict) -> tuple[dict, dict]:
        """Keep the max_entries highest counts, ties broken by identity."""
        if len(counts) <= self.max_entries:
            return counts, last_used

        kept = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        counts = dict(kept[:self.max_entries])
        last_used = {k: v for k, v in last_used.items() if k in counts}
        logger.debug(f"Usage history trimmed to {len(counts)} entries")
        return counts, last_used

    def _save(self):
        try:
            self.store.set(COUNTS_KEY, json.dumps(self._counts).encode("utf-8"))
            self.store.set(LAST_USED_KEY, json.dumps(self._last_used).encode("utf-8"))
        except StoreError:
            logger.exception("Failed to save usage history, keeping it in memory")

    def get_usage_count(self, identity: str) -> int:
        return self._counts.get(identity, 0)

    def get_last_used(self, identity: str) -> Optional[float]:
        """Unix timestamp of the last selection, or None."""
        return self._last_used.get(identity)

    def get_weight(self, identity: str) -> float:
        """
        Calculate the decayed usage weight.

        Args:
            identity: Candidate identity

        Returns:
            count * time_decay (0.0 for unknown identities)
        """
        count = self._counts.get(identity, 0)
        if not count:
            return 0.0

        decay = 1.0
        last_used = self._last_used.get(identity)
        if last_used is not None:
            days = max(0.0, (self.clock() - last_used) / SECONDS_PER_DAY)
            decay = max(0.1, 1.0 - days * 0.1)

        return count * decay

    def __len__(self) -> int:
        return len(self._counts)

    def clear(self) -> None:
        """Forget all usage history."""
        with self._lock:
            self._counts = {}
            self._last_used = {}
            try:
                self.store.delete(COUNTS_KEY)
                self.store.delete(LAST_USED_KEY)
            except StoreError:
                logger.exception("Failed to clear stored usage history")
        logger.debug("Cleared usage history")
