# Searchlight Services Package
"""
Backend services for the search engine.

Services handle persistence (usage ledger, key-value store) and background
snapshot refresh.
"""

from .scheduler import RefreshScheduler
from .store import MemoryKeyValueStore, SqliteKeyValueStore
from .usage import UsageLedger

__all__ = ["UsageLedger", "MemoryKeyValueStore", "SqliteKeyValueStore", "RefreshScheduler"]
