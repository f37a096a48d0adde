"""
Search providers - Data sources contributing candidates.

Each provider owns an immutable snapshot of its candidates and knows how to
reload it from its backing source.
"""

from .applications import ApplicationsProvider
from .base import Provider, ProviderSnapshot, ProviderUnavailableError
from .bookmarks import BookmarksProvider
from .dictionary import DictionaryEntry, DictionaryProvider
from .history import HistoryProvider
from .ide_projects import IDEProjectsProvider
from .tabs import TabsProvider

__all__ = [
    "Provider",
    "ProviderSnapshot",
    "ProviderUnavailableError",
    "ApplicationsProvider",
    "BookmarksProvider",
    "HistoryProvider",
    "TabsProvider",
    "DictionaryProvider",
    "DictionaryEntry",
    "IDEProjectsProvider",
]
