"""
Query Router - Resolves raw input into a keyword and a provider filter.

Grammar, first match wins:
  1. IDE keyword as first token ("py myproj"), last token ("myproj py")
     or on its own ("py") -> that IDE's recent projects
  2. Two or more tokens ending in a magic suffix ("chrome ch")
     -> a single provider
  3. Anything else -> every provider, full trimmed input as keyword

Every input resolves to exactly one filter.
"""

from typing import Callable, Optional

from searchlight.search.models import (
    AllFilter,
    IDEConfig,
    IDEProjectFilter,
    ProviderFilter,
    ProviderType,
    QueryFilter,
)

DEFAULT_SUFFIXES = {
    "ap": ProviderType.APPLICATION,
    "ch": ProviderType.BOOKMARK,
    "hi": ProviderType.HISTORY,
    "di": ProviderType.DICTIONARY,
    "tb": ProviderType.TAB,
}


class QueryRouter:
    """Parses queries using IDE keywords and magic suffixes."""

    def __init__(
        self,
        ide_resolver: Optional[Callable[[str], Optional[IDEConfig]]] = None,
        suffixes: Optional[dict] = None,
    ):
        self._ide_resolver = ide_resolver or (lambda token: None)
        if suffixes is None:
            suffixes = DEFAULT_SUFFIXES
        self.suffixes = {
            name.casefold(): ProviderType(kind) for name, kind in suffixes.items()
        }

    def parse(self, raw: str) -> tuple[str, QueryFilter]:
        """
        Resolve a raw query.

        Args:
            raw: Text as typed by the user

        Returns:
            Tuple of (keyword, filter)
        """
        trimmed = raw.strip()
        tokens = trimmed.split()

        ide_match = self._match_ide(tokens)
        if ide_match is not None:
            return ide_match

        if len(tokens) >= 2:
            kind = self.suffixes.get(tokens[-1].casefold())
            if kind is not None:
                return " ".join(tokens[:-1]), ProviderFilter(kind)

        return trimmed, AllFilter()

    def _match_ide(self, tokens: list[str]) -> Optional[tuple[str, QueryFilter]]:
        """Check first token, then last token, against registered IDE keywords."""
        if not tokens:
            return None

        config = self._ide_resolver(tokens[0].casefold())
        if config is not None:
            return " ".join(tokens[1:]), IDEProjectFilter(config)

        if len(tokens) >= 2:
            config = self._ide_resolver(tokens[-1].casefold())
            if config is not None:
                return " ".join(tokens[:-1]), IDEProjectFilter(config)

        return None
