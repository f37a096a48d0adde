"""
Search data model - Candidates, results and query filters.

Candidates are produced by providers and never mutated afterwards. A
SearchResult pairs a candidate with the score it earned for one query.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ProviderType(str, Enum):
    """Category of a candidate. Doubles as the provider kind for filtering."""
    APPLICATION = "application"
    IDE_PROJECT = "ide_project"
    DICTIONARY = "dictionary"
    BOOKMARK = "bookmark"
    HISTORY = "history"
    TAB = "tab"
    FILE = "file"


# Lower number = ranked first on ties
TYPE_PRIORITY = {
    ProviderType.APPLICATION: 1,
    ProviderType.IDE_PROJECT: 1,
    ProviderType.DICTIONARY: 2,
    ProviderType.BOOKMARK: 3,
    ProviderType.HISTORY: 3,
    ProviderType.TAB: 3,
    ProviderType.FILE: 4,
}


def type_priority(provider_type: ProviderType) -> int:
    return TYPE_PRIORITY.get(provider_type, TYPE_PRIORITY[ProviderType.FILE])


@dataclass(frozen=True)
class Candidate:
    """A matchable item as produced by a provider."""
    identity: str
    title: str
    provider_type: ProviderType
    subtitle: Optional[str] = None
    raw_fields: tuple[str, ...] = ()

    def match_fields(self) -> tuple[str, ...]:
        """Strings the scorer is run against (title when none given)."""
        return self.raw_fields or (self.title,)


@dataclass(frozen=True)
class SearchResult:
    """A candidate scored against one query."""
    candidate: Candidate
    score: float

    @property
    def identity(self) -> str:
        return self.candidate.identity

    @property
    def title(self) -> str:
        return self.candidate.title

    @property
    def subtitle(self) -> Optional[str]:
        return self.candidate.subtitle

    @property
    def provider_type(self) -> ProviderType:
        return self.candidate.provider_type


@dataclass(frozen=True)
class IDEConfig:
    """One IDE whose recent projects can be searched via a magic keyword."""
    name: str
    prefixes: tuple[str, ...]
    type: str  # "vscode" or "jetbrains"
    recent_projects_path: str
    url_scheme: str = ""
    app_path: str = ""
    enabled: bool = True

    @property
    def primary_prefix(self) -> str:
        return self.prefixes[0]

    @classmethod
    def from_dict(cls, data: dict) -> "IDEConfig":
        """Build from a settings table. Raises KeyError/ValueError when malformed."""
        prefixes = data.get("prefixes") or [data["prefix"]]
        if isinstance(prefixes, str):
            prefixes = [prefixes]
        prefixes = tuple(p.strip().lower() for p in prefixes if p and p.strip())
        if not prefixes:
            raise ValueError(f"IDE '{data.get('name')}' has no prefixes")
        return cls(
            name=data["name"],
            prefixes=prefixes,
            type=data["type"],
            recent_projects_path=data["recent_projects_path"],
            url_scheme=data.get("url_scheme", ""),
            app_path=data.get("app_path", ""),
            enabled=data.get("enabled", True),
        )


@dataclass(frozen=True)
class AllFilter:
    """Consult every enabled provider."""


@dataclass(frozen=True)
class ProviderFilter:
    """Consult a single provider."""
    kind: ProviderType


@dataclass(frozen=True)
class IDEProjectFilter:
    """List the recent projects of one IDE."""
    config: IDEConfig


QueryFilter = Union[AllFilter, ProviderFilter, IDEProjectFilter]
