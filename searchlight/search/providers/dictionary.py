"""
Dictionary Provider - Word definitions from an external lookup command.

Only queries that look like a single English word are looked up
(is_eligible). Lookups run as a subprocess without blocking the event loop,
and every answer, including "not found", is cached per normalized word.

Default command is the DICT client (`dict <word>`); any command that prints
a definition to stdout and exits non-zero on a miss works.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from loguru import logger

from searchlight.search.models import Candidate, ProviderType
from searchlight.search.providers.base import Provider

DEFAULT_COMMAND = ("dict",)
SHORT_TRANSLATION_LENGTH = 60

WORD_RE = re.compile(r"^[A-Za-z]+(-[A-Za-z]+)*$")
TAG_RE = re.compile(r"<[^>]+>")
PHONETIC_RE = re.compile(r"\|\s*([^|\n]+?)\s*\|")
CJK_RE = re.compile(r"[\u4e00-\u9fff]")
# Banner lines printed by dict(1) before the definition body
HEADER_RE = re.compile(r"^(\d+ definitions? found|From .+:)$", re.IGNORECASE)

HTML_ENTITIES = {"&nbsp;": " ", "&lt;": "<", "&gt;": ">", "&amp;": "&"}


@dataclass(frozen=True)
class DictionaryEntry:
    word: str
    phonetic: Optional[str]
    short_translation: str
    full_translation: str


class DictionaryProvider(Provider):
    """On-demand provider; nothing is preloaded into the snapshot."""

    kind = ProviderType.DICTIONARY

    def __init__(self, command: Sequence[str] = DEFAULT_COMMAND, **kwargs):
        super().__init__(**kwargs)
        self.command = list(command)
        self._cache: dict[str, Optional[DictionaryEntry]] = {}

    def load_or_refresh(self) -> list[Candidate]:
        return []

    def invalidate(self) -> bool:
        self._cache.clear()
        logger.debug("Dictionary cache cleared")
        return super().invalidate()

    def is_eligible(self, query: str) -> bool:
        """True for a single word of 2+ letters, hyphenated parts allowed."""
        word = query.strip()
        return len(word) >= 2 and WORD_RE.match(word) is not None

    async def lookup(self, word: str) -> Optional[DictionaryEntry]:
        """
        Look up a word.

        Args:
            word: English word, any case

        Returns:
            DictionaryEntry, or None when the word is unknown or the lookup
            command is unavailable
        """
        normalized = word.strip().lower()
        if normalized in self._cache:
            return self._cache[normalized]

        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command, normalized,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
            try:
                stdout, _ = await proc.communicate()
            except asyncio.CancelledError:
                # A newer keystroke superseded this lookup
                proc.kill()
                await proc.wait()
                raise
        except (FileNotFoundError, PermissionError) as e:
            logger.warning(f"Dictionary command {self.command[0]!r} unavailable: {e}")
            return None

        text = stdout.decode("utf-8", errors="replace")
        if proc.returncode != 0 or not text.strip():
            logger.debug(f"No dictionary entry for {normalized}")
            self._cache[normalized] = None
            return None

        entry = parse_definition(normalized, text)
        self._cache[normalized] = entry
        logger.debug(f"Dictionary entry for {normalized}: {entry.short_translation}")
        return entry

    async def candidates(self, keyword: str) -> Sequence[Candidate]:
        if not self.is_eligible(keyword):
            return []

        entry = await self.lookup(keyword)
        if entry is None:
            return []

        return [Candidate(
            identity=f"dict://{entry.word}",
            title=entry.word,
            subtitle=entry.short_translation,
            provider_type=ProviderType.DICTIONARY,
            raw_fields=(entry.word,),
        )]


def parse_definition(word: str, definition: str) -> DictionaryEntry:
    """
    Clean raw definition text into an entry.

    The short translation is the first line containing CJK characters (for
    bilingual dictionaries), otherwise the first body line, cut to 60 chars.
    """
    text = TAG_RE.sub("", definition)
    for entity, replacement in HTML_ENTITIES.items():
        text = text.replace(entity, replacement)

    phonetic = None
    match = PHONETIC_RE.search(text)
    if match:
        phonetic = match.group(1).strip()

    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line and not HEADER_RE.match(line)]

    short = next((line for line in lines if CJK_RE.search(line)), None)
    if short is None:
        short = next((line for line in lines if line.lower() != word), None)
    if short is None:
        short = lines[0] if lines else "No definition"

    if len(short) > SHORT_TRANSLATION_LENGTH:
        short = short[:SHORT_TRANSLATION_LENGTH - 3] + "..."

    full = "\n".join(lines)
    return DictionaryEntry(
        word=word,
        phonetic=phonetic,
        short_translation=short,
        full_translation=full or "No detailed definition",
    )
