"""
Bookmarks Provider - Chrome bookmarks from the profile and from exports.

Sources, both optional:
  - The profile's Bookmarks JSON file (nested folder tree)
  - The newest exported bookmarks_YYYY_MM_DD.html in an export directory

Entries with a blank title or URL are skipped.
"""

import json
import re
from pathlib import Path
from typing import Optional

from loguru import logger

from searchlight.search.models import Candidate, ProviderType
from searchlight.search.providers.base import Provider, ProviderUnavailableError

DEFAULT_CHROME_BOOKMARKS = "~/.config/google-chrome/Default/Bookmarks"
DEFAULT_EXPORT_DIR = "~/Documents/Spotlight"

EXPORT_LINK_RE = re.compile(r'<A HREF="([^"]+)"[^>]*>([^<]+)</A>', re.IGNORECASE)


class BookmarksProvider(Provider):
    """Static provider for browser bookmarks."""

    kind = ProviderType.BOOKMARK

    def __init__(
        self,
        chrome_bookmarks_path: Optional[str] = DEFAULT_CHROME_BOOKMARKS,
        export_dir: Optional[str] = DEFAULT_EXPORT_DIR,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.chrome_bookmarks_path = (
            Path(chrome_bookmarks_path).expanduser() if chrome_bookmarks_path else None
        )
        self.export_dir = Path(export_dir).expanduser() if export_dir else None

    def load_or_refresh(self) -> list[Candidate]:
        found_source = False
        pairs: list[tuple[str, str]] = []

        if self.chrome_bookmarks_path and self.chrome_bookmarks_path.exists():
            found_source = True
            pairs.extend(self._load_profile_bookmarks(self.chrome_bookmarks_path))

        export = self._latest_export()
        if export is not None:
            found_source = True
            pairs.extend(self._load_exported_bookmarks(export))

        if not found_source:
            raise ProviderUnavailableError("no bookmarks file or export found")

        candidates = []
        for url, title in pairs:
            url, title = url.strip(), title.strip()
            if not url or not title:
                continue
            candidates.append(_bookmark_candidate(url, title))

        logger.debug(f"Loaded {len(candidates)} bookmarks")
        return candidates

    def _load_profile_bookmarks(self, path: Path) -> list[tuple[str, str]]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read bookmarks from {path}: {e}")
            return []

        pairs: list[tuple[str, str]] = []
        for root in (data.get("roots") or {}).values():
            if isinstance(root, dict):
                _walk_bookmark_tree(root, pairs)
        return pairs

    def _latest_export(self) -> Optional[Path]:
        """Newest export by file name (bookmarks_YYYY_MM_DD.html sorts by date)."""
        if not self.export_dir or not self.export_dir.is_dir():
            return None
        exports = sorted(self.export_dir.glob("bookmarks_*.html"), reverse=True)
        return exports[0] if exports else None

    def _load_exported_bookmarks(self, path: Path) -> list[tuple[str, str]]:
        try:
            html = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read bookmark export {path}: {e}")
            return []

        pairs = EXPORT_LINK_RE.findall(html)
        logger.debug(f"Parsed {len(pairs)} links from {path.name}")
        return pairs


def _walk_bookmark_tree(node: dict, out: list[tuple[str, str]]) -> None:
    """Collect (url, title) pairs from a Chrome bookmark folder, depth first."""
    if node.get("type") == "url":
        url = node.get("url")
        title = node.get("name")
        if isinstance(url, str) and isinstance(title, str):
            out.append((url, title))
        return

    for child in node.get("children") or []:
        if isinstance(child, dict):
            _walk_bookmark_tree(child, out)


def _bookmark_candidate(url: str, title: str) -> Candidate:
    return Candidate(
        identity=url,
        title=title,
        subtitle=url,
        provider_type=ProviderType.BOOKMARK,
        raw_fields=(title, url),
    )
