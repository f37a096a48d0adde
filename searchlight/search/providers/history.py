"""
History Provider - Recently visited pages from Chrome's History database.

Chrome keeps the database locked while running, so each refresh copies it
to a temporary file and reads the copy. Refreshed every 30 seconds; each
refresh replaces the previous snapshot.
"""

import shutil
import sqlite3
import tempfile
from pathlib import Path
from typing import Optional

from loguru import logger

from searchlight.search.models import Candidate, ProviderType
from searchlight.search.providers.base import Provider, ProviderUnavailableError

DEFAULT_HISTORY_PATH = "~/.config/google-chrome/Default/History"
DEFAULT_LIMIT = 500
HISTORY_REFRESH_SECONDS = 30.0


class HistoryProvider(Provider):
    """Volatile provider reading the newest browser history entries."""

    kind = ProviderType.HISTORY
    refresh_interval = HISTORY_REFRESH_SECONDS

    def __init__(
        self,
        history_path: str = DEFAULT_HISTORY_PATH,
        limit: int = DEFAULT_LIMIT,
        refresh_interval: float = HISTORY_REFRESH_SECONDS,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.history_path = Path(history_path).expanduser()
        self.limit = limit
        self.refresh_interval = refresh_interval

    def load_or_refresh(self) -> list[Candidate]:
        if not self.history_path.exists():
            raise ProviderUnavailableError(f"history file not found at {self.history_path}")

        with tempfile.TemporaryDirectory(prefix="searchlight-history-") as tmp:
            copy_path = Path(tmp) / "History"
            try:
                shutil.copyfile(self.history_path, copy_path)
            except OSError as e:
                raise ProviderUnavailableError(f"cannot copy history database: {e}") from e
            rows = self._read_rows(copy_path)

        candidates = []
        for row in rows:
            candidate = _history_candidate(row)
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def _read_rows(self, db_path: Path) -> list[tuple]:
        try:
            conn = sqlite3.connect(f"file:{db_path}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise ProviderUnavailableError(f"cannot open history database: {e}") from e

        try:
            return conn.execute("""
                SELECT url, title
                FROM urls
                ORDER BY last_visit_time DESC
                LIMIT ?
            """, (self.limit,)).fetchall()
        except sqlite3.Error as e:
            raise ProviderUnavailableError(f"cannot query history database: {e}") from e
        finally:
            conn.close()


def _history_candidate(row: tuple) -> Optional[Candidate]:
    """Build a candidate from a urls row; malformed rows are skipped."""
    try:
        url, title = row[0], row[1]
    except (TypeError, IndexError):
        return None

    if not isinstance(url, str) or not url.strip():
        return None
    url = url.strip()
    title = title.strip() if isinstance(title, str) else ""

    return Candidate(
        identity=url,
        title=title or url,
        subtitle=url,
        provider_type=ProviderType.HISTORY,
        raw_fields=(title, url) if title else (url,),
    )
