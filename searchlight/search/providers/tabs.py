"""
Tabs Provider - Open Chrome tabs via AppleScript.

Runs osascript every 10 seconds and replaces the snapshot with the current
tab list. When Chrome is not running (or osascript is missing) the provider
is unavailable and the previous snapshot is kept.

Output format, one tab per line:
    window_index<TAB>tab_index<TAB>url<TAB>title
"""

import subprocess
from typing import Sequence

from loguru import logger

from searchlight.search.models import Candidate, ProviderType
from searchlight.search.providers.base import Provider, ProviderUnavailableError

TABS_REFRESH_SECONDS = 10.0
DEFAULT_MAX_TABS = 200

LIST_TABS_SCRIPT = """
tell application "System Events"
    set isRunning to (name of processes) contains "Google Chrome"
end tell
if not isRunning then return ""
set output to ""
tell application id "com.google.Chrome"
    set windowIndex to 1
    repeat with w in every window
        set tabIndex to 1
        repeat with t in every tab in w
            set output to output & windowIndex & tab & tabIndex & tab & (URL of t) & tab & (title of t) & linefeed
            set tabIndex to tabIndex + 1
        end repeat
        set windowIndex to windowIndex + 1
    end repeat
end tell
return output
"""


class TabsProvider(Provider):
    """Volatile provider for open browser tabs."""

    kind = ProviderType.TAB
    refresh_interval = TABS_REFRESH_SECONDS

    def __init__(
        self,
        command: Sequence[str] = ("osascript", "-e", LIST_TABS_SCRIPT),
        max_tabs: int = DEFAULT_MAX_TABS,
        refresh_interval: float = TABS_REFRESH_SECONDS,
        timeout: float = 5.0,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.command = list(command)
        self.max_tabs = max_tabs
        self.refresh_interval = refresh_interval
        self.timeout = timeout

    def load_or_refresh(self) -> list[Candidate]:
        try:
            result = subprocess.run(
                self.command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            raise ProviderUnavailableError(f"cannot list tabs: {e}") from e

        if result.returncode != 0:
            raise ProviderUnavailableError(
                f"tab script exited with {result.returncode}: {result.stderr.strip()[:200]}"
            )

        candidates = parse_tab_lines(result.stdout)
        if not candidates:
            raise ProviderUnavailableError("no open tabs (browser not running?)")
        return candidates[:self.max_tabs]


def parse_tab_lines(output: str) -> list[Candidate]:
    """
    Parse script output into tab candidates.

    Lines with the wrong field count or a blank URL/title are skipped.
    """
    candidates = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t", 3)
        if len(parts) != 4:
            logger.debug(f"Skipping malformed tab line: {line[:80]!r}")
            continue

        window_index, tab_index, url, title = (p.strip() for p in parts)
        if not url or not title:
            continue

        candidates.append(Candidate(
            identity=url,
            title=title,
            subtitle=f"{url}  (window {window_index}, tab {tab_index})",
            provider_type=ProviderType.TAB,
            raw_fields=(title, url),
        ))
    return candidates
