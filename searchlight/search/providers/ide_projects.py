"""
IDE Projects Provider - Recent projects of configured IDEs.

Each IDE is registered with one or more magic keywords ("py", "code"...).
Typing a keyword routes the query to that IDE's recent-project list; in a
normal search every IDE's projects take part like any other candidate.

Supported recent-project formats:
  - vscode:    state.vscdb SQLite, key history.recentlyOpenedPathsList
  - jetbrains: recentProjects.xml, newest projectOpenTimestamp first

Only projects whose directory still exists are listed. Project lists are
cached per IDE until the provider is invalidated.
"""

import json
import re
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlparse

from loguru import logger

from searchlight.search.models import Candidate, IDEConfig, ProviderType
from searchlight.search.providers.base import Provider, ProviderUnavailableError
from searchlight.search.scorer import score_fields

MAX_LISTED_PROJECTS = 20
VSCODE_RECENT_KEY = "history.recentlyOpenedPathsList"

JETBRAINS_ENTRY_RE = re.compile(r'<entry key="([^"]+)">([\s\S]*?)</entry>')
JETBRAINS_TIMESTAMP_RE = re.compile(r'"projectOpenTimestamp"\s+value="(\d+)"')


@dataclass(frozen=True)
class IDEProject:
    name: str
    path: str
    ide_name: str


class IDEProjectsProvider(Provider):
    """Static provider for IDE recent projects."""

    kind = ProviderType.IDE_PROJECT

    def __init__(
        self,
        configs: Optional[list[IDEConfig]] = None,
        home: Optional[Union[Path, str]] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.home = Path(home) if home else Path.home()
        self._configs: list[IDEConfig] = []
        self._keywords: dict[str, IDEConfig] = {}
        self._cache: dict[str, list[IDEProject]] = {}
        self._cache_lock = threading.Lock()
        self.set_configs(configs or [])

    @property
    def configs(self) -> list[IDEConfig]:
        return list(self._configs)

    def set_configs(self, configs: list[IDEConfig]) -> None:
        """Replace the IDE list and its keywords. Clears cached projects."""
        enabled = [c for c in configs if c.enabled]
        keywords = {}
        for config in enabled:
            for prefix in config.prefixes:
                if prefix in keywords:
                    logger.warning(
                        f"IDE keyword '{prefix}' of {config.name} already used by "
                        f"{keywords[prefix].name}, ignoring"
                    )
                    continue
                keywords[prefix] = config

        self._configs = enabled
        self._keywords = keywords
        self.clear_cache()
        logger.debug(
            "IDE keywords: " + ", ".join(f"{k}:{c.name}" for k, c in keywords.items())
        )

    def resolve_keyword(self, token: str) -> Optional[IDEConfig]:
        """Return the IDE registered for a keyword (case-insensitive)."""
        return self._keywords.get(token.strip().casefold())

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    def invalidate(self) -> bool:
        self.clear_cache()
        return super().invalidate()

    def load_or_refresh(self) -> list[Candidate]:
        candidates = []
        for config in self._configs:
            candidates.extend(
                _project_candidate(config, project) for project in self.projects_for(config)
            )
        return candidates

    def list_projects(self, config: IDEConfig, keyword: str) -> list[Candidate]:
        """
        Recent projects of one IDE, most recent first.

        Args:
            config: IDE to list
            keyword: Filter; empty lists everything

        Returns:
            At most MAX_LISTED_PROJECTS candidates
        """
        projects = self.projects_for(config)
        if keyword.strip():
            projects = [
                p for p in projects if score_fields(keyword, (p.name, p.path)) > 0
            ]
        return [_project_candidate(config, p) for p in projects[:MAX_LISTED_PROJECTS]]

    def projects_for(self, config: IDEConfig) -> list[IDEProject]:
        """Cached project list of one IDE. Unreadable sources yield []."""
        with self._cache_lock:
            cached = self._cache.get(config.primary_prefix)
        if cached is not None:
            return cached

        try:
            projects = self._parse_recent_projects(config)
        except ProviderUnavailableError as e:
            logger.warning(f"{config.name} recent projects unavailable: {e}")
            projects = []

        with self._cache_lock:
            self._cache[config.primary_prefix] = projects
        return projects

    def _parse_recent_projects(self, config: IDEConfig) -> list[IDEProject]:
        path = Path(config.recent_projects_path).expanduser()
        if not path.exists():
            raise ProviderUnavailableError(f"file not found: {path}")

        if config.type == "vscode":
            paths = parse_vscode_recent(path)
        elif config.type == "jetbrains":
            paths = parse_jetbrains_recent(path, self.home)
        else:
            logger.warning(f"Unknown IDE type '{config.type}' for {config.name}")
            return []

        projects = [
            IDEProject(
                name=Path(p).name,
                path=p,
                ide_name=config.name,
            )
            for p in paths
            if Path(p).is_dir()
        ]
        logger.debug(f"{config.name}: found {len(projects)} projects")
        return projects


def parse_vscode_recent(db_path: Path) -> list[str]:
    """Folder paths from a VS Code family state.vscdb, in stored order."""
    try:
        conn = sqlite3.connect(f"file:{db_path}?mode=ro", uri=True)
    except sqlite3.Error as e:
        raise ProviderUnavailableError(f"cannot open {db_path}: {e}") from e

    try:
        row = conn.execute(
            "SELECT value FROM ItemTable WHERE key = ?", (VSCODE_RECENT_KEY,)
        ).fetchone()
    except sqlite3.Error as e:
        raise ProviderUnavailableError(f"cannot query {db_path}: {e}") from e
    finally:
        conn.close()

    if not row or not row[0]:
        return []

    value = row[0]
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    try:
        entries = json.loads(value).get("entries", [])
    except (ValueError, AttributeError) as e:
        logger.warning(f"Malformed recent list in {db_path}: {e}")
        return []

    paths = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        uri = entry.get("folderUri")
        if not isinstance(uri, str) or not uri.startswith("file://"):
            continue
        paths.append(unquote(urlparse(uri).path))
    return paths


def parse_jetbrains_recent(xml_path: Path, home: Path) -> list[str]:
    """Project paths from recentProjects.xml, newest open first."""
    try:
        content = xml_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ProviderUnavailableError(f"cannot read {xml_path}: {e}") from e

    stamped = []
    for key, body in JETBRAINS_ENTRY_RE.findall(content):
        path = key.replace("$USER_HOME$", str(home))
        match = JETBRAINS_TIMESTAMP_RE.search(body)
        timestamp = int(match.group(1)) if match else 0
        stamped.append((timestamp, path))

    # Stable sort keeps file order among equal timestamps
    stamped.sort(key=lambda item: item[0], reverse=True)
    return [path for _, path in stamped]


def _project_candidate(config: IDEConfig, project: IDEProject) -> Candidate:
    return Candidate(
        identity=f"ide://{config.primary_prefix}/{project.path}",
        title=f"[{config.name}] {project.name}",
        subtitle=project.path,
        provider_type=ProviderType.IDE_PROJECT,
        raw_fields=(project.name, project.path),
    )
