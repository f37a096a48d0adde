"""
Shared test fixtures for the Searchlight test suite.

Provides temporary settings, bookmark, history, IDE and application files
that use real file I/O and real SQLite databases (no mocking of the
filesystem).
"""

import json
import plistlib
import sqlite3
from pathlib import Path

import pytest
import toml

from searchlight.search.models import Candidate, ProviderType
from searchlight.search.providers.base import Provider
from searchlight.services.store import SqliteKeyValueStore


class ListProvider(Provider):
    """Provider serving a fixed, replaceable list of candidates."""

    def __init__(self, kind, items=None, **kwargs):
        super().__init__(**kwargs)
        self.kind = kind
        self.items = list(items or [])
        self.loads = 0
        self.queries = 0

    def load_or_refresh(self):
        self.loads += 1
        return list(self.items)

    async def candidates(self, keyword):
        self.queries += 1
        return await super().candidates(keyword)


class FailingProvider(Provider):
    """Provider whose every query raises."""

    def __init__(self, kind, **kwargs):
        super().__init__(**kwargs)
        self.kind = kind

    def load_or_refresh(self):
        raise RuntimeError("backing source exploded")

    async def candidates(self, keyword):
        raise RuntimeError("backing source exploded")


def make_candidate(identity, title, provider_type=ProviderType.APPLICATION, raw_fields=()):
    return Candidate(
        identity=identity,
        title=title,
        provider_type=provider_type,
        raw_fields=tuple(raw_fields),
    )


@pytest.fixture
def make_provider():
    """Factory for loaded ListProviders."""
    def _make(kind, *candidates):
        provider = ListProvider(kind, candidates)
        provider.refresh()
        return provider
    return _make


@pytest.fixture
def tmp_store(tmp_path):
    """Real SQLite key-value store on disk."""
    store = SqliteKeyValueStore(tmp_path / "state.db")
    yield store
    store.close()


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file overriding a few sections."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "search": {"max_results": 5, "debounce_ms": 200},
        "providers": {"browser_history_enabled": False},
        "ides": [
            {
                "name": "VS Code",
                "prefixes": ["code", "vs"],
                "type": "vscode",
                "recent_projects_path": str(tmp_path / "state.vscdb"),
            },
        ],
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path


@pytest.fixture
def chrome_bookmarks(tmp_path):
    """Create a real Chrome Bookmarks JSON file with nested folders."""
    path = tmp_path / "Bookmarks"
    data = {
        "roots": {
            "bookmark_bar": {
                "type": "folder",
                "name": "Bookmarks bar",
                "children": [
                    {"type": "url", "name": "GitHub", "url": "https://github.com/"},
                    {
                        "type": "folder",
                        "name": "Docs",
                        "children": [
                            {"type": "url", "name": "Python Docs", "url": "https://docs.python.org/3/"},
                            {"type": "url", "name": "   ", "url": "https://blank.example/"},
                        ],
                    },
                ],
            },
            "other": {
                "type": "folder",
                "name": "Other bookmarks",
                "children": [
                    {"type": "url", "name": "Hacker News", "url": "https://news.ycombinator.com/"},
                ],
            },
        },
        "version": 1,
    }
    path.write_text(json.dumps(data, indent=2))
    return path


@pytest.fixture
def bookmark_exports(tmp_path):
    """Create an export directory with an old and a new bookmark export."""
    export_dir = tmp_path / "exports"
    export_dir.mkdir()
    (export_dir / "bookmarks_2024_01_01.html").write_text(
        '<DT><A HREF="https://old.example/" ADD_DATE="1">Old Site</A>\n'
    )
    (export_dir / "bookmarks_2024_06_30.html").write_text(
        "<!DOCTYPE NETSCAPE-Bookmark-file-1>\n"
        "<DL><p>\n"
        '    <DT><A HREF="https://lobste.rs/" ADD_DATE="1700000000">Lobsters</A>\n'
        '    <DT><A HREF="https://github.com/" ADD_DATE="1700000001">GitHub Export</A>\n'
        "</DL><p>\n"
    )
    return export_dir


@pytest.fixture
def history_db(tmp_path):
    """Create a real Chrome-style History database."""
    db_path = tmp_path / "History"
    conn = sqlite3.connect(str(db_path))
    conn.execute("""
        CREATE TABLE urls (
            id INTEGER PRIMARY KEY,
            url LONGVARCHAR,
            title LONGVARCHAR,
            visit_count INTEGER DEFAULT 0,
            last_visit_time INTEGER NOT NULL
        )
    """)
    conn.executemany(
        "INSERT INTO urls (url, title, visit_count, last_visit_time) VALUES (?, ?, ?, ?)",
        [
            ("https://example.com/old", "Old Page", 1, 100),
            ("https://example.com/new", "New Page", 3, 300),
            ("https://example.com/untitled", None, 1, 200),
            ("", "Blank URL", 1, 250),
        ],
    )
    conn.commit()
    conn.close()
    return db_path


@pytest.fixture
def project_dirs(tmp_path):
    """Create real project directories for IDE recent lists."""
    root = tmp_path / "projects"
    dirs = {}
    for name in ("searchlight", "website", "notes"):
        path = root / name
        path.mkdir(parents=True)
        dirs[name] = path
    return dirs


@pytest.fixture
def vscode_state_db(tmp_path, project_dirs):
    """Create a real state.vscdb with a recently opened list."""
    db_path = tmp_path / "state.vscdb"
    entries = [
        {"folderUri": project_dirs["searchlight"].as_uri()},
        {"fileUri": "file:///tmp/scratch.txt"},
        {"folderUri": project_dirs["website"].as_uri()},
        {"folderUri": "file:///does/not/exist"},
        {"folderUri": "vscode-remote://ssh-remote+box/home/me/remote"},
    ]
    conn = sqlite3.connect(str(db_path))
    conn.execute("CREATE TABLE ItemTable (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)")
    conn.execute(
        "INSERT INTO ItemTable (key, value) VALUES (?, ?)",
        ("history.recentlyOpenedPathsList", json.dumps({"entries": entries})),
    )
    conn.commit()
    conn.close()
    return db_path


@pytest.fixture
def jetbrains_xml(tmp_path, project_dirs):
    """Create a real recentProjects.xml using $USER_HOME$ paths."""
    xml_path = tmp_path / "recentProjects.xml"
    home_relative = "$USER_HOME$/projects"
    xml_path.write_text(f"""<application>
  <component name="RecentProjectsManager">
    <option name="additionalInfo">
      <map>
        <entry key="{home_relative}/notes">
          <value>
            <RecentProjectMetaInfo>
              <option name="projectOpenTimestamp" value="1700000000000" />
            </RecentProjectMetaInfo>
          </value>
        </entry>
        <entry key="{home_relative}/searchlight">
          <value>
            <RecentProjectMetaInfo>
              <option name="projectOpenTimestamp" value="1710000000000" />
            </RecentProjectMetaInfo>
          </value>
        </entry>
        <entry key="{home_relative}/gone">
          <value>
            <RecentProjectMetaInfo>
              <option name="projectOpenTimestamp" value="1720000000000" />
            </RecentProjectMetaInfo>
          </value>
        </entry>
      </map>
    </option>
  </component>
</application>
""")
    return xml_path


@pytest.fixture
def applications_dir(tmp_path):
    """Create a directory of desktop entries and one .app bundle."""
    apps = tmp_path / "applications"
    apps.mkdir()
    (apps / "firefox.desktop").write_text(
        "[Desktop Entry]\nType=Application\nName=Firefox Web Browser\nExec=firefox %u\n"
    )
    (apps / "hidden.desktop").write_text(
        "[Desktop Entry]\nType=Application\nName=Hidden Tool\nNoDisplay=true\n"
    )
    (apps / "broken.desktop").write_text("this is not a desktop entry\n")
    (apps / "README.txt").write_text("not an app\n")

    bundle = apps / "Safari.app" / "Contents"
    bundle.mkdir(parents=True)
    with open(bundle / "Info.plist", "wb") as f:
        plistlib.dump({"CFBundleName": "Safari"}, f)

    (apps / "Mystery.app").mkdir()
    return apps


@pytest.fixture
def home_dir(tmp_path) -> Path:
    """Home directory that $USER_HOME$ expands to."""
    return tmp_path
