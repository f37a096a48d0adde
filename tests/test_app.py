"""
Tests for application wiring and lifecycle.

Builds the full stack from settings pointing at real fixture files.
"""

import pytest
import toml

from searchlight.config import build_app
from searchlight.search.models import ProviderType
from searchlight.services.store import MemoryKeyValueStore
from searchlight.utils.helpers import load_settings


@pytest.fixture
def settings_path(tmp_path, applications_dir, chrome_bookmarks, history_db, vscode_state_db):
    path = tmp_path / "settings.toml"
    data = {
        "providers": {
            "tabs_enabled": False,
            "applications": {"search_paths": [str(applications_dir)]},
            "bookmarks": {"chrome_bookmarks_path": str(chrome_bookmarks), "export_dir": ""},
            "history": {"path": str(history_db)},
            "dictionary": {"command": ["searchlight-no-such-dict"]},
        },
        "ides": [{
            "name": "VS Code",
            "prefixes": ["code"],
            "type": "vscode",
            "recent_projects_path": str(vscode_state_db),
        }],
    }
    path.write_text(toml.dumps(data))
    return path


@pytest.fixture
def app(settings_path):
    return build_app(store=MemoryKeyValueStore(), settings_path=settings_path)


def provider_kinds(app):
    return [p.kind for p in app.engine.providers]


class TestBuildApp:
    """Provider wiring follows settings."""

    def test_provider_order(self, app):
        assert provider_kinds(app) == [
            ProviderType.APPLICATION,
            ProviderType.DICTIONARY,
            ProviderType.IDE_PROJECT,
            ProviderType.BOOKMARK,
            ProviderType.HISTORY,
        ]

    def test_tabs_included_by_default(self, settings_path):
        settings = load_settings(settings_path)
        settings["providers"]["tabs_enabled"] = True
        app = build_app(settings=settings, store=MemoryKeyValueStore())
        assert provider_kinds(app).index(ProviderType.TAB) == 3
        assert [job.provider.kind for job in app.scheduler.jobs] == [
            ProviderType.TAB, ProviderType.HISTORY,
        ]

    def test_history_can_be_disabled(self, settings_path):
        settings = load_settings(settings_path)
        settings["providers"]["browser_history_enabled"] = False
        app = build_app(settings=settings, store=MemoryKeyValueStore())
        assert ProviderType.HISTORY not in provider_kinds(app)
        assert app.scheduler.jobs == []

    def test_thresholds_and_limits_from_settings(self, settings_path):
        settings = load_settings(settings_path)
        settings["search"]["max_results"] = 3
        settings["search"]["high_score_threshold"] = 70.0
        settings["search"]["debounce_ms"] = 50
        app = build_app(settings=settings, store=MemoryKeyValueStore())
        assert app.engine.max_results == 3
        assert app.engine.ranker.high_score_threshold == 70.0
        assert app.debouncer.delay == 0.05


class TestLifecycle:
    """start, search through the debouncer, stop."""

    @pytest.mark.asyncio
    async def test_start_search_stop(self, app):
        await app.start()
        try:
            app.debouncer.submit("firefox")
            await app.debouncer.flush()
            assert app.latest_query == "firefox"
            assert [r.title for r in app.latest_results] == ["Firefox Web Browser"]

            results = await app.engine.search("github ch")
            assert [r.provider_type for r in results] == [ProviderType.BOOKMARK]

            results = await app.engine.search("code")
            assert [r.title for r in results] == ["[VS Code] searchlight", "[VS Code] website"]
        finally:
            await app.stop()
        assert not app.scheduler.running

    @pytest.mark.asyncio
    async def test_selection_is_recorded(self, app):
        await app.start()
        try:
            results = await app.engine.search("safari")
            await app.engine.record_selection(results[0].identity)
            assert app.ledger.get_usage_count(results[0].identity) == 1
        finally:
            await app.stop()

    @pytest.mark.asyncio
    async def test_reload_settings_registers_new_keywords(self, app, settings_path):
        await app.start()
        try:
            assert app.ide_provider.resolve_keyword("vs") is None

            data = toml.load(settings_path)
            data["ides"][0]["prefixes"] = ["code", "vs"]
            settings_path.write_text(toml.dumps(data))
            await app.reload_settings()

            assert app.ide_provider.resolve_keyword("vs") is not None
            results = await app.engine.search("vs web")
            assert [r.title for r in results] == ["[VS Code] website"]
        finally:
            await app.stop()
