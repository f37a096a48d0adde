"""
Searchlight - Application wiring.

build_app() turns a settings dictionary into a running search stack:
store, usage ledger, providers, router, ranker, engine, refresh scheduler
and keystroke debouncer.

Usage:
  app = build_app()
  await app.start()
  app.debouncer.submit("chrome ap")
  ...
  await app.stop()
"""

from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from searchlight.search.debounce import SearchDebouncer
from searchlight.search.engine import SearchEngine
from searchlight.search.models import ProviderType, SearchResult
from searchlight.search.providers import (
    ApplicationsProvider,
    BookmarksProvider,
    DictionaryProvider,
    HistoryProvider,
    IDEProjectsProvider,
    TabsProvider,
)
from searchlight.search.ranker import Ranker
from searchlight.search.router import QueryRouter
from searchlight.services.scheduler import RefreshScheduler
from searchlight.services.store import KeyValueStore, open_store
from searchlight.services.usage import UsageLedger
from searchlight.utils.helpers import load_settings, parse_ide_configs

# Providers whose snapshots only change when reloaded explicitly
STATIC_PROVIDERS = (ProviderType.APPLICATION, ProviderType.BOOKMARK)


class SearchlightApp:
    """Holds the wired components and their lifecycle."""

    def __init__(
        self,
        settings: Dict[str, Any],
        engine: SearchEngine,
        scheduler: RefreshScheduler,
        debounce_ms: int,
        ledger: UsageLedger,
        store: KeyValueStore,
        ide_provider: IDEProjectsProvider,
        settings_path: Optional[Path] = None,
    ):
        self.settings = settings
        self.engine = engine
        self.scheduler = scheduler
        self.debouncer = SearchDebouncer(
            search=engine.search,
            on_results=self._on_results,
            delay_ms=debounce_ms,
        )
        self.ledger = ledger
        self.store = store
        self.ide_provider = ide_provider
        self.settings_path = settings_path
        self.latest_results: list[SearchResult] = []
        self.latest_query = ""

    def _on_results(self, query: str, results: list[SearchResult]) -> None:
        self.latest_query = query
        self.latest_results = results

    async def start(self) -> None:
        """Load every provider once, then start periodic refreshes."""
        await self.engine.load_providers()
        self.scheduler.start()
        logger.info("Searchlight started")

    async def stop(self) -> None:
        self.debouncer.cancel()
        await self.scheduler.stop()
        close = getattr(self.store, "close", None)
        if close is not None:
            close()
        logger.info("Searchlight stopped")

    async def reload_settings(self, path: Optional[Path] = None) -> Dict[str, Any]:
        """
        Re-read settings and apply the parts that can change at runtime.

        IDE keywords are re-registered and static providers reloaded.
        Result limits, thresholds and provider wiring need a restart.
        """
        path = path or self.settings_path
        self.settings = load_settings(path)

        self.ide_provider.set_configs(parse_ide_configs(self.settings.get("ides", [])))
        await self.engine.invalidate_provider(ProviderType.IDE_PROJECT)
        for kind in STATIC_PROVIDERS:
            await self.engine.invalidate_provider(kind)

        logger.info("Settings reloaded")
        return self.settings


def build_app(
    settings: Optional[Dict[str, Any]] = None,
    store: Optional[KeyValueStore] = None,
    settings_path: Optional[Path] = None,
) -> SearchlightApp:
    """
    Wire the search stack from settings.

    Args:
        settings: Settings dictionary (loaded from settings_path if None)
        store: Persistence for the usage ledger (SQLite at usage.db_path if None)
        settings_path: Settings file used by load and reload

    Returns:
        SearchlightApp, not yet started
    """
    if settings is None:
        settings = load_settings(settings_path)

    search_cfg = settings["search"]
    usage_cfg = settings["usage"]
    providers_cfg = settings["providers"]

    if store is None:
        store = open_store(Path(usage_cfg["db_path"]).expanduser())
    ledger = UsageLedger(store=store, max_entries=usage_cfg["max_entries"])

    sanity_limit = providers_cfg["sanity_limit"]
    ide_provider = IDEProjectsProvider(
        configs=parse_ide_configs(settings.get("ides", [])),
        sanity_limit=sanity_limit,
    )

    # Order decides which provider wins a duplicate identity
    providers = [
        ApplicationsProvider(
            search_paths=providers_cfg["applications"]["search_paths"],
            sanity_limit=sanity_limit,
        ),
        DictionaryProvider(
            command=providers_cfg["dictionary"]["command"],
            sanity_limit=sanity_limit,
        ),
        ide_provider,
    ]

    scheduler = RefreshScheduler()

    if providers_cfg.get("tabs_enabled", True):
        tabs = TabsProvider(
            max_tabs=providers_cfg["tabs"]["max_tabs"],
            refresh_interval=providers_cfg["tabs_refresh_seconds"],
            sanity_limit=sanity_limit,
        )
        providers.append(tabs)
        scheduler.add(tabs)

    bookmarks_cfg = providers_cfg["bookmarks"]
    providers.append(
        BookmarksProvider(
            chrome_bookmarks_path=bookmarks_cfg.get("chrome_bookmarks_path"),
            export_dir=bookmarks_cfg.get("export_dir"),
            sanity_limit=sanity_limit,
        )
    )

    if providers_cfg["browser_history_enabled"]:
        history = HistoryProvider(
            history_path=providers_cfg["history"]["path"],
            limit=providers_cfg["history"]["limit"],
            refresh_interval=providers_cfg["history_refresh_seconds"],
            sanity_limit=sanity_limit,
        )
        providers.append(history)
        scheduler.add(history)
    else:
        logger.info("Browser history search disabled")

    router = QueryRouter(
        ide_resolver=ide_provider.resolve_keyword,
        suffixes=settings.get("suffixes"),
    )
    ranker = Ranker(
        weight_of=ledger.get_weight,
        high_score_threshold=search_cfg["high_score_threshold"],
        usage_weight_threshold=search_cfg["usage_weight_threshold"],
    )
    engine = SearchEngine(
        providers=providers,
        router=router,
        ranker=ranker,
        ledger=ledger,
        max_results=search_cfg["max_results"],
    )

    app = SearchlightApp(
        settings=settings,
        engine=engine,
        scheduler=scheduler,
        debounce_ms=search_cfg["debounce_ms"],
        ledger=ledger,
        store=store,
        ide_provider=ide_provider,
        settings_path=settings_path,
    )
    logger.debug(f"Built app with providers: {', '.join(p.name for p in providers)}")
    return app
