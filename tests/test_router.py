"""
Tests for query routing: IDE keywords, magic suffixes and the default filter.

Uses a real router with a dictionary-backed IDE resolver.
"""

import pytest

from searchlight.search.models import (
    AllFilter,
    IDEConfig,
    IDEProjectFilter,
    ProviderFilter,
    ProviderType,
)
from searchlight.search.router import QueryRouter

PYCHARM = IDEConfig(
    name="PyCharm",
    prefixes=("py", "pycharm"),
    type="jetbrains",
    recent_projects_path="/tmp/recentProjects.xml",
)


@pytest.fixture
def router():
    keywords = {prefix: PYCHARM for prefix in PYCHARM.prefixes}
    return QueryRouter(ide_resolver=keywords.get)


class TestIDEKeywords:
    """IDE keyword as first token, last token or on its own."""

    def test_keyword_first(self, router):
        assert router.parse("py myproj") == ("myproj", IDEProjectFilter(PYCHARM))

    def test_keyword_last(self, router):
        assert router.parse("myproj py") == ("myproj", IDEProjectFilter(PYCHARM))

    def test_bare_keyword_lists_everything(self, router):
        assert router.parse("py") == ("", IDEProjectFilter(PYCHARM))

    def test_keyword_is_case_insensitive(self, router):
        assert router.parse("  PyCharm My Proj ") == ("My Proj", IDEProjectFilter(PYCHARM))

    def test_keyword_inside_query_is_ignored(self, router):
        keyword, query_filter = router.parse("my py proj")
        assert query_filter == AllFilter()
        assert keyword == "my py proj"

    def test_ide_keyword_beats_magic_suffix(self):
        config = IDEConfig(name="Chrome IDE", prefixes=("ch",), type="vscode", recent_projects_path="x")
        router = QueryRouter(ide_resolver={"ch": config}.get)
        assert router.parse("github ch") == ("github", IDEProjectFilter(config))


class TestMagicSuffixes:
    """Trailing suffix selects a single provider."""

    @pytest.mark.parametrize("suffix, kind", [
        ("ap", ProviderType.APPLICATION),
        ("ch", ProviderType.BOOKMARK),
        ("hi", ProviderType.HISTORY),
        ("di", ProviderType.DICTIONARY),
        ("tb", ProviderType.TAB),
    ])
    def test_default_suffixes(self, router, suffix, kind):
        assert router.parse(f"github {suffix}") == ("github", ProviderFilter(kind))

    def test_suffix_is_case_insensitive(self, router):
        assert router.parse("GitHub CH") == ("GitHub", ProviderFilter(ProviderType.BOOKMARK))

    def test_multi_word_keyword_is_kept(self, router):
        assert router.parse("google chrome ap") == (
            "google chrome", ProviderFilter(ProviderType.APPLICATION),
        )

    def test_suffix_alone_is_a_plain_query(self, router):
        assert router.parse("ch") == ("ch", AllFilter())

    def test_custom_suffix_table(self):
        router = QueryRouter(suffixes={"bm": "bookmark"})
        assert router.parse("github bm") == ("github", ProviderFilter(ProviderType.BOOKMARK))
        assert router.parse("github ch") == ("github ch", AllFilter())

    def test_unknown_provider_type_in_table_raises(self):
        with pytest.raises(ValueError):
            QueryRouter(suffixes={"zz": "not-a-provider"})


class TestDefaultFilter:
    """Everything else searches all providers."""

    def test_plain_query(self, router):
        assert router.parse("  safari  ") == ("safari", AllFilter())

    def test_empty_query(self, router):
        assert router.parse("") == ("", AllFilter())

    def test_without_ide_resolver(self):
        assert QueryRouter().parse("py proj") == ("py proj", AllFilter())
