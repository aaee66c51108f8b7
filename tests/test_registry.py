# =============================================================================
# Registry Tests - Loading, Resolution, Mutation and Persistence
# =============================================================================
"""
Tests for the source registry and its JSON config store.

Run with: pytest tests/test_registry.py -v
"""

import pytest
import json
import sys
import os
from unittest.mock import patch, AsyncMock

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sources.errors import InvalidArgumentError, NotFoundError, PermissionDeniedError
from sources.models import RegistryConfig
from sources.registry import SourceRegistry
from sources.storage import ConfigStore

DEFAULT_LAYOUT = {
    "relays": {
        "trending": ["wss://algo.utxo.one"],
        "news": ["wss://news.utxo.one"],
        "custom": [],
    },
    "rssFeeds": {
        "stackerNews": "https://stacker.news/rss",
        "hackerNews": {
            "newest": "https://hnrss.org/newest",
            "frontpage": "https://hnrss.org/frontpage",
            "bestComments": "https://hnrss.org/bestcomments",
            "ask": "https://hnrss.org/ask",
            "show": "https://hnrss.org/show",
        },
        "custom": {},
    },
}


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.json"


@pytest.fixture
def registry(config_path):
    return SourceRegistry.load(config_path)


def read_json(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


class TestLoading:
    """Config file -> example file -> defaults."""

    def test_defaults_when_nothing_exists(self, tmp_path, config_path):
        registry = SourceRegistry.load(config_path, tmp_path / "missing.example.json")

        assert registry.snapshot() == DEFAULT_LAYOUT
        assert list(registry.relay_groups) == ["trending", "news", "custom"]
        assert read_json(config_path) == DEFAULT_LAYOUT

    def test_example_used_and_persisted(self, tmp_path, config_path):
        example = dict(DEFAULT_LAYOUT, relays={
            "trending": ["wss://algo.utxo.one"],
            "news": ["wss://news.utxo.one"],
            "custom": ["wss://relay.example"],
            "friends": ["wss://friends.example"],
        })
        example_path = tmp_path / "config.example.json"
        example_path.write_text(json.dumps(example))

        registry = SourceRegistry.load(config_path, example_path)

        assert registry.resolve_relay_group("friends") == ["wss://friends.example"]
        assert read_json(config_path)["relays"]["custom"] == ["wss://relay.example"]

    def test_existing_config_wins(self, tmp_path, config_path):
        layout = json.loads(json.dumps(DEFAULT_LAYOUT))
        layout["rssFeeds"]["custom"] = {"blog": "https://blog.example/rss"}
        config_path.write_text(json.dumps(layout))
        example_path = tmp_path / "config.example.json"
        example_path.write_text(json.dumps(DEFAULT_LAYOUT))

        registry = SourceRegistry.load(config_path, example_path)

        assert registry.resolve_feed("blog") == "https://blog.example/rss"

    def test_corrupt_config_falls_back_and_rewrites(self, config_path):
        config_path.write_text("{not json")

        registry = SourceRegistry.load(config_path)

        assert registry.snapshot() == DEFAULT_LAYOUT
        assert read_json(config_path) == DEFAULT_LAYOUT

    def test_wrong_shape_falls_back(self, config_path):
        config_path.write_text(json.dumps({"relays": ["wss://a"]}))
        assert SourceRegistry.load(config_path).snapshot() == DEFAULT_LAYOUT

    def test_missing_builtins_are_filled(self, config_path):
        config_path.write_text(json.dumps({"relays": {"mine": ["wss://mine.example"]}}))

        registry = SourceRegistry.load(config_path)

        groups = registry.relay_groups
        assert groups["mine"] == ["wss://mine.example"]
        assert groups["trending"] == ["wss://algo.utxo.one"]
        assert groups["custom"] == []
        assert registry.hacker_news_url("ask") == "https://hnrss.org/ask"


class TestPersistenceRoundTrip:
    """save(load()) is stable."""

    def test_idempotent_save(self, registry, config_path):
        store = ConfigStore(config_path)

        store.save(store.load())
        first = config_path.read_bytes()
        store.save(store.load())
        second = config_path.read_bytes()

        assert first == second

    def test_registry_reload_is_stable(self, registry, config_path):
        registry.add_relay_group("friends", ["wss://friends.example"])
        before = config_path.read_bytes()

        SourceRegistry.load(config_path)._persist()

        assert config_path.read_bytes() == before

    def test_config_from_dict_round_trip(self):
        config = RegistryConfig.from_dict(DEFAULT_LAYOUT)
        assert config.to_dict() == DEFAULT_LAYOUT


class TestResolution:
    """Name -> URL(s)."""

    def test_relay_group(self, registry):
        assert registry.resolve_relay_group("news") == ["wss://news.utxo.one"]

    def test_relay_group_not_found(self, registry):
        with pytest.raises(NotFoundError) as exc:
            registry.resolve_relay_group("doesnotexist")
        assert str(exc.value) == "Relay group 'doesnotexist' not found in configuration"

    def test_resolved_list_is_a_copy(self, registry):
        registry.resolve_relay_group("trending").append("wss://evil.example")
        assert registry.resolve_relay_group("trending") == ["wss://algo.utxo.one"]

    def test_stacker_news(self, registry):
        assert registry.resolve_feed("stackerNews") == "https://stacker.news/rss"

    def test_hacker_news_subtype(self, registry):
        assert registry.resolve_feed("hackerNews.bestComments") == "https://hnrss.org/bestcomments"

    def test_hacker_news_unknown_subtype(self, registry):
        with pytest.raises(NotFoundError):
            registry.resolve_feed("hackerNews.bogus")

    def test_hacker_news_without_subtype(self, registry):
        with pytest.raises(NotFoundError):
            registry.resolve_feed("hackerNews")

    def test_unknown_feed(self, registry):
        with pytest.raises(NotFoundError) as exc:
            registry.resolve_feed("nope")
        assert "RSS feed 'nope' not found" in str(exc.value)

    def test_hacker_news_url_unknown(self, registry):
        with pytest.raises(NotFoundError):
            registry.hacker_news_url("bogus-type")


class TestRelayGroupMutation:
    """add/remove relay groups."""

    def test_custom_appends(self, registry, config_path):
        registry.add_relay_group("custom", ["wss://u1.example"])
        registry.add_relay_group("custom", ["wss://u2.example"])

        assert registry.resolve_relay_group("custom") == ["wss://u1.example", "wss://u2.example"]
        assert read_json(config_path)["relays"]["custom"] == ["wss://u1.example", "wss://u2.example"]

    def test_other_group_replaces(self, registry):
        registry.add_relay_group("other", ["wss://u1.example"])
        registry.add_relay_group("other", ["wss://u2.example"])

        assert registry.resolve_relay_group("other") == ["wss://u2.example"]

    def test_rejects_non_websocket_urls(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.add_relay_group("other", ["https://not-a-relay.example"])
        with pytest.raises(NotFoundError):
            registry.resolve_relay_group("other")

    def test_rejects_empty_name(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.add_relay_group("  ", ["wss://u1.example"])

    @pytest.mark.parametrize("name", ["trending", "news"])
    def test_builtin_groups_cannot_be_removed(self, registry, config_path, name):
        before = registry.snapshot()
        file_before = config_path.read_bytes()

        with pytest.raises(PermissionDeniedError):
            registry.remove_relay_group(name)

        assert registry.snapshot() == before
        assert config_path.read_bytes() == file_before

    def test_custom_is_cleared_not_deleted(self, registry):
        registry.add_relay_group("custom", ["wss://u1.example"])
        registry.remove_relay_group("custom")

        assert registry.resolve_relay_group("custom") == []

    def test_remove_group(self, registry, config_path):
        registry.add_relay_group("other", ["wss://u1.example"])
        registry.remove_relay_group("other")

        assert "other" not in registry.relay_groups
        assert "other" not in read_json(config_path)["relays"]

    def test_remove_missing_group(self, registry):
        with pytest.raises(NotFoundError):
            registry.remove_relay_group("ghost")


class TestFeedMutation:
    """add/remove custom feeds."""

    @pytest.mark.asyncio
    async def test_add_feed_after_probe(self, registry, config_path):
        probe = AsyncMock(return_value=[])

        await registry.add_feed("blog", "https://blog.example/rss", probe)

        probe.assert_awaited_once_with("https://blog.example/rss")
        assert registry.resolve_feed("blog") == "https://blog.example/rss"
        assert read_json(config_path)["rssFeeds"]["custom"] == {"blog": "https://blog.example/rss"}

    @pytest.mark.asyncio
    async def test_add_feed_probe_failure(self, registry):
        probe = AsyncMock(side_effect=RuntimeError("connection refused"))

        with pytest.raises(InvalidArgumentError) as exc:
            await registry.add_feed("blog", "https://blog.example/rss", probe)

        assert "connection refused" in str(exc.value)
        assert registry.custom_feeds == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["stackerNews", "hackerNews", "hackerNews.newest"])
    async def test_add_feed_builtin_name(self, registry, name):
        probe = AsyncMock(return_value=[])

        with pytest.raises(PermissionDeniedError):
            await registry.add_feed(name, "https://blog.example/rss", probe)

        probe.assert_not_awaited()

    @pytest.mark.parametrize("name", ["stackerNews", "hackerNews.newest", "hackerNews.ask"])
    def test_builtin_feeds_cannot_be_removed(self, registry, name):
        with pytest.raises(PermissionDeniedError):
            registry.remove_feed(name)

    @pytest.mark.asyncio
    async def test_remove_feed(self, registry, config_path):
        await registry.add_feed("blog", "https://blog.example/rss", AsyncMock(return_value=[]))

        registry.remove_feed("blog")

        assert registry.custom_feeds == {}
        assert read_json(config_path)["rssFeeds"]["custom"] == {}

    def test_remove_missing_feed(self, registry):
        with pytest.raises(NotFoundError):
            registry.remove_feed("ghost")


class TestPersistenceFailure:
    """A failed write is logged and memory stays authoritative."""

    def test_save_error_is_swallowed(self, registry):
        with patch.object(ConfigStore, "save", side_effect=OSError("disk full")):
            registry.add_relay_group("other", ["wss://u1.example"])

        assert registry.resolve_relay_group("other") == ["wss://u1.example"]

    def test_unwritable_path_at_load(self, tmp_path):
        with patch.object(ConfigStore, "save", side_effect=PermissionError("read-only")):
            registry = SourceRegistry.load(tmp_path / "config.json")

        assert registry.snapshot() == DEFAULT_LAYOUT

    def test_registry_without_store(self):
        registry = SourceRegistry()
        registry.add_relay_group("other", ["wss://u1.example"])
        assert registry.resolve_relay_group("other") == ["wss://u1.example"]


class TestListing:
    """Text enumerations."""

    def test_describe_relay_groups(self, registry):
        registry.add_relay_group("friends", ["wss://a.example", "wss://b.example"])

        assert registry.describe_relay_groups() == (
            "Relay groups:\n"
            "- trending: wss://algo.utxo.one\n"
            "- news: wss://news.utxo.one\n"
            "- custom: (empty)\n"
            "- friends: wss://a.example, wss://b.example"
        )

    @pytest.mark.asyncio
    async def test_describe_feeds(self, registry):
        await registry.add_feed("blog", "https://blog.example/rss", AsyncMock(return_value=[]))

        text = registry.describe_feeds()

        assert "- stackerNews: https://stacker.news/rss" in text
        assert "- hackerNews.show: https://hnrss.org/show" in text
        assert text.endswith("Custom RSS feeds:\n- blog: https://blog.example/rss")

    def test_describe_feeds_without_custom(self, registry):
        assert registry.describe_feeds().endswith("Custom RSS feeds:\n- (none)")

    def test_to_json(self, registry):
        assert json.loads(registry.to_json()) == DEFAULT_LAYOUT


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
