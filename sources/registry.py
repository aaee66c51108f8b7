# =============================================================================
# Nostr Daily News - Source Registry
# =============================================================================
"""
Named relay groups and RSS feeds.

Provides:
- SourceRegistry: resolve, add, remove and list named sources

Built-in groups (trending, news) and built-in feeds (stackerNews,
hackerNews.<type>) cannot be removed. The "custom" relay group is appended
to on add and emptied on remove. Every mutation rewrites config.json; a
failed write is logged and the in-memory registry stays authoritative.
"""

import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from sources.errors import InvalidArgumentError, NotFoundError, PermissionDeniedError
from sources.models import (
    BUILTIN_RELAY_GROUPS,
    CUSTOM_GROUP,
    HACKER_NEWS_KEY,
    STACKER_NEWS_KEY,
    RegistryConfig,
)
from sources.storage import ConfigStore, open_store

logger = logging.getLogger(__name__)

RELAY_URL_SCHEMES = ("ws://", "wss://")

FeedProbe = Callable[[str], Awaitable[Any]]


class SourceRegistry:
    """
    Mutable registry of relay groups and RSS feeds backed by a ConfigStore.

    Construct once at startup with SourceRegistry.load() and pass the
    instance to whatever needs it.
    """

    def __init__(self, config: Optional[RegistryConfig] = None, store: Optional[ConfigStore] = None):
        self._config = config or RegistryConfig.default()
        self._store = store

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def load(
        cls,
        config_path: Union[str, Path],
        example_path: Optional[Union[str, Path]] = None,
    ) -> "SourceRegistry":
        """
        Load the registry: config file, then example file, then defaults.

        Any read or parse failure falls back to the defaults. Whenever the
        config file was not the source, the chosen config is written to it.

        Args:
            config_path: Path of config.json
            example_path: Path of the bundled example config

        Returns:
            Loaded SourceRegistry
        """
        store = ConfigStore(config_path)
        try:
            if store.exists():
                config = RegistryConfig.from_dict(store.load())
                logger.info(f"Loaded source config from {store.path}")
                return cls(config, store)

            example = open_store(example_path)
            if example and example.exists():
                config = RegistryConfig.from_dict(example.load())
                logger.info(f"No config at {store.path}, using example {example.path}")
            else:
                config = RegistryConfig.default()
                logger.info(f"No config at {store.path}, using built-in defaults")
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load source config: {e} - using built-in defaults")
            config = RegistryConfig.default()

        registry = cls(config, store)
        registry._persist()
        return registry

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve_relay_group(self, name: str) -> List[str]:
        """Relay URLs of a group; raises NotFoundError if unknown."""
        if name not in self._config.relays:
            raise NotFoundError(f"Relay group '{name}' not found in configuration")
        return list(self._config.relays[name])

    def resolve_feed(self, name: str) -> str:
        """
        Feed URL for a feed name.

        Accepted names: "stackerNews", "hackerNews.<type>", or a custom feed.

        Raises:
            NotFoundError: If the name or the Hacker News type is unknown
        """
        if name == STACKER_NEWS_KEY:
            return self._config.stacker_news

        prefix, _, subtype = name.partition(".")
        if prefix == HACKER_NEWS_KEY and subtype:
            return self.hacker_news_url(subtype)

        if name in self._config.custom_feeds:
            return self._config.custom_feeds[name]

        raise NotFoundError(f"RSS feed '{name}' not found in configuration")

    def hacker_news_url(self, feed_type: str) -> str:
        """URL of a built-in Hacker News feed type."""
        url = self._config.hacker_news.get(feed_type)
        if url is None:
            raise NotFoundError(f"Hacker News feed type '{feed_type}' not found in configuration")
        return url

    @property
    def relay_groups(self) -> Dict[str, List[str]]:
        return {name: list(urls) for name, urls in self._config.relays.items()}

    @property
    def custom_feeds(self) -> Dict[str, str]:
        return dict(self._config.custom_feeds)

    # =========================================================================
    # Mutation
    # =========================================================================

    def add_relay_group(self, name: str, urls: List[str]) -> List[str]:
        """
        Create or replace a relay group, or append to "custom".

        Args:
            name: Group name
            urls: Relay websocket URLs

        Returns:
            The group's relay URLs after the change
        """
        name = (name or "").strip()
        if not name:
            raise InvalidArgumentError("Relay group name must not be empty")
        if not urls:
            raise InvalidArgumentError("At least one relay URL is required")

        invalid = [u for u in urls if not isinstance(u, str) or not u.startswith(RELAY_URL_SCHEMES)]
        if invalid:
            raise InvalidArgumentError(
                f"Relay URLs must start with ws:// or wss://: {', '.join(map(str, invalid))}"
            )

        if name == CUSTOM_GROUP:
            self._config.relays.setdefault(CUSTOM_GROUP, []).extend(urls)
        else:
            self._config.relays[name] = list(urls)

        logger.info(f"Relay group '{name}' now has {len(self._config.relays[name])} relays")
        self._persist()
        return list(self._config.relays[name])

    async def add_feed(self, name: str, url: str, probe: FeedProbe) -> None:
        """
        Register a custom RSS feed after checking that it can be fetched.

        Args:
            name: Custom feed name
            url: Feed URL
            probe: Coroutine function fetching and parsing url; any
                exception it raises rejects the feed
        """
        name = (name or "").strip()
        if not name:
            raise InvalidArgumentError("RSS feed name must not be empty")
        if _is_builtin_feed(name):
            raise PermissionDeniedError(f"Cannot overwrite built-in RSS feed '{name}'")

        try:
            await probe(url)
        except Exception as e:
            logger.warning(f"Feed probe failed for {url}: {e}")
            raise InvalidArgumentError(f"Invalid RSS feed URL '{url}': {e}") from e

        self._config.custom_feeds[name] = url
        logger.info(f"Added RSS feed '{name}': {url}")
        self._persist()

    def remove_relay_group(self, name: str) -> None:
        """Delete a relay group; "custom" is emptied instead."""
        if name in BUILTIN_RELAY_GROUPS:
            raise PermissionDeniedError(f"Cannot remove built-in relay group '{name}'")

        if name == CUSTOM_GROUP:
            self._config.relays[CUSTOM_GROUP] = []
        elif name in self._config.relays:
            del self._config.relays[name]
        else:
            raise NotFoundError(f"Relay group '{name}' not found in configuration")

        logger.info(f"Removed relay group '{name}'")
        self._persist()

    def remove_feed(self, name: str) -> None:
        """Delete a custom RSS feed."""
        if _is_builtin_feed(name):
            raise PermissionDeniedError(f"Cannot remove built-in RSS feed '{name}'")
        if name not in self._config.custom_feeds:
            raise NotFoundError(f"RSS feed '{name}' not found in configuration")

        del self._config.custom_feeds[name]
        logger.info(f"Removed RSS feed '{name}'")
        self._persist()

    # =========================================================================
    # Listing
    # =========================================================================

    def snapshot(self) -> dict:
        """Deep copy of the persisted layout."""
        return self._config.to_dict()

    def to_json(self) -> str:
        return json.dumps(self.snapshot(), indent=2)

    def describe_relay_groups(self) -> str:
        lines = ["Relay groups:"]
        for name, urls in self._config.relays.items():
            lines.append(f"- {name}: {', '.join(urls) if urls else '(empty)'}")
        return "\n".join(lines)

    def describe_feeds(self) -> str:
        lines = ["Built-in RSS feeds:", f"- {STACKER_NEWS_KEY}: {self._config.stacker_news}"]
        for feed_type, url in self._config.hacker_news.items():
            lines.append(f"- {HACKER_NEWS_KEY}.{feed_type}: {url}")

        lines.append("")
        lines.append("Custom RSS feeds:")
        if self._config.custom_feeds:
            for name, url in self._config.custom_feeds.items():
                lines.append(f"- {name}: {url}")
        else:
            lines.append("- (none)")
        return "\n".join(lines)

    # =========================================================================
    # Persistence
    # =========================================================================

    def _persist(self) -> bool:
        """Write the registry; failures are logged, not raised."""
        if self._store is None:
            return False
        try:
            self._store.save(self.snapshot())
            return True
        except OSError as e:
            logger.error(f"Failed to save source config to {self._store.path}: {e}")
            return False


def _is_builtin_feed(name: str) -> bool:
    return name in (STACKER_NEWS_KEY, HACKER_NEWS_KEY) or name.startswith(f"{HACKER_NEWS_KEY}.")
