# =============================================================================
# Nostr Daily News - Fetch Resolver
# =============================================================================
"""
Resolve source names through the registry and fetch their items.

Relay results are merged across relays, sorted newest first and cut to the
filter limit. Feed results keep feed order and are cut to the limit.
Nothing is retried; errors propagate as SourceError subclasses.
"""

import logging
from typing import Any, Dict, List, Optional

from sources.errors import RetrievalError, SourceError
from sources.formatter import normalize
from sources.models import (
    DEFAULT_LIMIT,
    NEWS_GROUP,
    STACKER_NEWS_KEY,
    TRENDING_GROUP,
    EventFilter,
    FormattedRecord,
    HackerNewsFeed,
    RelayEvent,
)
from sources.registry import SourceRegistry
from tools.nostr import NostrRelayQueryTool
from tools.rss import RssFeedTool

logger = logging.getLogger(__name__)


class FetchResolver:
    """
    Fetches relay events and feed entries by name or by explicit endpoints.

    The relay and feed tools are LangChain tools (or anything with an async
    ainvoke(dict) method) and can be swapped out in tests.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        relay_tool: Optional[Any] = None,
        feed_tool: Optional[Any] = None,
    ):
        self.registry = registry
        self.relay_tool = relay_tool or NostrRelayQueryTool()
        self.feed_tool = feed_tool or RssFeedTool()

    # =========================================================================
    # Relays
    # =========================================================================

    async def fetch_events(self, relays: List[str], event_filter: EventFilter) -> List[RelayEvent]:
        """
        Query relays and return events newest first, at most filter.limit.

        Args:
            relays: Relay websocket URLs
            event_filter: Filter sent to every relay

        Returns:
            Sorted, truncated RelayEvents
        """
        if not relays:
            logger.info("No relays to query")
            return []

        payload: Dict[str, Any] = {"relays": list(relays), **event_filter.to_nostr()}
        events = await self._invoke(self.relay_tool, payload, source=", ".join(relays))

        events = sorted(events, key=lambda e: e.created_at, reverse=True)
        return events[:event_filter.limit]

    async def fetch_custom(self, relays: List[str], event_filter: EventFilter) -> List[FormattedRecord]:
        events = await self.fetch_events(relays, event_filter)
        return [normalize(e) for e in events]

    async def fetch_relay(self, group: str, limit: Optional[int] = DEFAULT_LIMIT) -> List[FormattedRecord]:
        """Fetch from a named relay group (raises NotFoundError if unknown)."""
        relays = self.registry.resolve_relay_group(group)
        logger.info(f"Fetching from relay group '{group}' ({len(relays)} relays)")
        return await self.fetch_custom(relays, EventFilter(limit=limit))

    async def fetch_trending(self, limit: Optional[int] = DEFAULT_LIMIT) -> List[FormattedRecord]:
        return await self.fetch_relay(TRENDING_GROUP, limit)

    async def fetch_news(self, limit: Optional[int] = DEFAULT_LIMIT) -> List[FormattedRecord]:
        return await self.fetch_relay(NEWS_GROUP, limit)

    # =========================================================================
    # RSS Feeds
    # =========================================================================

    async def fetch_feed_url(self, url: str, limit: Optional[int] = DEFAULT_LIMIT) -> List[FormattedRecord]:
        """Fetch a feed URL and keep its first `limit` entries in feed order."""
        if limit is None:
            limit = DEFAULT_LIMIT

        entries = await self._invoke(self.feed_tool, {"url": url}, source=url)
        return [normalize(e) for e in entries[:max(limit, 0)]]

    async def fetch_feed(self, name: str, limit: Optional[int] = DEFAULT_LIMIT) -> List[FormattedRecord]:
        """Fetch a feed by name: stackerNews, hackerNews.<type> or a custom feed."""
        url = self.registry.resolve_feed(name)
        logger.info(f"Fetching RSS feed '{name}' from {url}")
        return await self.fetch_feed_url(url, limit)

    async def fetch_stacker_news(self, limit: Optional[int] = DEFAULT_LIMIT) -> List[FormattedRecord]:
        return await self.fetch_feed(STACKER_NEWS_KEY, limit)

    async def fetch_hacker_news(
        self,
        feed_type: str = HackerNewsFeed.NEWEST.value,
        limit: Optional[int] = DEFAULT_LIMIT,
    ) -> List[FormattedRecord]:
        """Fetch a Hacker News feed type (raises NotFoundError if unknown)."""
        url = self.registry.hacker_news_url(feed_type)
        return await self.fetch_feed_url(url, limit)

    async def probe_feed(self, url: str) -> None:
        """Fetch and parse url, raising on failure. Used before adding a feed."""
        await self._invoke(self.feed_tool, {"url": url}, source=url)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    async def _invoke(tool: Any, payload: Dict[str, Any], source: str) -> List[Any]:
        try:
            return await tool.ainvoke(payload)
        except SourceError:
            raise
        except Exception as e:
            logger.error(f"{getattr(tool, 'name', type(tool).__name__)} failed for {source}: {e}")
            raise RetrievalError(str(e) or type(e).__name__, source=source) from e
