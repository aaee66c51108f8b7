# =============================================================================
# Nostr Daily News - Tools Module
# =============================================================================
"""
LangChain Tools for fetching news sources.

This module provides the retrieval tools used by the fetch resolver:
- Nostr tools (relay queries over websockets)
- RSS tools (feed download and parsing)

Usage:
    from tools import NostrRelayQueryTool

    events = await NostrRelayQueryTool().ainvoke({"relays": ["wss://news.utxo.one"], "limit": 5})
"""

from tools.base import RelayQueryInput, FeedUrlInput
from tools.nostr import NostrRelayQueryTool
from tools.rss import RssFeedTool


__all__ = [
    # Base
    'RelayQueryInput',
    'FeedUrlInput',
    # Retrieval
    'NostrRelayQueryTool',
    'RssFeedTool',
]
