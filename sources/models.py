# =============================================================================
# Nostr Daily News - Source Models
# =============================================================================
"""
Data Transfer Objects for relay events, feed entries and the source registry.

A fetched item is either a RelayEvent (Nostr) or a FeedEntry (RSS/Atom);
the formatter projects both onto a FormattedRecord.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

DEFAULT_LIMIT = 10


class HackerNewsFeed(str, Enum):
    """Built-in Hacker News feed types."""
    NEWEST = "newest"
    FRONTPAGE = "frontpage"
    BEST_COMMENTS = "bestComments"
    ASK = "ask"
    SHOW = "show"


# =============================================================================
# Built-in Sources
# =============================================================================

TRENDING_GROUP = "trending"
NEWS_GROUP = "news"
CUSTOM_GROUP = "custom"
BUILTIN_RELAY_GROUPS = (TRENDING_GROUP, NEWS_GROUP)

STACKER_NEWS_KEY = "stackerNews"
HACKER_NEWS_KEY = "hackerNews"

DEFAULT_RELAYS: Dict[str, List[str]] = {
    TRENDING_GROUP: ["wss://algo.utxo.one"],
    NEWS_GROUP: ["wss://news.utxo.one"],
    CUSTOM_GROUP: [],
}

DEFAULT_STACKER_NEWS_URL = "https://stacker.news/rss"

DEFAULT_HACKER_NEWS_FEEDS: Dict[str, str] = {
    HackerNewsFeed.NEWEST.value: "https://hnrss.org/newest",
    HackerNewsFeed.FRONTPAGE.value: "https://hnrss.org/frontpage",
    HackerNewsFeed.BEST_COMMENTS.value: "https://hnrss.org/bestcomments",
    HackerNewsFeed.ASK.value: "https://hnrss.org/ask",
    HackerNewsFeed.SHOW.value: "https://hnrss.org/show",
}


# =============================================================================
# Source Items
# =============================================================================

@dataclass
class RelayEvent:
    """A Nostr event as returned by a relay (NIP-01)."""
    id: str
    pubkey: str = ""
    created_at: int = 0
    kind: Optional[int] = None
    content: str = ""
    tags: List[List[str]] = field(default_factory=list)
    sig: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RelayEvent":
        """
        Build an event from relay JSON.

        Raises:
            KeyError: If the event has no id
            ValueError: If created_at or kind are not integers
        """
        kind = data.get("kind")
        return cls(
            id=str(data["id"]),
            pubkey=data.get("pubkey") or "",
            created_at=int(data.get("created_at", 0)),
            kind=int(kind) if kind is not None else None,
            content=data.get("content") or "",
            tags=list(data.get("tags") or []),
            sig=data.get("sig") or "",
        )


@dataclass
class FeedEntry:
    """
    One entry of an RSS/Atom feed.

    Every field is optional; feeds are inconsistent about what they carry.
    `iso_date` is the parser-normalized date, `pub_date` the raw one.
    """
    pub_date: Optional[str] = None
    iso_date: Optional[str] = None
    title: Optional[str] = None
    creator: Optional[str] = None
    alt_creators: List[Optional[str]] = field(default_factory=list)
    categories: List[Any] = field(default_factory=list)
    content_snippet: Optional[str] = None
    content: Optional[str] = None
    link: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeedEntry":
        """Build an entry from a plain mapping (rss-parser style keys)."""
        return cls(
            pub_date=data.get("pubDate"),
            iso_date=data.get("isoDate"),
            title=data.get("title"),
            creator=data.get("creator"),
            alt_creators=[data.get("dc:creator"), data.get("author")],
            categories=data.get("categories") or [],
            content_snippet=data.get("contentSnippet"),
            content=data.get("content"),
            link=data.get("link"),
        )


SourceItem = Union[RelayEvent, FeedEntry]


@dataclass
class FormattedRecord:
    """Uniform display projection of a SourceItem."""
    display_date: str
    title: str = ""
    author: str = ""
    content: str = ""
    link: str = ""
    metadata: Optional[Dict[str, str]] = None


# =============================================================================
# Relay Filter
# =============================================================================

@dataclass
class EventFilter:
    """Nostr REQ filter. A falsy limit falls back to DEFAULT_LIMIT."""
    limit: Optional[int] = DEFAULT_LIMIT
    kinds: Optional[List[int]] = None
    authors: Optional[List[str]] = None
    since: Optional[int] = None
    until: Optional[int] = None

    def __post_init__(self):
        if not self.limit:
            self.limit = DEFAULT_LIMIT

    def to_nostr(self) -> Dict[str, Any]:
        """Filter object as sent in a REQ message; unset keys are omitted."""
        data: Dict[str, Any] = {"limit": self.limit}
        if self.kinds:
            data["kinds"] = list(self.kinds)
        if self.authors:
            data["authors"] = list(self.authors)
        if self.since:
            data["since"] = self.since
        if self.until:
            data["until"] = self.until
        return data


# =============================================================================
# Registry Configuration
# =============================================================================

@dataclass
class RegistryConfig:
    """
    Named relay groups and RSS feeds, as persisted to config.json.

    Built-in groups (trending, news, custom) and the built-in feeds are
    always present after from_dict / default.
    """
    relays: Dict[str, List[str]] = field(default_factory=dict)
    stacker_news: str = DEFAULT_STACKER_NEWS_URL
    hacker_news: Dict[str, str] = field(default_factory=dict)
    custom_feeds: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def default(cls) -> "RegistryConfig":
        return cls(
            relays=copy.deepcopy(DEFAULT_RELAYS),
            stacker_news=DEFAULT_STACKER_NEWS_URL,
            hacker_news=dict(DEFAULT_HACKER_NEWS_FEEDS),
            custom_feeds={},
        )

    def to_dict(self) -> dict:
        return {
            "relays": copy.deepcopy(self.relays),
            "rssFeeds": {
                STACKER_NEWS_KEY: self.stacker_news,
                HACKER_NEWS_KEY: dict(self.hacker_news),
                CUSTOM_GROUP: dict(self.custom_feeds),
            },
        }

    @classmethod
    def from_dict(cls, data: Any) -> "RegistryConfig":
        """
        Parse the persisted layout.

        Missing built-in entries are filled from the defaults.

        Raises:
            ValueError: If the document does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError("config root must be an object")

        relays_raw = data.get("relays", {})
        if not isinstance(relays_raw, dict):
            raise ValueError("'relays' must be an object")

        relays: Dict[str, List[str]] = {}
        for name, urls in relays_raw.items():
            if not isinstance(urls, list) or not all(isinstance(u, str) for u in urls):
                raise ValueError(f"relay group '{name}' must be a list of URLs")
            relays[name] = list(urls)
        for name, urls in DEFAULT_RELAYS.items():
            relays.setdefault(name, list(urls))

        feeds_raw = data.get("rssFeeds", {})
        if not isinstance(feeds_raw, dict):
            raise ValueError("'rssFeeds' must be an object")

        stacker_news = feeds_raw.get(STACKER_NEWS_KEY, DEFAULT_STACKER_NEWS_URL)
        if not isinstance(stacker_news, str):
            raise ValueError(f"'{STACKER_NEWS_KEY}' must be a URL")

        hacker_news = feeds_raw.get(HACKER_NEWS_KEY, {})
        custom_feeds = feeds_raw.get(CUSTOM_GROUP, {})
        for key, mapping in ((HACKER_NEWS_KEY, hacker_news), (CUSTOM_GROUP, custom_feeds)):
            if not isinstance(mapping, dict) or not all(isinstance(v, str) for v in mapping.values()):
                raise ValueError(f"'rssFeeds.{key}' must map names to URLs")

        hacker_news = dict(hacker_news)
        for feed_type, url in DEFAULT_HACKER_NEWS_FEEDS.items():
            hacker_news.setdefault(feed_type, url)

        return cls(
            relays=relays,
            stacker_news=stacker_news,
            hacker_news=hacker_news,
            custom_feeds=dict(custom_feeds),
        )
