# =============================================================================
# Nostr Daily News - RSS Feed Tools
# =============================================================================
"""
RSS/Atom feed retrieval.

The feed is downloaded with aiohttp and parsed with feedparser; entries
keep the order of the feed document.

Provides:
- RssFeedTool: Fetch and parse a feed into FeedEntry records
"""

import asyncio
import calendar
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Type

import aiohttp
import feedparser
from bs4 import BeautifulSoup
from pydantic import BaseModel
from langchain_core.tools import BaseTool
from langchain_core.callbacks import CallbackManagerForToolRun

from config import settings
from sources.errors import RetrievalError
from sources.formatter import to_iso
from sources.models import FeedEntry
from tools.base import FeedUrlInput

logger = logging.getLogger(__name__)


# =============================================================================
# Helper Functions
# =============================================================================

def _struct_time_to_iso(value: Any) -> Optional[str]:
    if not value:
        return None
    try:
        return to_iso(datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc))
    except (TypeError, ValueError, OverflowError):
        return None


def _strip_html(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    return BeautifulSoup(value, "html.parser").get_text(" ", strip=True)


def entry_from_feedparser(entry: Any) -> FeedEntry:
    """Convert a feedparser entry into a FeedEntry."""
    summary = entry.get("summary")
    contents = entry.get("content") or []
    content = contents[0].get("value") if contents else summary

    author_detail = entry.get("author_detail") or {}
    categories = [tag.get("term") for tag in entry.get("tags") or [] if tag.get("term")]

    return FeedEntry(
        pub_date=entry.get("published"),
        iso_date=_struct_time_to_iso(entry.get("published_parsed") or entry.get("updated_parsed")),
        title=entry.get("title"),
        creator=entry.get("author"),
        alt_creators=[author_detail.get("name"), entry.get("publisher")],
        categories=categories,
        content_snippet=_strip_html(summary),
        content=content,
        link=entry.get("link"),
    )


def parse_feed(body: bytes, url: str = "") -> List[FeedEntry]:
    """
    Parse a feed document.

    Raises:
        RetrievalError: If the document is not a feed
    """
    parsed = feedparser.parse(body)
    entries = parsed.get("entries") or []

    if not entries and (parsed.get("bozo") or not parsed.get("version")):
        reason = parsed.get("bozo_exception") or "not an RSS or Atom document"
        raise RetrievalError(f"Could not parse feed {url}: {reason}", source=url)

    if parsed.get("bozo"):
        logger.debug(f"Feed 'bozo' flagged for {url}: {parsed.get('bozo_exception')}")

    return [entry_from_feedparser(e) for e in entries]


async def fetch_feed(url: str, timeout: Optional[float] = None) -> List[FeedEntry]:
    """
    Download and parse a feed.

    Args:
        url: Feed URL
        timeout: Total request timeout in seconds (default DEFAULT_TIMEOUT)

    Returns:
        Feed entries in document order

    Raises:
        RetrievalError: On network, HTTP or parse errors
    """
    timeout = timeout if timeout is not None else settings.DEFAULT_TIMEOUT
    logger.debug(f"Fetching RSS from {url}")

    try:
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=timeout),
            headers={"User-Agent": settings.HTTP_USER_AGENT},
        ) as session:
            async with session.get(url) as response:
                if response.status != 200:
                    raise RetrievalError(f"HTTP {response.status} from {url}", source=url)
                body = await response.read()
    except asyncio.TimeoutError as e:
        raise RetrievalError(f"Timed out after {timeout}s fetching {url}", source=url) from e
    except (aiohttp.ClientError, ValueError) as e:
        raise RetrievalError(f"{type(e).__name__}: {e}", source=url) from e

    entries = parse_feed(body, url)
    logger.info(f"Fetched {len(entries)} RSS entries from {url}")
    return entries


# =============================================================================
# RSS Feed Tool
# =============================================================================

class RssFeedTool(BaseTool):
    """
    Fetch an RSS or Atom feed.

    Returns a list of FeedEntry objects in feed order.
    """

    name: str = "rss_feed_fetch"
    description: str = """Fetch and parse an RSS or Atom feed.
Input: url of the feed.
Returns: Feed entries (title, link, date, author, categories, content)."""
    args_schema: Type[BaseModel] = FeedUrlInput

    def _run(
        self,
        url: str,
        run_manager: Optional[CallbackManagerForToolRun] = None
    ) -> List[FeedEntry]:
        """Fetch feed synchronously."""
        return asyncio.run(self._arun(url))

    async def _arun(
        self,
        url: str,
        run_manager: Optional[CallbackManagerForToolRun] = None
    ) -> List[FeedEntry]:
        """Fetch feed asynchronously."""
        return await fetch_feed(url)
