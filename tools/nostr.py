# =============================================================================
# Nostr Daily News - Nostr Relay Tools
# =============================================================================
"""
Query Nostr relays over websockets (NIP-01).

Every relay gets its own REQ subscription; events are collected until the
relay sends EOSE or the timeout expires, then the subscription is closed.
All relays are queried concurrently.

Provides:
- NostrRelayQueryTool: Fetch events matching a filter from a set of relays
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Dict, List, Optional, Type

import aiohttp
from pydantic import BaseModel
from langchain_core.tools import BaseTool
from langchain_core.callbacks import CallbackManagerForToolRun

from config import settings
from sources.errors import RetrievalError
from sources.models import EventFilter, RelayEvent
from tools.base import RelayQueryInput

logger = logging.getLogger(__name__)


# =============================================================================
# Helper Functions
# =============================================================================

async def _collect_events(ws: aiohttp.ClientWebSocketResponse, sub_id: str, events: List[dict]) -> None:
    """Append EVENT payloads for sub_id until EOSE."""
    async for msg in ws:
        if msg.type == aiohttp.WSMsgType.ERROR:
            raise RetrievalError(f"websocket error: {ws.exception()}")
        if msg.type != aiohttp.WSMsgType.TEXT:
            continue

        try:
            data = json.loads(msg.data)
        except json.JSONDecodeError:
            logger.debug(f"Ignoring non-JSON relay message: {msg.data[:100]}")
            continue
        if not isinstance(data, list) or len(data) < 2:
            continue

        message_type = data[0]
        if message_type == "EVENT" and len(data) >= 3 and data[1] == sub_id:
            events.append(data[2])
        elif message_type == "EOSE" and data[1] == sub_id:
            return
        elif message_type == "CLOSED" and data[1] == sub_id:
            reason = data[2] if len(data) > 2 else "no reason given"
            raise RetrievalError(f"subscription closed by relay: {reason}")
        elif message_type == "NOTICE":
            logger.debug(f"Relay notice: {data[1]}")


async def _query_relay(
    session: aiohttp.ClientSession,
    relay_url: str,
    nostr_filter: Dict[str, Any],
    timeout: float,
) -> List[dict]:
    """
    Run one REQ against a relay.

    Args:
        session: Shared aiohttp session
        relay_url: Relay websocket URL
        nostr_filter: Filter object for the REQ message
        timeout: Seconds to wait for EOSE

    Returns:
        Raw event dictionaries received before EOSE or the timeout
    """
    sub_id = uuid.uuid4().hex[:16]
    events: List[dict] = []

    async with session.ws_connect(relay_url) as ws:
        await ws.send_str(json.dumps(["REQ", sub_id, nostr_filter]))
        try:
            await asyncio.wait_for(_collect_events(ws, sub_id, events), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{relay_url} sent no EOSE within {timeout}s, keeping {len(events)} events")

        if not ws.closed:
            try:
                await ws.send_str(json.dumps(["CLOSE", sub_id]))
            except (ConnectionResetError, aiohttp.ClientError) as e:
                logger.debug(f"Could not close subscription on {relay_url}: {e}")

    logger.debug(f"Received {len(events)} events from {relay_url}")
    return events


async def query_events(
    relays: List[str],
    nostr_filter: Dict[str, Any],
    timeout: Optional[float] = None,
    strict: Optional[bool] = None,
) -> List[RelayEvent]:
    """
    Query all relays concurrently and merge their events.

    Events are de-duplicated by id; malformed events are skipped. Relays that
    fail are logged and ignored unless every relay failed, or strict is set.

    Args:
        relays: Relay websocket URLs
        nostr_filter: Filter object for the REQ message
        timeout: Seconds to wait for each relay (default NOSTR_TIMEOUT)
        strict: Fail when any relay fails (default NOSTR_STRICT_RELAYS)

    Returns:
        Merged list of RelayEvents in arrival order

    Raises:
        RetrievalError: If the failure policy above is triggered
    """
    timeout = timeout if timeout is not None else settings.NOSTR_TIMEOUT
    strict = strict if strict is not None else settings.NOSTR_STRICT_RELAYS

    client_timeout = aiohttp.ClientTimeout(total=None, connect=timeout)
    headers = {"User-Agent": settings.HTTP_USER_AGENT}
    async with aiohttp.ClientSession(timeout=client_timeout, headers=headers) as session:
        results = await asyncio.gather(
            *(_query_relay(session, url, nostr_filter, timeout) for url in relays),
            return_exceptions=True,
        )

    failures = []
    seen = set()
    merged: List[RelayEvent] = []
    for relay_url, result in zip(relays, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            logger.warning(f"Relay query failed for {relay_url}: {result}")
            failures.append(f"{relay_url}: {str(result) or type(result).__name__}")
            continue

        for raw in result:
            try:
                event = RelayEvent.from_dict(raw)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.debug(f"Skipping malformed event from {relay_url}: {e}")
                continue
            if event.id in seen:
                continue
            seen.add(event.id)
            merged.append(event)

    if failures and (strict or len(failures) == len(relays)):
        raise RetrievalError("; ".join(failures), source=", ".join(relays))

    return merged


# =============================================================================
# Nostr Relay Query Tool
# =============================================================================

class NostrRelayQueryTool(BaseTool):
    """
    Fetch Nostr events from one or more relays.

    Returns a list of RelayEvent objects (unsorted, de-duplicated by id).
    """

    name: str = "nostr_relay_query"
    description: str = """Fetch Nostr events from a list of relays.
Input: relays (wss:// URLs), limit, optional kinds, authors, since, until.
Returns: Events matching the filter, merged across relays."""
    args_schema: Type[BaseModel] = RelayQueryInput

    def _run(
        self,
        relays: List[str],
        limit: int = 10,
        kinds: Optional[List[int]] = None,
        authors: Optional[List[str]] = None,
        since: Optional[int] = None,
        until: Optional[int] = None,
        run_manager: Optional[CallbackManagerForToolRun] = None
    ) -> List[RelayEvent]:
        """Query relays synchronously."""
        return asyncio.run(self._arun(relays, limit, kinds, authors, since, until))

    async def _arun(
        self,
        relays: List[str],
        limit: int = 10,
        kinds: Optional[List[int]] = None,
        authors: Optional[List[str]] = None,
        since: Optional[int] = None,
        until: Optional[int] = None,
        run_manager: Optional[CallbackManagerForToolRun] = None
    ) -> List[RelayEvent]:
        """Query relays asynchronously."""
        event_filter = EventFilter(limit=limit, kinds=kinds, authors=authors, since=since, until=until)
        logger.info(f"Querying {len(relays)} relays with filter {event_filter.to_nostr()}")
        return await query_events(relays, event_filter.to_nostr())
