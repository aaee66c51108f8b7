# =============================================================================
# Nostr Daily News - MCP Server
# =============================================================================
"""
Model Context Protocol (MCP) server exposing Nostr and RSS news tools.

Tools:
- fetch-trending-notes / fetch-news-notes: built-in relay groups
- fetch-custom-events: any relays with a custom filter
- fetch-relay-group: a configured relay group
- fetch-stacker-news / fetch-hacker-news / fetch-custom-rss: RSS feeds
- get-config, list-relay-groups, list-rss-feeds: registry contents
- add-relay-group, add-rss-feed, remove-relay-group, remove-rss-feed

Every tool answers with a single text block. Failures are reported as
"<error prefix>: <message>" text, never as protocol errors.
"""

import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from pydantic import ValidationError

from config import settings
from sources.errors import InvalidArgumentError, NotFoundError, SourceError
from sources.formatter import render_batch
from sources.models import CUSTOM_GROUP, EventFilter, FormattedRecord
from sources.registry import SourceRegistry
from sources.resolver import FetchResolver
from news_mcp.schemas import (
    AddRelayGroupArgs,
    AddRssFeedArgs,
    CustomEventsArgs,
    CustomRssArgs,
    HackerNewsArgs,
    LimitArgs,
    NoArgs,
    RelayGroupFetchArgs,
    RemoveArgs,
    ToolArgs,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "nostr-daily-news"


# =============================================================================
# Tool Results
# =============================================================================

@dataclass
class ToolResult:
    """Text returned to the client plus the error that produced it, if any."""
    text: str
    error: Optional[SourceError] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_model: Type[ToolArgs]
    error_prefix: str
    handler: str


TOOL_SPECS: List[ToolSpec] = [
    ToolSpec("fetch-trending-notes", "Fetch trending notes from Nostr",
             LimitArgs, "Error fetching notes", "fetch_trending_notes"),
    ToolSpec("fetch-news-notes", "Fetch latest news notes from Nostr",
             LimitArgs, "Error fetching notes", "fetch_news_notes"),
    ToolSpec("fetch-custom-events", "Fetch Nostr events with custom filters from specified relay URLs",
             CustomEventsArgs, "Error fetching events", "fetch_custom_events"),
    ToolSpec("fetch-relay-group", "Fetch Nostr events from a configured relay group",
             RelayGroupFetchArgs, "Error fetching events from relay group", "fetch_relay_group"),
    ToolSpec("fetch-stacker-news", "Fetch latest news and discussions from the Stacker News RSS feed",
             LimitArgs, "Error fetching RSS feed", "fetch_stacker_news"),
    ToolSpec("fetch-hacker-news", "Fetch stories from a Hacker News RSS feed",
             HackerNewsArgs, "Error fetching RSS feed", "fetch_hacker_news"),
    ToolSpec("fetch-custom-rss", "Fetch items from a configured RSS feed",
             CustomRssArgs, "Error fetching RSS feed", "fetch_custom_rss"),
    ToolSpec("get-config", "Show the current relay group and RSS feed configuration",
             NoArgs, "Error getting configuration", "get_config"),
    ToolSpec("add-relay-group", "Add or replace a relay group ('custom' appends relays)",
             AddRelayGroupArgs, "Error adding relay group", "add_relay_group"),
    ToolSpec("add-rss-feed", "Add a custom RSS feed after checking that it can be fetched",
             AddRssFeedArgs, "Error adding RSS feed", "add_rss_feed"),
    ToolSpec("list-relay-groups", "List all relay groups and their relays",
             NoArgs, "Error listing relay groups", "list_relay_groups"),
    ToolSpec("list-rss-feeds", "List built-in and custom RSS feeds",
             NoArgs, "Error listing RSS feeds", "list_rss_feeds"),
    ToolSpec("remove-relay-group", "Remove a relay group ('custom' is emptied, built-ins are protected)",
             RemoveArgs, "Error removing relay group", "remove_relay_group"),
    ToolSpec("remove-rss-feed", "Remove a custom RSS feed (built-in feeds are protected)",
             RemoveArgs, "Error removing RSS feed", "remove_rss_feed"),
]

_SPECS_BY_NAME: Dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_SPECS}

# Tool definitions for MCP
TOOLS = [
    {
        "name": spec.name,
        "description": spec.description,
        "inputSchema": spec.args_model.model_json_schema(by_alias=True),
    }
    for spec in TOOL_SPECS
]


def _render(records: List[FormattedRecord], empty_message: str) -> str:
    return render_batch(records) if records else empty_message


def _validation_message(error: ValidationError) -> str:
    problems = []
    for err in error.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "arguments"
        problems.append(f"{location}: {err.get('msg')}")
    return "Invalid arguments - " + "; ".join(problems)


# =============================================================================
# Tool Handlers
# =============================================================================

class NewsTools:
    """
    Tool handlers bound to one SourceRegistry and FetchResolver.

    Create once at startup; handle_tool_call is the only entry point the
    MCP server uses.
    """

    def __init__(self, registry: SourceRegistry, resolver: Optional[FetchResolver] = None):
        self.registry = registry
        self.resolver = resolver or FetchResolver(registry)

    async def handle_tool_call(self, name: str, arguments: Optional[Dict[str, Any]]) -> ToolResult:
        """Validate arguments, run the tool and convert failures to text."""
        spec = _SPECS_BY_NAME.get(name)
        if spec is None:
            return ToolResult(f"Unknown tool: {name}", NotFoundError(f"Unknown tool: {name}"))

        logger.info(f"{name} called with {arguments or {}}")
        try:
            args = spec.args_model.model_validate(arguments or {})
            text = await getattr(self, spec.handler)(args)
            return ToolResult(text)
        except ValidationError as e:
            error = InvalidArgumentError(_validation_message(e))
        except SourceError as e:
            error = e
        except Exception as e:
            logger.exception(f"Unexpected failure in {name}")
            error = SourceError(str(e) or type(e).__name__)

        logger.warning(f"{name} failed: {error}")
        return ToolResult(f"{spec.error_prefix}: {error}", error)

    # -------------------------------------------------------------------------
    # Nostr
    # -------------------------------------------------------------------------

    async def fetch_trending_notes(self, args: LimitArgs) -> str:
        records = await self.resolver.fetch_trending(args.limit)
        return _render(records, "No trending notes found.")

    async def fetch_news_notes(self, args: LimitArgs) -> str:
        records = await self.resolver.fetch_news(args.limit)
        return _render(records, "No news notes found.")

    async def fetch_custom_events(self, args: CustomEventsArgs) -> str:
        event_filter = EventFilter(
            limit=args.limit,
            kinds=args.kinds,
            authors=args.authors,
            since=args.since,
            until=args.until,
        )
        records = await self.resolver.fetch_custom(args.relays, event_filter)
        return _render(records, "No events found for the specified filter.")

    async def fetch_relay_group(self, args: RelayGroupFetchArgs) -> str:
        records = await self.resolver.fetch_relay(args.relay_group, args.limit)
        return _render(records, f"No events found in relay group '{args.relay_group}'.")

    # -------------------------------------------------------------------------
    # RSS
    # -------------------------------------------------------------------------

    async def fetch_stacker_news(self, args: LimitArgs) -> str:
        records = await self.resolver.fetch_stacker_news(args.limit)
        return _render(records, "No Stacker News items found.")

    async def fetch_hacker_news(self, args: HackerNewsArgs) -> str:
        records = await self.resolver.fetch_hacker_news(args.feed_type, args.limit)
        return _render(records, "No Hacker News items found.")

    async def fetch_custom_rss(self, args: CustomRssArgs) -> str:
        records = await self.resolver.fetch_feed(args.feed_name, args.limit)
        return _render(records, f"No items found in RSS feed '{args.feed_name}'.")

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    async def get_config(self, args: NoArgs) -> str:
        return self.registry.to_json()

    async def add_relay_group(self, args: AddRelayGroupArgs) -> str:
        relays = self.registry.add_relay_group(args.name, args.relays)
        if args.name.strip() == CUSTOM_GROUP:
            return (f"Added {len(args.relays)} relays to the custom relay group "
                    f"({len(relays)} relays total).")
        return f"Relay group '{args.name.strip()}' saved with {len(relays)} relays."

    async def add_rss_feed(self, args: AddRssFeedArgs) -> str:
        await self.registry.add_feed(args.name, args.url, self.resolver.probe_feed)
        return f"RSS feed '{args.name.strip()}' added: {args.url}"

    async def list_relay_groups(self, args: NoArgs) -> str:
        return self.registry.describe_relay_groups()

    async def list_rss_feeds(self, args: NoArgs) -> str:
        return self.registry.describe_feeds()

    async def remove_relay_group(self, args: RemoveArgs) -> str:
        self.registry.remove_relay_group(args.name)
        if args.name == CUSTOM_GROUP:
            return "Cleared the custom relay group."
        return f"Relay group '{args.name}' removed."

    async def remove_rss_feed(self, args: RemoveArgs) -> str:
        self.registry.remove_feed(args.name)
        return f"RSS feed '{args.name}' removed."


def create_news_tools() -> NewsTools:
    """Load the registry from the configured paths and build the handlers."""
    registry = SourceRegistry.load(settings.CONFIG_PATH, settings.EXAMPLE_CONFIG_PATH)
    return NewsTools(registry)


# =============================================================================
# MCP Server Implementation
# =============================================================================

def create_server(news_tools: NewsTools):
    """
    Build the low-level MCP server for a set of tool handlers.

    Input validation by the MCP library is turned off so that argument
    errors are reported by handle_tool_call as prefixed text.

    Args:
        news_tools: Tool handlers to expose

    Returns:
        mcp.server.Server with list_tools and call_tool registered
    """
    from mcp.server import Server
    from mcp import types

    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        """List available tools."""
        return [
            types.Tool(
                name=tool["name"],
                description=tool["description"],
                inputSchema=tool["inputSchema"]
            )
            for tool in TOOLS
        ]

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
        """Call a tool with arguments."""
        result = await news_tools.handle_tool_call(name, arguments)
        return [types.TextContent(type="text", text=result.text)]

    return server


def run_server():
    """Run the MCP server over stdio."""
    # stdout carries the MCP stream, so logs go to stderr
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    try:
        from mcp.server.stdio import stdio_server
    except ImportError:
        logger.error("MCP package not installed. Run: pip install mcp")
        sys.exit(1)

    for warning in settings.validate():
        logger.warning(warning)

    server = create_server(create_news_tools())

    async def main():
        logger.info("Nostr MCP server starting...")
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Nostr MCP server started. Waiting for requests...")
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )

    try:
        asyncio.run(main())
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run_server()
