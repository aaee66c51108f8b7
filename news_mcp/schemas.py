# =============================================================================
# Nostr Daily News - MCP Tool Arguments
# =============================================================================
"""
Pydantic models for MCP tool arguments.

Each tool's inputSchema is generated from its model, and incoming arguments
are validated against it before dispatch.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sources.models import DEFAULT_LIMIT, HackerNewsFeed


class ToolArgs(BaseModel):
    """Base for all tool arguments."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class NoArgs(ToolArgs):
    pass


class LimitArgs(ToolArgs):
    limit: Optional[int] = Field(
        default=DEFAULT_LIMIT,
        ge=0,
        description=f"Maximum number of items to return (default {DEFAULT_LIMIT})",
    )

    @field_validator("limit")
    @classmethod
    def _default_limit(cls, value: Optional[int]) -> int:
        return DEFAULT_LIMIT if value is None else value


class CustomEventsArgs(LimitArgs):
    relays: List[str] = Field(min_length=1, description="Relay URLs to query (wss://...)")
    kinds: Optional[List[int]] = Field(default=None, description="Event kinds to match")
    authors: Optional[List[str]] = Field(default=None, description="Author public keys (hex)")
    since: Optional[int] = Field(default=None, description="Only events after this unix timestamp")
    until: Optional[int] = Field(default=None, description="Only events before this unix timestamp")


class RelayGroupFetchArgs(LimitArgs):
    relay_group: str = Field(alias="relayGroup", description="Name of a configured relay group")


class HackerNewsArgs(LimitArgs):
    # Not an Enum field: config.json may define extra types, unknown ones
    # are reported by the registry.
    feed_type: str = Field(
        default=HackerNewsFeed.NEWEST.value,
        alias="type",
        description="Hacker News feed type",
        json_schema_extra={"enum": [t.value for t in HackerNewsFeed]},
    )


class CustomRssArgs(LimitArgs):
    feed_name: str = Field(
        alias="feedName",
        description="Custom feed name, 'stackerNews' or 'hackerNews.<type>'",
    )


class AddRelayGroupArgs(ToolArgs):
    name: str = Field(description="Relay group name ('custom' appends to the custom group)")
    relays: List[str] = Field(min_length=1, description="Relay URLs (wss://...)")


class AddRssFeedArgs(ToolArgs):
    name: str = Field(description="Name for the custom feed")
    url: str = Field(description="Feed URL; it is fetched once to check that it parses")


class RemoveArgs(ToolArgs):
    name: str = Field(description="Name to remove")
