# =============================================================================
# Nostr Daily News - Base Tool Definitions
# =============================================================================
"""
Input schemas for the retrieval tools.

This module provides:
- Pydantic models for tool inputs
"""

from pydantic import BaseModel, Field
from typing import Optional, List

from sources.models import DEFAULT_LIMIT


# =============================================================================
# Input Schemas (Pydantic Models)
# =============================================================================

class RelayQueryInput(BaseModel):
    """Input schema for Nostr relay queries."""
    relays: List[str] = Field(description="Relay websocket URLs (wss://...) to query")
    limit: int = Field(default=DEFAULT_LIMIT, description="Maximum number of events per relay")
    kinds: Optional[List[int]] = Field(default=None, description="Event kinds to match")
    authors: Optional[List[str]] = Field(default=None, description="Author public keys (hex)")
    since: Optional[int] = Field(default=None, description="Only events after this unix timestamp")
    until: Optional[int] = Field(default=None, description="Only events before this unix timestamp")


class FeedUrlInput(BaseModel):
    """Input schema for RSS/Atom feed retrieval."""
    url: str = Field(description="The feed URL to fetch")
