# =============================================================================
# Nostr Daily News - Sources Package
# =============================================================================
"""
Source models, registry and formatting.

The fetch resolver lives in sources.resolver; it depends on the retrieval
tools and is not imported here.
"""

from sources.errors import (
    SourceError, NotFoundError, PermissionDeniedError,
    InvalidArgumentError, RetrievalError
)
from sources.models import (
    DEFAULT_LIMIT, HackerNewsFeed, RelayEvent, FeedEntry, SourceItem,
    FormattedRecord, EventFilter, RegistryConfig
)
from sources.formatter import normalize, render, render_batch
from sources.registry import SourceRegistry
from sources.storage import ConfigStore

__all__ = [
    # Errors
    "SourceError", "NotFoundError", "PermissionDeniedError",
    "InvalidArgumentError", "RetrievalError",
    # Models
    "DEFAULT_LIMIT", "HackerNewsFeed", "RelayEvent", "FeedEntry", "SourceItem",
    "FormattedRecord", "EventFilter", "RegistryConfig",
    # Formatting
    "normalize", "render", "render_batch",
    # Registry
    "SourceRegistry", "ConfigStore",
]
