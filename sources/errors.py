# =============================================================================
# Nostr Daily News - Source Errors
# =============================================================================
"""
Typed errors raised by the registry, the resolver and the retrieval tools.

The MCP adapter turns these into "<prefix>: <message>" text; everything
below it keeps the exception type.
"""


class SourceError(Exception):
    """Base class for all source resolution and retrieval failures."""

    kind: str = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(SourceError):
    """Unknown relay group, feed name or Hacker News feed type."""

    kind = "not_found"


class PermissionDeniedError(SourceError):
    """Attempt to modify a built-in relay group or feed."""

    kind = "permission_denied"


class InvalidArgumentError(SourceError):
    """Bad tool arguments, or a feed URL that failed its probe."""

    kind = "invalid_argument"


class RetrievalError(SourceError):
    """Network or parse failure talking to a relay or feed."""

    kind = "retrieval_failure"

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source
