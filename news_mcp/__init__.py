# =============================================================================
# Nostr Daily News - MCP Package
# =============================================================================
"""
MCP (Model Context Protocol) server package.
"""

from news_mcp.news_server import (
    NewsTools,
    ToolResult,
    create_news_tools,
    create_server,
    run_server,
    TOOLS
)

__all__ = [
    "NewsTools",
    "ToolResult",
    "create_news_tools",
    "create_server",
    "run_server",
    "TOOLS"
]
