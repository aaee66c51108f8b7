# =============================================================================
# Nostr Daily News - Test Suite
# =============================================================================
"""
Test suite for the Nostr Daily News MCP server.

Test Categories:
- test_smoke.py: Import and loading tests (CICD smoke tests)
- test_formatter.py: Item normalization and rendering
- test_registry.py: Relay group / RSS feed registry and persistence
- test_resolver.py: Fetch ordering, limits and error propagation
- test_tools.py: Nostr relay and RSS retrieval tools
- test_server.py: MCP tool dispatch and text results
"""
