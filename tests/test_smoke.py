# =============================================================================
# Smoke Tests - Module Loading and Imports
# =============================================================================
"""
Smoke tests for verifying that all modules load correctly.

These tests are designed for CI/CD pipelines to catch import errors,
missing dependencies, and configuration issues early.

Run with: pytest tests/test_smoke.py -v
"""

import json
import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class TestConfigLoading:
    """Test configuration module loading."""

    def test_settings_import(self):
        """Test that settings module can be imported."""
        from config import settings
        assert settings is not None

    def test_settings_properties(self):
        """Test that essential settings properties exist."""
        from config import settings

        assert settings.CONFIG_PATH.name == "config.json"
        assert settings.NOSTR_TIMEOUT > 0
        assert isinstance(settings.NOSTR_STRICT_RELAYS, bool)

    def test_env_overrides(self, monkeypatch, tmp_path):
        """Test that settings are read from the environment."""
        from config import settings

        monkeypatch.setenv("NEWS_MCP_CONFIG_PATH", str(tmp_path / "sources.json"))
        monkeypatch.setenv("NOSTR_STRICT_RELAYS", "TRUE")

        assert settings.CONFIG_PATH == tmp_path / "sources.json"
        assert settings.NOSTR_STRICT_RELAYS is True

    def test_validate_warnings(self, monkeypatch, tmp_path):
        from config import settings

        monkeypatch.setenv("NOSTR_TIMEOUT", "0")
        monkeypatch.setenv("NEWS_MCP_EXAMPLE_CONFIG_PATH", str(tmp_path / "missing.json"))

        warnings = settings.validate()
        assert len(warnings) == 2

    def test_example_config_matches_defaults(self):
        """Test that the bundled example config is the default layout."""
        from config import settings
        from sources.models import RegistryConfig

        with open(settings.BASE_DIR / "config.example.json", encoding="utf-8") as f:
            example = json.load(f)
        assert example == RegistryConfig.default().to_dict()


class TestSourcesLoading:
    """Test sources module loading."""

    def test_sources_import(self):
        from sources import SourceRegistry, ConfigStore, normalize, render_batch
        assert SourceRegistry is not None
        assert ConfigStore is not None
        assert normalize is not None
        assert render_batch is not None

    def test_resolver_import(self):
        from sources.resolver import FetchResolver
        assert FetchResolver is not None


class TestToolsLoading:
    """Test tools module loading."""

    def test_tools_module_import(self):
        """Test tools package import."""
        import tools
        assert tools is not None

    def test_retrieval_tools_import(self):
        from tools import NostrRelayQueryTool, RssFeedTool
        assert NostrRelayQueryTool is not None
        assert RssFeedTool is not None


class TestMCPLoading:
    """Test MCP server module loading."""

    def test_news_mcp_import(self):
        from news_mcp import NewsTools, TOOLS, run_server
        assert NewsTools is not None
        assert run_server is not None
        assert len(TOOLS) == 14

    def test_create_news_tools(self, monkeypatch, tmp_path):
        """Test that the handlers boot from an empty directory."""
        from news_mcp import create_news_tools

        config_path = tmp_path / "config.json"
        monkeypatch.setenv("NEWS_MCP_CONFIG_PATH", str(config_path))

        news_tools = create_news_tools()

        assert config_path.exists()
        assert "trending" in news_tools.registry.relay_groups


class TestDependencies:
    """Test that required dependencies are available."""

    def test_mcp_available(self):
        import mcp
        assert mcp is not None

    def test_mcp_low_level_decorators(self):
        """Test that the installed MCP release has the decorator API the server uses."""
        from mcp.server import Server
        server = Server("smoke")
        assert callable(server.list_tools)
        assert callable(server.call_tool)

    def test_langchain_core_available(self):
        """Test LangChain core is available."""
        import langchain_core
        assert langchain_core is not None

    def test_aiohttp_available(self):
        import aiohttp
        assert aiohttp is not None

    def test_feedparser_available(self):
        import feedparser
        assert feedparser is not None

    def test_beautifulsoup_available(self):
        """Test BeautifulSoup is available."""
        from bs4 import BeautifulSoup
        assert BeautifulSoup is not None

    def test_dateutil_available(self):
        from dateutil import parser
        assert parser is not None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
