# =============================================================================
# Nostr Daily News - Configuration Settings
# =============================================================================
"""
Application settings loaded from environment variables.

All configuration is centralized here for easy maintenance.
Environment variables are loaded from .env file using python-dotenv.
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class Settings:
    """
    Application configuration container.

    All settings are loaded from environment variables with sensible defaults.
    Use the global `settings` instance instead of creating new instances.
    """

    # =========================================================================
    # Path Configuration
    # =========================================================================
    BASE_DIR: Path = field(default_factory=lambda: Path(__file__).parent.parent.absolute())

    @property
    def CONFIG_PATH(self) -> Path:
        """Persisted relay group / RSS feed registry."""
        default = str(self.BASE_DIR / "config.json")
        return Path(os.getenv("NEWS_MCP_CONFIG_PATH", default))

    @property
    def EXAMPLE_CONFIG_PATH(self) -> Path:
        """Bundled example registry used when no config file exists yet."""
        default = str(self.BASE_DIR / "config.example.json")
        return Path(os.getenv("NEWS_MCP_EXAMPLE_CONFIG_PATH", default))

    # =========================================================================
    # Timeouts
    # =========================================================================
    @property
    def DEFAULT_TIMEOUT(self) -> int:
        """HTTP timeout for RSS feed requests, in seconds."""
        return int(os.getenv("DEFAULT_TIMEOUT", "30"))

    @property
    def NOSTR_TIMEOUT(self) -> int:
        """Seconds to wait for a relay to send EOSE."""
        return int(os.getenv("NOSTR_TIMEOUT", "10"))

    @property
    def NOSTR_STRICT_RELAYS(self) -> bool:
        """Fail a relay query when any single relay fails."""
        return os.getenv("NOSTR_STRICT_RELAYS", "false").lower() == "true"

    @property
    def HTTP_USER_AGENT(self) -> str:
        return os.getenv("HTTP_USER_AGENT", "nostr-daily-news/1.0")

    # =========================================================================
    # Logging
    # =========================================================================
    @property
    def LOG_LEVEL(self) -> str:
        return os.getenv("LOG_LEVEL", "INFO").upper()

    # =========================================================================
    # Utility Methods
    # =========================================================================
    def validate(self) -> List[str]:
        """
        Validate configuration and return list of warnings.

        Returns:
            List of warning messages for missing or invalid config.
        """
        warnings = []

        if self.NOSTR_TIMEOUT < 1:
            warnings.append("NOSTR_TIMEOUT below 1 second - relays will rarely answer in time")

        if not self.EXAMPLE_CONFIG_PATH.exists():
            warnings.append(f"Example config not found at {self.EXAMPLE_CONFIG_PATH} - using built-in defaults")

        return warnings


# =============================================================================
# Global Settings Instance
# =============================================================================

settings = Settings()
