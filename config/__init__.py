# =============================================================================
# Nostr Daily News - Configuration Module
# =============================================================================
"""
Centralized configuration management.

Usage:
    from config import settings

    # Access configuration
    config_path = settings.CONFIG_PATH
    timeout = settings.NOSTR_TIMEOUT
"""

from config.settings import settings, Settings

__all__ = ['settings', 'Settings']
