# =============================================================================
# Nostr Daily News - Config Storage
# =============================================================================
"""
JSON file persistence for the source registry.

The whole registry is rewritten on every save; writes go to a temporary
file in the same directory and are moved into place.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ConfigStore:
    """Load/save a single JSON document."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Any:
        """
        Read and decode the document.

        Raises:
            OSError: If the file cannot be read
            ValueError: If it is not valid JSON
        """
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def save(self, data: Any) -> None:
        """
        Write the document atomically.

        Raises:
            OSError: If the file cannot be written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = dumps(data)

        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug(f"Saved config to {self.path}")


def dumps(data: Any) -> str:
    """Canonical JSON text used for config files."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def open_store(path: Optional[Union[str, Path]]) -> Optional[ConfigStore]:
    """ConfigStore for path, or None when no path is given."""
    return ConfigStore(path) if path else None
