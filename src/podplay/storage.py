"""Key-value state file.

A small, human-inspectable JSON document that holds the player's
persisted keys (played episodes, their timestamps, the list's scroll
position). Every write replaces the whole file atomically.
"""

import json
import logging
from pathlib import Path
from typing import Any

from podplay.utils.errors import StorageError
from podplay.utils.paths import get_state_file

logger = logging.getLogger(__name__)


class StateFile:
    """JSON-backed key-value store.

    Example:
        >>> state = StateFile(Path("/tmp/state.json"))
        >>> state.set("podcastScrollPosition", 120)
        >>> state.get("podcastScrollPosition")
        120
    """

    def __init__(self, path: Path | None = None):
        """Initialize the state file.

        Args:
            path: Location of the JSON file. Defaults to the user data dir.
        """
        self.path = path or get_state_file()

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.debug(f"Ignoring state file {self.path}: top level is not an object")
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """Read one key. Missing or unreadable data returns ``default``."""
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Write one key, keeping the others."""
        self.update({key: value})

    def update(self, values: dict[str, Any]) -> None:
        """Write several keys in one atomic replace.

        Raises:
            StorageError: If the file can't be written
        """
        data = self._read_all()
        data.update(values)

        temp_file = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with temp_file.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            temp_file.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            if temp_file.exists():
                temp_file.unlink()
            raise StorageError(f"Failed to write state to {self.path}: {e}") from e
