"""Played-episode store.

Tracks which episodes were played and when. The played set is the key set
of the timestamp mapping, so an id can never be played without a
timestamp or keep a timestamp after it is unmarked.
"""

import logging
import math
import time
from collections.abc import Callable

from podplay.storage import StateFile
from podplay.utils.errors import StorageError

logger = logging.getLogger(__name__)

PLAYED_KEY = "podcast-played-episodes"
TIMESTAMPS_KEY = "podcast-played-timestamps"


def now_millis() -> int:
    return int(time.time() * 1000)


class PlayedStateStore:
    """Persistent set of played episode ids with last-played timestamps.

    Every mutation is written to the state file before the method returns.
    Durability is best effort: a failed write is logged and the in-memory
    state stays authoritative for the rest of the process.

    Example:
        >>> store = PlayedStateStore(StateFile(Path("/tmp/state.json")))
        >>> store.toggle_played("ep-1")
        True
        >>> store.get_recently_played(5)
        ['ep-1']
    """

    def __init__(
        self,
        state: StateFile | None = None,
        clock: Callable[[], int] = now_millis,
    ):
        """Initialize the store and load persisted state.

        Args:
            state: Backing state file (defaults to the user data dir)
            clock: Returns the current time in epoch milliseconds
        """
        self.state = state or StateFile()
        self.clock = clock
        self._timestamps: dict[str, int] = self._load()

    def _load(self) -> dict[str, int]:
        played = self.state.get(PLAYED_KEY)
        stamps = self.state.get(TIMESTAMPS_KEY, {})

        if played is None:
            return {}
        if not isinstance(played, list) or not all(isinstance(i, str) for i in played):
            logger.debug("Stored played episodes are malformed, starting empty")
            return {}
        if not isinstance(stamps, dict):
            stamps = {}

        timestamps: dict[str, int] = {}
        for episode_id in played:
            value = stamps.get(episode_id, 0)
            # NaN and Infinity are valid JSON to the parser but not timestamps
            if (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or not math.isfinite(value)
            ):
                value = 0
            timestamps[episode_id] = int(value)
        return timestamps

    def _save(self) -> None:
        try:
            self.state.update(
                {
                    PLAYED_KEY: list(self._timestamps),
                    TIMESTAMPS_KEY: dict(self._timestamps),
                }
            )
        except StorageError as e:
            logger.warning(f"Played state not saved: {e}")

    @property
    def played_ids(self) -> frozenset[str]:
        return frozenset(self._timestamps)

    def __contains__(self, episode_id: object) -> bool:
        return episode_id in self._timestamps

    def __len__(self) -> int:
        return len(self._timestamps)

    def is_played(self, episode_id: str) -> bool:
        return episode_id in self._timestamps

    def last_played(self, episode_id: str) -> int | None:
        """Timestamp (epoch millis) of the last play, or None."""
        return self._timestamps.get(episode_id)

    def toggle_played(self, episode_id: str) -> bool:
        """Flip the played flag of an episode.

        Returns:
            True if the episode is now played
        """
        if episode_id in self._timestamps:
            del self._timestamps[episode_id]
            played = False
        else:
            self._timestamps[episode_id] = self.clock()
            played = True
        self._save()
        return played

    def mark_as_playing(self, episode_id: str) -> None:
        """Mark an episode played and refresh its timestamp. Never unmarks."""
        self._timestamps[episode_id] = self.clock()
        self._save()

    def get_recently_played(self, limit: int) -> list[str]:
        """Return up to ``limit`` played ids, most recent first."""
        if limit <= 0:
            return []
        ordered = sorted(self._timestamps.items(), key=lambda item: item[1], reverse=True)
        return [episode_id for episode_id, _ in ordered[:limit]]

