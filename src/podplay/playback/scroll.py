"""Selection and scroll synchronisation.

When an episode is selected, the list jumps to the page that holds it and
scrolls its row to the middle of the viewport. Rows can render a few
frames after a page switch, so the row lookup is retried once per frame up
to a fixed number of attempts, then silently abandoned.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from podplay.feeds.models import Episode
from podplay.storage import StateFile
from podplay.utils.errors import StorageError
from podplay.utils.retry import poll_each_frame

logger = logging.getLogger(__name__)

SCROLL_POSITION_KEY = "podcastScrollPosition"


@dataclass(frozen=True)
class ScrollTarget:
    """Where a selected episode lives in the filtered, sorted list."""

    episode_id: str
    index: int
    desired_page: int


class EpisodeView(Protocol):
    """The paginated episode list as the synchroniser sees it."""

    page_size: int

    @property
    def current_page(self) -> int: ...

    def set_page(self, page: int) -> None: ...

    def find_rendered(self, episode_id: str) -> Any | None:
        """The rendered row for ``episode_id``, or None if not on screen yet."""
        ...

    def scroll_into_view(self, row: Any, *, center: bool = True, smooth: bool = True) -> None: ...

    async def next_frame(self) -> None:
        """Resolve after the view has rendered once more."""
        ...


def compute_scroll_target(
    episodes: Sequence[Episode], episode_id: str, page_size: int
) -> ScrollTarget | None:
    """Locate ``episode_id`` in the unpaginated ordering.

    Returns:
        The target, or None when the episode is filtered out
    """
    for index, episode in enumerate(episodes):
        if episode.id == episode_id:
            return ScrollTarget(
                episode_id=episode_id,
                index=index,
                desired_page=index // page_size + 1,
            )
    return None


class ScrollSynchronizer:
    """Brings the selected episode into view."""

    def __init__(self, view: EpisodeView, max_attempts: int = 20):
        """Initialize the synchroniser.

        Args:
            view: The episode list
            max_attempts: Row lookups (one per frame) before giving up
        """
        self.view = view
        self.max_attempts = max_attempts

    async def sync(self, episodes: Sequence[Episode], episode_id: str) -> bool:
        """Switch to the episode's page and scroll its row into view.

        Args:
            episodes: Current filtered and sorted episodes, unpaginated
            episode_id: The selected episode

        Returns:
            True if the row was scrolled into view
        """
        target = compute_scroll_target(episodes, episode_id, self.view.page_size)
        if target is None:
            logger.debug(f"Episode {episode_id} is not in the current view")
            return False

        if self.view.current_page != target.desired_page:
            self.view.set_page(target.desired_page)

        row = await poll_each_frame(
            lambda: self.view.find_rendered(episode_id),
            self.view.next_frame,
            max_attempts=self.max_attempts,
        )
        if row is None:
            logger.debug(
                f"Row for {episode_id} not rendered after {self.max_attempts} frames"
            )
            return False

        self.view.scroll_into_view(row, center=True, smooth=True)
        return True


class ScrollPositionStore:
    """Persists the list's vertical scroll offset.

    Writes are debounced: ``record`` keeps the latest offset and flushes it
    once ``interval`` seconds have passed since the first unsaved change.
    ``restore`` hands the stored offset out once per process.
    """

    def __init__(self, state: StateFile, interval: float = 0.3):
        self.state = state
        self.interval = interval
        self._pending: float | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._restored = False

    def record(self, offset: float) -> None:
        """Remember ``offset``; must be called on the event loop thread."""
        self._pending = offset
        if self._timer is None:
            loop = asyncio.get_running_loop()
            self._timer = loop.call_later(self.interval, self.flush)

    def flush(self) -> None:
        """Write the pending offset now."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._pending is None:
            return
        offset, self._pending = self._pending, None
        try:
            self.state.set(SCROLL_POSITION_KEY, offset)
        except StorageError as e:
            logger.warning(f"Scroll position not saved: {e}")

    def restore(self) -> float | None:
        """The stored offset on the first call, None afterwards."""
        if self._restored:
            return None
        self._restored = True
        value = self.state.get(SCROLL_POSITION_KEY)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0:
            return float(value)
        return None
