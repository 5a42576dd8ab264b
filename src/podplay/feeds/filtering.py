"""Search, filter, sort and paginate an episode list.

These are the pure view-model steps behind the episode list. The scroll
synchroniser reads the same ordering, so page math stays consistent
between what is rendered and where a selection is looked up.
"""

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from podplay.config.schema import SortOption
from podplay.feeds.models import Episode

COMMON_KEYWORDS = [
    "AI",
    "Cloud",
    "DevOps",
    "Security",
    "Python",
    "C#",
    ".NET",
    "JavaScript",
    "Frontend",
    "Backend",
    "Data",
    "Azure",
    "AWS",
]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _search_text(episode: Episode) -> str:
    return f"{episode.title} {episode.description}".lower()


def extract_keywords(
    episodes: Iterable[Episode], candidates: Sequence[str] = COMMON_KEYWORDS
) -> list[str]:
    """Return the candidate keywords that occur in at least one episode, sorted."""
    found: set[str] = set()
    for episode in episodes:
        text = _search_text(episode)
        for keyword in candidates:
            if keyword.lower() in text:
                found.add(keyword)
    return sorted(found)


@dataclass
class EpisodeQuery:
    """What the listener is currently looking at.

    Attributes:
        search: Free text matched against title and description
        keywords: Every keyword must occur for an episode to match
        show_played: Include episodes already marked played
        sort: "date-desc" (newest first) or "date-asc"
    """

    search: str = ""
    keywords: list[str] = field(default_factory=list)
    show_played: bool = False
    sort: SortOption = "date-desc"

    def toggle_keyword(self, keyword: str) -> None:
        if keyword in self.keywords:
            self.keywords.remove(keyword)
        else:
            self.keywords.append(keyword)

    def matches(self, episode: Episode, is_played: Callable[[str], bool]) -> bool:
        text = _search_text(episode)
        if self.search and self.search.lower() not in text:
            return False
        if not all(keyword.lower() in text for keyword in self.keywords):
            return False
        return self.show_played or not is_played(episode.id)

    def apply(
        self, episodes: Iterable[Episode], is_played: Callable[[str], bool]
    ) -> list[Episode]:
        """Filter and sort episodes. Undated episodes sort as oldest."""
        matching = [e for e in episodes if self.matches(e, is_played)]
        matching.sort(
            key=lambda e: e.published or _EPOCH,
            reverse=self.sort == "date-desc",
        )
        return matching


def total_pages(count: int, page_size: int) -> int:
    return math.ceil(count / page_size) if count > 0 else 0


def paginate(episodes: Sequence[Episode], page: int, page_size: int) -> list[Episode]:
    """Return the 1-based ``page`` of ``episodes``."""
    start = (page - 1) * page_size
    return list(episodes[start : start + page_size])
