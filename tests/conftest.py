"""Shared test fixtures and fakes."""

import asyncio
from pathlib import Path
from typing import Any

import pytest

from podplay.feeds.models import Episode
from podplay.playback.played import PlayedStateStore
from podplay.playback.transport import ENDED, TIME_UPDATE, Transport
from podplay.storage import StateFile


class FakeTransport(Transport):
    """Scripted transport.

    ``load`` and ``play`` resolve immediately unless a test sets
    ``hold_loads`` / ``hold_plays``; held calls wait on futures the test
    resolves or fails through :meth:`finish_load` and :meth:`finish_play`.
    """

    def __init__(self, duration: float = 120.0) -> None:
        super().__init__()
        self.duration = duration
        self.calls: list[tuple[Any, ...]] = []
        self.hold_loads = False
        self.hold_plays = False
        self.load_error: Exception | None = None
        self.play_error: Exception | None = None
        self.pending_loads: list[asyncio.Future] = []
        self.pending_plays: list[asyncio.Future] = []
        self.volume: float | None = None

    async def load(self, url: str) -> float:
        self.calls.append(("load", url))
        if self.hold_loads:
            future = asyncio.get_running_loop().create_future()
            self.pending_loads.append(future)
            return await future
        if self.load_error is not None:
            raise self.load_error
        return self.duration

    async def play(self) -> None:
        self.calls.append(("play",))
        if self.hold_plays:
            future = asyncio.get_running_loop().create_future()
            self.pending_plays.append(future)
            await future
            return
        if self.play_error is not None:
            raise self.play_error

    def pause(self) -> None:
        self.calls.append(("pause",))

    def stop(self) -> None:
        self.calls.append(("stop",))

    def seek(self, seconds: float) -> None:
        self.calls.append(("seek", seconds))

    def set_volume(self, volume: float) -> None:
        self.calls.append(("set_volume", volume))
        self.volume = volume

    # -- test helpers -----------------------------------------------------

    def finish_load(self, index: int = 0, duration: float | None = None) -> None:
        self.pending_loads[index].set_result(self.duration if duration is None else duration)

    def fail_load(self, index: int, error: Exception) -> None:
        self.pending_loads[index].set_exception(error)

    def finish_play(self, index: int = 0) -> None:
        self.pending_plays[index].set_result(None)

    def fail_play(self, index: int, error: Exception) -> None:
        self.pending_plays[index].set_exception(error)

    def time_update(self, seconds: float) -> None:
        self.events.emit(TIME_UPDATE, seconds)

    def end(self) -> None:
        self.events.emit(ENDED)

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


class FakeView:
    """Paginated list that renders rows ``render_delay`` frames after a page switch."""

    def __init__(self, episodes: list[Episode], page_size: int = 10, render_delay: int = 0):
        self.episodes = episodes
        self.page_size = page_size
        self.render_delay = render_delay
        self._page = 1
        self._frames_until_render = 0
        self.page_changes: list[int] = []
        self.scrolled: list[tuple[str, bool, bool]] = []
        self.frames = 0

    @property
    def current_page(self) -> int:
        return self._page

    def set_page(self, page: int) -> None:
        self._page = page
        self.page_changes.append(page)
        self._frames_until_render = self.render_delay

    def find_rendered(self, episode_id: str) -> str | None:
        if self._frames_until_render > 0:
            return None
        start = (self._page - 1) * self.page_size
        visible = self.episodes[start : start + self.page_size]
        return episode_id if any(e.id == episode_id for e in visible) else None

    def scroll_into_view(self, row: str, *, center: bool = True, smooth: bool = True) -> None:
        self.scrolled.append((row, center, smooth))

    async def next_frame(self) -> None:
        self.frames += 1
        if self._frames_until_render > 0:
            self._frames_until_render -= 1


class Clock:
    """Monotonic fake clock in epoch milliseconds."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


def make_episode(index: int, **overrides: Any) -> Episode:
    data = {
        "id": f"ep-{index}",
        "title": f"Episode {index}",
        "description": f"<p>Show notes for episode {index}</p>",
        "pub_date": f"2024-01-{index + 1:02d}T10:00:00+00:00" if index < 28 else "",
        "duration": "2:00",
        "audio_url": f"https://cdn.example.com/ep-{index}.mp3",
    }
    data.update(overrides)
    return Episode(**data)


@pytest.fixture
def state(tmp_path: Path) -> StateFile:
    return StateFile(tmp_path / "state.json")


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def store(state: StateFile, clock: Clock) -> PlayedStateStore:
    return PlayedStateStore(state, clock=clock)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def episodes() -> list[Episode]:
    return [make_episode(i) for i in range(25)]


@pytest.fixture
def episode_factory():
    """Build an episode by index, overriding any field."""
    return make_episode


@pytest.fixture
def view_factory():
    """Build a FakeView over a list of episodes."""
    return FakeView


@pytest.fixture
def sample_config_dict() -> dict:
    return {
        "version": "1",
        "feed_url": "https://example.com/feed.rss",
        "log_level": "INFO",
        "player": {"keyboard_skip_seconds": 10, "button_skip_seconds": 15},
        "view": {"page_size": 10},
    }


SAMPLE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Dev Talks</title>
    <description>Conversations about building software</description>
    <itunes:image href="https://cdn.example.com/show.jpg"/>
    <item>
      <title>Securing Azure workloads</title>
      <guid>guid-1</guid>
      <description>Plain summary</description>
      <content:encoded><![CDATA[<p>Security on <b>Azure</b></p>]]></content:encoded>
      <pubDate>Mon, 15 Jan 2024 10:00:00 GMT</pubDate>
      <itunes:duration>1:02:03</itunes:duration>
      <enclosure url="https://cdn.example.com/1.mp3" length="1" type="audio/mpeg"/>
      <link>https://example.com/episodes/1</link>
    </item>
    <item>
      <title>Python packaging</title>
      <guid>guid-2</guid>
      <description>All about wheels in Python</description>
      <pubDate>Mon, 08 Jan 2024 10:00:00 GMT</pubDate>
      <itunes:duration>45:30</itunes:duration>
      <itunes:image href="https://cdn.example.com/2.jpg"/>
      <enclosure url="https://cdn.example.com/2.mp3" length="1" type="audio/mpeg"/>
    </item>
    <item>
      <title>No guid here</title>
      <description>Frontend talk</description>
      <enclosure url="https://cdn.example.com/3.mp3" length="1" type="audio/mpeg"/>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def sample_feed_xml() -> str:
    return SAMPLE_FEED
