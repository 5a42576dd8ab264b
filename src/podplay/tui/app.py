"""Textual terminal UI: episode list, filters and the inline player."""

import asyncio
import logging
from typing import Any

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    SelectionList,
    Static,
    TextArea,
)
from textual.widgets.data_table import RowDoesNotExist

from podplay.config.schema import GlobalConfig
from podplay.feeds.filtering import EpisodeQuery, extract_keywords, paginate, total_pages
from podplay.feeds.models import Episode, PodcastFeed
from podplay.feeds.parser import RSSParser
from podplay.playback.controller import PlaybackController
from podplay.playback.keyboard import FocusKind, KeyboardRouter, KeyEvent
from podplay.playback.played import PlayedStateStore
from podplay.playback.scroll import ScrollPositionStore, ScrollSynchronizer
from podplay.playback.session import PlaybackSession, PlaybackState
from podplay.playback.transport import Transport
from podplay.storage import StateFile
from podplay.utils.display import format_duration, format_time, strip_html, truncate_text
from podplay.utils.errors import FeedError, TransportError

logger = logging.getLogger(__name__)


def episode_details(episode: Episode) -> Text:
    """Title, date, duration and plain-text show notes of an episode."""
    published = episode.published
    facts = [
        published.strftime("%b %d, %Y") if published else "",
        format_duration(episode.duration),
    ]
    text = Text(episode.title, style="bold")
    if any(facts):
        text.append("  " + " · ".join(fact for fact in facts if fact), style="dim")
    description = truncate_text(episode.plain_description, 500)
    if description:
        text.append("\n" + description)
    return text


def feed_summary(feed: PodcastFeed) -> Text:
    return Text(truncate_text(strip_html(feed.description), 300))


class TableEpisodeView:
    """Adapts the episode DataTable to the scroll synchroniser."""

    def __init__(self, app: "PodplayApp"):
        self.app = app
        self.page_size = app.config.view.page_size

    @property
    def table(self) -> DataTable:
        return self.app.query_one("#episodes", DataTable)

    @property
    def current_page(self) -> int:
        return self.app.page

    def set_page(self, page: int) -> None:
        self.app.show_page(page)

    def find_rendered(self, episode_id: str) -> int | None:
        try:
            return self.table.get_row_index(episode_id)
        except RowDoesNotExist:
            return None

    def scroll_into_view(self, row: Any, *, center: bool = True, smooth: bool = True) -> None:
        table = self.table
        table.move_cursor(row=row, animate=smooth)
        if center:
            table.scroll_to(y=max(0, row - table.size.height // 2 + 1), animate=smooth)

    async def next_frame(self) -> None:
        rendered = asyncio.get_running_loop().create_future()

        def resolve() -> None:
            if not rendered.done():
                rendered.set_result(None)

        self.app.call_after_refresh(resolve)
        await rendered


class PodplayApp(App):
    """Browse a podcast feed and play episodes inline."""

    CSS = """
    #sidebar {
        width: 32;
    }
    #keywords {
        height: 1fr;
    }
    #recent {
        height: 1fr;
    }
    #episodes {
        height: 1fr;
    }
    #feed-description {
        color: $text-muted;
    }
    #details {
        height: auto;
        max-height: 8;
        border-top: solid $primary;
    }
    #player {
        height: auto;
        border-top: solid $accent;
    }
    #controls {
        height: auto;
    }
    """

    BINDINGS = [
        Binding("space", "player_key('space')", "Play/Pause", priority=True),
        Binding("left", "player_key('left')", "-10s", priority=True),
        Binding("right", "player_key('right')", "+10s", priority=True),
        Binding("p", "toggle_played", "Played"),
        Binding("s", "toggle_show_played", "Show played"),
        Binding("o", "toggle_sort", "Sort"),
        Binding("n", "next_page", "Next page"),
        Binding("b", "previous_page", "Prev page"),
        Binding("m", "toggle_mute", "Mute"),
        Binding("plus", "volume(0.1)", "Vol +", show=False),
        Binding("minus", "volume(-0.1)", "Vol -", show=False),
        Binding("x", "close_player", "Close player"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        config: GlobalConfig,
        transport: Transport | None = None,
        state: StateFile | None = None,
        parser: RSSParser | None = None,
        initial_episode_id: str | None = None,
    ):
        super().__init__()
        self.config = config
        self.state_file = state or StateFile()
        self.parser = parser or RSSParser(
            timeout=config.feed_timeout_seconds, fallback_title=config.fallback_title
        )
        self.initial_episode_id = initial_episode_id

        if transport is None:
            from podplay.playback.mpv_transport import MpvTransport

            transport = MpvTransport()
        self.transport = transport

        player = config.player
        self.store = PlayedStateStore(self.state_file)
        self.controller = PlaybackController(
            transport,
            self.store,
            autoplay=player.autoplay,
            completion_threshold=player.completion_threshold,
            initial_volume=player.initial_volume,
            unmute_volume=player.unmute_volume,
            button_skip_seconds=player.button_skip_seconds,
            on_finished=self._on_finished,
            on_error=self._on_player_error,
            on_change=self._on_player_change,
        )
        self.router = KeyboardRouter(self.controller, skip_seconds=player.keyboard_skip_seconds)
        self.scroll_store = ScrollPositionStore(
            self.state_file, interval=config.view.scroll_save_interval_ms / 1000
        )

        self.feed: PodcastFeed | None = None
        self.episode_query = EpisodeQuery(
            show_played=config.view.show_played, sort=config.view.default_sort
        )
        self.filtered: list[Episode] = []
        self.page = 1
        self._recent: list[Episode] = []
        self._marked_episode_id: str | None = None
        self.details_episode: Episode | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal():
            with Vertical(id="sidebar"):
                yield Label("Keywords")
                yield SelectionList[str](id="keywords")
                yield Label("Recently played")
                yield ListView(id="recent")
            with Vertical():
                yield Input(placeholder="Search episodes", id="search")
                yield Static("Loading feed...", id="status")
                yield Static("", id="feed-description")
                yield DataTable(id="episodes", cursor_type="row", zebra_stripes=True)
                yield Static("", id="details")
                yield Static("", id="pager")
        with Vertical(id="player"):
            yield Static("Nothing playing", id="now-playing")
            with Horizontal(id="controls"):
                yield Button("-15s", id="skip-back")
                yield Button("Play", id="play-pause", variant="primary")
                yield Button("+15s", id="skip-forward")
                yield Button("Mute", id="mute")
                yield Button("Close", id="close-player")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#episodes", DataTable)
        table.add_columns("", "Played", "Date", "Title", "Duration")
        self.scroll_sync = ScrollSynchronizer(
            TableEpisodeView(self), max_attempts=self.config.view.scroll_max_attempts
        )
        self.watch(table, "scroll_y", self._remember_scroll, init=False)
        self.run_worker(self._load_feed(), exclusive=True, group="feed")

    async def on_unmount(self) -> None:
        self.scroll_store.flush()
        self.controller.on_change = None
        self.controller.close()
        self.transport.close()

    # -- feed and list ------------------------------------------------------

    async def _load_feed(self) -> None:
        status = self.query_one("#status", Static)
        try:
            self.feed = await self.parser.fetch_async(self.config.feed_url)
        except FeedError as e:
            logger.error(f"Feed unavailable: {e}")
            status.update(f"Feed unavailable: {e}")
            self.notify(str(e), title="Feed unavailable", severity="error")
            return

        self.title = self.feed.title
        self.query_one("#feed-description", Static).update(feed_summary(self.feed))
        keywords = self.query_one("#keywords", SelectionList)
        keywords.clear_options()
        keywords.add_options([(keyword, keyword) for keyword in extract_keywords(self.feed.episodes)])
        self.refilter(reset_page=True)
        await self._refresh_recent()

        offset = self.scroll_store.restore()
        if offset is not None:
            table = self.query_one("#episodes", DataTable)
            self.call_after_refresh(table.scroll_to, y=offset, animate=False)

        if self.initial_episode_id:
            episode = self.feed.get_episode(self.initial_episode_id)
            if episode is None:
                self.notify(f"Episode {self.initial_episode_id} not found", severity="warning")
            else:
                self._select(episode)

    def refilter(self, reset_page: bool = False) -> None:
        if self.feed is None:
            return
        self.filtered = self.episode_query.apply(self.feed.episodes, self.store.is_played)
        pages = total_pages(len(self.filtered), self.config.view.page_size)
        if reset_page:
            self.page = 1
        self.page = min(max(1, self.page), max(1, pages))

        status = self.query_one("#status", Static)
        shown, total = len(self.filtered), len(self.feed.episodes)
        summary = f"{shown} episode{'s' if shown != 1 else ''}"
        if shown < total:
            summary += f" (of {total} total)"
        sort_label = "newest first" if self.episode_query.sort == "date-desc" else "oldest first"
        played_label = "showing played" if self.episode_query.show_played else "hiding played"
        status.update(f"{summary} · {sort_label} · {played_label}")
        self.show_page(self.page)

    def show_page(self, page: int) -> None:
        self.page = page
        table = self.query_one("#episodes", DataTable)
        table.clear()

        session = self.controller.session
        playing_id = session.episode.id if session is not None else None
        page_size = self.config.view.page_size
        for episode in paginate(self.filtered, page, page_size):
            published = episode.published
            table.add_row(
                "▶" if episode.id == playing_id else "",
                "✓" if self.store.is_played(episode.id) else "",
                published.strftime("%b %d, %Y") if published else "",
                episode.title,
                format_duration(episode.duration),
                key=episode.id,
            )

        pages = total_pages(len(self.filtered), page_size)
        pager = self.query_one("#pager", Static)
        if not self.filtered:
            pager.update("No episodes match your search or filters.")
        else:
            pager.update(f"Page {page} of {pages}")
        self._show_details(self._highlighted_episode())

    async def _refresh_recent(self) -> None:
        if self.feed is None:
            return
        recent = self.query_one("#recent", ListView)
        await recent.clear()
        self._recent = [
            episode
            for episode_id in self.store.get_recently_played(self.config.view.recently_played_limit)
            if (episode := self.feed.get_episode(episode_id)) is not None
        ]
        for episode in self._recent:
            await recent.append(ListItem(Label(episode.title)))

    def _remember_scroll(self, scroll_y: float) -> None:
        self.scroll_store.record(scroll_y)

    # -- selection ------------------------------------------------------------

    def _select(self, episode: Episode) -> None:
        self.run_worker(self._play(episode), exclusive=True, group="player")

    async def _play(self, episode: Episode) -> None:
        await self.scroll_sync.sync(self.filtered, episode.id)
        await self.controller.play_episode(episode)

    def _highlighted_episode(self) -> Episode | None:
        table = self.query_one("#episodes", DataTable)
        if self.feed is None or table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key
        return self.feed.get_episode(str(row_key.value))

    def _show_details(self, episode: Episode | None) -> None:
        self.details_episode = episode
        details = self.query_one("#details", Static)
        details.update(episode_details(episode) if episode is not None else "")

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if self.feed is None or event.row_key is None:
            return
        self._show_details(self.feed.get_episode(str(event.row_key.value)))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if self.feed is None:
            return
        episode = self.feed.get_episode(str(event.row_key.value))
        if episode is not None:
            self._select(episode)

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        if index is not None and 0 <= index < len(self._recent):
            self._select(self._recent[index])

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "search":
            return
        self.episode_query.search = event.value.strip()
        self.refilter(reset_page=True)

    def on_selection_list_selected_changed(self, event: SelectionList.SelectedChanged) -> None:
        self.episode_query.keywords = list(event.selection_list.selected)
        self.refilter(reset_page=True)

    # -- player ---------------------------------------------------------------

    def _focus_kind(self) -> FocusKind:
        focused = self.focused
        if focused is None:
            return FocusKind.NONE
        if isinstance(focused, Input):
            return FocusKind.TEXT_INPUT
        if isinstance(focused, TextArea) and not focused.read_only:
            return FocusKind.TEXT_AREA
        return FocusKind.OTHER

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        # Disabled bindings let the key reach the focused widget
        if action == "player_key":
            return self.router.accepts(self._focus_kind())
        return True

    async def action_player_key(self, key: str) -> None:
        await self.router.handle(KeyEvent(key=key, focus=self._focus_kind()))

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "skip-back":
            self.controller.skip_back()
        elif button_id == "skip-forward":
            self.controller.skip_forward()
        elif button_id == "play-pause":
            await self.controller.toggle_play_pause()
        elif button_id == "mute":
            self.controller.toggle_mute()
        elif button_id == "close-player":
            self.controller.close()

    def action_toggle_mute(self) -> None:
        self.controller.toggle_mute()

    def action_volume(self, delta: float) -> None:
        self.controller.set_volume(self.controller.volume + delta)

    def action_close_player(self) -> None:
        self.controller.close()

    async def action_toggle_played(self) -> None:
        episode = self._highlighted_episode()
        if episode is None:
            return
        self.store.toggle_played(episode.id)
        self.refilter()
        await self._refresh_recent()

    def action_toggle_show_played(self) -> None:
        self.episode_query.show_played = not self.episode_query.show_played
        self.refilter(reset_page=True)

    def action_toggle_sort(self) -> None:
        self.episode_query.sort = "date-asc" if self.episode_query.sort == "date-desc" else "date-desc"
        self.refilter(reset_page=True)

    def action_next_page(self) -> None:
        if self.page < total_pages(len(self.filtered), self.config.view.page_size):
            self.show_page(self.page + 1)

    def action_previous_page(self) -> None:
        if self.page > 1:
            self.show_page(self.page - 1)

    def _on_player_change(self, session: PlaybackSession | None) -> None:
        now_playing = self.query_one("#now-playing", Static)
        play_pause = self.query_one("#play-pause", Button)
        mute = self.query_one("#mute", Button)

        mute.label = "Unmute" if self.controller.is_muted else "Mute"

        current_id = session.episode.id if session is not None else None
        if current_id != self._marked_episode_id:
            # Selection was just recorded as played; redraw markers and history
            self._marked_episode_id = current_id
            self.show_page(self.page)
            self.run_worker(self._refresh_recent(), exclusive=True, group="recent")

        if session is None:
            now_playing.update("Nothing playing")
            play_pause.label = "Play"
            return

        state = session.state
        if state is PlaybackState.LOADING:
            detail = "loading..."
        elif session.error and state in (PlaybackState.IDLE, PlaybackState.PAUSED):
            detail = f"{state.value}: {session.error}"
        else:
            detail = f"{format_time(session.current_time)} / {format_time(session.duration)}"
        volume = "muted" if session.is_muted else f"vol {round(session.volume * 100)}%"
        now_playing.update(f"{session.episode.title}  {detail}  [{volume}]")
        play_pause.label = "Pause" if state is PlaybackState.PLAYING else "Play"

    def _on_finished(self, episode: Episode) -> None:
        self.notify(f"Finished: {episode.title}")
        self.run_worker(self._refresh_recent(), exclusive=True, group="recent")

    def _on_player_error(self, error: TransportError) -> None:
        self.notify(str(error), title="Playback problem", severity="warning")
