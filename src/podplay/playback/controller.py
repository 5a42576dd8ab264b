"""Playback controller.

Owns the single active playback session and drives the transport through
the ``IDLE -> LOADING -> READY -> PLAYING <-> PAUSED -> ENDED`` state
machine. Transport failures never escape this module: they become state
transitions, a log line and an ``on_error`` callback.
"""

import logging
from collections.abc import Callable
from functools import partial

from podplay.feeds.models import Episode
from podplay.playback.played import PlayedStateStore
from podplay.playback.session import PlaybackSession, PlaybackState
from podplay.playback.transport import ENDED, TIME_UPDATE, Transport
from podplay.utils.errors import TransportError

logger = logging.getLogger(__name__)

SEEKABLE_STATES = (PlaybackState.READY, PlaybackState.PLAYING, PlaybackState.PAUSED)
RESUMABLE_STATES = (PlaybackState.READY, PlaybackState.PAUSED, PlaybackState.ENDED)


class PlaybackController:
    """Single-session audio player on top of a :class:`Transport`.

    Example:
        >>> controller = PlaybackController(transport, PlayedStateStore())
        >>> await controller.select(episode)   # loads, then auto-plays
        >>> controller.skip(-15)
        >>> await controller.toggle_play_pause()
        >>> controller.close()
    """

    def __init__(
        self,
        transport: Transport,
        store: PlayedStateStore,
        *,
        autoplay: bool = True,
        completion_threshold: float = 0.95,
        initial_volume: float = 1.0,
        unmute_volume: float = 0.5,
        button_skip_seconds: float = 15,
        on_finished: Callable[[Episode], None] | None = None,
        on_error: Callable[[TransportError], None] | None = None,
        on_change: Callable[[PlaybackSession | None], None] | None = None,
    ):
        """Initialize the controller.

        Args:
            transport: Playback engine
            store: Played-state store notified on selection and completion
            autoplay: Start playing once an episode is loaded
            completion_threshold: Fraction of the duration that counts as finished
            initial_volume: Starting volume in [0, 1]
            unmute_volume: Level restored on unmute when the stored level is 0
            button_skip_seconds: Step of :meth:`skip_back` / :meth:`skip_forward`
            on_finished: Called once per session when the episode is finished
            on_error: Called with every reported transport error
            on_change: Called after every session change, for redraws
        """
        self.transport = transport
        self.store = store
        self.autoplay = autoplay
        self.completion_threshold = completion_threshold
        self.unmute_volume = unmute_volume
        self.button_skip_seconds = button_skip_seconds
        self.on_finished = on_finished
        self.on_error = on_error
        self.on_change = on_change

        self._session: PlaybackSession | None = None
        self._volume = min(1.0, max(0.0, initial_volume))
        self._muted = self._volume == 0
        self._play_token = 0
        # Session whose transport.play() is in flight
        self._starting: PlaybackSession | None = None
        self.last_error: TransportError | None = None

    # -- state -----------------------------------------------------------

    @property
    def session(self) -> PlaybackSession | None:
        return self._session

    @property
    def state(self) -> PlaybackState:
        if self._session is None:
            return PlaybackState.IDLE
        return self._session.state

    @property
    def volume(self) -> float:
        """Chosen volume level; kept while muted."""
        return self._volume

    @property
    def is_muted(self) -> bool:
        return self._muted

    @property
    def effective_volume(self) -> float:
        return 0.0 if self._muted else self._volume

    @property
    def play_token(self) -> int:
        return self._play_token

    # -- session lifecycle ----------------------------------------------

    async def select(self, episode: Episode) -> None:
        """Replace the current session with a new one for ``episode``.

        The previous session's listeners are detached before the new
        session subscribes, so its late events can't reach the new one.
        """
        self._teardown()
        self.last_error = None
        self.store.mark_as_playing(episode.id)

        session = PlaybackSession(
            episode=episode,
            volume=self._volume,
            is_muted=self._muted,
            play_token=self._play_token,
        )
        self._session = session
        session.listeners.callback(
            self.transport.subscribe(TIME_UPDATE, partial(self._on_time_update, session))
        )
        session.listeners.callback(
            self.transport.subscribe(ENDED, partial(self._on_ended, session))
        )
        logger.info(f"Loading episode {episode.id}: {episode.title}")
        self._changed()

        try:
            duration = await self.transport.load(episode.audio_url)
        except TransportError as e:
            if self._session is not session:
                logger.debug(f"Ignoring load failure of superseded episode {episode.id}")
                return
            session.listeners.close()
            self.transport.stop()
            session.state = PlaybackState.IDLE
            self._report(session, e)
            self._changed()
            return

        if self._session is not session:
            logger.debug(f"Discarding late load of superseded episode {episode.id}")
            return

        session.duration = max(0.0, duration or 0.0)
        session.state = PlaybackState.READY
        self.transport.set_volume(self.effective_volume)
        self._changed()

        if self.autoplay:
            await self._start(session)

    async def play_episode(self, episode: Episode) -> int:
        """Play ``episode``, loading it only if it isn't the current one.

        Returns:
            The play token of this request
        """
        session = self._session
        if session is not None and session.episode.id == episode.id:
            return await self.request_play()

        self._play_token += 1
        await self.select(episode)
        return self._play_token

    async def request_play(self) -> int:
        """Ask the current session to play.

        Each call gets a new token, so repeated requests for the same
        episode are distinct intents. A session whose load failed is
        reloaded.

        Returns:
            The token of this request; ``session.acknowledged_token`` reaches
            it once playback actually started
        """
        self._play_token += 1
        session = self._session
        if session is None:
            return self._play_token

        session.play_token = self._play_token
        if session.state is PlaybackState.IDLE:
            await self.select(session.episode)
        elif session.state in RESUMABLE_STATES:
            await self.resume()
        elif session.state is PlaybackState.PLAYING:
            session.acknowledged_token = session.play_token
        return self._play_token

    def close(self) -> None:
        """Tear down the session and return to idle."""
        if self._session is None:
            return
        logger.info(f"Closing player for episode {self._session.episode.id}")
        self._teardown()
        self._changed()

    def _teardown(self) -> None:
        session = self._session
        if session is None:
            return
        session.listeners.close()
        self.transport.stop()
        self._session = None

    # -- transport commands ------------------------------------------------

    async def toggle_play_pause(self) -> None:
        session = self._session
        if session is None or session.state in (PlaybackState.IDLE, PlaybackState.LOADING):
            return
        if session.state is PlaybackState.PLAYING:
            self.pause()
        else:
            await self.resume()

    def pause(self) -> None:
        session = self._session
        if session is None or session.state is not PlaybackState.PLAYING:
            return
        self.transport.pause()
        session.state = PlaybackState.PAUSED
        self._changed()

    async def resume(self) -> None:
        session = self._session
        if session is None or session.state not in RESUMABLE_STATES:
            return
        if session.state is PlaybackState.ENDED:
            session.current_time = 0.0
            self.transport.seek(0.0)
        await self._start(session)

    async def _start(self, session: PlaybackSession) -> None:
        if self._starting is session:
            # The pending start acknowledges the newest play token
            logger.debug(f"Start of {session.episode.id} already in progress")
            return
        self._starting = session
        try:
            await self.transport.play()
        except TransportError as e:
            if self._session is not session:
                logger.debug(f"Ignoring play rejection for superseded episode {session.episode.id}")
                return
            session.state = PlaybackState.PAUSED
            self._report(session, e)
            self._changed()
            return
        finally:
            if self._starting is session:
                self._starting = None

        if self._session is not session:
            logger.debug(f"Ignoring play result for superseded episode {session.episode.id}")
            return
        session.state = PlaybackState.PLAYING
        session.error = None
        session.acknowledged_token = session.play_token
        self._changed()

    def seek(self, seconds: float) -> None:
        """Jump to ``seconds``, clamped to the episode bounds."""
        session = self._session
        if session is None or session.state not in SEEKABLE_STATES:
            return
        target = min(max(0.0, seconds), session.duration)
        session.current_time = target
        self.transport.seek(target)
        self._changed()

    def skip(self, delta: float) -> None:
        session = self._session
        if session is None:
            return
        self.seek(session.current_time + delta)

    def skip_back(self) -> None:
        self.skip(-self.button_skip_seconds)

    def skip_forward(self) -> None:
        self.skip(self.button_skip_seconds)

    def set_volume(self, volume: float) -> None:
        """Set the volume; 0 mutes, anything above unmutes."""
        self._volume = min(1.0, max(0.0, volume))
        self._muted = self._volume == 0
        self._apply_volume()

    def toggle_mute(self) -> None:
        if self._muted:
            if self._volume == 0:
                self._volume = self.unmute_volume
            self._muted = False
        else:
            self._muted = True
        self._apply_volume()

    def _apply_volume(self) -> None:
        self.transport.set_volume(self.effective_volume)
        if self._session is not None:
            self._session.volume = self._volume
            self._session.is_muted = self._muted
        self._changed()

    # -- transport events -------------------------------------------------

    def _on_time_update(self, session: PlaybackSession, current_time: float) -> None:
        if self._session is not session:
            logger.debug(f"Dropping stale time update for {session.episode.id}")
            return
        session.current_time = max(0.0, current_time)
        if (
            session.state is PlaybackState.PLAYING
            and session.duration > 0
            and session.current_time / session.duration >= self.completion_threshold
        ):
            self._finish(session)
        self._changed()

    def _on_ended(self, session: PlaybackSession) -> None:
        if self._session is not session:
            logger.debug(f"Dropping stale end of media for {session.episode.id}")
            return
        session.state = PlaybackState.ENDED
        session.current_time = session.duration
        self._finish(session)
        self._changed()

    def _finish(self, session: PlaybackSession) -> None:
        if session.has_crossed_completion_threshold:
            return
        session.has_crossed_completion_threshold = True
        logger.info(f"Episode {session.episode.id} finished")
        self.store.mark_as_playing(session.episode.id)
        if self.on_finished is not None:
            self.on_finished(session.episode)

    # -- reporting ----------------------------------------------------------

    def _report(self, session: PlaybackSession, error: TransportError) -> None:
        self.last_error = error
        session.error = str(error)
        logger.warning(f"Playback of {session.episode.id} failed: {type(error).__name__}: {error}")
        if self.on_error is not None:
            self.on_error(error)

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self._session)
