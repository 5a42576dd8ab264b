"""libmpv-backed transport.

mpv reports properties and events on its own thread; every notification
is handed to the asyncio loop with ``call_soon_threadsafe`` so transport
listeners always run on the loop thread.
"""

import asyncio
import logging
from typing import Any

import mpv

from podplay.playback.transport import ENDED, TIME_UPDATE, Transport
from podplay.utils.errors import MediaLoadError, PlaybackRejectedError

logger = logging.getLogger(__name__)


class MpvTransport(Transport):
    """Audio-only playback through python-mpv."""

    def __init__(self, load_timeout: float = 30.0, player: Any | None = None):
        """Initialize the transport.

        Args:
            load_timeout: Seconds to wait for a file's metadata
            player: Preconfigured ``mpv.MPV`` instance (created if None)
        """
        super().__init__()
        self.load_timeout = load_timeout
        self._player = player or mpv.MPV(video=False, ytdl=False, keep_open="yes", idle="yes")
        self._loop: asyncio.AbstractEventLoop | None = None
        self._load_waiter: asyncio.Future | None = None
        # Bumped by every load, stop and close; mpv events carry the value
        # current when they arrived and are dropped once it has moved on
        self._generation = 0

        self._player.observe_property("time-pos", self._on_time_pos)
        self._player.observe_property("eof-reached", self._on_eof_reached)
        self._player.register_event_callback(self._on_event)

    async def load(self, url: str) -> float:
        if not url:
            raise MediaLoadError("Episode has no audio URL")

        self._loop = asyncio.get_running_loop()
        self._fail_pending_load("Load superseded")
        waiter = self._loop.create_future()
        self._load_waiter = waiter

        try:
            self._player.pause = True
            self._player.loadfile(url)
            await asyncio.wait_for(waiter, self.load_timeout)
        except asyncio.TimeoutError as e:
            raise MediaLoadError(f"Timed out loading {url}") from e
        except mpv.ShutdownError as e:
            raise MediaLoadError(f"Player is shut down: {e}") from e
        finally:
            if self._load_waiter is waiter:
                self._load_waiter = None

        duration = self._player.duration
        return float(duration) if duration else 0.0

    async def play(self) -> None:
        try:
            self._player.pause = False
        except mpv.ShutdownError as e:
            raise PlaybackRejectedError(f"Player is shut down: {e}") from e

    def pause(self) -> None:
        self._player.pause = True

    def stop(self) -> None:
        self._fail_pending_load("Playback stopped")
        self._player.command("stop")

    def seek(self, seconds: float) -> None:
        self._player.seek(seconds, reference="absolute")

    def set_volume(self, volume: float) -> None:
        self._player.volume = round(volume * 100)

    def close(self) -> None:
        self._fail_pending_load("Player closed")
        self._player.terminate()

    def _fail_pending_load(self, reason: str) -> None:
        self._generation += 1
        waiter = self._load_waiter
        if waiter is not None and not waiter.done():
            waiter.set_exception(MediaLoadError(reason))
        self._load_waiter = None

    # Called on the mpv event thread

    def _dispatch(self, callback: Any, *args: Any) -> None:
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(callback, *args)

    def _on_time_pos(self, _name: str, value: float | None) -> None:
        if value is not None:
            self._dispatch(self.events.emit, TIME_UPDATE, float(value))

    def _on_eof_reached(self, _name: str, value: bool | None) -> None:
        if value:
            self._dispatch(self.events.emit, ENDED)

    def _on_event(self, event: Any) -> None:
        event_id = event.event_id.value
        generation = self._generation
        if event_id == mpv.MpvEventID.FILE_LOADED:
            self._dispatch(self._resolve_load, generation)
        elif event_id == mpv.MpvEventID.END_FILE:
            if event.data.reason == mpv.MpvEventEndFile.ERROR:
                self._dispatch(self._reject_load, generation, event.data.error)

    # Back on the loop thread

    def _current_waiter(self, generation: int) -> asyncio.Future | None:
        if generation != self._generation:
            logger.debug("Dropping mpv event from an earlier load")
            return None
        waiter = self._load_waiter
        if waiter is None or waiter.done():
            return None
        return waiter

    def _resolve_load(self, generation: int) -> None:
        waiter = self._current_waiter(generation)
        if waiter is not None:
            waiter.set_result(None)

    def _reject_load(self, generation: int, error_code: int) -> None:
        logger.debug(f"mpv reported end-file error {error_code}")
        waiter = self._current_waiter(generation)
        if waiter is not None:
            waiter.set_exception(MediaLoadError(f"mpv could not open the file (error {error_code})"))
