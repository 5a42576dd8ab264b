"""Playback session state."""

from contextlib import ExitStack
from dataclasses import dataclass, field
from enum import Enum

from podplay.feeds.models import Episode


class PlaybackState(str, Enum):
    """States of the audio transport state machine."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


@dataclass
class PlaybackSession:
    """The live binding between one episode and the transport.

    ``listeners`` owns the detach callbacks of every transport listener the
    session registered; closing it detaches them all.
    """

    episode: Episode
    state: PlaybackState = PlaybackState.LOADING
    current_time: float = 0.0
    duration: float = 0.0
    volume: float = 1.0
    is_muted: bool = False
    play_token: int = 0
    acknowledged_token: int = 0
    has_crossed_completion_threshold: bool = False
    error: str | None = None
    listeners: ExitStack = field(default_factory=ExitStack, repr=False, compare=False)

    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    @property
    def progress(self) -> float:
        """Fraction of the episode played, in [0, 1]."""
        if self.duration <= 0:
            return 0.0
        return min(1.0, self.current_time / self.duration)
