"""Playback and played-state control.

The libmpv transport lives in :mod:`podplay.playback.mpv_transport` and is imported
only by the terminal UI, since it needs libmpv at import time.
"""

from podplay.playback.controller import PlaybackController
from podplay.playback.keyboard import FocusKind, KeyboardRouter, KeyEvent
from podplay.playback.played import PlayedStateStore
from podplay.playback.scroll import (
    EpisodeView,
    ScrollPositionStore,
    ScrollSynchronizer,
    ScrollTarget,
    compute_scroll_target,
)
from podplay.playback.session import PlaybackSession, PlaybackState
from podplay.playback.transport import ENDED, TIME_UPDATE, Emitter, Transport

__all__ = [
    "PlaybackController",
    "PlaybackSession",
    "PlaybackState",
    "PlayedStateStore",
    "KeyboardRouter",
    "KeyEvent",
    "FocusKind",
    "ScrollSynchronizer",
    "ScrollPositionStore",
    "ScrollTarget",
    "EpisodeView",
    "compute_scroll_target",
    "Transport",
    "Emitter",
    "TIME_UPDATE",
    "ENDED",
]
