"""Audio transport contract.

A transport is the playback engine underneath the controller: it loads a
URL, plays, pauses, seeks and reports progress through events. Listeners
are attached with :meth:`Transport.subscribe`, which hands back a callable
that detaches them again.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Callable

logger = logging.getLogger(__name__)

# Event names
TIME_UPDATE = "timeupdate"  # listener(current_time: float)
ENDED = "ended"  # listener()

Listener = Callable[..., None]


class Emitter:
    """Minimal synchronous event emitter."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def add_listener(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for ``event``.

        Returns:
            A callable that removes the listener. Calling it twice is harmless.
        """
        self._listeners[event].append(listener)

        def remove() -> None:
            self.remove_listener(event, listener)

        return remove

    def remove_listener(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def emit(self, event: str, *args: object) -> None:
        # Copy so listeners may detach while being notified
        for listener in list(self._listeners.get(event, ())):
            listener(*args)

    def listener_count(self, event: str | None = None) -> int:
        if event is not None:
            return len(self._listeners.get(event, ()))
        return sum(len(listeners) for listeners in self._listeners.values())


class Transport(ABC):
    """Base class for audio playback engines.

    ``load`` and ``play`` are coroutines because real engines resolve them
    later (network fetch, device start). Everything else applies at once.
    Failures are raised as :class:`~podplay.utils.errors.TransportError`
    subclasses.
    """

    def __init__(self) -> None:
        self.events = Emitter()

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        return self.events.add_listener(event, listener)

    @abstractmethod
    async def load(self, url: str) -> float:
        """Load a media URL and wait for its metadata.

        Returns:
            Duration in seconds (0 when unknown)

        Raises:
            MediaLoadError: If the resource is unreachable or unsupported
        """

    @abstractmethod
    async def play(self) -> None:
        """Start or resume playback.

        Raises:
            PlaybackRejectedError: If the environment refuses to play
        """

    @abstractmethod
    def pause(self) -> None: ...

    @abstractmethod
    def stop(self) -> None:
        """Stop playback and unload the current media."""

    @abstractmethod
    def seek(self, seconds: float) -> None: ...

    @abstractmethod
    def set_volume(self, volume: float) -> None:
        """Set output volume in [0, 1]."""

    def close(self) -> None:
        """Release the engine."""
        self.stop()
