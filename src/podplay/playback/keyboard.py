"""Global keyboard shortcuts for the player."""

import logging
from dataclasses import dataclass
from enum import Enum

from podplay.playback.controller import PlaybackController

logger = logging.getLogger(__name__)


class FocusKind(str, Enum):
    """What kind of element holds keyboard focus."""

    NONE = "none"
    OTHER = "other"
    TEXT_INPUT = "text-input"
    TEXT_AREA = "text-area"
    CONTENT_EDITABLE = "content-editable"


TEXT_ENTRY_FOCUS = frozenset(
    {FocusKind.TEXT_INPUT, FocusKind.TEXT_AREA, FocusKind.CONTENT_EDITABLE}
)


@dataclass
class KeyEvent:
    """A key press together with the focus target at the time of the press."""

    key: str
    focus: FocusKind = FocusKind.NONE
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


class KeyboardRouter:
    """Routes space / left / right to the playback controller.

    Keys are ignored while no session exists, or while a text entry has
    focus so typing in the search box never pauses playback.
    """

    def __init__(self, controller: PlaybackController, skip_seconds: float = 10):
        self.controller = controller
        self.skip_seconds = skip_seconds

    def accepts(self, focus: FocusKind) -> bool:
        """Whether player keys are live for the given focus target."""
        return self.controller.session is not None and focus not in TEXT_ENTRY_FOCUS

    async def handle(self, event: KeyEvent) -> bool:
        """Dispatch one key press.

        Returns:
            True if the key was consumed
        """
        if not self.accepts(event.focus):
            return False

        if event.key == "space":
            event.prevent_default()
            await self.controller.toggle_play_pause()
        elif event.key == "left":
            event.prevent_default()
            self.controller.skip(-self.skip_seconds)
        elif event.key == "right":
            event.prevent_default()
            self.controller.skip(self.skip_seconds)
        else:
            return False

        logger.debug(f"Key {event.key!r} routed to player")
        return True
