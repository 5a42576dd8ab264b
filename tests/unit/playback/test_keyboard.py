"""Tests for global keyboard shortcuts."""

import pytest

from podplay.playback.controller import PlaybackController
from podplay.playback.keyboard import FocusKind, KeyboardRouter, KeyEvent
from podplay.playback.session import PlaybackState


@pytest.fixture
def controller(transport, store) -> PlaybackController:
    return PlaybackController(transport, store)


@pytest.fixture
def router(controller) -> KeyboardRouter:
    return KeyboardRouter(controller, skip_seconds=10)


async def start_playing(controller, transport, episode):
    await controller.select(episode)
    transport.time_update(60.0)
    return controller


class TestKeyboardRouter:
    """Tests for KeyboardRouter.handle."""

    @pytest.mark.asyncio
    async def test_space_toggles_play_pause(self, router, controller, transport, episode_factory) -> None:
        playing = await start_playing(controller, transport, episode_factory(1))
        event = KeyEvent("space")

        assert await router.handle(event) is True

        assert event.default_prevented
        assert playing.state is PlaybackState.PAUSED

        await router.handle(KeyEvent("space"))
        assert playing.state is PlaybackState.PLAYING

    @pytest.mark.asyncio
    async def test_arrows_skip_ten_seconds(self, router, controller, transport, episode_factory) -> None:
        playing = await start_playing(controller, transport, episode_factory(1))
        await router.handle(KeyEvent("left"))
        assert playing.session.current_time == 50.0

        await router.handle(KeyEvent("right"))
        await router.handle(KeyEvent("right"))
        assert playing.session.current_time == 70.0

    @pytest.mark.asyncio
    async def test_other_keys_pass_through(self, router, controller, transport, episode_factory) -> None:
        playing = await start_playing(controller, transport, episode_factory(1))
        event = KeyEvent("a")

        assert await router.handle(event) is False

        assert not event.default_prevented
        assert playing.state is PlaybackState.PLAYING

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "focus", [FocusKind.TEXT_INPUT, FocusKind.TEXT_AREA, FocusKind.CONTENT_EDITABLE]
    )
    async def test_ignored_while_typing(self, router, controller, transport, episode_factory, focus) -> None:
        playing = await start_playing(controller, transport, episode_factory(1))
        transport.calls.clear()
        event = KeyEvent("space", focus=focus)

        assert await router.handle(event) is False

        assert not event.default_prevented
        assert playing.state is PlaybackState.PLAYING
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_other_focus_targets_still_route(self, router, controller, transport, episode_factory) -> None:
        playing = await start_playing(controller, transport, episode_factory(1))
        assert await router.handle(KeyEvent("left", focus=FocusKind.OTHER)) is True
        assert playing.session.current_time == 50.0

    @pytest.mark.asyncio
    async def test_ignored_without_session(self, router, transport) -> None:
        event = KeyEvent("space")

        assert await router.handle(event) is False

        assert not event.default_prevented
        assert transport.calls == []

    def test_accepts(self, router, controller) -> None:
        assert router.accepts(FocusKind.NONE) is False
