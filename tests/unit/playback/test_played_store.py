"""Tests for the played-episode store."""

import json
from pathlib import Path

import pytest

from podplay.playback.played import PLAYED_KEY, TIMESTAMPS_KEY, PlayedStateStore
from podplay.storage import StateFile
from podplay.utils.errors import StorageError


class TestTogglePlayed:
    """Tests for toggle_played."""

    def test_toggle_marks_then_unmarks(self, store: PlayedStateStore) -> None:
        """Toggling twice leaves the episode unplayed with no timestamp."""
        assert store.toggle_played("a") is True
        assert store.is_played("a")
        assert store.last_played("a") is not None

        assert store.toggle_played("a") is False
        assert not store.is_played("a")
        assert store.last_played("a") is None
        assert len(store) == 0

    def test_toggle_persists_both_keys(self, store: PlayedStateStore, state: StateFile) -> None:
        """Every toggle writes the played list and the timestamps."""
        store.toggle_played("a")

        data = json.loads(state.path.read_text())
        assert data[PLAYED_KEY] == ["a"]
        assert set(data[TIMESTAMPS_KEY]) == {"a"}

        store.toggle_played("a")

        data = json.loads(state.path.read_text())
        assert data[PLAYED_KEY] == []
        assert data[TIMESTAMPS_KEY] == {}


class TestMarkAsPlaying:
    """Tests for mark_as_playing."""

    def test_marks_unplayed_episode(self, store: PlayedStateStore) -> None:
        store.mark_as_playing("a")
        assert store.is_played("a")

    def test_never_unmarks_and_refreshes_timestamp(self, store: PlayedStateStore) -> None:
        """A second call keeps the episode played with a newer timestamp."""
        store.mark_as_playing("a")
        first = store.last_played("a")

        store.mark_as_playing("a")

        assert store.is_played("a")
        assert store.last_played("a") > first

    def test_moves_episode_to_front_of_recent(self, store: PlayedStateStore) -> None:
        store.mark_as_playing("a")
        store.mark_as_playing("b")
        assert store.get_recently_played(5) == ["b", "a"]

        store.mark_as_playing("a")
        assert store.get_recently_played(5) == ["a", "b"]


class TestRecentlyPlayed:
    """Tests for get_recently_played."""

    def test_most_recent_first_and_limited(self, store: PlayedStateStore) -> None:
        for episode_id in ["a", "b", "c", "d"]:
            store.mark_as_playing(episode_id)

        assert store.get_recently_played(2) == ["d", "c"]
        assert store.get_recently_played(10) == ["d", "c", "b", "a"]

    def test_zero_or_negative_limit_returns_empty(self, store: PlayedStateStore) -> None:
        store.mark_as_playing("a")

        assert store.get_recently_played(0) == []
        assert store.get_recently_played(-3) == []

    def test_unplayed_episode_leaves_history(self, store: PlayedStateStore) -> None:
        store.mark_as_playing("a")
        store.mark_as_playing("b")
        store.toggle_played("b")

        assert store.get_recently_played(5) == ["a"]

    def test_equal_timestamps_keep_insertion_order(self, state: StateFile) -> None:
        store = PlayedStateStore(state, clock=lambda: 1000)
        store.mark_as_playing("a")
        store.mark_as_playing("b")

        assert store.get_recently_played(5) == ["a", "b"]


class TestLoading:
    """Tests for loading persisted state."""

    def test_round_trip_through_state_file(self, store: PlayedStateStore, state: StateFile) -> None:
        store.mark_as_playing("a")
        store.mark_as_playing("b")

        reloaded = PlayedStateStore(state)

        assert reloaded.played_ids == {"a", "b"}
        assert reloaded.get_recently_played(5) == ["b", "a"]

    def test_missing_file_starts_empty(self, tmp_path: Path) -> None:
        store = PlayedStateStore(StateFile(tmp_path / "missing.json"))
        assert len(store) == 0

    def test_corrupt_file_starts_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{not json")

        store = PlayedStateStore(StateFile(path))

        assert len(store) == 0

    def test_malformed_played_list_starts_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(json.dumps({PLAYED_KEY: "a", TIMESTAMPS_KEY: {"a": 5}}))

        store = PlayedStateStore(StateFile(path))

        assert len(store) == 0

    def test_missing_timestamp_sorts_last(self, tmp_path: Path) -> None:
        """Played ids without a timestamp count as never played recently."""
        path = tmp_path / "state.json"
        path.write_text(json.dumps({PLAYED_KEY: ["old", "new"], TIMESTAMPS_KEY: {"new": 5000}}))

        store = PlayedStateStore(StateFile(path))

        assert store.is_played("old")
        assert store.last_played("old") == 0
        assert store.get_recently_played(5) == ["new", "old"]

    @pytest.mark.parametrize("stamp", ["NaN", "Infinity", "-Infinity", '"yesterday"', "true"])
    def test_unusable_timestamp_loads_as_zero(self, tmp_path: Path, stamp: str) -> None:
        """Timestamps that aren't finite numbers don't break loading."""
        path = tmp_path / "state.json"
        path.write_text(
            f'{{"{PLAYED_KEY}": ["a", "b"], "{TIMESTAMPS_KEY}": {{"a": {stamp}, "b": 5000}}}}'
        )

        store = PlayedStateStore(StateFile(path))

        assert store.played_ids == {"a", "b"}
        assert store.last_played("a") == 0
        assert store.get_recently_played(5) == ["b", "a"]

    def test_timestamps_for_unplayed_ids_are_dropped(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(json.dumps({PLAYED_KEY: ["a"], TIMESTAMPS_KEY: {"a": 1, "ghost": 2}}))

        store = PlayedStateStore(StateFile(path))

        assert store.played_ids == {"a"}
        assert store.get_recently_played(5) == ["a"]


class TestWriteFailures:
    """A failed write keeps the in-memory state."""

    def test_storage_error_is_logged_not_raised(self, store: PlayedStateStore, monkeypatch, caplog) -> None:
        def fail(values):
            raise StorageError("disk full")

        monkeypatch.setattr(store.state, "update", fail)

        assert store.toggle_played("a") is True
        assert store.is_played("a")
        assert "Played state not saved" in caplog.text
