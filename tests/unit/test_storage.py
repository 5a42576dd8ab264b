"""Tests for the JSON state file."""

import json
from pathlib import Path

import pytest

from podplay.storage import StateFile
from podplay.utils.errors import StorageError


class TestStateFile:
    """Tests for StateFile."""

    def test_get_missing_file_returns_default(self, tmp_path: Path) -> None:
        state = StateFile(tmp_path / "state.json")
        assert state.get("key") is None
        assert state.get("key", 7) == 7

    def test_set_and_get(self, tmp_path: Path) -> None:
        state = StateFile(tmp_path / "nested" / "state.json")

        state.set("podcastScrollPosition", 120)

        assert state.get("podcastScrollPosition") == 120
        assert state.path.exists()

    def test_update_keeps_other_keys(self, tmp_path: Path) -> None:
        state = StateFile(tmp_path / "state.json")
        state.set("a", 1)

        state.update({"b": 2, "c": [1, 2]})

        assert json.loads(state.path.read_text()) == {"a": 1, "b": 2, "c": [1, 2]}

    def test_no_temp_file_left_behind(self, tmp_path: Path) -> None:
        state = StateFile(tmp_path / "state.json")
        state.set("a", 1)
        assert not (tmp_path / "state.tmp").exists()

    def test_non_object_document_is_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("[1, 2, 3]")

        state = StateFile(path)

        assert state.get("a") is None
        state.set("a", 1)
        assert json.loads(path.read_text()) == {"a": 1}

    def test_unserializable_value_raises_storage_error(self, tmp_path: Path) -> None:
        state = StateFile(tmp_path / "state.json")
        state.set("a", 1)

        with pytest.raises(StorageError):
            state.set("b", object())

        # Previous contents survive a failed write
        assert state.get("a") == 1
        assert not (tmp_path / "state.tmp").exists()

    def test_default_path_honours_home_override(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("PODPLAY_HOME", str(tmp_path))
        assert StateFile().path == tmp_path / "data" / "state.json"
