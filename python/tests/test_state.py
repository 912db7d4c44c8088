"""
State Tests - Verify the annotation store.

Tests:
- Index construction from a folder
- One record per path, last write wins
- Tag aggregation and its tie-break
- Questionable-state warnings
- Dict round trip for persistence
"""

import json
import logging
from pathlib import Path

import pytest

from fileperson.errors import RootAccessError
from fileperson.models import Directory, FileInfo, Tag
from fileperson.state import State


def tagged(path: str, *tags: str, delete=None) -> FileInfo:
    return FileInfo(path=Path(path), delete=delete, tags=list(tags))


class TestStateFromPath:
    """Tests for building a State from disk."""

    def test_indexes_root(self, media_tree, test_config):
        """from_path scans and starts with no records."""
        state = State.from_path(test_config.root, {"mp3"}, test_config)

        assert state.files() == (media_tree["mp3"],)
        assert state.root.find(media_tree["sub"]) is not None
        assert len(state) == 0
        assert list(state.tags()) == []

    def test_uses_config_extensions(self, media_tree, test_config):
        state = State.from_path(test_config.root, config=test_config)
        assert state.files() == (media_tree["mp3"],)

    def test_expands_home(self, temp_dir, test_config, monkeypatch):
        """A root starting with ~ is expanded."""
        monkeypatch.setenv("HOME", str(temp_dir))
        monkeypatch.setenv("USERPROFILE", str(temp_dir))
        music = temp_dir / "Music"
        music.mkdir()
        (music / "s.mp3").write_bytes(b"ID3")

        state = State.from_path("~/Music", {"mp3"}, test_config)

        assert state.root.this == music
        assert state.files() == (music / "s.mp3",)

    def test_missing_root_raises(self, temp_dir, test_config):
        with pytest.raises(RootAccessError):
            State.from_path(temp_dir / "gone", {"mp3"}, test_config)


class TestStateRecords:
    """Tests for adding and removing records."""

    @pytest.fixture
    def state(self) -> State:
        root = Path("/music")
        return State(Directory(this=root), Directory(this=root))

    def test_same_path_replaces(self, state):
        """A second record for a path replaces the first."""
        state.add(tagged("/music/p.mp3", "X"))
        state.add(tagged("/music/p.mp3", "Y"))

        assert len(state) == 1
        assert [t.display() for t in state.get("/music/p.mp3").tags] == ["Y"]
        assert [t.display() for t in state.tags()] == ["Y"]

    def test_replacement_keeps_position(self, state):
        state.add(tagged("/music/a.mp3"))
        state.add(tagged("/music/b.mp3"))
        state.add(tagged("/music/a.mp3", "late"))

        assert [i.path.name for i in state] == ["a.mp3", "b.mp3"]

    def test_remove_resets_to_untouched(self, state):
        state.add(tagged("/music/a.mp3", "live"))

        removed = state.remove("/music/a.mp3")

        assert removed is not None
        assert "/music/a.mp3" not in state
        assert state.get("/music/a.mp3") is None
        assert list(state.tags()) == []

    def test_record_kept_by_reference(self, state):
        """Edits to a stored record's tags show up in queries."""
        info = tagged("/music/a.mp3", "live")
        state.add(info)

        info.add_tag("Demo")

        assert state.get("/music/a.mp3") is info
        assert [t.display() for t in state.tags()] == ["Demo", "live"]

    def test_moving_a_record(self, state):
        """A record moves by remove and re-add under the new path."""
        state.add(tagged("/music/a.mp3", "live"))

        old = state.remove("/music/a.mp3")
        state.add(FileInfo(path=Path("/music/renamed.mp3"), tags=old.tags))

        assert "/music/a.mp3" not in state
        assert [t.display() for t in state.get("/music/renamed.mp3").tags] == ["live"]

    def test_remove_missing_returns_none(self, state):
        assert state.remove("/music/none.mp3") is None

    def test_extend_and_contains(self, state):
        state.extend([tagged("/music/a.mp3"), tagged("/music/b.mp3")])

        assert Path("/music/a.mp3") in state
        assert FileInfo.from_path("/music/b.mp3") in state
        assert 42 not in state
        assert len(state.infos) == 2

    def test_questionable_record_warns(self, state, caplog):
        """Storing a tagged record marked for deletion logs a warning."""
        with caplog.at_level(logging.WARNING, logger="fileperson.state"):
            state.add(tagged("/music/a.mp3", "keeper", delete=True))
            state.add(tagged("/music/b.mp3", delete=True))

        assert len(caplog.records) == 1
        assert "a.mp3" in caplog.records[0].getMessage()
        assert [i.path.name for i in state.questionable()] == ["a.mp3"]
        assert len(state) == 2


class TestStateTags:
    """Tests for tag aggregation."""

    @pytest.fixture
    def state(self) -> State:
        root = Path("/music")
        return State(Directory(this=root), Directory(this=root))

    def test_empty_store_has_no_tags(self, state):
        assert list(state.tags()) == []
        assert list(state.tags()) == []

    def test_case_duplicates_collapse(self, state):
        """Red/red/BLUE yields two tags, first literal wins."""
        state.add(tagged("/music/a.mp3", "Red", "BLUE"))
        state.add(tagged("/music/b.mp3", "red"))

        tags = list(state.tags())

        assert [t.folded for t in tags] == ["blue", "red"]
        assert [t.display() for t in tags] == ["BLUE", "Red"]

    def test_tie_break_follows_insertion_order(self, state):
        state.add(tagged("/music/a.mp3", "live"))
        state.add(tagged("/music/b.mp3", "LIVE"))
        assert [t.display() for t in state.tags()] == ["live"]

    def test_restartable(self, state):
        """Each call recomputes from current records."""
        state.add(tagged("/music/a.mp3", "b", "a"))

        first = list(state.tags())
        second = list(state.tags())
        assert first == second == [Tag("a"), Tag("b")]

        state.add(tagged("/music/c.mp3", "c"))
        assert [t.display() for t in state.tags()] == ["a", "b", "c"]

    def test_tags_filter(self, state):
        state.add(tagged("/music/keep.mp3", "Live"))
        state.add(tagged("/music/drop.mp3", "Demo", "live", delete=True))

        kept = state.tags_filter(lambda info: not info.delete)
        assert [t.display() for t in kept] == ["Live"]

        doomed = state.tags_filter(lambda info: info.delete is True)
        assert [t.display() for t in doomed] == ["Demo", "live"]


class TestStateSerialization:
    """Tests for the persistence-facing dict form."""

    def test_json_round_trip(self, media_tree, test_config):
        state = State.from_path(test_config.root, {"mp3", "wav"}, test_config)
        state.add(FileInfo(path=media_tree["mp3"], tags=[Tag("Live", color="red")]))
        state.add(FileInfo(path=media_tree["wav"], delete=True))

        data = json.loads(json.dumps(state.to_dict()))
        restored = State.from_dict(data)

        assert restored.root == state.root
        assert restored.flat == state.flat
        assert restored.infos == state.infos
        assert restored.get(media_tree["mp3"]).tags[0].color == "red"

    def test_dict_shape(self, media_tree, test_config):
        state = State.from_path(test_config.root, {"mp3"}, test_config)
        data = state.to_dict()

        assert set(data) == {"root", "flat", "infos"}
        assert data["flat"]["entries"] == [{"File": str(media_tree["mp3"])}]
        assert data["root"]["entries"][0]["Directory"]["this"] == str(media_tree["sub"])
