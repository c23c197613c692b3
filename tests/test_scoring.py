"""
Tests for scoring, combo decay and high score persistence.
"""

import pytest

from chef_catcher.catcher_core.config_loader import load_config
from chef_catcher.catcher_core.entities import PlayerState
from chef_catcher.catcher_core.persistence import InMemoryStore, JsonFileStore
from chef_catcher.catcher_core.scoring import ScoreTracker, parse_high_score
from chef_catcher.catcher_core.session import GameSession, SessionState


@pytest.fixture
def config():
    return load_config()


def make_tracker(config, store=None):
    session = GameSession(player=PlayerState(position=(200, 500), size=(30, 30)))
    session.state = SessionState.PLAYING
    return ScoreTracker(session, store, config)


class BrokenStore:
    """Store whose every call fails."""

    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("storage unavailable")


class TestPoints:
    """Test points per collection."""

    def test_points_formula(self, config):
        """Points are 10 plus 2 per combo held before the collection."""
        tracker = make_tracker(config)
        assert tracker.get_points(0) == 10
        assert tracker.get_points(1) == 12
        assert tracker.get_points(5) == 20

    def test_first_collection(self, config):
        tracker = make_tracker(config)
        event = tracker.on_collect(0)

        assert event.points == 10
        assert event.combo == 1
        assert tracker.score == 10
        assert tracker.combo == 1

    def test_streak_grows_points(self, config):
        """Consecutive collections inside the window add the combo bonus."""
        tracker = make_tracker(config)
        points = [tracker.on_collect(t).points for t in (0, 100, 200, 300)]

        assert points == [10, 12, 14, 16]
        assert tracker.score == 52
        assert tracker.combo == 4


class TestComboDecay:
    """Test the combo timeout window."""

    def test_collect_after_timeout_restarts_streak(self, config):
        """Collections at 0, 500 and 3000 ms score 10, 22 and 32."""
        tracker = make_tracker(config)

        tracker.on_collect(0)
        assert (tracker.score, tracker.combo) == (10, 1)

        tracker.on_collect(500)
        assert (tracker.score, tracker.combo) == (22, 2)

        event = tracker.on_collect(3000)
        assert event.streak_restarted
        assert event.points == 10
        assert (tracker.score, tracker.combo) == (32, 1)

    def test_gap_equal_to_timeout_keeps_streak(self, config):
        """Decay needs strictly more than the timeout."""
        tracker = make_tracker(config)
        tracker.on_collect(0)
        event = tracker.on_collect(2000)

        assert not event.streak_restarted
        assert event.points == 12
        assert tracker.combo == 2

    def test_idle_tick_decays_combo(self, config):
        tracker = make_tracker(config)
        tracker.on_collect(1000)

        assert tracker.on_idle_tick(3000) is False
        assert tracker.combo == 1
        assert tracker.on_idle_tick(3001) is True
        assert tracker.combo == 0

    def test_idle_tick_without_combo(self, config):
        """Nothing to decay when no streak is running."""
        tracker = make_tracker(config)
        assert tracker.on_idle_tick(100000) is False
        assert tracker.score == 0

    def test_decay_keeps_score(self, config):
        tracker = make_tracker(config)
        tracker.on_collect(0)
        tracker.on_collect(100)
        tracker.on_idle_tick(5000)

        assert tracker.combo == 0
        assert tracker.score == 22


class TestHighScore:
    """Test persisted high score handling."""

    def test_loaded_from_store(self, config):
        store = InMemoryStore({"chefHighScore": "15"})
        tracker = make_tracker(config, store)
        assert tracker.high_score == 15

    def test_updated_only_when_beaten(self, config):
        """The stored value changes only once the score passes it."""
        store = InMemoryStore({"chefHighScore": "15"})
        tracker = make_tracker(config, store)

        event = tracker.on_collect(0)
        assert not event.new_high_score
        assert store.get("chefHighScore") == "15"

        event = tracker.on_collect(100)
        assert event.new_high_score
        assert tracker.high_score == 22
        assert store.get("chefHighScore") == "22"

    def test_missing_value_reads_as_zero(self, config):
        tracker = make_tracker(config, InMemoryStore())
        assert tracker.high_score == 0

        event = tracker.on_collect(0)
        assert event.new_high_score
        assert tracker.high_score == 10

    def test_malformed_values_read_as_zero(self):
        assert parse_high_score(None) == 0
        assert parse_high_score("") == 0
        assert parse_high_score("abc") == 0
        assert parse_high_score("-40") == 0
        assert parse_high_score(" 120 ") == 120

    def test_malformed_store_value(self, config):
        tracker = make_tracker(config, InMemoryStore({"chefHighScore": "lots"}))
        assert tracker.high_score == 0

    def test_storage_errors_are_tolerated(self, config):
        """A failing store never interrupts scoring."""
        tracker = make_tracker(config, BrokenStore())
        assert tracker.high_score == 0

        event = tracker.on_collect(0)
        assert event.new_high_score
        assert tracker.high_score == 10

    def test_reset_keeps_high_score(self, config):
        tracker = make_tracker(config, InMemoryStore())
        tracker.on_collect(0)
        tracker.on_collect(100)
        tracker.reset()

        assert tracker.score == 0
        assert tracker.combo == 0
        assert tracker.high_score == 22

    def test_json_file_store(self, config, tmp_path):
        """High score survives a new tracker on the same file."""
        path = tmp_path / "scores" / "high_score.json"

        tracker = make_tracker(config, JsonFileStore(path))
        tracker.on_collect(0)
        assert path.exists()

        tracker = make_tracker(config, JsonFileStore(path))
        assert tracker.high_score == 10

    def test_json_file_store_rejects_non_object(self, tmp_path):
        path = tmp_path / "high_score.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(ValueError):
            JsonFileStore(path).get("chefHighScore")
