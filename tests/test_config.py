"""
Tests for configuration loading and validation.
"""

import dataclasses
from pathlib import Path

import pytest
import yaml

import chef_catcher
from chef_catcher.catcher_core.config_loader import get_config, load_config
from chef_catcher.catcher_core.entities import EntityKind, PowerupType

DEFAULT_CONFIG_PATH = Path(chef_catcher.__file__).parent / "game_config.yaml"


@pytest.fixture
def raw_config():
    with open(DEFAULT_CONFIG_PATH, "r") as f:
        return yaml.safe_load(f)


def write_config(tmp_path, data):
    path = tmp_path / "game_config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(data, f)
    return str(path)


class TestDefaults:
    """Test the shipped configuration."""

    def test_playfield(self):
        config = load_config()
        assert config.playfield.width == 400
        assert config.playfield.height == 600
        assert config.playfield.despawn_y == 650

    def test_entity_types(self):
        config = load_config()
        ingredient = config.entity_type(EntityKind.INGREDIENT)
        hazard = config.entity_type(EntityKind.HAZARD)
        powerup = config.entity_type(EntityKind.POWERUP)

        assert (ingredient.width, ingredient.height) == (40, 40)
        assert (hazard.width, hazard.height) == (25, 25)
        assert (powerup.width, powerup.height) == (30, 30)
        assert ingredient.fall_speed(1.0) == 170
        assert hazard.fall_speed(1.0) == 230

    def test_spawner(self):
        config = load_config()
        (schedule,) = config.spawner.schedules
        assert schedule.interval_ms == 800
        assert dict(schedule.weights) == {
            EntityKind.INGREDIENT: 6,
            EntityKind.HAZARD: 3,
            EntityKind.POWERUP: 1,
        }
        assert dict(config.spawner.powerup_weights) == {
            PowerupType.SHIELD: 1,
            PowerupType.MAGNET: 1,
        }

    def test_gameplay_constants(self):
        config = load_config()
        assert config.scoring.base_points == 10
        assert config.scoring.combo_bonus == 2
        assert config.scoring.combo_timeout_ms == 2000
        assert config.scoring.high_score_key == "chefHighScore"
        assert config.powerups.shield_charges == 3
        assert config.powerups.magnet_duration_ms == 5000
        assert config.powerups.magnet_radius == 200
        assert config.powerups.magnet_speed == 300
        assert config.difficulty.period_ms == 5000
        assert config.difficulty.level_step == pytest.approx(0.1)

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_config_is_frozen(self):
        config = load_config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.playfield.width = 10


class TestValidation:
    """Test rejection of inconsistent files."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_unknown_kind_in_weights(self, tmp_path, raw_config):
        raw_config["spawner"]["schedules"][0]["weights"]["boulder"] = 2
        with pytest.raises(ValueError, match="boulder"):
            load_config(write_config(tmp_path, raw_config))

    def test_unknown_powerup(self, tmp_path, raw_config):
        raw_config["spawner"]["powerup_weights"] = {"speed": 1}
        with pytest.raises(ValueError, match="speed"):
            load_config(write_config(tmp_path, raw_config))

    def test_missing_entity_kind(self, tmp_path, raw_config):
        del raw_config["entities"]["hazard"]
        with pytest.raises(ValueError, match="hazard"):
            load_config(write_config(tmp_path, raw_config))

    def test_zero_interval(self, tmp_path, raw_config):
        raw_config["spawner"]["schedules"][0]["interval_ms"] = 0
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_zero_weights(self, tmp_path, raw_config):
        weights = raw_config["spawner"]["schedules"][0]["weights"]
        for key in weights:
            weights[key] = 0
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_zero_period(self, tmp_path, raw_config):
        raw_config["difficulty"]["period_ms"] = 0
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    @pytest.mark.parametrize("section, key", [
        ("physics", "max_step_ms"),
        ("session", "max_dt_ms"),
    ])
    def test_zero_step_sizes(self, tmp_path, raw_config, section, key):
        """Frame slicing and pymunk stepping both need a positive size."""
        raw_config[section][key] = 0
        with pytest.raises(ValueError, match=key):
            load_config(write_config(tmp_path, raw_config))

    def test_spawn_margin_too_wide(self, tmp_path, raw_config):
        raw_config["playfield"]["spawn_margin"] = 250
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_empty_schedules_allowed(self, tmp_path, raw_config):
        """A config with no spawn schedules loads; nothing spawns on its own."""
        raw_config["spawner"]["schedules"] = []
        config = load_config(write_config(tmp_path, raw_config))
        assert config.spawner.schedules == ()
