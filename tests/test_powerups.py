"""
Tests for shield charges and the magnet.
"""

import pytest

from chef_catcher.catcher_core.config_loader import load_config
from chef_catcher.catcher_core.entities import EntityKind, FallingEntity, PlayerState, PowerupType
from chef_catcher.catcher_core.powerups import PowerupManager
from chef_catcher.catcher_core.session import GameSession, SessionState


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def session():
    session = GameSession(player=PlayerState(position=(200, 500), size=(30, 30)))
    session.state = SessionState.PLAYING
    return session


@pytest.fixture
def manager(session, config):
    return PowerupManager(session, config)


def make_entity(entity_id, kind, x, y, powerup=None):
    return FallingEntity(
        id=entity_id,
        kind=kind,
        position=(x, y),
        size=(40, 40),
        velocity=(0.0, 170.0),
        fall_velocity=(0.0, 170.0),
        powerup=powerup,
    )


class TestShield:
    """Test shield charges."""

    def test_starts_without_charges(self, manager):
        assert manager.shield_charges == 0
        assert manager.on_hazard_hit() is False

    def test_pickup_sets_charges(self, manager):
        manager.on_collect(PowerupType.SHIELD, 0)
        assert manager.shield_charges == 3

    def test_pickups_do_not_stack(self, manager):
        """A second pickup refills to the maximum, never above it."""
        manager.on_collect(PowerupType.SHIELD, 0)
        manager.on_hazard_hit()
        assert manager.shield_charges == 2

        manager.on_collect(PowerupType.SHIELD, 100)
        assert manager.shield_charges == 3
        manager.on_collect(PowerupType.SHIELD, 200)
        assert manager.shield_charges == 3

    def test_absorbs_until_depleted(self, manager):
        """Three hits are absorbed, the fourth is fatal."""
        manager.on_collect(PowerupType.SHIELD, 0)

        assert [manager.on_hazard_hit() for _ in range(4)] == [True, True, True, False]
        assert manager.shield_charges == 0

    def test_unknown_powerup_rejected(self, manager):
        with pytest.raises(ValueError):
            manager.on_collect("speed", 0)


class TestMagnetTimer:
    """Test magnet activation and expiry."""

    def test_activation(self, manager):
        manager.on_collect(PowerupType.MAGNET, 1000)

        assert manager.magnet_active
        assert manager.state.magnet_expires_at == 6000
        assert manager.magnet_remaining_ms(1000) == 5000

    def test_expires_after_duration(self, manager):
        manager.on_collect(PowerupType.MAGNET, 1000)

        assert manager.advance(5999) is False
        assert manager.magnet_active
        assert manager.advance(6000) is True
        assert not manager.magnet_active
        assert manager.magnet_remaining_ms(6000) == 0.0

    def test_expiry_reported_once(self, manager):
        manager.on_collect(PowerupType.MAGNET, 0)
        assert manager.advance(5000) is True
        assert manager.advance(5100) is False

    def test_second_pickup_restarts_timer(self, manager):
        manager.on_collect(PowerupType.MAGNET, 0)
        manager.on_collect(PowerupType.MAGNET, 3000)

        assert manager.advance(5000) is False
        assert manager.magnet_remaining_ms(5000) == 3000

    def test_reset(self, manager):
        manager.on_collect(PowerupType.SHIELD, 0)
        manager.on_collect(PowerupType.MAGNET, 0)
        manager.reset()

        assert manager.shield_charges == 0
        assert not manager.magnet_active


class TestMagnetSteering:
    """Test ingredient attraction."""

    def test_in_range_ingredient_steered(self, session, manager):
        """An ingredient 199 px above the player moves straight down at 300."""
        manager.on_collect(PowerupType.MAGNET, 0)
        entity = make_entity(1, EntityKind.INGREDIENT, 200, 301)

        steered = manager.apply_magnet(session.player, [entity])

        assert steered == [entity]
        assert entity.velocity[0] == pytest.approx(0.0)
        assert entity.velocity[1] == pytest.approx(300.0)

    def test_out_of_range_ingredient_falls(self, session, manager):
        manager.on_collect(PowerupType.MAGNET, 0)
        entity = make_entity(1, EntityKind.INGREDIENT, 200, 299)

        assert manager.apply_magnet(session.player, [entity]) == []
        assert entity.velocity == (0.0, 170.0)

    def test_diagonal_direction(self, session, manager):
        manager.on_collect(PowerupType.MAGNET, 0)
        entity = make_entity(1, EntityKind.INGREDIENT, 100, 400)

        manager.apply_magnet(session.player, [entity])

        vx, vy = entity.velocity
        assert vx == pytest.approx(300 / 2 ** 0.5)
        assert vy == pytest.approx(300 / 2 ** 0.5)

    def test_hazards_and_powerups_ignored(self, session, manager):
        manager.on_collect(PowerupType.MAGNET, 0)
        hazard = make_entity(1, EntityKind.HAZARD, 200, 450)
        shield = make_entity(2, EntityKind.POWERUP, 200, 450, powerup=PowerupType.SHIELD)

        assert manager.apply_magnet(session.player, [hazard, shield]) == []
        assert hazard.velocity == (0.0, 170.0)
        assert shield.velocity == (0.0, 170.0)

    def test_inactive_magnet_restores_fall(self, session, manager):
        """Steering lasts only while the magnet is on."""
        manager.on_collect(PowerupType.MAGNET, 0)
        entity = make_entity(1, EntityKind.INGREDIENT, 200, 400)
        manager.apply_magnet(session.player, [entity])
        assert entity.velocity[1] == pytest.approx(300.0)

        manager.advance(5000)
        manager.apply_magnet(session.player, [entity])
        assert entity.velocity == (0.0, 170.0)

    def test_zero_distance(self, session, manager):
        manager.on_collect(PowerupType.MAGNET, 0)
        entity = make_entity(1, EntityKind.INGREDIENT, 200, 500)

        manager.apply_magnet(session.player, [entity])
        assert entity.velocity == (0.0, 0.0)
