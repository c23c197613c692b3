"""
Tests for the pymunk motion integrator.

These check positions after stepping, with tolerances for the solver.
"""

import pytest

from chef_catcher.catcher_core.config_loader import load_config
from chef_catcher.catcher_core.entities import Direction, EntityKind, Facing, FallingEntity, PlayerState
from chef_catcher.catcher_core.physics_world import PhysicsWorld

FRAME_MS = 1000.0 / 60.0


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def world(config):
    return PhysicsWorld(config)


@pytest.fixture
def player(config):
    return PlayerState(
        position=(config.player.start_x, config.player.start_y),
        size=(config.player.width, config.player.height),
    )


def run(world, player, frames, entities=None):
    entities = entities if entities is not None else {}
    for _ in range(frames):
        world.step(FRAME_MS, player, entities)


def make_entity(entity_id, x, y):
    return FallingEntity(
        id=entity_id,
        kind=EntityKind.INGREDIENT,
        position=(x, y),
        size=(40, 40),
        velocity=(0.0, 170.0),
        fall_velocity=(0.0, 170.0),
    )


class TestPlayerGravity:
    """Test falling and landing."""

    def test_player_falls_from_start(self, world, player):
        run(world, player, 5)
        assert player.position[1] > 500
        assert not world.is_grounded()

    def test_player_lands_on_floor(self, world, player):
        """Resting center is half the hitbox above the bottom edge."""
        run(world, player, 90)
        assert player.position[1] == pytest.approx(585, abs=1.0)
        assert world.is_grounded()

    def test_long_frames_hold_floor(self, world, player):
        """Long frames are split into short pymunk steps, so the floor holds."""
        for _ in range(12):
            world.step(250, player, {})
            assert player.position[1] <= 585

        assert world.is_grounded()
        _, vy = world.player_velocity
        assert vy == pytest.approx(0.0, abs=15.0)

    def test_single_huge_frame(self, world, player):
        world.step(5000, player, {})
        assert player.position[1] == pytest.approx(585, abs=1.0)

    def test_zero_dt_does_not_move(self, world, player):
        world.step(0, player, {})
        assert player.position == (200, 500)


class TestPlayerMovement:
    """Test horizontal drive and walls."""

    def test_move_right(self, world, player):
        world.set_direction(Direction.RIGHT)
        world.step(100, player, {})
        assert player.position[0] == pytest.approx(230, abs=0.5)

    def test_move_left(self, world, player):
        world.set_direction(Direction.LEFT)
        world.step(100, player, {})
        assert player.position[0] == pytest.approx(170, abs=0.5)

    def test_drag_slows_player(self, world, player):
        world.set_direction(Direction.RIGHT)
        world.step(FRAME_MS, player, {})
        world.set_direction(Direction.NONE)
        run(world, player, 30)

        vx, _ = world.player_velocity
        assert vx == pytest.approx(0.0)

    def test_left_wall(self, world, player):
        world.set_direction(Direction.LEFT)
        run(world, player, 120)
        assert 14 <= player.position[0] <= 16

    def test_right_wall(self, world, player):
        world.set_direction(Direction.RIGHT)
        run(world, player, 120)
        assert 384 <= player.position[0] <= 386


class TestPrimaryAction:
    """Test jump and mid-air reversal."""

    def test_jump_when_grounded(self, world, player):
        run(world, player, 90)
        assert world.primary_action(player) is True

        _, vy = world.player_velocity
        assert vy == pytest.approx(-600)

        run(world, player, 5)
        assert player.position[1] < 580

    def test_reverse_in_air(self, world, player):
        world.set_direction(Direction.RIGHT)
        world.step(FRAME_MS, player, {})
        vx_before, _ = world.player_velocity

        assert world.primary_action(player) is False
        vx_after, _ = world.player_velocity
        assert vx_after == pytest.approx(-vx_before)
        assert player.facing is Facing.LEFT


class TestEntityBodies:
    """Test kinematic body bookkeeping."""

    def test_entities_move_with_velocity(self, world, player):
        entity = make_entity(1, 100, 0)
        world.step(100, player, {1: entity})

        assert entity.position[0] == pytest.approx(100)
        assert entity.position[1] == pytest.approx(17)

    def test_bodies_follow_live_collection(self, world, player):
        entities = {1: make_entity(1, 100, 0), 2: make_entity(2, 300, 0)}
        world.step(FRAME_MS, player, entities)
        assert world.body_count == 2

        del entities[1]
        world.step(FRAME_MS, player, entities)
        assert world.body_count == 1

    def test_velocity_change_applies(self, world, player):
        """A steered velocity replaces the fall velocity on the next step."""
        entity = make_entity(1, 100, 100)
        world.step(100, player, {1: entity})
        entity.velocity = (300.0, 0.0)
        world.step(100, player, {1: entity})

        assert entity.position[0] == pytest.approx(130)
        assert entity.position[1] == pytest.approx(117)

    def test_entities_do_not_push_player(self, world, player):
        entity = make_entity(1, 200, 500)
        world.step(FRAME_MS, player, {1: entity})
        assert player.position[0] == pytest.approx(200)

    def test_reset(self, world, player):
        world.set_direction(Direction.RIGHT)
        run(world, player, 10, {1: make_entity(1, 100, 0)})
        player.facing = Facing.LEFT

        world.reset(player)

        assert world.body_count == 0
        assert player.position == (200, 500)
        assert player.facing is Facing.RIGHT
