"""
Physics World
=============

Default motion integrator backed by a pymunk Space.

The game rules never integrate motion themselves. Each tick the state
machine hands this world the player and the live entities; the world
moves them and writes positions back. Any object with the same methods
can stand in for it.

- Player: dynamic box under gravity, kept in by a floor and two side walls.
- Falling entities: kinematic bodies without shapes. They move at whatever
  velocity the entity carries (spawn fall speed or magnet steering) and never
  push the player; overlap is decided by the CollisionResolver.
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional

import pymunk

from chef_catcher.catcher_core.config_loader import GameConfig, get_config
from chef_catcher.catcher_core.entities import Direction, Facing, FallingEntity, PlayerState

# Collision types for pymunk
COLLISION_TYPE_PLAYER = 1
COLLISION_TYPE_WALL = 2

# Wall half-thickness; walls are offset so their inner surface sits on the edge
WALL_THICKNESS = 10.0


class PhysicsWorld:
    """
    Manages the pymunk simulation for the player and falling entities.

    Handles:
    - Static floor and side walls
    - Player body, horizontal drive, drag and jumping
    - Kinematic body bookkeeping for live entities
    - Stepping and writing positions back
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize physics world.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._width = float(config.playfield.width)
        self._height = float(config.playfield.height)

        self._space = pymunk.Space()
        self._space.gravity = (0.0, config.player.gravity)

        self._wall_shapes: List[pymunk.Segment] = []
        self._create_walls()

        self._player_body: Optional[pymunk.Body] = None
        self._player_shape: Optional[pymunk.Poly] = None
        self._entity_bodies: Dict[int, pymunk.Body] = {}
        self._direction = Direction.NONE
        self._create_player(config.player.start_x, config.player.start_y)

    def _create_walls(self) -> None:
        """Create static wall segments."""
        t = WALL_THICKNESS
        w = self._width
        h = self._height
        # Side walls reach well above the top edge so a jump can't escape
        top = -h

        static_body = self._space.static_body
        segments = [
            pymunk.Segment(static_body, (-t, h + t), (w + t, h + t), t),  # floor
            pymunk.Segment(static_body, (-t, top), (-t, h + t), t),       # left
            pymunk.Segment(static_body, (w + t, top), (w + t, h + t), t), # right
        ]
        for segment in segments:
            segment.friction = 0.0
            segment.elasticity = 0.0
            segment.collision_type = COLLISION_TYPE_WALL
            self._wall_shapes.append(segment)

        self._space.add(*self._wall_shapes)

    def _create_player(self, x: float, y: float) -> None:
        if self._player_body is not None:
            self._space.remove(self._player_body, self._player_shape)

        cfg = self._config.player
        # Infinite moment keeps the box upright
        body = pymunk.Body(1.0, float("inf"))
        body.position = (x, y)
        shape = pymunk.Poly.create_box(body, (cfg.width, cfg.height))
        shape.friction = 0.0
        shape.elasticity = 0.0
        shape.collision_type = COLLISION_TYPE_PLAYER

        self._space.add(body, shape)
        self._player_body = body
        self._player_shape = shape

    @property
    def space(self) -> pymunk.Space:
        """The pymunk Space instance."""
        return self._space

    @property
    def body_count(self) -> int:
        """Number of entity bodies currently tracked."""
        return len(self._entity_bodies)

    @property
    def player_velocity(self):
        v = self._player_body.velocity
        return v.x, v.y

    def reset(self, player: PlayerState) -> None:
        """Drop all entity bodies and put the player back at the start."""
        for entity_id in list(self._entity_bodies):
            self._remove_body(entity_id)
        self._direction = Direction.NONE
        self._create_player(self._config.player.start_x, self._config.player.start_y)
        player.position = (self._config.player.start_x, self._config.player.start_y)
        player.facing = Facing.RIGHT

    def set_direction(self, direction: Direction) -> None:
        """Directional hold to apply on the next step."""
        self._direction = direction

    def is_grounded(self) -> bool:
        """True if the player is resting on the floor."""
        floor_y = self._height - self._config.player.height / 2.0
        return abs(self._player_body.position.y - floor_y) <= self._config.physics.floor_tolerance

    def primary_action(self, player: PlayerState) -> bool:
        """
        Jump if grounded, otherwise reverse horizontal motion.

        Returns:
            True if the player jumped.
        """
        vx, vy = self.player_velocity
        if self.is_grounded():
            self._player_body.velocity = (vx, -self._config.player.jump_velocity)
            return True
        self._player_body.velocity = (-vx, vy)
        player.facing = Facing.LEFT if player.facing is Facing.RIGHT else Facing.RIGHT
        return False

    def _drive_player(self, dt: float) -> None:
        cfg = self._config.player
        vx, vy = self.player_velocity
        if self._direction is Direction.LEFT:
            vx = -cfg.move_speed
        elif self._direction is Direction.RIGHT:
            vx = cfg.move_speed
        else:
            slow = cfg.drag * dt
            vx = 0.0 if abs(vx) <= slow else vx - slow * (1 if vx > 0 else -1)
        self._player_body.velocity = (vx, vy)

    def _sync_bodies(self, entities: Dict[int, FallingEntity]) -> None:
        for entity_id in [k for k in self._entity_bodies if k not in entities]:
            self._remove_body(entity_id)

        for entity_id, entity in entities.items():
            body = self._entity_bodies.get(entity_id)
            if body is None:
                body = pymunk.Body(body_type=pymunk.Body.KINEMATIC)
                self._space.add(body)
                self._entity_bodies[entity_id] = body
            # Entity state is authoritative between steps
            body.position = entity.position
            body.velocity = entity.velocity

    def _remove_body(self, entity_id: int) -> None:
        body = self._entity_bodies.pop(entity_id, None)
        if body is not None:
            self._space.remove(body)

    def step(
        self,
        dt_ms: float,
        player: PlayerState,
        entities: Dict[int, FallingEntity]
    ) -> None:
        """
        Advance the simulation and write positions back.

        Args:
            dt_ms: Tick length in milliseconds.
            player: Player state to update.
            entities: Live entities by id; bodies are created/removed to match.
        """
        self._sync_bodies(entities)
        self._player_body.position = player.position
        if dt_ms <= 0:
            return

        dt = dt_ms / 1000.0
        self._drive_player(dt)

        # Fixed-size steps whatever the frame length, so the floor holds on long frames
        steps = max(1, math.ceil(dt_ms / self._config.physics.max_step_ms))
        for _ in range(steps):
            self._space.step(dt / steps)

        self._clamp_player()
        pos = self._player_body.position
        player.position = (pos.x, pos.y)
        for entity_id, body in self._entity_bodies.items():
            entities[entity_id].position = (body.position.x, body.position.y)

    def _clamp_player(self) -> None:
        """Keep the player box inside the side edges and above the floor."""
        cfg = self._config.player
        half_w = cfg.width / 2.0
        x, y = self._player_body.position
        vx, vy = self.player_velocity

        if x < half_w:
            x, vx = half_w, 0.0
        elif x > self._width - half_w:
            x, vx = self._width - half_w, 0.0

        floor_y = self._height - cfg.height / 2.0
        if y > floor_y:
            y = floor_y
            vy = min(vy, 0.0)

        self._player_body.position = (x, y)
        self._player_body.velocity = (vx, vy)
