"""
Core Game
=========

The game state machine: lifecycle plus the fixed per-tick sequence.

    Idle --start--> Playing --fatal hazard--> GameOver --restart--> Playing

Each PLAYING tick runs, in order: difficulty, spawning, motion
integration, magnet expiry and combo decay, magnet steering, collision
resolution with reactions, then the offscreen sweep. All timers are
accumulators evaluated here, so a seed plus a sequence of dt values
reproduces a run exactly.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from chef_catcher.catcher_core.collision import CollisionHit, CollisionResolver
from chef_catcher.catcher_core.config_loader import GameConfig, get_config
from chef_catcher.catcher_core.difficulty import DifficultyController
from chef_catcher.catcher_core.entities import (
    Direction,
    EntityKind,
    Facing,
    FallingEntity,
    PlayerState,
)
from chef_catcher.catcher_core.events import EventCallback, EventType, GameEvent
from chef_catcher.catcher_core.persistence import PersistenceGateway
from chef_catcher.catcher_core.physics_world import PhysicsWorld
from chef_catcher.catcher_core.powerups import PowerupManager
from chef_catcher.catcher_core.scoring import ScoreTracker
from chef_catcher.catcher_core.session import GameSession, SessionState
from chef_catcher.catcher_core.spawner import EntitySpawner

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Result of a single tick."""
    state: SessionState
    dt_ms: float
    delta_score: int
    events: List[GameEvent] = field(default_factory=list)
    spawned: List[FallingEntity] = field(default_factory=list)
    hits: List[CollisionHit] = field(default_factory=list)
    despawned: List[FallingEntity] = field(default_factory=list)

    @property
    def game_over(self) -> bool:
        return self.state is SessionState.GAME_OVER


class GameStateMachine:
    """
    Main game simulation class.

    Orchestrates:
    - Difficulty curve
    - Entity spawning (seeded RNG)
    - Motion integration (pymunk world by default)
    - Power-ups
    - Collision resolution
    - Scoring and high score persistence
    - Lifecycle state

    No trigger raises; a trigger that does not apply to the current state
    is ignored and reported as False.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        store: Optional[PersistenceGateway] = None,
        event_callback: Optional[EventCallback] = None,
        physics: Optional[PhysicsWorld] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            store: High-score storage. In-memory only if None.
            event_callback: Optional sink notified of every GameEvent.
            physics: Motion integrator. A new PhysicsWorld if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._event_callback = event_callback

        player = PlayerState(
            position=(config.player.start_x, config.player.start_y),
            size=(config.player.width, config.player.height),
        )
        self._session = GameSession(player=player)

        # Initialize subsystems
        self._difficulty = DifficultyController(self._session, config)
        self._spawner = EntitySpawner(self._session, self._difficulty, config, seed)
        self._resolver = CollisionResolver(config)
        self._powerups = PowerupManager(self._session, config)
        self._scorer = ScoreTracker(self._session, store, config)
        self._physics = physics if physics is not None else PhysicsWorld(config)

        self._pending_events: List[GameEvent] = []

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def seed(self) -> Optional[int]:
        """Most recent seed given to the spawner."""
        return self._seed

    @property
    def session(self) -> GameSession:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def is_over(self) -> bool:
        """True if the session ended in a game over."""
        return self._session.state is SessionState.GAME_OVER

    @property
    def player(self) -> PlayerState:
        return self._session.player

    @property
    def entities(self) -> Dict[int, FallingEntity]:
        return self._session.entities

    @property
    def clock_ms(self) -> float:
        """Play time of the current session."""
        return self._session.clock_ms

    @property
    def score(self) -> int:
        """Current score."""
        return self._scorer.score

    @property
    def combo(self) -> int:
        return self._scorer.combo

    @property
    def high_score(self) -> int:
        return self._scorer.high_score

    @property
    def level(self) -> float:
        return self._difficulty.level

    @property
    def difficulty(self) -> DifficultyController:
        return self._difficulty

    @property
    def spawner(self) -> EntitySpawner:
        return self._spawner

    @property
    def resolver(self) -> CollisionResolver:
        return self._resolver

    @property
    def powerups(self) -> PowerupManager:
        return self._powerups

    @property
    def scorer(self) -> ScoreTracker:
        return self._scorer

    @property
    def physics(self) -> PhysicsWorld:
        return self._physics

    def _emit(self, event: GameEvent) -> None:
        self._pending_events.append(event)
        if self._event_callback is not None:
            self._event_callback(event)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Return to IDLE with an empty playfield.

        Args:
            seed: New random seed. The RNG stream continues if None.
        """
        if seed is not None:
            self._seed = seed
        self._spawner.reset(seed)
        self._scorer.reset()
        self._difficulty.reset()
        self._powerups.reset()
        self._physics.reset(self._session.player)
        self._session.clock_ms = 0.0
        self._session.game_over_ms = 0.0
        self._session.state = SessionState.IDLE
        self._pending_events = []

    def _begin_session(self) -> None:
        """Entry to PLAYING: fresh score, difficulty, power-ups and playfield."""
        self._scorer.reset()
        self._difficulty.reset()
        self._powerups.reset()
        self._spawner.reset()
        self._physics.reset(self._session.player)
        self._session.clock_ms = 0.0
        self._session.game_over_ms = 0.0
        self._session.state = SessionState.PLAYING

        logger.info("Session started (high score %d)", self._scorer.high_score)
        self._emit(GameEvent(EventType.GAME_STARTED, value=self._scorer.high_score))

    def _enter_game_over(self) -> None:
        self._session.state = SessionState.GAME_OVER
        self._session.game_over_ms = 0.0
        self._physics.set_direction(Direction.NONE)

        logger.info(
            "Game over: score %d, level %.1f, %.0f ms played",
            self._scorer.score, self._difficulty.level, self._session.clock_ms
        )
        self._emit(GameEvent(EventType.GAME_OVER, value=self._scorer.score))

    def start(self) -> bool:
        """IDLE -> PLAYING. Returns False (no-op) from any other state."""
        if self._session.state is not SessionState.IDLE:
            return False
        self._begin_session()
        return True

    @property
    def can_restart(self) -> bool:
        return (
            self._session.state is SessionState.GAME_OVER
            and self._session.game_over_ms >= self._config.session.restart_delay_ms
        )

    def restart(self) -> bool:
        """
        GAME_OVER -> PLAYING through a fresh session reset.

        Ignored until the restart delay has passed since the game over.
        """
        if not self.can_restart:
            return False
        self._begin_session()
        return True

    def primary_action(self) -> bool:
        """
        Context-dependent primary input: start, restart, or jump/reverse.

        Returns:
            True if the action changed anything.
        """
        state = self._session.state
        if state is SessionState.IDLE:
            return self.start()
        if state is SessionState.GAME_OVER:
            return self.restart()
        self._physics.primary_action(self._session.player)
        return True

    def clear_entities(self) -> None:
        """Drop every live entity, e.g. once a game-over screen has been dismissed."""
        self._spawner.clear()

    def _sanitize_dt(self, dt_ms: float) -> float:
        try:
            dt_ms = float(dt_ms)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(dt_ms) or dt_ms < 0:
            return 0.0
        return dt_ms

    def tick(
        self,
        dt_ms: float,
        direction: Direction = Direction.NONE,
        primary_action: bool = False
    ) -> TickResult:
        """
        Advance the game by one frame.

        Args:
            dt_ms: Frame time in milliseconds. Negative, NaN or infinite
                counts as 0. Frames longer than session.max_dt_ms run as
                consecutive slices so no play time is lost.
            direction: Directional hold this frame.
            primary_action: True if the primary action fired this frame.

        Returns:
            TickResult with the events and entity changes of this frame.
        """
        dt = self._sanitize_dt(dt_ms)
        score_before = self._scorer.score

        if primary_action:
            self.primary_action()

        session = self._session
        result = TickResult(state=session.state, dt_ms=dt, delta_score=0)

        if session.state is SessionState.GAME_OVER:
            session.game_over_ms += dt
        elif session.state is SessionState.PLAYING:
            max_slice = self._config.session.max_dt_ms
            remaining = dt
            while True:
                slice_ms = min(remaining, max_slice)
                remaining -= slice_ms
                self._play_tick(slice_ms, direction, result)
                if remaining <= 0:
                    break
                if session.state is not SessionState.PLAYING:
                    # The rest of the frame counts toward the restart delay
                    session.game_over_ms += remaining
                    break

        result.state = session.state
        result.delta_score = self._scorer.score - score_before
        result.events = self._pending_events
        self._pending_events = []
        return result

    def _play_tick(self, dt: float, direction: Direction, result: TickResult) -> None:
        session = self._session
        player = session.player

        if direction is Direction.LEFT:
            player.facing = Facing.LEFT
        elif direction is Direction.RIGHT:
            player.facing = Facing.RIGHT

        session.clock_ms += dt
        now = session.clock_ms

        self._difficulty.advance(dt)

        spawned = self._spawner.advance(dt)
        result.spawned.extend(spawned)
        for entity in spawned:
            self._emit(GameEvent(
                EventType.ENTITY_SPAWNED,
                entity_id=entity.id,
                kind=entity.kind,
                powerup=entity.powerup,
                position=entity.position,
            ))

        self._physics.set_direction(direction)
        self._physics.step(dt, player, session.entities)

        if self._powerups.advance(now):
            self._emit(GameEvent(EventType.MAGNET_EXPIRED))
        self._scorer.on_idle_tick(now)

        self._powerups.apply_magnet(player, self._spawner.live_entities)

        hits = self._resolver.check(player.bounds, session.entities.values())
        result.hits.extend(hits)
        for hit in hits:
            self._spawner.remove(hit.entity.id)
            # Overlaps after a fatal hit this tick are consumed silently
            if session.state is not SessionState.PLAYING:
                continue
            self._react(hit, now)

        if session.state is SessionState.PLAYING:
            despawned = self._resolver.sweep_offscreen(session.entities.values())
            result.despawned.extend(despawned)
            for entity in despawned:
                self._spawner.remove(entity.id)
                self._emit(GameEvent(
                    EventType.ENTITY_DESPAWNED,
                    entity_id=entity.id,
                    kind=entity.kind,
                    powerup=entity.powerup,
                    position=entity.position,
                ))

    def _react(self, hit: CollisionHit, now: float) -> None:
        entity = hit.entity

        if hit.kind is EntityKind.INGREDIENT:
            event = self._scorer.on_collect(now)
            self._emit(GameEvent(
                EventType.ENTITY_COLLECTED,
                entity_id=entity.id,
                kind=entity.kind,
                position=entity.position,
                points=event.points,
            ))
            if event.combo > 1:
                self._emit(GameEvent(EventType.COMBO_ACHIEVED, value=event.combo))
            if event.new_high_score:
                self._emit(GameEvent(EventType.HIGH_SCORE_UPDATED, value=event.score))

        elif hit.kind is EntityKind.POWERUP:
            self._powerups.on_collect(entity.powerup, now)
            self._emit(GameEvent(
                EventType.ENTITY_COLLECTED,
                entity_id=entity.id,
                kind=entity.kind,
                powerup=entity.powerup,
                position=entity.position,
            ))

        elif hit.kind is EntityKind.HAZARD:
            absorbed = self._powerups.on_hazard_hit()
            self._emit(GameEvent(
                EventType.ENTITY_HIT,
                entity_id=entity.id,
                kind=entity.kind,
                position=entity.position,
                absorbed=absorbed,
                value=self._powerups.shield_charges,
            ))
            if not absorbed:
                self._enter_game_over()

        else:
            raise ValueError(f"Unknown entity kind: {hit.kind!r}")

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "state": self._session.state.name.lower(),
            "score": self._scorer.score,
            "combo": self._scorer.combo,
            "high_score": self._scorer.high_score,
            "level": self._difficulty.level,
            "clock_ms": self._session.clock_ms,
            "shield_charges": self._powerups.shield_charges,
            "magnet_active": self._powerups.magnet_active,
            "entity_count": self._spawner.entity_count,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with player, entities and HUD values.
        """
        player = self._session.player
        entities_data = []
        for entity in self._spawner.live_entities:
            entities_data.append({
                "id": entity.id,
                "kind": entity.kind.value,
                "powerup": entity.powerup.value if entity.powerup else None,
                "x": entity.position[0],
                "y": entity.position[1],
                "width": entity.size[0],
                "height": entity.size[1],
                "active": entity.active,
            })

        return {
            "playfield_width": self._config.playfield.width,
            "playfield_height": self._config.playfield.height,
            "state": self._session.state.name.lower(),
            "player": {
                "x": player.position[0],
                "y": player.position[1],
                "width": player.size[0],
                "height": player.size[1],
                "facing": player.facing.value,
            },
            "entities": entities_data,
            "score": self._scorer.score,
            "combo": self._scorer.combo,
            "high_score": self._scorer.high_score,
            "level": self._difficulty.level,
            "shield_charges": self._powerups.shield_charges,
            "magnet_remaining_ms": self._powerups.magnet_remaining_ms(self._session.clock_ms),
            "can_restart": self.can_restart,
        }
