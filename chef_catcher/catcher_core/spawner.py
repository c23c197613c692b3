"""
Entity Spawner
==============

Schedules falling entities and owns the live-entity collection.

Each configured schedule keeps its own time accumulator. When an
accumulator passes its interval, one weighted roll decides what falls.
With the default weights (ingredient 6, hazard 3, power-up 1) a roll
of 1-10 maps to ingredient on 1-6, hazard on 7-9 and power-up on 10,
the power-up then split between shield and magnet.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Tuple

from chef_catcher.catcher_core.config_loader import GameConfig, SpawnScheduleConfig, get_config
from chef_catcher.catcher_core.difficulty import DifficultyController
from chef_catcher.catcher_core.entities import EntityKind, FallingEntity, PowerupType
from chef_catcher.catcher_core.session import GameSession

logger = logging.getLogger(__name__)

# Guard against a zero interval turning the accumulator loop infinite
_MIN_INTERVAL_MS = 1.0


class EntitySpawner:
    """
    Timed, seeded spawning of ingredients, hazards and power-ups.

    Spawning is suppressed entirely unless the session is PLAYING, which
    is how pending timers are cancelled after a game over.
    """

    def __init__(
        self,
        session: GameSession,
        difficulty: DifficultyController,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize spawner.

        Args:
            session: Session whose entity collection this spawner owns.
            difficulty: Source of the current level for fall speeds.
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._session = session
        self._difficulty = difficulty
        self._rng = random.Random(seed)
        self._accumulators: List[float] = [0.0] * len(config.spawner.schedules)

        # Ids are never reused, even across sessions
        self._next_id = 0

    @property
    def entities(self) -> Dict[int, FallingEntity]:
        """Live entities by id."""
        return self._session.entities

    @property
    def live_entities(self) -> List[FallingEntity]:
        """Live entities in id (spawn) order."""
        return [self._session.entities[k] for k in sorted(self._session.entities)]

    @property
    def entity_count(self) -> int:
        return len(self._session.entities)

    @property
    def accumulators(self) -> Tuple[float, ...]:
        """Milliseconds accumulated toward each schedule's next spawn."""
        return tuple(self._accumulators)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Clear live entities and timers.

        Args:
            seed: New random seed. Keeps current RNG stream if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
        self.clear()
        self._accumulators = [0.0] * len(self._config.spawner.schedules)

    def clear(self) -> None:
        """Remove every live entity."""
        self._session.entities.clear()

    def advance(self, dt_ms: float) -> List[FallingEntity]:
        """
        Accumulate time on every schedule and spawn for each elapsed interval.

        Args:
            dt_ms: Milliseconds since the last tick.

        Returns:
            Entities spawned this call, in spawn order.
        """
        if not self._session.is_playing or dt_ms <= 0:
            return []

        spawned: List[FallingEntity] = []
        for index, schedule in enumerate(self._config.spawner.schedules):
            interval = max(
                _MIN_INTERVAL_MS,
                self._difficulty.spawn_interval_ms(schedule.interval_ms)
            )
            self._accumulators[index] += dt_ms
            while self._accumulators[index] >= interval:
                self._accumulators[index] -= interval
                kind, powerup = self.roll_kind(schedule)
                entity = self.spawn(kind, powerup=powerup)
                if entity is not None:
                    spawned.append(entity)
        return spawned

    def roll_kind(self, schedule: SpawnScheduleConfig) -> Tuple[EntityKind, Optional[PowerupType]]:
        """
        Roll once against a schedule's weights.

        Returns:
            (kind, powerup subtype or None).
        """
        kind = self._weighted_pick(schedule.weights)
        if kind is EntityKind.POWERUP:
            return kind, self._weighted_pick(self._config.spawner.powerup_weights)
        return kind, None

    def _weighted_pick(self, weights):
        total = sum(w for _, w in weights)
        roll = self._rng.randint(1, total)
        cumulative = 0
        for choice, weight in weights:
            cumulative += weight
            if roll <= cumulative:
                return choice
        return weights[-1][0]

    def spawn(
        self,
        kind: EntityKind,
        x: Optional[float] = None,
        y: Optional[float] = None,
        powerup: Optional[PowerupType] = None
    ) -> Optional[FallingEntity]:
        """
        Create one entity and add it to the live collection.

        Args:
            kind: Entity kind. Anything but an EntityKind raises ValueError.
            x: Horizontal position. Uniform in the spawn range if None.
            y: Vertical position. The configured spawn line if None.
            powerup: Required subtype for POWERUP entities.

        Returns:
            The new entity, or None when the session is not PLAYING.
        """
        if not isinstance(kind, EntityKind):
            raise ValueError(f"Unknown entity kind: {kind!r}")
        if not self._session.is_playing:
            return None

        playfield = self._config.playfield
        if x is None:
            x = self._rng.uniform(playfield.spawn_margin, playfield.width - playfield.spawn_margin)
        if y is None:
            y = playfield.spawn_y

        type_cfg = self._config.entity_type(kind)
        fall = (0.0, self._difficulty.fall_speed(type_cfg.fall_speed_base, type_cfg.fall_speed_per_level))

        entity = FallingEntity(
            id=self._next_id,
            kind=kind,
            position=(float(x), float(y)),
            size=(type_cfg.width, type_cfg.height),
            velocity=fall,
            fall_velocity=fall,
            powerup=powerup,
        )
        self._next_id += 1
        self._session.entities[entity.id] = entity

        logger.debug(
            "Spawned %s #%d at x=%.1f falling %.1f",
            powerup.value if powerup else kind.value, entity.id, x, fall[1]
        )
        return entity

    def remove(self, entity_id: int) -> Optional[FallingEntity]:
        """Remove an entity for good. Returns it, or None if not live."""
        return self._session.entities.pop(entity_id, None)

    def get(self, entity_id: int) -> Optional[FallingEntity]:
        return self._session.entities.get(entity_id)
