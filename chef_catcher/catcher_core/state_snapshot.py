"""
State Snapshot
==============

Packs game state into fixed-size numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

import numpy as np

from chef_catcher.catcher_core.config_loader import GameConfig, get_config
from chef_catcher.catcher_core.entities import Facing

if TYPE_CHECKING:
    from chef_catcher.catcher_core.game import GameStateMachine


@dataclass
class GameSnapshot:
    """
    Game state at one instant.

    Entity arrays are fixed-size with a mask for the variable entity count.
    Kind ids: 0 ingredient, 1 hazard, 2 shield, 3 magnet, -1 empty slot.
    """
    # Core state
    state: int
    score: int
    combo: int
    high_score: int
    level: float
    clock_ms: float
    shield_charges: int
    magnet_remaining_ms: float

    # Player
    player_x: float
    player_y: float
    player_facing: int        # 0 left, 1 right

    # Entity arrays (fixed size, padded)
    entity_count: int
    ent_kind: np.ndarray      # (MAX_ENT,) int16
    ent_x: np.ndarray         # (MAX_ENT,) float32
    ent_y: np.ndarray         # (MAX_ENT,) float32
    ent_vx: np.ndarray        # (MAX_ENT,) float32
    ent_vy: np.ndarray        # (MAX_ENT,) float32
    ent_mask: np.ndarray      # (MAX_ENT,) bool

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            "state": np.array(self.state, dtype=np.int32),
            "score": np.array(self.score, dtype=np.int64),
            "combo": np.array(self.combo, dtype=np.int32),
            "level": np.array(self.level, dtype=np.float32),
            "shield_charges": np.array(self.shield_charges, dtype=np.int32),
            "magnet_remaining_ms": np.array(self.magnet_remaining_ms, dtype=np.float32),
            "player_x": np.array(self.player_x, dtype=np.float32),
            "player_y": np.array(self.player_y, dtype=np.float32),
            "player_facing": np.array(self.player_facing, dtype=np.int32),
            "entity_count": np.array(self.entity_count, dtype=np.int32),
            "ent_kind": self.ent_kind.copy(),
            "ent_x": self.ent_x.copy(),
            "ent_y": self.ent_y.copy(),
            "ent_vx": self.ent_vx.copy(),
            "ent_vy": self.ent_vy.copy(),
            "ent_mask": self.ent_mask.copy(),
        }


class SnapshotBuilder:
    """Builds game state snapshots with pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_entities = config.observation.max_entities

        # Pre-allocate arrays
        self._ent_kind = np.zeros(self._max_entities, dtype=np.int16)
        self._ent_x = np.zeros(self._max_entities, dtype=np.float32)
        self._ent_y = np.zeros(self._max_entities, dtype=np.float32)
        self._ent_vx = np.zeros(self._max_entities, dtype=np.float32)
        self._ent_vy = np.zeros(self._max_entities, dtype=np.float32)
        self._ent_mask = np.zeros(self._max_entities, dtype=bool)

    @property
    def max_entities(self) -> int:
        return self._max_entities

    def build(self, game: "GameStateMachine") -> GameSnapshot:
        """Build a snapshot from current game state."""
        self._ent_kind.fill(-1)
        self._ent_x.fill(0)
        self._ent_y.fill(0)
        self._ent_vx.fill(0)
        self._ent_vy.fill(0)
        self._ent_mask.fill(False)

        # Oldest entities first; overflow beyond the array size is dropped
        entities = game.spawner.live_entities
        count = min(len(entities), self._max_entities)
        for i in range(count):
            entity = entities[i]
            self._ent_kind[i] = entity.kind_id
            self._ent_x[i] = entity.position[0]
            self._ent_y[i] = entity.position[1]
            self._ent_vx[i] = entity.velocity[0]
            self._ent_vy[i] = entity.velocity[1]
            self._ent_mask[i] = entity.active

        player = game.player
        return GameSnapshot(
            state=game.state.value,
            score=game.score,
            combo=game.combo,
            high_score=game.high_score,
            level=game.level,
            clock_ms=game.clock_ms,
            shield_charges=game.powerups.shield_charges,
            magnet_remaining_ms=game.powerups.magnet_remaining_ms(game.clock_ms),
            player_x=player.position[0],
            player_y=player.position[1],
            player_facing=0 if player.facing is Facing.LEFT else 1,
            entity_count=count,
            ent_kind=self._ent_kind,
            ent_x=self._ent_x,
            ent_y=self._ent_y,
            ent_vx=self._ent_vx,
            ent_vy=self._ent_vy,
            ent_mask=self._ent_mask,
        )
