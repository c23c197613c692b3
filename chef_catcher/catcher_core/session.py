"""
Session State
=============

Mutable state structs for one play session, gathered in a single
`GameSession` aggregate. Components receive references to the parts
they own; there is no module-level game state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict

from chef_catcher.catcher_core.entities import FallingEntity, PlayerState


class SessionState(Enum):
    IDLE = 0
    PLAYING = 1
    GAME_OVER = 2


@dataclass
class ScoreState:
    score: int = 0
    combo: int = 0
    last_combo_at: float = 0.0
    high_score: int = 0


@dataclass
class PowerupState:
    shield_charges: int = 0
    magnet_active: bool = False
    magnet_expires_at: float = 0.0


@dataclass
class DifficultyState:
    elapsed_play_ms: float = 0.0
    level: float = 1.0
    periods_elapsed: int = 0
    period_accumulator_ms: float = 0.0


@dataclass
class GameSession:
    """
    Everything the per-tick logic reads and writes.

    `clock_ms` is play time: it only advances while PLAYING and is the
    timestamp used for combo decay and magnet expiry.
    """
    player: PlayerState
    state: SessionState = SessionState.IDLE
    clock_ms: float = 0.0
    game_over_ms: float = 0.0
    score: ScoreState = field(default_factory=ScoreState)
    powerups: PowerupState = field(default_factory=PowerupState)
    difficulty: DifficultyState = field(default_factory=DifficultyState)
    entities: Dict[int, FallingEntity] = field(default_factory=dict)

    @property
    def is_playing(self) -> bool:
        return self.state is SessionState.PLAYING
