"""
Difficulty Controller
=====================

Turns elapsed play time into a difficulty level.

The level rises by a fixed step every fixed period and never caps:
difficulty keeps growing for the whole session, endless-runner style.
"""

from __future__ import annotations

from typing import Optional

from chef_catcher.catcher_core.config_loader import GameConfig, get_config
from chef_catcher.catcher_core.session import DifficultyState, GameSession


class DifficultyController:
    """
    Accumulates play time and derives level, fall speeds and spawn intervals.

    Only advances while the session is PLAYING.
    """

    def __init__(self, session: GameSession, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._session = session
        self.reset()

    @property
    def state(self) -> DifficultyState:
        return self._session.difficulty

    @property
    def level(self) -> float:
        """Current difficulty level."""
        return self._session.difficulty.level

    def reset(self) -> None:
        """Return to the initial level with no elapsed time."""
        self._session.difficulty = DifficultyState(level=self._config.difficulty.initial_level)

    def advance(self, dt_ms: float) -> None:
        """
        Accumulate play time, stepping the level once per elapsed period.

        Args:
            dt_ms: Milliseconds since the last tick. Negative values count as 0.
        """
        if not self._session.is_playing or dt_ms <= 0:
            return

        cfg = self._config.difficulty
        state = self._session.difficulty
        state.elapsed_play_ms += dt_ms
        state.period_accumulator_ms += dt_ms

        while state.period_accumulator_ms >= cfg.period_ms:
            state.period_accumulator_ms -= cfg.period_ms
            state.periods_elapsed += 1

        # Derived from the integer count so repeated steps don't drift
        state.level = cfg.initial_level + cfg.level_step * state.periods_elapsed

    def fall_speed(self, base: float, per_level: float) -> float:
        """Fall speed for a kind with the given constants at the current level."""
        return base + self.level * per_level

    def spawn_interval_ms(self, base_interval_ms: float) -> float:
        """
        Effective spawn interval at the current level.

        With interval_scale_per_level at 0 the base interval is returned unchanged.
        """
        cfg = self._config.difficulty
        if cfg.interval_scale_per_level <= 0:
            return base_interval_ms
        growth = 1.0 + cfg.interval_scale_per_level * (self.level - cfg.initial_level)
        return max(cfg.min_interval_ms, base_interval_ms / growth)
