"""
Scoring System
==============

Score, combo streaks and the persisted high score.

Each collection awards `base_points + combo_bonus * combo`, where combo is
the streak held *before* this collection (so 10, 12, 14, ... with the
defaults). A gap longer than the combo timeout drops the streak to 0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from chef_catcher.catcher_core.config_loader import GameConfig, get_config
from chef_catcher.catcher_core.persistence import PersistenceGateway
from chef_catcher.catcher_core.session import GameSession, ScoreState

logger = logging.getLogger(__name__)


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    combo: int               # Streak after this collection
    score: int               # Total after this collection
    new_high_score: bool = False
    streak_restarted: bool = False

    def __repr__(self) -> str:
        if self.new_high_score:
            return f"ScoreEvent(+{self.points}, combo={self.combo}, high_score={self.score})"
        return f"ScoreEvent(+{self.points}, combo={self.combo})"


def parse_high_score(raw: Optional[str]) -> int:
    """
    Interpret a persisted high score.

    Missing, non-numeric or negative values read as 0.
    """
    if raw is None:
        return 0
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed persisted high score: %r", raw)
        return 0
    return max(0, value)


class ScoreTracker:
    """
    Tracks score and combo for the session and keeps the high score in sync
    with the persistence gateway.

    The high score is read once, when the tracker is built, and survives
    session resets. Storage errors never reach gameplay: they are logged and
    the in-memory value carries on for the run.
    """

    def __init__(
        self,
        session: GameSession,
        store: Optional[PersistenceGateway] = None,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize score tracker.

        Args:
            session: Session holding the ScoreState.
            store: High-score storage. In-memory only if None.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._session = session
        self._store = store
        self._key = config.scoring.high_score_key
        self._session.score.high_score = self._load_high_score()

    @property
    def state(self) -> ScoreState:
        return self._session.score

    @property
    def score(self) -> int:
        """Current total score."""
        return self._session.score.score

    @property
    def combo(self) -> int:
        return self._session.score.combo

    @property
    def high_score(self) -> int:
        return self._session.score.high_score

    def _load_high_score(self) -> int:
        if self._store is None:
            return 0
        try:
            raw = self._store.get(self._key)
        except Exception as e:
            logger.warning("High score unavailable, starting from 0: %s", e)
            return 0
        return parse_high_score(raw)

    def _save_high_score(self) -> None:
        if self._store is None:
            return
        try:
            self._store.set(self._key, str(self._session.score.high_score))
        except Exception as e:
            logger.warning("Could not persist high score %d: %s", self._session.score.high_score, e)

    def get_points(self, combo: int) -> int:
        """Points for a collection made while holding `combo`."""
        return self._config.scoring.base_points + self._config.scoring.combo_bonus * combo

    def on_collect(self, now: float) -> ScoreEvent:
        """
        Apply score for a collected ingredient and return the event.

        Args:
            now: Current play time in ms.

        Returns:
            ScoreEvent describing the points awarded.
        """
        state = self._session.score
        restarted = self._decay(now)

        points = self.get_points(state.combo)
        state.combo += 1
        state.last_combo_at = now
        state.score += points

        new_high = False
        if state.score > state.high_score:
            state.high_score = state.score
            new_high = True
            self._save_high_score()

        return ScoreEvent(
            points=points,
            combo=state.combo,
            score=state.score,
            new_high_score=new_high,
            streak_restarted=restarted,
        )

    def on_idle_tick(self, now: float) -> bool:
        """
        Apply combo decay without a collection. Call once per tick.

        Returns:
            True if the combo dropped to 0 on this call.
        """
        return self._decay(now)

    def _decay(self, now: float) -> bool:
        state = self._session.score
        if state.combo > 0 and now - state.last_combo_at > self._config.scoring.combo_timeout_ms:
            state.combo = 0
            return True
        return False

    def reset(self) -> None:
        """Reset score and combo to zero. The high score is kept."""
        high_score = self._session.score.high_score
        self._session.score = ScoreState(high_score=high_score)
