"""
Power-ups
=========

Shield charges and the timed magnet.

- Shield: a pickup sets the charge count to a flat maximum (no stacking).
  Each hazard hit while charged spends one charge instead of ending the game.
- Magnet: a pickup (re)starts a fixed-length timer. While it runs, every
  ingredient within the radius is steered straight at the player.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional

from chef_catcher.catcher_core.config_loader import GameConfig, get_config
from chef_catcher.catcher_core.entities import FallingEntity, PlayerState, PowerupType
from chef_catcher.catcher_core.session import GameSession, PowerupState

logger = logging.getLogger(__name__)


class PowerupManager:
    """Owns PowerupState and applies its effects."""

    def __init__(self, session: GameSession, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._session = session

    @property
    def state(self) -> PowerupState:
        return self._session.powerups

    @property
    def shield_charges(self) -> int:
        return self._session.powerups.shield_charges

    @property
    def magnet_active(self) -> bool:
        return self._session.powerups.magnet_active

    def magnet_remaining_ms(self, now: float) -> float:
        """Milliseconds of magnet left, 0 when inactive."""
        state = self._session.powerups
        if not state.magnet_active:
            return 0.0
        return max(0.0, state.magnet_expires_at - now)

    def reset(self) -> None:
        self._session.powerups = PowerupState()

    def on_collect(self, powerup: PowerupType, now: float) -> None:
        """
        Apply a collected power-up.

        Args:
            powerup: SHIELD or MAGNET.
            now: Current play time in ms.
        """
        state = self._session.powerups
        if powerup is PowerupType.SHIELD:
            state.shield_charges = self._config.powerups.shield_charges
        elif powerup is PowerupType.MAGNET:
            state.magnet_active = True
            state.magnet_expires_at = now + self._config.powerups.magnet_duration_ms
        else:
            raise ValueError(f"Unknown power-up type: {powerup!r}")

    def advance(self, now: float) -> bool:
        """
        Expire the magnet once its time is up.

        Returns:
            True if the magnet expired on this call.
        """
        state = self._session.powerups
        if state.magnet_active and now >= state.magnet_expires_at:
            state.magnet_active = False
            logger.debug("Magnet expired at %.0f ms", now)
            return True
        return False

    def on_hazard_hit(self) -> bool:
        """
        Spend a shield charge on a hazard hit.

        Returns:
            True if the hit was absorbed; False means the game is over.
        """
        state = self._session.powerups
        if state.shield_charges > 0:
            state.shield_charges -= 1
            logger.debug("Shield absorbed hit, %d charges left", state.shield_charges)
            return True
        return False

    def apply_magnet(
        self,
        player: PlayerState,
        ingredients: Iterable[FallingEntity]
    ) -> List[FallingEntity]:
        """
        Steer ingredients in range toward the player for this tick.

        Every other entity passed in gets its spawn-time fall velocity back,
        so the pull lasts only while the magnet is on and the ingredient is
        in range. Must be called every tick.

        Returns:
            The entities steered this tick.
        """
        state = self._session.powerups
        radius = self._config.powerups.magnet_radius
        speed = self._config.powerups.magnet_speed
        px, py = player.position

        steered: List[FallingEntity] = []
        for entity in ingredients:
            if not entity.is_ingredient or not entity.active:
                continue
            dx = px - entity.position[0]
            dy = py - entity.position[1]
            distance = math.hypot(dx, dy)
            if state.magnet_active and distance < radius:
                if distance > 0:
                    entity.velocity = (dx / distance * speed, dy / distance * speed)
                else:
                    entity.velocity = (0.0, 0.0)
                steered.append(entity)
            else:
                entity.velocity = entity.fall_velocity
        return steered
