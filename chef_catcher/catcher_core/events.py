"""
Game Events
===========

Notifications emitted by the simulation for renderers, audio and effects.
The core owns no presentation state; it only reports what happened.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from chef_catcher.catcher_core.entities import EntityKind, PowerupType


class EventType(Enum):
    GAME_STARTED = "game_started"
    ENTITY_SPAWNED = "entity_spawned"
    ENTITY_COLLECTED = "entity_collected"
    ENTITY_HIT = "entity_hit"
    ENTITY_DESPAWNED = "entity_despawned"
    COMBO_ACHIEVED = "combo_achieved"
    MAGNET_EXPIRED = "magnet_expired"
    HIGH_SCORE_UPDATED = "high_score_updated"
    GAME_OVER = "game_over"


@dataclass
class GameEvent:
    """
    A single notification.

    Field use per type:
        ENTITY_COLLECTED: position, points (0 for power-ups)
        ENTITY_HIT: position, absorbed, value = shield charges left
        COMBO_ACHIEVED: value = combo count
        HIGH_SCORE_UPDATED / GAME_OVER: value = score
    """
    type: EventType
    entity_id: Optional[int] = None
    kind: Optional[EntityKind] = None
    powerup: Optional[PowerupType] = None
    position: Optional[Tuple[float, float]] = None
    points: int = 0
    value: int = 0
    absorbed: bool = False


EventCallback = Callable[[GameEvent], None]


class EventRecorder:
    """Sink that keeps every event it receives, in order."""

    def __init__(self):
        self.events: List[GameEvent] = []

    def __call__(self, event: GameEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: EventType) -> List[GameEvent]:
        return [e for e in self.events if e.type is event_type]

    def clear(self) -> None:
        self.events.clear()
