"""
Entities
========

Plain data types for the player and the falling entities.

Coordinates are playfield units with Y growing downward. Positions are
box centers; bounds are derived from position and hitbox size.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class EntityKind(Enum):
    """Top-level kind of a falling entity."""
    INGREDIENT = "ingredient"
    HAZARD = "hazard"
    POWERUP = "powerup"


class PowerupType(Enum):
    """Subtype carried by POWERUP entities."""
    SHIELD = "shield"
    MAGNET = "magnet"


class Facing(Enum):
    LEFT = "left"
    RIGHT = "right"


class Direction(Enum):
    """Directional hold signal from the input source."""
    NONE = 0
    LEFT = 1
    RIGHT = 2


# Stable numeric ids for observation arrays
KIND_IDS = {
    (EntityKind.INGREDIENT, None): 0,
    (EntityKind.HAZARD, None): 1,
    (EntityKind.POWERUP, PowerupType.SHIELD): 2,
    (EntityKind.POWERUP, PowerupType.MAGNET): 3,
}


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box given by its edges."""
    left: float
    top: float
    right: float
    bottom: float

    @staticmethod
    def centered(x: float, y: float, width: float, height: float) -> "Bounds":
        half_w = width / 2.0
        half_h = height / 2.0
        return Bounds(x - half_w, y - half_h, x + half_w, y + half_h)

    def intersects(self, other: "Bounds") -> bool:
        """True if the boxes overlap. Touching edges do not count."""
        return (
            self.left < other.right
            and other.left < self.right
            and self.top < other.bottom
            and other.top < self.bottom
        )


@dataclass
class FallingEntity:
    """
    A collectible, hazard or power-up descending through the playfield.

    `fall_velocity` is the velocity assigned at spawn; `velocity` is what
    the integrator applies this tick and may be overridden by the magnet.
    """
    id: int
    kind: EntityKind
    position: Tuple[float, float]
    size: Tuple[float, float]
    velocity: Tuple[float, float]
    fall_velocity: Tuple[float, float]
    powerup: Optional[PowerupType] = None
    active: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.kind, EntityKind):
            raise ValueError(f"Unknown entity kind: {self.kind!r}")
        if self.kind is EntityKind.POWERUP:
            if not isinstance(self.powerup, PowerupType):
                raise ValueError(f"Power-up entity {self.id} has no valid subtype: {self.powerup!r}")
        elif self.powerup is not None:
            raise ValueError(f"Only power-up entities carry a subtype, got {self.kind.value}")

    @property
    def bounds(self) -> Bounds:
        return Bounds.centered(self.position[0], self.position[1], self.size[0], self.size[1])

    @property
    def kind_id(self) -> int:
        return KIND_IDS[(self.kind, self.powerup)]

    @property
    def is_ingredient(self) -> bool:
        return self.kind is EntityKind.INGREDIENT


@dataclass
class PlayerState:
    """The player-controlled catcher."""
    position: Tuple[float, float]
    size: Tuple[float, float]
    facing: Facing = Facing.RIGHT

    @property
    def bounds(self) -> Bounds:
        return Bounds.centered(self.position[0], self.position[1], self.size[0], self.size[1])
