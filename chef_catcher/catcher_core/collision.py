"""
Collision Resolver
==================

First-touch overlap detection between the player and falling entities,
plus the per-tick sweep that despawns entities below the playfield.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from chef_catcher.catcher_core.config_loader import GameConfig, get_config
from chef_catcher.catcher_core.entities import Bounds, EntityKind, FallingEntity, PowerupType


@dataclass
class CollisionHit:
    """A single first-touch overlap."""
    entity: FallingEntity
    kind: EntityKind

    @property
    def powerup(self) -> Optional[PowerupType]:
        return self.entity.powerup

    @property
    def position(self) -> Tuple[float, float]:
        return self.entity.position


class CollisionResolver:
    """
    Reports each entity's overlap with the player at most once.

    An entity is deactivated the moment it is reported, so later checks
    skip it even if the boxes still overlap.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._despawn_y = config.playfield.despawn_y

    @property
    def despawn_y(self) -> float:
        """Entities whose center passes this Y are swept."""
        return self._despawn_y

    def check(self, player_bounds: Bounds, entities: Iterable[FallingEntity]) -> List[CollisionHit]:
        """
        Find active entities overlapping the player.

        Results are ordered by entity id so resolution is deterministic.

        Args:
            player_bounds: The player's hitbox.
            entities: Candidate entities.

        Returns:
            One CollisionHit per newly touched entity.
        """
        hits: List[CollisionHit] = []
        for entity in sorted(entities, key=lambda e: e.id):
            if not entity.active:
                continue
            if player_bounds.intersects(entity.bounds):
                entity.active = False
                hits.append(CollisionHit(entity=entity, kind=entity.kind))
        return hits

    def sweep_offscreen(self, entities: Iterable[FallingEntity]) -> List[FallingEntity]:
        """
        Entities below the despawn line, whatever their active flag.

        The caller removes them from the live collection.
        """
        return [e for e in sorted(entities, key=lambda e: e.id) if e.position[1] > self._despawn_y]
