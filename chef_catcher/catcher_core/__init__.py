"""
Catcher Core - the gameplay simulation.

Main exports:
- GameStateMachine: Lifecycle and per-tick sequencing (the entry point for hosts)
- CatcherEnv: Gymnasium environment for agent training
- GameConfig: Configuration loaded from game_config.yaml
- InMemoryStore / JsonFileStore: High-score persistence gateways
- ReplayRecorder: Deterministic session recording and playback
"""

from chef_catcher.catcher_core.config_loader import GameConfig, load_config, get_config
from chef_catcher.catcher_core.entities import (
    Bounds,
    Direction,
    EntityKind,
    Facing,
    FallingEntity,
    PlayerState,
    PowerupType,
)
from chef_catcher.catcher_core.session import GameSession, SessionState
from chef_catcher.catcher_core.difficulty import DifficultyController
from chef_catcher.catcher_core.spawner import EntitySpawner
from chef_catcher.catcher_core.collision import CollisionHit, CollisionResolver
from chef_catcher.catcher_core.powerups import PowerupManager
from chef_catcher.catcher_core.scoring import ScoreEvent, ScoreTracker
from chef_catcher.catcher_core.persistence import InMemoryStore, JsonFileStore, PersistenceGateway
from chef_catcher.catcher_core.events import EventRecorder, EventType, GameEvent
from chef_catcher.catcher_core.physics_world import PhysicsWorld
from chef_catcher.catcher_core.game import GameStateMachine, TickResult
from chef_catcher.catcher_core.env_gym import CatcherEnv
from chef_catcher.catcher_core.replay_recorder import (
    ReplayRecorder,
    load_replay,
    replay,
    generate_replay_filename,
)

__all__ = [
    "GameConfig",
    "load_config",
    "get_config",
    "Bounds",
    "Direction",
    "EntityKind",
    "Facing",
    "FallingEntity",
    "PlayerState",
    "PowerupType",
    "GameSession",
    "SessionState",
    "DifficultyController",
    "EntitySpawner",
    "CollisionHit",
    "CollisionResolver",
    "PowerupManager",
    "ScoreEvent",
    "ScoreTracker",
    "InMemoryStore",
    "JsonFileStore",
    "PersistenceGateway",
    "EventRecorder",
    "EventType",
    "GameEvent",
    "PhysicsWorld",
    "GameStateMachine",
    "TickResult",
    "CatcherEnv",
    "ReplayRecorder",
    "load_replay",
    "replay",
    "generate_replay_filename",
]
