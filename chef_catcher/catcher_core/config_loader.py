"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

from chef_catcher.catcher_core.entities import EntityKind, PowerupType


@dataclass(frozen=True)
class PlayfieldConfig:
    """Playfield geometry and spawn/despawn lines."""
    width: int
    height: int
    spawn_y: float          # Y coordinate where entities appear (above the top edge)
    spawn_margin: float     # Horizontal inset of the spawn range
    despawn_margin: float   # Distance below the bottom edge before removal

    @property
    def despawn_y(self) -> float:
        return self.height + self.despawn_margin


@dataclass(frozen=True)
class PlayerConfig:
    """Player hitbox and movement tuning."""
    start_x: float
    start_y: float
    width: float
    height: float
    move_speed: float
    jump_velocity: float
    gravity: float
    drag: float


@dataclass(frozen=True)
class EntityTypeConfig:
    """Hitbox and fall speed for one entity kind."""
    width: float
    height: float
    fall_speed_base: float
    fall_speed_per_level: float

    def fall_speed(self, level: float) -> float:
        return self.fall_speed_base + level * self.fall_speed_per_level


@dataclass(frozen=True)
class SpawnScheduleConfig:
    """One independent spawn timer and the weighted roll it performs."""
    name: str
    interval_ms: float
    weights: Tuple[Tuple[EntityKind, int], ...]

    @property
    def total_weight(self) -> int:
        return sum(w for _, w in self.weights)


@dataclass(frozen=True)
class SpawnerConfig:
    schedules: Tuple[SpawnScheduleConfig, ...]
    powerup_weights: Tuple[Tuple[PowerupType, int], ...]


@dataclass(frozen=True)
class DifficultyConfig:
    initial_level: float
    period_ms: float
    level_step: float
    interval_scale_per_level: float
    min_interval_ms: float


@dataclass(frozen=True)
class ScoringConfig:
    base_points: int
    combo_bonus: int
    combo_timeout_ms: float
    high_score_key: str


@dataclass(frozen=True)
class PowerupConfig:
    shield_charges: int
    magnet_duration_ms: float
    magnet_radius: float
    magnet_speed: float


@dataclass(frozen=True)
class PhysicsConfig:
    max_step_ms: float       # Longest single pymunk step
    floor_tolerance: float


@dataclass(frozen=True)
class SessionConfig:
    max_dt_ms: float
    restart_delay_ms: float


@dataclass(frozen=True)
class ObservationConfig:
    max_entities: int
    frame_ms: float
    max_ticks: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    playfield: PlayfieldConfig
    player: PlayerConfig
    entities: Tuple[Tuple[EntityKind, EntityTypeConfig], ...]
    spawner: SpawnerConfig
    difficulty: DifficultyConfig
    scoring: ScoringConfig
    powerups: PowerupConfig
    physics: PhysicsConfig
    session: SessionConfig
    observation: ObservationConfig

    def entity_type(self, kind: EntityKind) -> EntityTypeConfig:
        """Get the hitbox/fall-speed config for an entity kind."""
        for entry_kind, entry in self.entities:
            if entry_kind is kind:
                return entry
        raise ValueError(f"No entity configuration for kind: {kind!r}")


def _parse_kind(name: str) -> EntityKind:
    try:
        return EntityKind(str(name))
    except ValueError:
        valid = ", ".join(k.value for k in EntityKind)
        raise ValueError(f"Unknown entity kind '{name}' (expected one of: {valid})") from None


def _parse_powerup(name: str) -> PowerupType:
    try:
        return PowerupType(str(name))
    except ValueError:
        valid = ", ".join(p.value for p in PowerupType)
        raise ValueError(f"Unknown power-up type '{name}' (expected one of: {valid})") from None


def _parse_entity_type(data: dict) -> EntityTypeConfig:
    return EntityTypeConfig(
        width=float(data["width"]),
        height=float(data["height"]),
        fall_speed_base=float(data["fall_speed_base"]),
        fall_speed_per_level=float(data.get("fall_speed_per_level", 0.0)),
    )


def _parse_schedule(data: dict) -> SpawnScheduleConfig:
    weights_data: Dict[str, int] = data["weights"]
    return SpawnScheduleConfig(
        name=str(data.get("name", "schedule")),
        interval_ms=float(data["interval_ms"]),
        weights=tuple((_parse_kind(k), int(w)) for k, w in weights_data.items()),
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    playfield = config.playfield
    if playfield.width <= 0 or playfield.height <= 0:
        raise ValueError(f"Playfield size must be positive, got {playfield.width}x{playfield.height}")
    if playfield.spawn_margin * 2 > playfield.width:
        raise ValueError(
            f"spawn_margin ({playfield.spawn_margin}) leaves no spawn range "
            f"on a playfield {playfield.width} wide"
        )

    # Every kind needs a hitbox so spawns never hit an unconfigured kind
    configured = {kind for kind, _ in config.entities}
    for kind in EntityKind:
        if kind not in configured:
            raise ValueError(f"Missing entity configuration for '{kind.value}'")

    for schedule in config.spawner.schedules:
        if schedule.interval_ms <= 0:
            raise ValueError(f"Schedule '{schedule.name}' interval_ms must be positive")
        if not schedule.weights:
            raise ValueError(f"Schedule '{schedule.name}' has no weights")
        if any(w < 0 for _, w in schedule.weights):
            raise ValueError(f"Schedule '{schedule.name}' has negative weights")
        if schedule.total_weight <= 0:
            raise ValueError(f"Schedule '{schedule.name}' weights sum to zero")

    powerup_total = sum(w for _, w in config.spawner.powerup_weights)
    if any(w < 0 for _, w in config.spawner.powerup_weights) or powerup_total <= 0:
        raise ValueError("powerup_weights must be non-negative and sum to a positive value")

    difficulty = config.difficulty
    if difficulty.period_ms <= 0:
        raise ValueError(f"difficulty.period_ms must be positive, got {difficulty.period_ms}")
    if difficulty.level_step < 0:
        raise ValueError("difficulty.level_step must not be negative")

    if config.scoring.combo_timeout_ms < 0:
        raise ValueError("scoring.combo_timeout_ms must not be negative")
    if config.powerups.shield_charges < 0:
        raise ValueError("powerups.shield_charges must not be negative")
    if not math.isfinite(config.physics.max_step_ms) or config.physics.max_step_ms <= 0:
        raise ValueError("physics.max_step_ms must be a positive finite number")
    if not math.isfinite(config.session.max_dt_ms) or config.session.max_dt_ms <= 0:
        raise ValueError("session.max_dt_ms must be a positive finite number")
    if config.observation.max_entities < 1:
        raise ValueError("observation.max_entities must be at least 1")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    pf_data = raw["playfield"]
    playfield = PlayfieldConfig(
        width=int(pf_data["width"]),
        height=int(pf_data["height"]),
        spawn_y=float(pf_data.get("spawn_y", -50.0)),
        spawn_margin=float(pf_data.get("spawn_margin", 50.0)),
        despawn_margin=float(pf_data.get("despawn_margin", 50.0)),
    )

    player_data = raw["player"]
    player = PlayerConfig(
        start_x=float(player_data["start_x"]),
        start_y=float(player_data["start_y"]),
        width=float(player_data["width"]),
        height=float(player_data["height"]),
        move_speed=float(player_data["move_speed"]),
        jump_velocity=float(player_data["jump_velocity"]),
        gravity=float(player_data["gravity"]),
        drag=float(player_data.get("drag", 0.0)),
    )

    entities = tuple(
        (_parse_kind(name), _parse_entity_type(data))
        for name, data in raw["entities"].items()
    )

    spawner_data = raw["spawner"]
    spawner = SpawnerConfig(
        schedules=tuple(_parse_schedule(s) for s in spawner_data.get("schedules") or []),
        powerup_weights=tuple(
            (_parse_powerup(k), int(w))
            for k, w in spawner_data.get("powerup_weights", {"shield": 1, "magnet": 1}).items()
        ),
    )

    diff_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        initial_level=float(diff_data.get("initial_level", 1.0)),
        period_ms=float(diff_data["period_ms"]),
        level_step=float(diff_data["level_step"]),
        interval_scale_per_level=float(diff_data.get("interval_scale_per_level", 0.0)),
        min_interval_ms=float(diff_data.get("min_interval_ms", 0.0)),
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        base_points=int(scoring_data["base_points"]),
        combo_bonus=int(scoring_data["combo_bonus"]),
        combo_timeout_ms=float(scoring_data["combo_timeout_ms"]),
        high_score_key=str(scoring_data.get("high_score_key", "chefHighScore")),
    )

    pu_data = raw["powerups"]
    powerups = PowerupConfig(
        shield_charges=int(pu_data["shield_charges"]),
        magnet_duration_ms=float(pu_data["magnet_duration_ms"]),
        magnet_radius=float(pu_data["magnet_radius"]),
        magnet_speed=float(pu_data["magnet_speed"]),
    )

    physics_data = raw.get("physics", {})
    physics = PhysicsConfig(
        max_step_ms=float(physics_data.get("max_step_ms", 1000.0 / 120.0)),
        floor_tolerance=float(physics_data.get("floor_tolerance", 1.0)),
    )

    session_data = raw.get("session", {})
    session = SessionConfig(
        max_dt_ms=float(session_data.get("max_dt_ms", 250.0)),
        restart_delay_ms=float(session_data.get("restart_delay_ms", 0.0)),
    )

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_entities=int(obs_data.get("max_entities", 64)),
        frame_ms=float(obs_data.get("frame_ms", 1000.0 / 60.0)),
        max_ticks=int(obs_data.get("max_ticks", 36000)),
    )

    config = GameConfig(
        playfield=playfield,
        player=player,
        entities=entities,
        spawner=spawner,
        difficulty=difficulty,
        scoring=scoring,
        powerups=powerups,
        physics=physics,
        session=session,
        observation=observation,
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
