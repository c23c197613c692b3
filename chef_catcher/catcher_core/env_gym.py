"""
Gymnasium Environment
=====================

Single-agent Gymnasium wrapper around GameStateMachine.

One step is one frame of `observation.frame_ms`. The action is
MultiDiscrete([3, 2]): (direction 0 none / 1 left / 2 right,
primary action 0 / 1). Reward is the score gained during the frame.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from chef_catcher.catcher_core.config_loader import GameConfig, load_config
from chef_catcher.catcher_core.entities import Direction
from chef_catcher.catcher_core.game import GameStateMachine
from chef_catcher.catcher_core.persistence import InMemoryStore
from chef_catcher.catcher_core.state_snapshot import SnapshotBuilder


class CatcherEnv(gym.Env):
    """
    Gymnasium environment for the catcher game.

    `reset()` starts a fresh seeded session that is already PLAYING.
    The episode terminates on game over and is truncated after
    `observation.max_ticks` frames.
    """

    metadata = {"render_modes": [], "render_fps": 60}

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        debug: bool = False
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            config: Pre-loaded configuration; takes precedence over config_path.
            debug: If True, enables verbose debug output for agent development.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)
        self._debug = debug
        self._frame_ms = self._config.observation.frame_ms
        self._max_ticks = self._config.observation.max_ticks

        self._game = GameStateMachine(config=self._config, store=InMemoryStore())
        self._snapshot_builder = SnapshotBuilder(self._config)
        self._ticks = 0

        self.action_space = spaces.MultiDiscrete([3, 2])
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] CatcherEnv initialized")
            print(f"[DEBUG]   Playfield: {self._config.playfield.width}x{self._config.playfield.height}")
            print(f"[DEBUG]   Frame: {self._frame_ms:.2f} ms, max ticks: {self._max_ticks}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_ent = self._config.observation.max_entities
        pf = self._config.playfield

        return spaces.Dict({
            "state": spaces.Discrete(3),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "combo": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "level": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "shield_charges": spaces.Box(low=0, high=self._config.powerups.shield_charges, shape=(), dtype=np.int32),
            "magnet_remaining_ms": spaces.Box(
                low=0, high=self._config.powerups.magnet_duration_ms, shape=(), dtype=np.float32
            ),
            "player_x": spaces.Box(low=0, high=pf.width, shape=(), dtype=np.float32),
            "player_y": spaces.Box(low=-np.inf, high=pf.height, shape=(), dtype=np.float32),
            "player_facing": spaces.Discrete(2),
            "entity_count": spaces.Box(low=0, high=max_ent, shape=(), dtype=np.int32),
            "ent_kind": spaces.Box(low=-1, high=3, shape=(max_ent,), dtype=np.int16),
            "ent_x": spaces.Box(low=-np.inf, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "ent_y": spaces.Box(low=-np.inf, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "ent_vx": spaces.Box(low=-np.inf, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "ent_vy": spaces.Box(low=-np.inf, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "ent_mask": spaces.MultiBinary(max_ent),
        })

    def _observe(self) -> Dict[str, np.ndarray]:
        return self._snapshot_builder.build(self._game).to_obs_dict()

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._game.reset(seed=seed)
        self._game.start()
        self._ticks = 0

        info = self._game.get_info()
        info["delta_score"] = 0
        return self._observe(), info

    def step(
        self,
        action: Union[np.ndarray, Tuple[int, int]]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one frame.

        Args:
            action: (direction, primary) pair.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        direction_id, primary = (int(a) for a in np.asarray(action).reshape(-1)[:2])
        direction = Direction(direction_id)

        result = self._game.tick(self._frame_ms, direction=direction, primary_action=bool(primary))
        self._ticks += 1

        terminated = result.game_over
        truncated = not terminated and self._ticks >= self._max_ticks
        reward = float(result.delta_score)

        info = self._game.get_info()
        info["delta_score"] = result.delta_score
        info["events"] = [e.type.value for e in result.events]

        if self._debug:
            print(f"[DEBUG] Tick {self._ticks}: action=({direction.name}, {primary}), "
                  f"delta_score={result.delta_score}, entities={info['entity_count']}")
            if terminated:
                print(f"[DEBUG] TERMINATED: score={info['score']}")

        return self._observe(), reward, terminated, truncated, info

    def close(self) -> None:
        """Clean up resources."""

    @property
    def game(self) -> GameStateMachine:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
