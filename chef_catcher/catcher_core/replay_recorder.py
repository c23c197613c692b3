"""
Replay Recorder
===============

Records a session as its seed plus the input of every tick, and plays
it back. Since all timing runs through tick accumulators, the same
seed and tick sequence always reproduce the same score.

Usage:
    from chef_catcher.catcher_core import GameStateMachine, ReplayRecorder

    recorder = ReplayRecorder(GameStateMachine())
    recorder.reset(seed=42)
    recorder.tick(16.7, primary_action=True)   # start
    ...
    recorder.save("my_replay.json")

    final_score = replay(load_replay("my_replay.json")).score
"""

from __future__ import annotations

import hashlib
import json
import logging
import random
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from chef_catcher.catcher_core.config_loader import GameConfig, get_config
from chef_catcher.catcher_core.entities import Direction
from chef_catcher.catcher_core.game import GameStateMachine, TickResult
from chef_catcher.catcher_core.persistence import InMemoryStore

logger = logging.getLogger(__name__)


def generate_replay_filename(
    name: str = "replay",
    seed: Optional[int] = None,
    directory: Optional[Union[str, Path]] = None
) -> Path:
    """
    Generate a timestamped replay filename.

    Format: {name}_{YYYYMMDD_HHMMSS}_s{seed}.json
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if seed is not None:
        filename = f"{name}_{timestamp}_s{seed}.json"
    else:
        filename = f"{name}_{timestamp}.json"

    if directory:
        return Path(directory) / filename
    return Path(filename)


def compute_config_hash(config: Optional[GameConfig] = None) -> str:
    """Hash of every gameplay parameter, for replay validation."""
    if config is None:
        config = get_config()
    data = json.dumps(asdict(config), sort_keys=True, default=str)
    return hashlib.md5(data.encode()).hexdigest()[:8]


class ReplayRecorder:
    """
    Wrapper that records the ticks fed to a GameStateMachine.

    Each tick is stored as [dt_ms, direction, primary_action] after dt
    sanitation, along with the score it produced.
    """

    def __init__(self, game: GameStateMachine, name: str = "replay"):
        self.game = game
        self.name = name

        self._seed: Optional[int] = None
        self._ticks: List[List[Any]] = []
        self._scores: List[int] = []
        self._config_hash = compute_config_hash(game.config)

    @property
    def tick_count(self) -> int:
        return len(self._ticks)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the game (back to IDLE) and start a new recording.

        Args:
            seed: Spawner seed. A random one is drawn if None, since the
                replay can only reproduce a seeded run.
        """
        if seed is None:
            seed = random.randrange(2 ** 31)
        self._seed = seed
        self._ticks = []
        self._scores = []
        self.game.reset(seed=seed)

    def tick(
        self,
        dt_ms: float,
        direction: Direction = Direction.NONE,
        primary_action: bool = False
    ) -> TickResult:
        """Tick the game and record the input."""
        result = self.game.tick(dt_ms, direction=direction, primary_action=primary_action)
        self._ticks.append([result.dt_ms, direction.value, bool(primary_action)])
        self._scores.append(self.game.score)
        return result

    def get_replay_data(self) -> Dict[str, Any]:
        """
        Get the current replay data as a dictionary.

        Returns:
            Dictionary containing all replay data.
        """
        return {
            "name": self.name,
            "seed": self._seed,
            "config_hash": self._config_hash,
            "ticks": [list(t) for t in self._ticks],
            "scores": self._scores.copy(),
            "final_score": self._scores[-1] if self._scores else 0,
            "total_ticks": len(self._ticks),
            "final_state": self.game.state.name.lower(),
        }

    def save(
        self,
        path: Optional[Union[str, Path]] = None,
        overwrite: bool = True,
        directory: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Save the replay to a JSON file.

        Args:
            path: Path to save the replay. If None, auto-generates a timestamped name.
            overwrite: If True, overwrite existing file.
            directory: Directory for auto-generated filename (only used if path is None).

        Returns:
            Path where the replay was saved.
        """
        if path is None:
            path = generate_replay_filename(self.name, seed=self._seed, directory=directory)
        else:
            path = Path(path)

        if path.exists() and not overwrite:
            raise FileExistsError(f"Replay file already exists: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)
        replay_data = self.get_replay_data()
        with open(path, "w") as f:
            json.dump(replay_data, f, indent=2)

        logger.info(
            "Replay saved: %s (seed %s, %d ticks, final score %d)",
            path, self._seed, len(self._ticks), replay_data["final_score"]
        )
        return path


def load_replay(path: Union[str, Path]) -> Dict[str, Any]:
    """Load replay data written by ReplayRecorder.save()."""
    with open(path, "r") as f:
        return json.load(f)


def replay(
    data: Dict[str, Any],
    config: Optional[GameConfig] = None
) -> GameStateMachine:
    """
    Re-run a recorded session on a fresh game.

    Args:
        data: Replay data from get_replay_data() or load_replay().
        config: Game configuration. Uses default if None.

    Returns:
        The game after the final tick.

    Raises:
        ValueError: If the replay was recorded under a different configuration.
    """
    if config is None:
        config = get_config()

    recorded_hash = data.get("config_hash")
    if recorded_hash is not None and recorded_hash != compute_config_hash(config):
        raise ValueError(
            f"Replay config hash {recorded_hash} does not match current config "
            f"{compute_config_hash(config)}"
        )

    game = GameStateMachine(config=config, store=InMemoryStore())
    # Same reset path as ReplayRecorder.reset so the physics world is rebuilt identically
    game.reset(seed=data.get("seed"))
    for dt_ms, direction, primary in data["ticks"]:
        game.tick(dt_ms, direction=Direction(direction), primary_action=bool(primary))
    return game
