"""
Human Play Mode
================

Play the catcher interactively in a pygame window.

Controls:
    - Left/Right or A/D: Move
    - Space/Up/W: Start, jump (grounded), reverse (mid-air), restart
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--scale SCALE] [--high-score-file PATH]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

import pygame

from chef_catcher.catcher_core.config_loader import GameConfig, load_config
from chef_catcher.catcher_core.entities import Direction
from chef_catcher.catcher_core.events import EventRecorder, EventType
from chef_catcher.catcher_core.game import GameStateMachine
from chef_catcher.catcher_core.persistence import JsonFileStore
from chef_catcher.catcher_core.replay_recorder import ReplayRecorder

DEFAULT_HIGH_SCORE_FILE = Path.home() / ".chef_catcher" / "high_score.json"


class CatcherRenderer:
    """Flat-color renderer: boxes for every hitbox plus a HUD strip."""

    def __init__(self, config: GameConfig, scale: float):
        self._config = config
        self._scale = scale

        self._hud_height = 60
        self.window_width = int(config.playfield.width * scale)
        self.window_height = int(config.playfield.height * scale) + self._hud_height

        # Colors - kitchen palette
        self._bg = (250, 244, 232)
        self._floor = (190, 150, 110)
        self._hud_bg = (60, 45, 35)
        self._text_light = (250, 240, 225)
        self._text_dark = (70, 50, 40)
        self._player = (235, 120, 60)
        self._player_facing = (120, 50, 20)
        self._shield_ring = (90, 170, 240)
        self._magnet_ring = (200, 90, 200)
        self._entity_colors: Dict[str, Tuple[int, int, int]] = {
            "ingredient": (110, 190, 90),
            "hazard": (200, 50, 50),
            "shield": (90, 170, 240),
            "magnet": (200, 90, 200),
        }

        pygame.font.init()
        self._font_large = pygame.font.Font(None, 48)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 20)

    def _rect(self, x: float, y: float, width: float, height: float) -> pygame.Rect:
        """Box centered on world (x, y), shifted below the HUD."""
        s = self._scale
        return pygame.Rect(
            int((x - width / 2) * s),
            int((y - height / 2) * s) + self._hud_height,
            max(1, int(width * s)),
            max(1, int(height * s)),
        )

    def render(self, screen: pygame.Surface, data: dict) -> None:
        screen.fill(self._bg)

        floor_y = int(data["playfield_height"] * self._scale) + self._hud_height
        pygame.draw.line(screen, self._floor, (0, floor_y - 1), (self.window_width, floor_y - 1), 3)

        for entity in data["entities"]:
            key = entity["powerup"] or entity["kind"]
            rect = self._rect(entity["x"], entity["y"], entity["width"], entity["height"])
            if entity["kind"] == "powerup":
                pygame.draw.ellipse(screen, self._entity_colors[key], rect)
            else:
                pygame.draw.rect(screen, self._entity_colors[key], rect, border_radius=4)

        self._draw_player(screen, data)
        self._draw_hud(screen, data)

        if data["state"] == "idle":
            self._draw_banner(screen, "Chef Catcher", "Press Space to start")
        elif data["state"] == "game_over":
            hint = "Press Space to restart" if data["can_restart"] else ""
            self._draw_banner(screen, f"Game Over - {data['score']}", hint)

    def _draw_player(self, screen: pygame.Surface, data: dict) -> None:
        player = data["player"]
        rect = self._rect(player["x"], player["y"], player["width"], player["height"])
        pygame.draw.rect(screen, self._player, rect, border_radius=6)

        # Facing marker on the leading edge
        marker_x = rect.left + 3 if player["facing"] == "left" else rect.right - 6
        pygame.draw.rect(screen, self._player_facing, (marker_x, rect.top + 4, 3, rect.height - 8))

        if data["shield_charges"] > 0:
            pygame.draw.rect(screen, self._shield_ring, rect.inflate(8, 8), width=2, border_radius=8)
        if data["magnet_remaining_ms"] > 0:
            radius = int(self._config.powerups.magnet_radius * self._scale)
            pygame.draw.circle(screen, self._magnet_ring, rect.center, radius, width=1)

    def _draw_hud(self, screen: pygame.Surface, data: dict) -> None:
        pygame.draw.rect(screen, self._hud_bg, (0, 0, self.window_width, self._hud_height))

        score = self._font_large.render(str(data["score"]), True, self._text_light)
        screen.blit(score, (12, 10))

        best = self._font_small.render(f"BEST {data['high_score']}", True, self._text_light)
        screen.blit(best, (14, 42))

        right = self.window_width - 12
        lines = [f"LV {data['level']:.1f}"]
        if data["combo"] > 1:
            lines.append(f"COMBO x{data['combo']}")
        if data["shield_charges"] > 0:
            lines.append(f"SHIELD {data['shield_charges']}")
        if data["magnet_remaining_ms"] > 0:
            lines.append(f"MAGNET {data['magnet_remaining_ms'] / 1000:.1f}s")

        for i, line in enumerate(lines):
            text = self._font_small.render(line, True, self._text_light)
            screen.blit(text, (right - text.get_width(), 6 + i * 13))

    def _draw_banner(self, screen: pygame.Surface, title: str, hint: str) -> None:
        overlay = pygame.Surface((self.window_width, self.window_height), pygame.SRCALPHA)
        overlay.fill((255, 255, 255, 160))
        screen.blit(overlay, (0, 0))

        center_x = self.window_width // 2
        center_y = self.window_height // 2

        text = self._font_large.render(title, True, self._text_dark)
        screen.blit(text, (center_x - text.get_width() // 2, center_y - 40))
        if hint:
            text = self._font_medium.render(hint, True, self._text_dark)
            screen.blit(text, (center_x - text.get_width() // 2, center_y + 10))


class HumanPlayer:
    """
    Keyboard-driven host loop around GameStateMachine.

    The frame time measured by pygame is passed straight to `tick`; the
    state machine caps and sanitizes it.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        scale: float = 1.0,
        target_fps: int = 60,
        high_score_file: Optional[Path] = None,
        record: bool = False
    ):
        if config is None:
            config = load_config()

        self._config = config
        self._seed = seed
        self._target_fps = target_fps

        self._events = EventRecorder()
        store = JsonFileStore(high_score_file or DEFAULT_HIGH_SCORE_FILE)
        self._game = GameStateMachine(
            config=config, seed=seed, store=store, event_callback=self._events
        )
        self._recorder = ReplayRecorder(self._game, name="human") if record else None
        if self._recorder is not None:
            self._recorder.reset(seed=seed)

        pygame.init()
        self._renderer = CatcherRenderer(config, scale)
        self._screen = pygame.display.set_mode(
            (self._renderer.window_width, self._renderer.window_height)
        )
        pygame.display.set_caption("Chef Catcher")
        self._clock = pygame.time.Clock()

        self._running = True
        self._primary_pressed = False

    def run(self) -> int:
        """Run the game loop. Returns the last score."""
        print("=== Chef Catcher ===")
        print("Left/Right to move, Space to start / jump / reverse / restart")
        print("ESC to quit")
        print()

        while self._running:
            dt_ms = self._clock.tick(self._target_fps)
            self._handle_events()
            self._update(dt_ms)
            self._renderer.render(self._screen, self._game.get_render_data())
            pygame.display.flip()

        if self._recorder is not None and self._recorder.tick_count:
            path = self._recorder.save(directory="replays")
            print(f"Replay saved to {path}")

        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key in (pygame.K_SPACE, pygame.K_UP, pygame.K_w):
                    self._primary_pressed = True

    def _direction(self) -> Direction:
        keys = pygame.key.get_pressed()
        left = keys[pygame.K_LEFT] or keys[pygame.K_a]
        right = keys[pygame.K_RIGHT] or keys[pygame.K_d]
        if left and not right:
            return Direction.LEFT
        if right and not left:
            return Direction.RIGHT
        return Direction.NONE

    def _update(self, dt_ms: float) -> None:
        primary = self._primary_pressed
        self._primary_pressed = False

        if self._recorder is not None:
            self._recorder.tick(dt_ms, direction=self._direction(), primary_action=primary)
        else:
            self._game.tick(dt_ms, direction=self._direction(), primary_action=primary)

        for event in self._events.events:
            if event.type is EventType.ENTITY_COLLECTED and event.points:
                print(f"  +{event.points} (Total: {self._game.score})")
            elif event.type is EventType.ENTITY_HIT and event.absorbed:
                print(f"  Shield absorbed a hit ({event.value} left)")
            elif event.type is EventType.GAME_OVER:
                print(f"\nGAME OVER - Score: {event.value}")
            elif event.type is EventType.GAME_STARTED:
                print(f"\n=== Game Started (best {event.value}) ===\n")
        self._events.clear()


def main():
    parser = argparse.ArgumentParser(description="Play Chef Catcher interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--scale", type=float, default=1.0, help="Window scale (default: 1.0)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument(
        "--high-score-file", type=Path, default=None,
        help=f"High score JSON file (default: {DEFAULT_HIGH_SCORE_FILE})"
    )
    parser.add_argument("--record", action="store_true", help="Save a replay on exit")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    player = HumanPlayer(
        config=config,
        seed=args.seed,
        scale=args.scale,
        target_fps=args.fps,
        high_score_file=args.high_score_file,
        record=args.record
    )
    score = player.run()
    print(f"\nFinal Score: {score}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
