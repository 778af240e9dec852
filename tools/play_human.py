"""
Human Play Mode
===============

Play the Invoker minigame interactively with pygame as the host: the window
feeds real frame times and key presses into InvokerGame and draws whatever
get_render_data() returns.

Controls:
    - A S D F G: Collect on tracks 1-5 (per keybindings in the config)
    - ESC: Pause / resume (the game starts paused)
    - Enter (while paused): End the session
    - Closing the window quits

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from typing import Dict, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from invoker.core.config_loader import InvokerConfig, load_config
from invoker.core.game import GameCallbacks, InvokerGame

logger = logging.getLogger(__name__)

# Piece color -> RGB
PALETTE: Dict[str, Tuple[int, int, int]] = {
    "red": (230, 70, 70),
    "green": (80, 200, 110),
    "yellow": (240, 210, 70),
    "blue": (70, 130, 235),
}

# Quadrant -> (start angle, end angle) in screen degrees, y pointing down
QUADRANT_ARCS: Dict[str, Tuple[float, float]] = {
    "upper_left": (180.0, 270.0),
    "upper_right": (270.0, 360.0),
    "lower_left": (90.0, 180.0),
    "lower_right": (0.0, 90.0),
}

GLITCH_FLASH_SECONDS = 0.25


def key_code_for(event_key: int) -> Optional[str]:
    """Translate a pygame key constant into a platform key code like "KeyA"."""
    if event_key == pygame.K_ESCAPE:
        return "Escape"
    if event_key in (pygame.K_RETURN, pygame.K_KP_ENTER):
        return "Enter"
    name = pygame.key.name(event_key)
    if len(name) == 1 and name.isalpha():
        return f"Key{name.upper()}"
    return None


def _wedge_points(
    cx: float, cy: float, radius: float, quadrant: str, steps: int = 8
) -> list:
    """Polygon approximating a quarter disc."""
    start, end = QUADRANT_ARCS[quadrant]
    points = [(cx, cy)]
    for i in range(steps + 1):
        angle = math.radians(start + (end - start) * i / steps)
        points.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return points


class InvokerRenderer:
    """Draws the board, pieces, circle ledger and HUD."""

    def __init__(self, config: InvokerConfig, window_width: int, window_height: int):
        self._config = config
        self._window_width = window_width
        self._window_height = window_height

        self._bg = (24, 22, 34)
        self._track_fill = (36, 34, 50)
        self._track_border = (60, 58, 80)
        self._line_color = (220, 220, 240)
        self._text = (230, 230, 240)
        self._text_dim = (140, 140, 160)

        pygame.font.init()
        self._font_large = pygame.font.Font(None, 48)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 20)

        self._calculate_layout()

    def _calculate_layout(self) -> None:
        """Board on the left, ledger panel on the right."""
        self._panel_width = 180
        self._top_ui_height = 60
        board_area_width = self._window_width - self._panel_width - 40
        board_area_height = self._window_height - self._top_ui_height - 20

        self._scale = board_area_height / self._config.board.screen_height
        self._track_width = board_area_width / self._config.board.tracks
        self._board_x = 20
        self._board_y = self._top_ui_height
        self._board_width = int(self._track_width * self._config.board.tracks)
        self._board_height = int(board_area_height)
        self._piece_radius = max(8, int(min(self._track_width * 0.35, 28)))

    def render(self, screen: "pygame.Surface", data: dict, glitch_alpha: float) -> None:
        screen.fill(self._bg)
        self._draw_tracks(screen, data)
        self._draw_pieces(screen, data)
        self._draw_ledger(screen, data)
        self._draw_hud(screen, data)

        if glitch_alpha > 0:
            self._draw_glitch(screen, glitch_alpha)
        if data["ended"]:
            self._draw_overlay(screen, "SESSION OVER", f"Score: {data['score']}")
        elif data["paused"]:
            self._draw_overlay(screen, "PAUSED", "ESC to resume, Enter to end")

    def _to_screen_y(self, y: float) -> int:
        return int(self._board_y + y * self._scale)

    def _track_center_x(self, track: int) -> int:
        return int(self._board_x + (track + 0.5) * self._track_width)

    def _draw_tracks(self, screen: "pygame.Surface", data: dict) -> None:
        board_rect = pygame.Rect(self._board_x, self._board_y, self._board_width, self._board_height)
        pygame.draw.rect(screen, self._track_fill, board_rect)

        for track in range(data["tracks"] + 1):
            x = int(self._board_x + track * self._track_width)
            pygame.draw.line(screen, self._track_border, (x, self._board_y),
                             (x, self._board_y + self._board_height), 1)

        # Hit window band and collection line
        line_y = self._to_screen_y(data["collection_line_y"])
        half = int(data["hit_window"] * self._scale)
        band = pygame.Surface((self._board_width, half * 2), pygame.SRCALPHA)
        band.fill((255, 255, 255, 28))
        screen.blit(band, (self._board_x, line_y - half))
        pygame.draw.line(screen, self._line_color, (self._board_x, line_y),
                         (self._board_x + self._board_width, line_y), 2)

        # Key labels under each track
        for track, key in enumerate(data["keybindings"]):
            label = self._font_small.render(key.replace("Key", ""), True, self._text_dim)
            screen.blit(label, (self._track_center_x(track) - label.get_width() // 2, line_y + half + 6))

    def _draw_pieces(self, screen: "pygame.Surface", data: dict) -> None:
        bottom = self._board_y + self._board_height
        for piece in data["pieces"]:
            cy = self._to_screen_y(piece["y"])
            if cy - self._piece_radius > bottom:
                continue
            cx = self._track_center_x(piece["track"])
            points = _wedge_points(cx, cy, self._piece_radius, piece["quadrant"])
            pygame.draw.polygon(screen, PALETTE[piece["color"]], points)
            pygame.draw.circle(screen, self._track_border, (cx, cy), self._piece_radius, 1)

    def _draw_ledger(self, screen: "pygame.Surface", data: dict) -> None:
        panel_x = self._window_width - self._panel_width
        title = self._font_medium.render("CIRCLES", True, self._text)
        screen.blit(title, (panel_x + (self._panel_width - title.get_width()) // 2, self._top_ui_height))

        # Fill color per quadrant comes from the color bound to it
        quadrant_colors = {
            quadrant.value: PALETTE[color.value]
            for color, quadrant in self._config.color_quadrant_map.items()
        }
        radius = 42
        cx = panel_x + self._panel_width // 2
        for i, circle in enumerate(data["circles"]):
            cy = self._top_ui_height + 80 + i * (radius * 2 + 30)
            for quadrant, filled in circle["quadrants"].items():
                if filled:
                    pygame.draw.polygon(screen, quadrant_colors[quadrant],
                                        _wedge_points(cx, cy, radius, quadrant))
            pygame.draw.circle(screen, self._text_dim, (cx, cy), radius, 2)
            pygame.draw.line(screen, self._text_dim, (cx - radius, cy), (cx + radius, cy), 1)
            pygame.draw.line(screen, self._text_dim, (cx, cy - radius), (cx, cy + radius), 1)

    def _draw_hud(self, screen: "pygame.Surface", data: dict) -> None:
        score = self._font_large.render(f"{data['score']}", True, self._text)
        screen.blit(score, (self._board_x, 10))

        # Difficulty meter
        meter_x = self._board_x + 140
        meter_w = 200
        pygame.draw.rect(screen, self._track_border, (meter_x, 22, meter_w, 14), 1)
        fill_w = int(meter_w * max(0.0, min(1.0, data["difficulty"])))
        pygame.draw.rect(screen, (230, 140, 60), (meter_x + 1, 23, max(0, fill_w - 2), 12))
        label = self._font_small.render(
            f"difficulty {data['difficulty']:.2f}  {data['spawn_rate']:.1f}/s  "
            f"{data['fall_speed']:.0f} u/s",
            True, self._text_dim
        )
        screen.blit(label, (meter_x, 40))

    def _draw_glitch(self, screen: "pygame.Surface", alpha: float) -> None:
        overlay = pygame.Surface((self._window_width, self._window_height), pygame.SRCALPHA)
        overlay.fill((*PALETTE["blue"], int(90 * alpha)))
        screen.blit(overlay, (0, 0))

    def _draw_overlay(self, screen: "pygame.Surface", title: str, hint: str) -> None:
        overlay = pygame.Surface((self._window_width, self._window_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 150))
        screen.blit(overlay, (0, 0))

        text = self._font_large.render(title, True, self._text)
        screen.blit(text, ((self._window_width - text.get_width()) // 2, self._window_height // 2 - 40))
        sub = self._font_medium.render(hint, True, self._text_dim)
        screen.blit(sub, ((self._window_width - sub.get_width()) // 2, self._window_height // 2 + 10))


class HumanPlayer:
    """Runs the pygame loop around an InvokerGame session."""

    def __init__(
        self,
        config: Optional[InvokerConfig] = None,
        seed: Optional[int] = None,
        window_width: int = 760,
        window_height: int = 720,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install invoker-core[play]")

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps
        self._glitch_timer = 0.0

        self._game = InvokerGame(config=config, seed=seed, callbacks=GameCallbacks(
            on_game_end=self._on_game_end,
            on_score_change=self._on_score_change,
            on_glitch=self._on_glitch,
        ))
        self._last_score = 0

        pygame.init()
        self._screen = pygame.display.set_mode((window_width, window_height))
        pygame.display.set_caption("Invoker")
        self._clock = pygame.time.Clock()
        self._renderer = InvokerRenderer(config, window_width, window_height)
        self._running = True

    def _on_game_end(self) -> None:
        print(f"\nSESSION OVER - Score: {self._game.score}")

    def _on_score_change(self, score: int) -> None:
        if score != self._last_score:
            print(f"  +{score - self._last_score} (Total: {score})")
            self._last_score = score

    def _on_glitch(self) -> None:
        self._glitch_timer = GLITCH_FLASH_SECONDS

    def run(self) -> int:
        """Run the game loop. Returns final score."""
        print("=== Invoker ===")
        print(f"Keys {' '.join(k.replace('Key', '') for k in self._config.keybindings)} collect")
        print("ESC to start / pause, Enter while paused to end")
        print()

        while self._running:
            dt_ms = self._clock.tick(self._target_fps)
            self._handle_events()
            if not self._game.ended:
                self._game.tick(dt_ms)
            self._glitch_timer = max(0.0, self._glitch_timer - dt_ms / 1000.0)
            self._render()

        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                key_code = key_code_for(event.key)
                if key_code is not None:
                    self._game.handle_key(key_code)

    def _render(self) -> None:
        data = self._game.get_render_data()
        self._renderer.render(self._screen, data, self._glitch_timer / GLITCH_FLASH_SECONDS)
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play the Invoker minigame interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--config", type=str, default=None, help="Path to invoker_config.yaml")
    parser.add_argument("--width", type=int, default=760, help="Window width (default: 760)")
    parser.add_argument("--height", type=int, default=720, help="Window height (default: 720)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--log-level", default="INFO", help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args.config)
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            window_width=args.width,
            window_height=args.height,
            target_fps=args.fps
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
