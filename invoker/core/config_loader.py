"""
Configuration Loader
====================

Loads and validates invoker_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

from invoker.core.colors import PieceColor, Quadrant, parse_color, parse_quadrant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardConfig:
    """Play-field geometry and hit window."""
    tracks: int                  # Number of parallel tracks
    screen_height: float         # Visible height in position units
    collection_line_y: float     # Y coordinate of the collection line
    hit_window: float            # Max distance from the line for a hit
    cull_margin: float           # Extra travel past the screen before a piece is dropped

    @property
    def cull_y(self) -> float:
        """Pieces with y beyond this value are culled."""
        return self.screen_height + self.cull_margin


@dataclass(frozen=True)
class DifficultyConfig:
    """Difficulty bounds and transition deltas."""
    min: float
    max: float
    initial: float
    drift_per_second: float
    completion_delta: float
    over_collection_base: float
    over_collection_scale: float


@dataclass(frozen=True)
class SpawnConfig:
    """Spawn rate and fall speed ranges."""
    base_rate: float             # Pieces/second at difficulty 0
    max_rate: float              # Pieces/second at difficulty 1
    base_fall_speed: float       # Units/second at difficulty 0
    max_fall_speed: float        # Units/second at difficulty 1
    speed_jitter_min: float
    speed_jitter_max: float


@dataclass(frozen=True)
class CirclesConfig:
    """Circle ledger parameters."""
    count: int
    completion_award: int
    glitch_color: PieceColor
    color_quadrants: Tuple[Tuple[PieceColor, Quadrant], ...]


@dataclass(frozen=True)
class RulesConfig:
    """Pause behavior."""
    start_paused: bool
    collect_while_paused: bool


@dataclass(frozen=True)
class ControlsConfig:
    """Host control keys handled by the session wrapper."""
    pause_key: str
    end_key: str


@dataclass(frozen=True)
class ObservationConfig:
    """Snapshot and Gymnasium environment parameters."""
    max_pieces: int
    frame_ms: float
    max_episode_seconds: float


@dataclass(frozen=True)
class InvokerConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    keybindings: Tuple[str, ...]
    difficulty: DifficultyConfig
    spawn: SpawnConfig
    available_colors: Tuple[PieceColor, ...]
    circles: CirclesConfig
    rules: RulesConfig
    controls: ControlsConfig
    observation: ObservationConfig

    @property
    def tracks(self) -> int:
        """Number of tracks."""
        return self.board.tracks

    @property
    def color_quadrant_map(self) -> Dict[PieceColor, Quadrant]:
        """Color -> quadrant table as a dict."""
        return dict(self.circles.color_quadrants)

    def track_for_key(self, key_code: str) -> Optional[int]:
        """Track bound to a key code, or None for unmapped keys."""
        try:
            return self.keybindings.index(key_code)
        except ValueError:
            return None

    def quadrant_for(self, color: PieceColor) -> Quadrant:
        """Quadrant a piece of this color fills."""
        for bound_color, quadrant in self.circles.color_quadrants:
            if bound_color == color:
                return quadrant
        raise ValueError(f"No quadrant bound to color: {color}")


def _parse_jitter(jitter_data) -> Tuple[float, float]:
    """Parse the [low, high] speed jitter pair from YAML."""
    if len(jitter_data) != 2:
        raise ValueError(f"speed_jitter must have 2 values [low, high], got {jitter_data}")
    return (float(jitter_data[0]), float(jitter_data[1]))


def _parse_color_quadrants(table: dict) -> Tuple[Tuple[PieceColor, Quadrant], ...]:
    """Parse the color -> quadrant table from YAML."""
    return tuple(
        (parse_color(color), parse_quadrant(quadrant))
        for color, quadrant in table.items()
    )


def _validate_config(config: InvokerConfig) -> None:
    """Validate configuration consistency."""
    board = config.board
    if board.tracks <= 0:
        raise ValueError(f"tracks must be positive, got {board.tracks}")

    # One key per track, no key bound twice
    if len(config.keybindings) != board.tracks:
        raise ValueError(
            f"keybindings length ({len(config.keybindings)}) must match "
            f"tracks ({board.tracks})"
        )
    if len(set(config.keybindings)) != len(config.keybindings):
        raise ValueError(f"keybindings contain duplicates: {list(config.keybindings)}")

    if board.screen_height <= 0:
        raise ValueError(f"screen_height must be positive, got {board.screen_height}")
    if not 0 <= board.collection_line_y <= board.screen_height:
        raise ValueError(
            f"collection_line_y ({board.collection_line_y}) must lie within "
            f"[0, screen_height ({board.screen_height})]"
        )
    if board.hit_window <= 0:
        raise ValueError(f"hit_window must be positive, got {board.hit_window}")
    if board.cull_margin < 0:
        raise ValueError(f"cull_margin must be non-negative, got {board.cull_margin}")

    # Difficulty curves are defined on [0, 1]
    diff = config.difficulty
    if not 0.0 <= diff.min <= diff.max <= 1.0:
        raise ValueError(
            f"difficulty bounds must satisfy 0 <= min <= max <= 1, got [{diff.min}, {diff.max}]"
        )
    for name in ("drift_per_second", "completion_delta", "over_collection_base", "over_collection_scale"):
        if getattr(diff, name) < 0:
            raise ValueError(f"difficulty.{name} must be non-negative, got {getattr(diff, name)}")

    spawn = config.spawn
    for name in ("base_rate", "max_rate", "base_fall_speed", "max_fall_speed"):
        if getattr(spawn, name) < 0:
            raise ValueError(f"spawn.{name} must be non-negative, got {getattr(spawn, name)}")
    if not 0 < spawn.speed_jitter_min <= spawn.speed_jitter_max:
        raise ValueError(
            f"speed_jitter must satisfy 0 < low <= high, got "
            f"[{spawn.speed_jitter_min}, {spawn.speed_jitter_max}]"
        )

    if not config.available_colors:
        raise ValueError("available_colors must not be empty")

    # Color -> quadrant table must be one-to-one and cover every available color
    circles = config.circles
    if circles.count <= 0:
        raise ValueError(f"circles.count must be positive, got {circles.count}")
    mapped_colors = [color for color, _ in circles.color_quadrants]
    mapped_quadrants = [quadrant for _, quadrant in circles.color_quadrants]
    if len(set(mapped_quadrants)) != len(mapped_quadrants):
        raise ValueError("color_quadrants must bind each quadrant to at most one color")
    for color in config.available_colors:
        if color not in mapped_colors:
            raise ValueError(f"Available color '{color.value}' has no quadrant in color_quadrants")

    obs = config.observation
    if obs.max_pieces <= 0:
        raise ValueError(f"observation.max_pieces must be positive, got {obs.max_pieces}")
    if obs.frame_ms <= 0:
        raise ValueError(f"observation.frame_ms must be positive, got {obs.frame_ms}")


def load_config(config_path: Optional[str] = None) -> InvokerConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to invoker_config.yaml. If None, uses default location.

    Returns:
        Validated InvokerConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "invoker_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.info("Loading Invoker config from %s", config_path)
    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    board_data = raw["board"]
    board = BoardConfig(
        tracks=int(board_data["tracks"]),
        screen_height=float(board_data["screen_height"]),
        collection_line_y=float(board_data["collection_line_y"]),
        hit_window=float(board_data["hit_window"]),
        cull_margin=float(board_data.get("cull_margin", 50.0))
    )

    diff_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        min=float(diff_data.get("min", 0.0)),
        max=float(diff_data.get("max", 1.0)),
        initial=float(diff_data.get("initial", 0.35)),
        drift_per_second=float(diff_data["drift_per_second"]),
        completion_delta=float(diff_data["completion_delta"]),
        over_collection_base=float(diff_data["over_collection_base"]),
        over_collection_scale=float(diff_data["over_collection_scale"])
    )

    spawn_data = raw["spawn"]
    jitter_low, jitter_high = _parse_jitter(spawn_data.get("speed_jitter", [0.85, 1.15]))
    spawn = SpawnConfig(
        base_rate=float(spawn_data["base_rate"]),
        max_rate=float(spawn_data["max_rate"]),
        base_fall_speed=float(spawn_data["base_fall_speed"]),
        max_fall_speed=float(spawn_data["max_fall_speed"]),
        speed_jitter_min=jitter_low,
        speed_jitter_max=jitter_high
    )

    circles_data = raw["circles"]
    circles = CirclesConfig(
        count=int(circles_data.get("count", 3)),
        completion_award=int(circles_data.get("completion_award", 10)),
        glitch_color=parse_color(circles_data.get("glitch_color", "blue")),
        color_quadrants=_parse_color_quadrants(circles_data["color_quadrants"])
    )

    # Optional sections
    rules_data = raw.get("rules", {})
    rules = RulesConfig(
        start_paused=bool(rules_data.get("start_paused", True)),
        collect_while_paused=bool(rules_data.get("collect_while_paused", False))
    )

    controls_data = raw.get("controls", {})
    controls = ControlsConfig(
        pause_key=str(controls_data.get("pause_key", "Escape")),
        end_key=str(controls_data.get("end_key", "Enter"))
    )

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_pieces=int(obs_data.get("max_pieces", 64)),
        frame_ms=float(obs_data.get("frame_ms", 1000.0 / 60.0)),
        max_episode_seconds=float(obs_data.get("max_episode_seconds", 120.0))
    )

    config = InvokerConfig(
        board=board,
        keybindings=tuple(str(k) for k in raw["keybindings"]),
        difficulty=difficulty,
        spawn=spawn,
        available_colors=tuple(parse_color(c) for c in raw["available_colors"]),
        circles=circles,
        rules=rules,
        controls=controls,
        observation=observation
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[InvokerConfig] = None


def get_config() -> InvokerConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> InvokerConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
