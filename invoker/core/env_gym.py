"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the Invoker game.
Reward is always 0.0 - agents compute their own from info.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from invoker.core.colors import COLOR_ORDER, QUADRANT_ORDER
from invoker.core.config_loader import InvokerConfig, load_config
from invoker.core.game import InvokerGame
from invoker.core.state_snapshot import SnapshotBuilder

logger = logging.getLogger(__name__)

NO_PRESS = 0


class InvokerEnv(gym.Env):
    """
    Invoker rhythm minigame as a Gymnasium environment.

    Action Space:
        Discrete(tracks + 1). 0 presses nothing, a + 1 presses the key bound
        to track a. The press is applied before the frame advances.

    Observation Space:
        Dict of arrays from InvokerSnapshot.to_obs_dict().

    Reward:
        Always 0.0. Agents must compute their own reward from the info dict.

    Episode:
        Never terminates (the core has no game-over). Truncates when simulation
        time reaches observation.max_episode_seconds.
    """

    metadata = {
        "render_modes": [],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[InvokerConfig] = None,
        frame_ms: Optional[float] = None,
        max_episode_seconds: Optional[float] = None,
    ):
        """
        Initialize Invoker environment.

        Args:
            config_path: Path to invoker_config.yaml. Uses default if None.
            config: Already-loaded configuration; takes precedence over config_path.
            frame_ms: Override frame length in milliseconds.
            max_episode_seconds: Override truncation time.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)
        self._frame_ms = float(frame_ms or self._config.observation.frame_ms)
        self._max_episode_seconds = float(
            max_episode_seconds or self._config.observation.max_episode_seconds
        )

        self._game = InvokerGame(config=self._config)
        self._snapshots = SnapshotBuilder(self._config)

        self.action_space = spaces.Discrete(self._config.board.tracks + 1)
        self.observation_space = self._build_observation_space()

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_pieces = self._config.observation.max_pieces
        tracks = self._config.board.tracks
        circles = self._config.circles.count
        height = self._config.board.screen_height + self._config.board.cull_margin

        obs_dict = {
            # Core state
            "time": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "difficulty": spaces.Box(low=0, high=1, shape=(), dtype=np.float32),
            "fall_speed": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "spawn_rate": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "spawn_accumulator": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "paused": spaces.Box(low=0, high=1, shape=(), dtype=np.int8),
            "pieces_count": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),

            # Board info
            "screen_height": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "collection_line_y": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "hit_window": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),

            # Events
            "completed_count": spaces.Box(low=0, high=circles, shape=(), dtype=np.int32),
            "glitch": spaces.Box(low=0, high=1, shape=(), dtype=np.int8),
            "over_collection": spaces.Box(low=0, high=1, shape=(), dtype=np.int8),

            # Derived
            "nearest_distance": spaces.Box(low=-1, high=np.inf, shape=(tracks,), dtype=np.float32),

            # Ledger
            "circle_ids": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(circles,), dtype=np.int32),
            "circle_grid": spaces.Box(low=0, high=1, shape=(circles, len(QUADRANT_ORDER)), dtype=np.int8),

            # Piece arrays
            "piece_id": spaces.Box(low=-1, high=np.iinfo(np.int32).max, shape=(max_pieces,), dtype=np.int32),
            "piece_track": spaces.Box(low=-1, high=tracks - 1, shape=(max_pieces,), dtype=np.int16),
            "piece_color": spaces.Box(low=-1, high=len(COLOR_ORDER) - 1, shape=(max_pieces,), dtype=np.int16),
            "piece_quadrant": spaces.Box(low=-1, high=len(QUADRANT_ORDER) - 1, shape=(max_pieces,), dtype=np.int16),
            "piece_y": spaces.Box(low=0, high=height, shape=(max_pieces,), dtype=np.float32),
            "piece_speed": spaces.Box(low=0, high=np.inf, shape=(max_pieces,), dtype=np.float32),
            "piece_mask": spaces.MultiBinary(max_pieces),
        }
        return spaces.Dict(obs_dict)

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
        self._game.resume()

        obs = self._snapshots.build(self._game.state).to_obs_dict()
        info = self._game.get_info()
        info["delta_score"] = 0
        return obs, info

    def step(
        self,
        action: Union[int, np.integer, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step: optional key press, then one frame.

        Args:
            action: 0 for no press, track + 1 to press that track's key.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = action.item()
        action = int(action)
        if not self.action_space.contains(action):
            raise ValueError(f"Action {action} outside Discrete({self.action_space.n})")

        score_before = self._game.score

        # Press events are cleared by the frame, so read them first
        press_events = None
        if action != NO_PRESS:
            key_code = self._config.keybindings[action - 1]
            press_events = self._game.press(key_code).events

        self._game.tick(self._frame_ms)
        state = self._game.state

        obs = self._snapshots.build(state).to_obs_dict()
        truncated = bool(state.time >= self._max_episode_seconds)

        info = self._game.get_info()
        info["delta_score"] = state.score - score_before
        info["pressed"] = action != NO_PRESS
        if press_events is not None:
            info.update(press_events.to_dict())
        else:
            info.update({
                "completed_circle_ids": [],
                "captured": None,
                "glitch": False,
                "over_collection": False,
            })

        if truncated:
            logger.debug("Episode truncated at t=%.2fs, score %d", state.time, state.score)

        return obs, 0.0, False, truncated, info

    def close(self) -> None:
        """Nothing to release; present for the Gymnasium API."""

    @property
    def game(self) -> InvokerGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> InvokerConfig:
        """Game configuration."""
        return self._config
