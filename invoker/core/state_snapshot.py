"""
State Snapshot
==============

Packs InvokerState into fixed-size numpy arrays for renderers, agents and
Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from invoker.core.colors import COLOR_ORDER, QUADRANT_ORDER
from invoker.core.config_loader import InvokerConfig, get_config
from invoker.core.difficulty import DifficultyModel
from invoker.core.state import InvokerState

# Per-track distance value used when a track has no pieces
EMPTY_TRACK_DISTANCE = -1.0


@dataclass
class InvokerSnapshot:
    """
    Complete state snapshot as arrays.

    Piece arrays are fixed-size with masking for variable piece counts.
    """
    # Core state
    time: float
    score: int
    difficulty: float
    fall_speed: float
    spawn_rate: float
    spawn_accumulator: float
    paused: bool
    pieces_count: int

    # Board info (for normalization)
    screen_height: float
    collection_line_y: float
    hit_window: float

    # Events from the last transition
    completed_count: int
    glitch: bool
    over_collection: bool

    # Derived per-track feature
    nearest_distance: np.ndarray      # (tracks,) float32, -1 for empty tracks

    # Ledger
    circle_ids: np.ndarray            # (circles,) int32
    circle_grid: np.ndarray           # (circles, 4) int8

    # Piece arrays (fixed size, padded)
    piece_id: np.ndarray              # (MAX_PIECES,) int32, -1 padding
    piece_track: np.ndarray           # (MAX_PIECES,) int16, -1 padding
    piece_color: np.ndarray           # (MAX_PIECES,) int16, index into COLOR_ORDER
    piece_quadrant: np.ndarray        # (MAX_PIECES,) int16, index into QUADRANT_ORDER
    piece_y: np.ndarray               # (MAX_PIECES,) float32
    piece_speed: np.ndarray           # (MAX_PIECES,) float32
    piece_mask: np.ndarray            # (MAX_PIECES,) bool

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            # Core state
            "time": np.array(self.time, dtype=np.float32),
            "score": np.array(self.score, dtype=np.int64),
            "difficulty": np.array(self.difficulty, dtype=np.float32),
            "fall_speed": np.array(self.fall_speed, dtype=np.float32),
            "spawn_rate": np.array(self.spawn_rate, dtype=np.float32),
            "spawn_accumulator": np.array(self.spawn_accumulator, dtype=np.float32),
            "paused": np.array(int(self.paused), dtype=np.int8),
            "pieces_count": np.array(self.pieces_count, dtype=np.int32),

            # Board info
            "screen_height": np.array(self.screen_height, dtype=np.float32),
            "collection_line_y": np.array(self.collection_line_y, dtype=np.float32),
            "hit_window": np.array(self.hit_window, dtype=np.float32),

            # Events
            "completed_count": np.array(self.completed_count, dtype=np.int32),
            "glitch": np.array(int(self.glitch), dtype=np.int8),
            "over_collection": np.array(int(self.over_collection), dtype=np.int8),

            # Derived
            "nearest_distance": self.nearest_distance,

            # Ledger
            "circle_ids": self.circle_ids,
            "circle_grid": self.circle_grid,

            # Piece arrays
            "piece_id": self.piece_id,
            "piece_track": self.piece_track,
            "piece_color": self.piece_color,
            "piece_quadrant": self.piece_quadrant,
            "piece_y": self.piece_y,
            "piece_speed": self.piece_speed,
            "piece_mask": self.piece_mask,
        }


class SnapshotBuilder:
    """Builds state snapshots with pre-allocated arrays."""

    def __init__(self, config: Optional[InvokerConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._model = DifficultyModel(config)
        self._max_pieces = config.observation.max_pieces
        self._tracks = config.board.tracks
        self._line_y = config.board.collection_line_y

        # Color index -> quadrant index lookup
        quadrants = config.color_quadrant_map
        self._quadrant_index = {
            color: QUADRANT_ORDER.index(quadrant) for color, quadrant in quadrants.items()
        }
        self._color_index = {color: i for i, color in enumerate(COLOR_ORDER)}

        # Pre-allocate arrays
        self._piece_id = np.full(self._max_pieces, -1, dtype=np.int32)
        self._piece_track = np.full(self._max_pieces, -1, dtype=np.int16)
        self._piece_color = np.full(self._max_pieces, -1, dtype=np.int16)
        self._piece_quadrant = np.full(self._max_pieces, -1, dtype=np.int16)
        self._piece_y = np.zeros(self._max_pieces, dtype=np.float32)
        self._piece_speed = np.zeros(self._max_pieces, dtype=np.float32)
        self._piece_mask = np.zeros(self._max_pieces, dtype=bool)
        self._nearest = np.full(self._tracks, EMPTY_TRACK_DISTANCE, dtype=np.float32)

    @property
    def max_pieces(self) -> int:
        return self._max_pieces

    def build(self, state: InvokerState) -> InvokerSnapshot:
        """
        Build snapshot from state.

        Pieces beyond max_pieces are left out of the arrays.

        Args:
            state: State to pack.

        Returns:
            InvokerSnapshot with copied arrays.
        """
        # Reset arrays
        self._piece_id.fill(-1)
        self._piece_track.fill(-1)
        self._piece_color.fill(-1)
        self._piece_quadrant.fill(-1)
        self._piece_y.fill(0)
        self._piece_speed.fill(0)
        self._piece_mask.fill(False)
        self._nearest.fill(EMPTY_TRACK_DISTANCE)

        for i, piece in enumerate(state.pieces[:self._max_pieces]):
            self._piece_id[i] = piece.id
            self._piece_track[i] = piece.track
            self._piece_color[i] = self._color_index[piece.color]
            self._piece_quadrant[i] = self._quadrant_index[piece.color]
            self._piece_y[i] = piece.y
            self._piece_speed[i] = piece.speed
            self._piece_mask[i] = True

        # Nearest piece per track considers every live piece
        for piece in state.pieces:
            distance = piece.distance_to(self._line_y)
            current = self._nearest[piece.track]
            if current < 0 or distance < current:
                self._nearest[piece.track] = distance

        circle_ids = np.array([c.id for c in state.circles], dtype=np.int32)
        circle_grid = np.array(state.circle_grid(), dtype=np.int8).reshape(len(state.circles), len(QUADRANT_ORDER))

        difficulty = state.difficulty.value
        events = state.events
        board = self._config.board

        return InvokerSnapshot(
            time=state.time,
            score=state.score,
            difficulty=difficulty,
            fall_speed=self._model.fall_speed(difficulty),
            spawn_rate=self._model.spawn_rate(difficulty),
            spawn_accumulator=state.difficulty.spawn_accumulator,
            paused=state.paused,
            pieces_count=len(state.pieces),
            screen_height=board.screen_height,
            collection_line_y=board.collection_line_y,
            hit_window=board.hit_window,
            completed_count=len(events.completed_circle_ids),
            glitch=events.glitch,
            over_collection=events.over_collection,
            nearest_distance=self._nearest.copy(),
            circle_ids=circle_ids,
            circle_grid=circle_grid,
            piece_id=self._piece_id.copy(),
            piece_track=self._piece_track.copy(),
            piece_color=self._piece_color.copy(),
            piece_quadrant=self._piece_quadrant.copy(),
            piece_y=self._piece_y.copy(),
            piece_speed=self._piece_speed.copy(),
            piece_mask=self._piece_mask.copy(),
        )
