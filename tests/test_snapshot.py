"""
Tests for the array snapshot used by renderers and agents.
"""

import numpy as np
import pytest

from invoker.core.colors import COLOR_ORDER, QUADRANT_ORDER, PieceColor
from invoker.core.config_loader import load_config
from invoker.core.game import initial_state
from invoker.core.state import Circle, Piece
from invoker.core.state_snapshot import EMPTY_TRACK_DISTANCE, SnapshotBuilder


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def builder(config):
    return SnapshotBuilder(config)


def make_piece(piece_id, track, color, y):
    return Piece(id=piece_id, track=track, color=color, y=y, speed=150.0, spawn_time=0.0)


class TestSnapshot:
    """Verify snapshot arrays and masks."""

    def test_empty_state(self, builder, config):
        snap = builder.build(initial_state(config, seed=0))

        assert snap.pieces_count == 0
        assert not snap.piece_mask.any()
        assert (snap.piece_id == -1).all()
        assert (snap.nearest_distance == EMPTY_TRACK_DISTANCE).all()
        assert snap.circle_ids.tolist() == [0, 1, 2]
        assert snap.circle_grid.shape == (config.circles.count, len(QUADRANT_ORDER))
        assert snap.circle_grid.sum() == 0
        assert snap.paused is True

    def test_piece_arrays(self, builder, config):
        state = initial_state(config, seed=0).replace(pieces=(
            make_piece(4, 1, PieceColor.YELLOW, 100.0),
            make_piece(9, 3, PieceColor.BLUE, 600.0),
        ))

        snap = builder.build(state)

        assert snap.piece_mask[:2].all()
        assert not snap.piece_mask[2:].any()
        assert snap.piece_id[:2].tolist() == [4, 9]
        assert snap.piece_track[:2].tolist() == [1, 3]
        assert snap.piece_color[0] == COLOR_ORDER.index(PieceColor.YELLOW)
        assert snap.piece_quadrant[1] == QUADRANT_ORDER.index(config.quadrant_for(PieceColor.BLUE))
        assert snap.piece_y[1] == pytest.approx(600.0)
        assert snap.piece_speed[0] == pytest.approx(150.0)

    def test_nearest_distance(self, builder, config):
        line = config.board.collection_line_y
        state = initial_state(config, seed=0).replace(pieces=(
            make_piece(0, 0, PieceColor.RED, line - 100.0),
            make_piece(1, 0, PieceColor.RED, line - 30.0),
            make_piece(2, 2, PieceColor.GREEN, line + 5.0),
        ))

        snap = builder.build(state)

        assert snap.nearest_distance[0] == pytest.approx(30.0)
        assert snap.nearest_distance[1] == EMPTY_TRACK_DISTANCE
        assert snap.nearest_distance[2] == pytest.approx(5.0)

    def test_circle_grid(self, builder, config):
        circles = (
            Circle(id=5, filled=(True, False, False, True)),
            Circle(id=6),
            Circle(id=7, filled=(False, True, False, False)),
        )
        snap = builder.build(initial_state(config, seed=0).replace(circles=circles))

        assert snap.circle_ids.tolist() == [5, 6, 7]
        assert snap.circle_grid.tolist() == [[1, 0, 0, 1], [0, 0, 0, 0], [0, 1, 0, 0]]

    def test_overflow_is_truncated(self, builder, config):
        """More pieces than max_pieces fill the arrays; the count stays exact."""
        max_pieces = config.observation.max_pieces
        pieces = tuple(
            make_piece(i, i % config.board.tracks, PieceColor.RED, float(i))
            for i in range(max_pieces + 10)
        )
        snap = builder.build(initial_state(config, seed=0).replace(pieces=pieces))

        assert snap.pieces_count == max_pieces + 10
        assert snap.piece_mask.all()
        assert snap.piece_id[-1] == max_pieces - 1

    def test_snapshots_do_not_alias(self, builder, config):
        """Arrays are copies; later builds do not change earlier snapshots."""
        state = initial_state(config, seed=0)
        first = builder.build(state.replace(pieces=(make_piece(0, 0, PieceColor.RED, 10.0),)))
        builder.build(state)

        assert first.piece_mask[0]
        assert first.piece_id[0] == 0

    def test_obs_dict_dtypes(self, builder, config):
        obs = builder.build(initial_state(config, seed=0)).to_obs_dict()

        assert obs["time"].dtype == np.float32
        assert obs["score"].dtype == np.int64
        assert obs["paused"].dtype == np.int8
        assert obs["piece_id"].dtype == np.int32
        assert obs["piece_track"].dtype == np.int16
        assert obs["piece_mask"].dtype == bool
        assert obs["circle_grid"].dtype == np.int8
        assert float(obs["difficulty"]) == pytest.approx(config.difficulty.initial)
