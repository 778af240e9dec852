"""
Collector
=========

Hit detection for a key press on one track.
"""

from __future__ import annotations

from typing import Iterable, Optional

from invoker.core.config_loader import InvokerConfig, get_config
from invoker.core.difficulty import DifficultyModel
from invoker.core.circle_ledger import resolve_collection
from invoker.core.state import InvokerState, Piece


def find_candidate(pieces: Iterable[Piece], track: int, line_y: float) -> Optional[Piece]:
    """
    Piece on track nearest to the collection line.

    Ties go to the first piece in iteration order.
    """
    best: Optional[Piece] = None
    best_distance = 0.0
    for piece in pieces:
        if piece.track != track:
            continue
        distance = piece.distance_to(line_y)
        if best is None or distance < best_distance:
            best = piece
            best_distance = distance
    return best


def collect_from_track(
    state: InvokerState,
    track: int,
    config: Optional[InvokerConfig] = None,
    model: Optional[DifficultyModel] = None
) -> InvokerState:
    """
    Collect the candidate piece on a track if it lies within the hit window.

    Empty tracks and misses leave the state unchanged (the piece stays alive).

    Args:
        state: Current state.
        track: Track index the key press resolved to.
        config: Game configuration. Uses default if None.
        model: Difficulty model for config. Built if None.

    Returns:
        New state.
    """
    if config is None:
        config = get_config()

    board = config.board
    candidate = find_candidate(state.pieces, track, board.collection_line_y)
    if candidate is None:
        return state
    if candidate.distance_to(board.collection_line_y) > board.hit_window:
        return state

    remaining = tuple(p for p in state.pieces if p.id != candidate.id)
    return resolve_collection(state.replace(pieces=remaining), candidate, config, model)
