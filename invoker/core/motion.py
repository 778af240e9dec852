"""
Motion
======

Moves live pieces down their tracks and culls the ones that left the screen.
Culling is silent: a missed piece costs neither score nor difficulty.
"""

from __future__ import annotations

import dataclasses
from typing import Optional

from invoker.core.config_loader import InvokerConfig, get_config
from invoker.core.state import InvokerState


def advance_pieces(
    state: InvokerState,
    dt_seconds: float,
    config: Optional[InvokerConfig] = None
) -> InvokerState:
    """
    Move every piece by speed * dt and drop pieces past the cull line.

    Args:
        state: Current state.
        dt_seconds: Elapsed tick time in seconds.
        config: Game configuration. Uses default if None.

    Returns:
        New state with updated piece positions.
    """
    if config is None:
        config = get_config()

    if not state.pieces:
        return state

    cull_y = config.board.cull_y
    moved = (
        dataclasses.replace(piece, y=piece.y + piece.speed * dt_seconds)
        for piece in state.pieces
    )
    return state.replace(pieces=tuple(p for p in moved if p.y <= cull_y))
