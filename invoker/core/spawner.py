"""
Spawner
=======

Accumulator-driven piece spawning.

Each tick adds dt * spawn_rate to the accumulator; every whole unit in it
becomes one piece. The fractional remainder carries over, so the long-run
spawn count does not depend on frame pacing.
"""

from __future__ import annotations

import dataclasses
from typing import List, Optional

from invoker.core.config_loader import InvokerConfig, get_config
from invoker.core.difficulty import DifficultyModel
from invoker.core.rng import PieceRng
from invoker.core.state import InvokerState, Piece


def spawn_pieces(
    state: InvokerState,
    dt_seconds: float,
    config: Optional[InvokerConfig] = None,
    model: Optional[DifficultyModel] = None
) -> InvokerState:
    """
    Advance the spawn accumulator and emit due pieces.

    Args:
        state: Current state.
        dt_seconds: Elapsed tick time in seconds.
        config: Game configuration. Uses default if None.
        model: Difficulty model for config. Built if None.

    Returns:
        New state with spawned pieces appended at y=0.
    """
    if config is None:
        config = get_config()
    if model is None:
        model = DifficultyModel(config)

    difficulty = state.difficulty.value
    accumulator = state.difficulty.spawn_accumulator + dt_seconds * model.spawn_rate(difficulty)

    if accumulator < 1.0:
        return state.replace(
            difficulty=dataclasses.replace(state.difficulty, spawn_accumulator=accumulator)
        )

    rng = PieceRng.from_state(state.rng_state)
    fall_speed = model.fall_speed(difficulty)
    spawn = config.spawn
    next_id = state.next_piece_id
    spawned: List[Piece] = []

    while accumulator >= 1.0:
        accumulator -= 1.0
        track = rng.pick_track(config.board.tracks)
        color = rng.pick_color(config.available_colors)
        speed = fall_speed * rng.speed_jitter(spawn.speed_jitter_min, spawn.speed_jitter_max)
        spawned.append(Piece(
            id=next_id,
            track=track,
            color=color,
            y=0.0,
            speed=speed,
            spawn_time=state.time
        ))
        next_id += 1

    return state.replace(
        pieces=state.pieces + tuple(spawned),
        difficulty=dataclasses.replace(state.difficulty, spawn_accumulator=accumulator),
        next_piece_id=next_id,
        rng_state=rng.get_state()
    )
