"""
Circle Ledger
=============

Resolves a collected piece against the fixed-size ledger of circles.

A piece of color C fills the quadrant bound to C on the first circle (in
ledger order) where that quadrant is still open. A circle with all four
quadrants filled scores, raises difficulty, and is replaced by a fresh circle
appended at the end. When no circle has the quadrant open the piece is an
over-collection: difficulty drops and score is untouched.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from invoker.core.colors import Quadrant
from invoker.core.config_loader import InvokerConfig, get_config
from invoker.core.difficulty import DifficultyModel
from invoker.core.state import (
    Circle,
    CircleCompleted,
    Glitch,
    InvokerState,
    OverCollection,
    Piece,
    QuadrantCaptured,
)

logger = logging.getLogger(__name__)


def create_ledger(count: int, first_id: int = 0) -> Tuple[Circle, ...]:
    """Fresh circles with consecutive ids starting at first_id."""
    return tuple(Circle(id=first_id + i) for i in range(count))


def first_open_circle(circles: Tuple[Circle, ...], quadrant: Quadrant) -> Optional[int]:
    """Index of the first circle with quadrant unfilled, or None."""
    for index, circle in enumerate(circles):
        if not circle.is_filled(quadrant):
            return index
    return None


def resolve_collection(
    state: InvokerState,
    piece: Piece,
    config: Optional[InvokerConfig] = None,
    model: Optional[DifficultyModel] = None
) -> InvokerState:
    """
    Apply a collected piece to the ledger.

    The piece must already be removed from state.pieces.

    Args:
        state: State after the piece was removed.
        piece: The collected piece.
        config: Game configuration. Uses default if None.
        model: Difficulty model for config. Built if None.

    Returns:
        New state with ledger, score, difficulty and events updated.
    """
    if config is None:
        config = get_config()
    if model is None:
        model = DifficultyModel(config)

    color = piece.color
    quadrant = config.quadrant_for(color)
    events = state.events
    is_glitch = color == config.circles.glitch_color

    index = first_open_circle(state.circles, quadrant)
    # A complete circle still sitting in the ledger is a ready circle waiting
    ready_waiting = any(c.is_complete for c in state.circles)

    if index is None or ready_waiting:
        difficulty = model.decrease(state.difficulty.value)
        events = events.with_event(OverCollection(color=color))
        if is_glitch:
            events = events.with_event(Glitch(color=color))
        logger.debug(
            "Over-collection of %s piece %d: difficulty %.3f -> %.3f",
            color.value, piece.id, state.difficulty.value, difficulty
        )
        return state.with_difficulty(difficulty).replace(events=events)

    circle = state.circles[index].fill(quadrant)
    events = events.with_event(
        QuadrantCaptured(circle_id=circle.id, quadrant=quadrant, color=color)
    )
    circles = state.circles[:index] + (circle,) + state.circles[index + 1:]
    score = state.score
    difficulty = state.difficulty.value
    next_circle_id = state.next_circle_id

    if circle.is_complete:
        score += config.circles.completion_award
        difficulty = model.increase(difficulty)
        events = events.with_event(CircleCompleted(circle_id=circle.id))
        circles = (
            circles[:index] + circles[index + 1:] + (Circle(id=next_circle_id),)
        )
        next_circle_id += 1
        logger.debug(
            "Circle %d completed: score %d, difficulty %.3f",
            circle.id, score, difficulty
        )

    if is_glitch:
        events = events.with_event(Glitch(color=color))

    return state.with_difficulty(difficulty).replace(
        circles=circles,
        score=score,
        events=events,
        next_circle_id=next_circle_id
    )
