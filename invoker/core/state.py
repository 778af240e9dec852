"""
Simulation State
================

Immutable value types for the Invoker core. Every transition returns a new
InvokerState; nothing in here is mutated after construction.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from invoker.core.colors import QUADRANT_ORDER, PieceColor, Quadrant


@dataclass(frozen=True)
class Piece:
    """A falling piece."""
    id: int
    track: int
    color: PieceColor
    y: float
    speed: float          # Units/second, fixed at spawn
    spawn_time: float     # Simulation seconds

    def distance_to(self, line_y: float) -> float:
        """Absolute distance from a horizontal line."""
        return abs(self.y - line_y)


@dataclass(frozen=True)
class Circle:
    """
    A four-quadrant collection target.

    filled holds one flag per quadrant in QUADRANT_ORDER.
    """
    id: int
    filled: Tuple[bool, bool, bool, bool] = (False, False, False, False)

    def is_filled(self, quadrant: Quadrant) -> bool:
        return self.filled[quadrant.index]

    def fill(self, quadrant: Quadrant) -> "Circle":
        """Return a copy with one quadrant filled."""
        slots = list(self.filled)
        slots[quadrant.index] = True
        return Circle(id=self.id, filled=tuple(slots))

    @property
    def is_complete(self) -> bool:
        return all(self.filled)

    @property
    def filled_count(self) -> int:
        return sum(1 for flag in self.filled if flag)

    def as_dict(self) -> Dict[str, bool]:
        """Quadrant name -> filled flag."""
        return {q.value: flag for q, flag in zip(QUADRANT_ORDER, self.filled)}


@dataclass(frozen=True)
class DifficultyState:
    """Difficulty scalar and the fractional spawn accumulator."""
    value: float
    spawn_accumulator: float = 0.0


# ----------------------------------------------------------------------------
# Events
# ----------------------------------------------------------------------------

@dataclass(frozen=True)
class CircleCompleted:
    circle_id: int


@dataclass(frozen=True)
class QuadrantCaptured:
    circle_id: int
    quadrant: Quadrant
    color: PieceColor


@dataclass(frozen=True)
class Glitch:
    color: PieceColor


@dataclass(frozen=True)
class OverCollection:
    color: PieceColor


InvokerEvent = Union[CircleCompleted, QuadrantCaptured, Glitch, OverCollection]


@dataclass(frozen=True)
class InvokerEvents:
    """
    Events raised by the most recent transition.

    Cleared at the start of every step and collect. The properties give the
    flag-style view renderers and audio usually want.
    """
    items: Tuple[InvokerEvent, ...] = ()

    def with_event(self, event: InvokerEvent) -> "InvokerEvents":
        return InvokerEvents(items=self.items + (event,))

    @property
    def completed_circle_ids(self) -> List[int]:
        return [e.circle_id for e in self.items if isinstance(e, CircleCompleted)]

    @property
    def captured(self) -> Optional[QuadrantCaptured]:
        """Most recent capture, if any."""
        captures = [e for e in self.items if isinstance(e, QuadrantCaptured)]
        return captures[-1] if captures else None

    @property
    def glitch(self) -> bool:
        return any(isinstance(e, Glitch) for e in self.items)

    @property
    def over_collection(self) -> bool:
        return any(isinstance(e, OverCollection) for e in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> Dict[str, Any]:
        captured = self.captured
        return {
            "completed_circle_ids": self.completed_circle_ids,
            "captured": None if captured is None else {
                "circle_id": captured.circle_id,
                "quadrant": captured.quadrant.value,
                "color": captured.color.value,
            },
            "glitch": self.glitch,
            "over_collection": self.over_collection,
        }


# ----------------------------------------------------------------------------
# Aggregate root
# ----------------------------------------------------------------------------

@dataclass(frozen=True)
class InvokerState:
    """
    Complete simulation state.

    Id counters and the RNG state travel with the value so that transitions
    stay pure and a seed reproduces a run.
    """
    time: float
    pieces: Tuple[Piece, ...]
    difficulty: DifficultyState
    circles: Tuple[Circle, ...]
    score: int
    paused: bool
    events: InvokerEvents
    next_piece_id: int
    next_circle_id: int
    rng_state: Any = field(default=None, repr=False, compare=False)

    def replace(self, **changes: Any) -> "InvokerState":
        return dataclasses.replace(self, **changes)

    def with_difficulty(self, value: float) -> "InvokerState":
        return self.replace(difficulty=dataclasses.replace(self.difficulty, value=value))

    def with_reset_events(self) -> "InvokerState":
        if self.events.is_empty:
            return self
        return self.replace(events=InvokerEvents())

    def pieces_on_track(self, track: int) -> Tuple[Piece, ...]:
        return tuple(p for p in self.pieces if p.track == track)

    def circle_grid(self) -> Tuple[Tuple[bool, ...], ...]:
        """Per-circle quadrant flags in ledger order."""
        return tuple(c.filled for c in self.circles)
