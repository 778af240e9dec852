"""
Colors and Quadrants
====================

Fixed enumerations shared by the whole core. Pieces carry a color, circles
are split into four quadrants, and the configuration binds each color to
exactly one quadrant.
"""

from __future__ import annotations

from enum import Enum
from typing import Tuple


class PieceColor(str, Enum):
    """The four piece colors."""

    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"


class Quadrant(str, Enum):
    """
    Circle quadrants.

    Declaration order is the slot order used by Circle.filled.
    """

    UPPER_LEFT = "upper_left"
    UPPER_RIGHT = "upper_right"
    LOWER_LEFT = "lower_left"
    LOWER_RIGHT = "lower_right"

    @property
    def index(self) -> int:
        """Slot index of this quadrant in a circle."""
        return QUADRANT_ORDER.index(self)


QUADRANT_ORDER: Tuple[Quadrant, ...] = tuple(Quadrant)
COLOR_ORDER: Tuple[PieceColor, ...] = tuple(PieceColor)


def parse_color(value: str) -> PieceColor:
    """Parse a color name, raising ValueError for unknown names."""
    try:
        return PieceColor(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(c.value for c in PieceColor)
        raise ValueError(f"Unknown piece color '{value}' (expected one of: {valid})") from None


def parse_quadrant(value: str) -> Quadrant:
    """Parse a quadrant name, raising ValueError for unknown names."""
    try:
        return Quadrant(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(q.value for q in Quadrant)
        raise ValueError(f"Unknown quadrant '{value}' (expected one of: {valid})") from None
