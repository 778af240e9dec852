"""
RNG - Piece Draws
=================

Seeded draws for spawning (track, color, speed jitter). The generator state
is stored on InvokerState and restored for every spawning tick, so a seed
reproduces the same piece stream without any module-level generator.
"""

from __future__ import annotations

import random
from typing import Any, Optional, Sequence

from invoker.core.colors import PieceColor


class PieceRng:
    """
    Thin wrapper over random.Random with the draws the spawner needs.

    Uniform over tracks and colors; speed jitter is uniform over [low, high].
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize generator.

        Args:
            seed: Random seed for reproducibility. Random if None.
        """
        self._rng = random.Random(seed)

    @classmethod
    def from_state(cls, rng_state: Any) -> "PieceRng":
        """
        Rebuild a generator from a stored state.

        Args:
            rng_state: Value from get_state(), or None for a fresh unseeded generator.
        """
        rng = cls()
        if rng_state is not None:
            rng._rng.setstate(rng_state)
        return rng

    def get_state(self) -> Any:
        """Opaque, immutable generator state for storing on InvokerState."""
        return self._rng.getstate()

    def pick_track(self, tracks: int) -> int:
        """Uniform track index in [0, tracks)."""
        return self._rng.randrange(tracks)

    def pick_color(self, colors: Sequence[PieceColor]) -> PieceColor:
        """Uniform choice from the available colors."""
        return colors[self._rng.randrange(len(colors))]

    def speed_jitter(self, low: float, high: float) -> float:
        """Uniform multiplier in [low, high]."""
        return self._rng.uniform(low, high)


def seed_state(seed: Optional[int] = None) -> Any:
    """Initial generator state for a seed."""
    return PieceRng(seed).get_state()
