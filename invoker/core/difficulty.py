"""
Difficulty Model
================

Maps the normalized difficulty scalar to fall speed and spawn rate, and
defines the drift / increase / decrease transitions.

Both curves are convex on [0, 1], so the upper end of the scale speeds up
pieces and spawns super-linearly. Every transition clamps into the configured
[min, max] bounds.
"""

from __future__ import annotations

from typing import Optional

from invoker.core.config_loader import InvokerConfig, get_config

FALL_CURVE_EXPONENT = 1.6
SPAWN_CURVE_EXPONENT = 1.4

# Completion growth is scaled by (1 - d * INCREASE_DAMPING)
INCREASE_DAMPING = 0.25


def _unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def fall_curve(difficulty: float) -> float:
    """d^1.6 on [0, 1]."""
    return _unit(difficulty) ** FALL_CURVE_EXPONENT


def spawn_curve(difficulty: float) -> float:
    """d^1.4 on [0, 1]."""
    return _unit(difficulty) ** SPAWN_CURVE_EXPONENT


class DifficultyModel:
    """
    Difficulty curves and transitions for one configuration.

    Stateless: every method takes a difficulty value and returns a new one,
    so the model can be shared between states.
    """

    def __init__(self, config: Optional[InvokerConfig] = None):
        """
        Initialize difficulty model.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._bounds = config.difficulty
        self._spawn = config.spawn

    @property
    def min(self) -> float:
        return self._bounds.min

    @property
    def max(self) -> float:
        return self._bounds.max

    def clamp(self, difficulty: float) -> float:
        """Clamp a value into [min, max]."""
        return min(self._bounds.max, max(self._bounds.min, float(difficulty)))

    def fall_speed(self, difficulty: float) -> float:
        """Fall speed (units/second) implied by a difficulty value."""
        spawn = self._spawn
        return spawn.base_fall_speed + (spawn.max_fall_speed - spawn.base_fall_speed) * fall_curve(difficulty)

    def spawn_rate(self, difficulty: float) -> float:
        """Spawn rate (pieces/second) implied by a difficulty value."""
        spawn = self._spawn
        return spawn.base_rate + (spawn.max_rate - spawn.base_rate) * spawn_curve(difficulty)

    def drift(self, difficulty: float, dt_seconds: float) -> float:
        """Idle relaxation applied every running tick."""
        return self.clamp(difficulty - self._bounds.drift_per_second * dt_seconds)

    def increase(self, difficulty: float) -> float:
        """Growth on circle completion, with diminishing returns."""
        delta = self._bounds.completion_delta * (1.0 - difficulty * INCREASE_DAMPING)
        return self.clamp(difficulty + delta)

    def decrease(self, difficulty: float) -> float:
        """Penalty on over-collection, larger at higher difficulty."""
        drop = self._bounds.over_collection_base + self._bounds.over_collection_scale * difficulty
        return self.clamp(difficulty - drop)
