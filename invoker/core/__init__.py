"""
Invoker Core - The deterministic game-state engine.

This module provides the pure state transitions, the session wrapper, the
snapshot builder and the Gymnasium environment.

Main exports:
- initial_state / step / collect: Pure transitions over InvokerState
- InvokerGame: Stateful session with host keys and callbacks
- InvokerEnv: Gymnasium environment for agents
- SnapshotBuilder: Packs state into numpy arrays
- InvokerConfig: Configuration loaded from invoker_config.yaml
"""

from invoker.core.colors import PieceColor, Quadrant
from invoker.core.config_loader import InvokerConfig, get_config, load_config
from invoker.core.difficulty import DifficultyModel
from invoker.core.state import (
    Circle,
    CircleCompleted,
    DifficultyState,
    Glitch,
    InvokerEvents,
    InvokerState,
    OverCollection,
    Piece,
    QuadrantCaptured,
)
from invoker.core.game import (
    GameCallbacks,
    InvokerGame,
    StepResult,
    collect,
    initial_state,
    set_paused,
    step,
    toggle_pause,
)
from invoker.core.state_snapshot import InvokerSnapshot, SnapshotBuilder
from invoker.core.env_gym import InvokerEnv

__all__ = [
    "PieceColor",
    "Quadrant",
    "InvokerConfig",
    "get_config",
    "load_config",
    "DifficultyModel",
    "Circle",
    "CircleCompleted",
    "DifficultyState",
    "Glitch",
    "InvokerEvents",
    "InvokerState",
    "OverCollection",
    "Piece",
    "QuadrantCaptured",
    "GameCallbacks",
    "InvokerGame",
    "StepResult",
    "collect",
    "initial_state",
    "set_paused",
    "step",
    "toggle_pause",
    "InvokerSnapshot",
    "SnapshotBuilder",
    "InvokerEnv",
]
