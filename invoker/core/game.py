"""
Core Game
=========

Frame orchestrator: pure transitions over InvokerState, plus a stateful
session wrapper for hosts.

Transitions:
- initial_state(config, seed) -> InvokerState
- step(state, dt_ms, config) -> InvokerState   (one frame)
- collect(state, key_code, config) -> InvokerState   (one key press)

Both step and collect clear the event record first, so events always
describe the most recent transition only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from invoker.core.circle_ledger import create_ledger
from invoker.core.collector import collect_from_track
from invoker.core.config_loader import InvokerConfig, get_config
from invoker.core.difficulty import DifficultyModel
from invoker.core.motion import advance_pieces
from invoker.core.rng import seed_state
from invoker.core.spawner import spawn_pieces
from invoker.core.state import DifficultyState, InvokerEvents, InvokerState

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------------
# Pure transitions
# ----------------------------------------------------------------------------

def initial_state(
    config: Optional[InvokerConfig] = None,
    seed: Optional[int] = None
) -> InvokerState:
    """
    Build the starting state.

    Args:
        config: Game configuration. Uses default if None.
        seed: Random seed for the piece stream. Random if None.
    """
    if config is None:
        config = get_config()

    model = DifficultyModel(config)
    count = config.circles.count
    return InvokerState(
        time=0.0,
        pieces=(),
        difficulty=DifficultyState(value=model.clamp(config.difficulty.initial)),
        circles=create_ledger(count),
        score=0,
        paused=config.rules.start_paused,
        events=InvokerEvents(),
        next_piece_id=0,
        next_circle_id=count,
        rng_state=seed_state(seed)
    )


def step(
    state: InvokerState,
    dt_ms: float,
    config: Optional[InvokerConfig] = None
) -> InvokerState:
    """
    Advance one frame.

    Paused states only get their events cleared. Otherwise: advance time,
    spawn, move, then drift difficulty. Spawning runs before motion so new
    pieces already travel during the tick they appear in.

    Args:
        state: Current state.
        dt_ms: Elapsed milliseconds since the previous frame.
        config: Game configuration. Uses default if None.
    """
    if config is None:
        config = get_config()

    state = state.with_reset_events()
    if state.paused:
        return state

    model = DifficultyModel(config)
    dt_seconds = max(0.0, float(dt_ms)) / 1000.0

    state = state.replace(time=state.time + dt_seconds)
    state = spawn_pieces(state, dt_seconds, config, model)
    state = advance_pieces(state, dt_seconds, config)
    return state.with_difficulty(model.drift(state.difficulty.value, dt_seconds))


def collect(
    state: InvokerState,
    key_code: str,
    config: Optional[InvokerConfig] = None
) -> InvokerState:
    """
    Handle one key press.

    Unmapped keys, empty tracks and misses only clear the events. While
    paused the press is ignored unless rules.collect_while_paused is set.

    Args:
        state: Current state.
        key_code: Platform key identifier, e.g. "KeyA".
        config: Game configuration. Uses default if None.
    """
    if config is None:
        config = get_config()

    state = state.with_reset_events()
    if state.paused and not config.rules.collect_while_paused:
        return state

    track = config.track_for_key(key_code)
    if track is None:
        return state

    return collect_from_track(state, track, config)


def set_paused(state: InvokerState, paused: bool) -> InvokerState:
    """Return state with the paused flag set."""
    if state.paused == paused:
        return state
    return state.replace(paused=paused)


def toggle_pause(state: InvokerState) -> InvokerState:
    """Return state with the paused flag flipped."""
    return state.replace(paused=not state.paused)


# ----------------------------------------------------------------------------
# Session wrapper
# ----------------------------------------------------------------------------

@dataclass
class GameCallbacks:
    """Optional hooks fired by InvokerGame after transitions."""
    on_game_end: Optional[Callable[[], None]] = None
    on_difficulty_change: Optional[Callable[[float], None]] = None
    on_score_change: Optional[Callable[[int], None]] = None
    on_glitch: Optional[Callable[[], None]] = None


@dataclass
class StepResult:
    """Result of a single tick or key press."""
    state: InvokerState
    delta_score: int
    events: InvokerEvents


class InvokerGame:
    """
    Stateful game session.

    Holds the current InvokerState and configuration, routes host keys
    (pause / end) and fires callbacks when score, difficulty or the glitch
    flag change. All simulation work is delegated to the pure transitions.
    """

    def __init__(
        self,
        config: Optional[InvokerConfig] = None,
        seed: Optional[int] = None,
        callbacks: Optional[GameCallbacks] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            callbacks: Optional hooks for UI and audio.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._callbacks = callbacks or GameCallbacks()
        self._model = DifficultyModel(config)

        self._state = initial_state(config, seed)
        self._ended = False
        self._circles_completed = 0
        self._over_collections = 0

    @property
    def config(self) -> InvokerConfig:
        """Game configuration."""
        return self._config

    @property
    def state(self) -> InvokerState:
        """Current state snapshot (read-only value)."""
        return self._state

    @property
    def score(self) -> int:
        """Current score."""
        return self._state.score

    @property
    def difficulty(self) -> float:
        """Current difficulty value."""
        return self._state.difficulty.value

    @property
    def paused(self) -> bool:
        return self._state.paused

    @property
    def ended(self) -> bool:
        """True once the end key was pressed while paused."""
        return self._ended

    @property
    def circles_completed(self) -> int:
        """Circles completed since the last reset."""
        return self._circles_completed

    def reset(self, seed: Optional[int] = None) -> InvokerState:
        """
        Reset game to initial state.

        Args:
            seed: New random seed. Uses previous if None.

        Returns:
            Initial state.
        """
        if seed is not None:
            self._seed = seed

        self._state = initial_state(self._config, self._seed)
        self._ended = False
        self._circles_completed = 0
        self._over_collections = 0
        return self._state

    def load_state(self, state: InvokerState) -> None:
        """Replace the current state (tools and tests)."""
        self._state = state

    def pause(self) -> None:
        if not self._state.paused:
            logger.info("Invoker paused at t=%.2fs", self._state.time)
        self._state = set_paused(self._state, True)

    def resume(self) -> None:
        if self._state.paused:
            logger.info("Invoker resumed at t=%.2fs", self._state.time)
        self._state = set_paused(self._state, False)

    def tick(self, dt_ms: float) -> StepResult:
        """
        Advance one frame.

        Args:
            dt_ms: Elapsed milliseconds since the previous frame.
        """
        before = self._state
        self._state = step(before, dt_ms, self._config)
        result = self._result(before)

        if self._state.difficulty.value != before.difficulty.value:
            self._fire(self._callbacks.on_difficulty_change, self._state.difficulty.value)
        if result.events.completed_circle_ids:
            self._fire(self._callbacks.on_score_change, self._state.score)
        if result.events.glitch:
            self._fire(self._callbacks.on_glitch)
        return result

    def press(self, key_code: str) -> StepResult:
        """
        Handle a gameplay key press.

        Score and difficulty callbacks fire after every press, matching
        the keydown handler the UI was built against.
        """
        before = self._state
        self._state = collect(before, key_code, self._config)
        result = self._result(before)

        self._fire(self._callbacks.on_score_change, self._state.score)
        self._fire(self._callbacks.on_difficulty_change, self._state.difficulty.value)
        if result.events.glitch:
            self._fire(self._callbacks.on_glitch)
        return result

    def handle_key(self, key_code: str) -> Optional[StepResult]:
        """
        Route a raw key from the host.

        The pause key toggles pause, the end key ends the session while
        paused, anything else is a gameplay press. Returns None for host
        keys and for keys arriving after the session ended.
        """
        if self._ended:
            return None

        controls = self._config.controls
        if key_code == controls.pause_key:
            if self._state.paused:
                self.resume()
            else:
                self.pause()
            return None

        if key_code == controls.end_key and self._state.paused:
            self._ended = True
            logger.info("Invoker ended with score %d", self._state.score)
            self._fire(self._callbacks.on_game_end)
            return None

        return self.press(key_code)

    def _result(self, before: InvokerState) -> StepResult:
        events = self._state.events
        self._circles_completed += len(events.completed_circle_ids)
        if events.over_collection:
            self._over_collections += 1
        return StepResult(
            state=self._state,
            delta_score=self._state.score - before.score,
            events=events
        )

    @staticmethod
    def _fire(callback: Optional[Callable[..., None]], *args: Any) -> None:
        if callback is not None:
            callback(*args)

    def get_info(self) -> Dict[str, Any]:
        """Summary counters for tools and the Gymnasium info dict."""
        state = self._state
        return {
            "score": state.score,
            "difficulty": state.difficulty.value,
            "time": state.time,
            "piece_count": len(state.pieces),
            "pieces_spawned": state.next_piece_id,
            "circles_completed": self._circles_completed,
            "over_collections": self._over_collections,
            "paused": state.paused,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with board geometry, pieces, circles and this frame's events.
        """
        state = self._state
        board = self._config.board
        pieces_data = []
        for piece in state.pieces:
            pieces_data.append({
                "id": piece.id,
                "track": piece.track,
                "color": piece.color.value,
                "quadrant": self._config.quadrant_for(piece.color).value,
                "y": piece.y,
            })

        return {
            "tracks": board.tracks,
            "screen_height": board.screen_height,
            "collection_line_y": board.collection_line_y,
            "hit_window": board.hit_window,
            "keybindings": list(self._config.keybindings),
            "pieces": pieces_data,
            "circles": [
                {"id": circle.id, "quadrants": circle.as_dict()}
                for circle in state.circles
            ],
            "score": state.score,
            "difficulty": state.difficulty.value,
            "fall_speed": self._model.fall_speed(state.difficulty.value),
            "spawn_rate": self._model.spawn_rate(state.difficulty.value),
            "paused": state.paused,
            "ended": self._ended,
            "time": state.time,
            "events": state.events.to_dict(),
        }
