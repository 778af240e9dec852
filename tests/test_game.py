"""
Tests for frame stepping and the InvokerGame session wrapper.
"""

import dataclasses

import pytest

from invoker.core.colors import PieceColor, Quadrant
from invoker.core.config_loader import load_config
from invoker.core.game import (
    GameCallbacks,
    InvokerGame,
    initial_state,
    set_paused,
    step,
    toggle_pause,
)
from invoker.core.state import Circle, InvokerEvents, OverCollection, Piece


@pytest.fixture
def config():
    base = load_config()
    return dataclasses.replace(
        base, spawn=dataclasses.replace(base.spawn, base_rate=0.0, max_rate=0.0)
    )


@pytest.fixture
def live_config():
    return load_config()


def at_line(config, piece_id, color, track=0):
    return Piece(
        id=piece_id, track=track, color=color,
        y=config.board.collection_line_y, speed=0.0, spawn_time=0.0
    )


class TestInitialState:
    """Test the starting state."""

    def test_defaults(self, config):
        state = initial_state(config, seed=0)

        assert state.time == 0.0
        assert state.pieces == ()
        assert state.score == 0
        assert state.paused is True
        assert state.difficulty.value == pytest.approx(config.difficulty.initial)
        assert state.difficulty.spawn_accumulator == 0.0
        assert state.events.is_empty
        assert [c.id for c in state.circles] == [0, 1, 2]
        assert all(c.filled_count == 0 for c in state.circles)
        assert state.next_piece_id == 0
        assert state.next_circle_id == config.circles.count

    def test_initial_difficulty_is_clamped(self, config):
        narrow = dataclasses.replace(
            config, difficulty=dataclasses.replace(config.difficulty, max=0.2)
        )
        assert initial_state(narrow).difficulty.value == 0.2

    def test_start_unpaused_rule(self, config):
        rules = dataclasses.replace(config.rules, start_paused=False)
        state = initial_state(dataclasses.replace(config, rules=rules))
        assert state.paused is False


class TestStep:
    """Test per-frame transitions."""

    def test_drift_over_one_second(self, config):
        """Difficulty 0.6, no spawns, 1000 ms: drops by drift_per_second."""
        state = set_paused(initial_state(config, seed=0), False).with_difficulty(0.6)

        result = step(state, 1000.0, config)

        assert result.difficulty.value == pytest.approx(0.6 - config.difficulty.drift_per_second)
        assert result.time == pytest.approx(1.0)
        assert result.pieces == ()
        assert result.score == 0

    def test_paused_step_only_clears_events(self, live_config):
        state = initial_state(live_config, seed=0).replace(
            events=InvokerEvents().with_event(OverCollection(color=PieceColor.RED))
        )
        assert state.paused

        result = step(state, 5000.0, live_config)

        assert result.events.is_empty
        assert result.time == state.time
        assert result.difficulty == state.difficulty
        assert result.pieces == state.pieces

    def test_events_reset_each_step(self, config):
        state = set_paused(initial_state(config, seed=0), False).replace(
            events=InvokerEvents().with_event(OverCollection(color=PieceColor.BLUE))
        )
        assert step(state, 16.0, config).events.is_empty

    def test_negative_dt_is_ignored(self, config):
        state = set_paused(initial_state(config, seed=0), False)
        result = step(state, -50.0, config)
        assert result.time == 0.0
        assert result.difficulty.value == state.difficulty.value

    def test_step_is_pure(self, live_config):
        """Stepping the same state twice yields equal results."""
        state = set_paused(initial_state(live_config, seed=9), False)
        for _ in range(30):
            state = step(state, 100.0, live_config)

        a = step(state, 100.0, live_config)
        b = step(state, 100.0, live_config)

        assert a == b
        assert a.pieces == b.pieces

    def test_seed_reproduces_run(self, live_config):
        def run(seed):
            state = set_paused(initial_state(live_config, seed=seed), False)
            for _ in range(200):
                state = step(state, 33.0, live_config)
            return state

        assert run(5) == run(5)

    def test_toggle_pause(self, config):
        state = initial_state(config)
        assert toggle_pause(state).paused is not state.paused
        assert toggle_pause(toggle_pause(state)).paused is state.paused


class TestInvokerGame:
    """Test the session wrapper: host keys and callbacks."""

    def test_starts_paused(self, config):
        game = InvokerGame(config=config, seed=1)
        assert game.paused
        assert not game.ended

    def test_pause_key_toggles(self, config):
        game = InvokerGame(config=config, seed=1)

        assert game.handle_key(config.controls.pause_key) is None
        assert not game.paused
        game.handle_key(config.controls.pause_key)
        assert game.paused

    def test_end_key_requires_pause(self, config):
        ended = []
        game = InvokerGame(config=config, seed=1, callbacks=GameCallbacks(
            on_game_end=lambda: ended.append(True)
        ))
        game.resume()

        # Not paused: end key is just an unmapped gameplay key
        result = game.handle_key(config.controls.end_key)
        assert result is not None
        assert not game.ended

        game.pause()
        assert game.handle_key(config.controls.end_key) is None
        assert game.ended
        assert ended == [True]

    def test_keys_after_end_are_ignored(self, config):
        game = InvokerGame(config=config, seed=1)
        game.handle_key(config.controls.end_key)
        assert game.ended

        assert game.handle_key(config.controls.pause_key) is None
        assert game.paused
        assert game.handle_key("KeyA") is None

    def test_press_fires_score_and_difficulty(self, config):
        scores, difficulties, glitches = [], [], []
        game = InvokerGame(config=config, seed=1, callbacks=GameCallbacks(
            on_score_change=scores.append,
            on_difficulty_change=difficulties.append,
            on_glitch=lambda: glitches.append(True),
        ))
        game.resume()
        game.load_state(game.state.replace(pieces=(at_line(config, 0, PieceColor.BLUE),)))

        result = game.handle_key("KeyA")

        assert result.events.captured.quadrant == Quadrant.LOWER_RIGHT
        assert result.delta_score == 0
        assert scores == [0]
        assert difficulties == [pytest.approx(game.difficulty)]
        assert glitches == [True]

    def test_completion_updates_counters(self, config):
        scores = []
        game = InvokerGame(config=config, seed=1, callbacks=GameCallbacks(
            on_score_change=scores.append
        ))
        game.resume()
        almost = Circle(id=0, filled=(True, True, True, False))
        game.load_state(game.state.replace(
            pieces=(at_line(config, 0, PieceColor.BLUE),),
            circles=(almost,) + game.state.circles[1:]
        ))

        result = game.press("KeyA")

        assert result.delta_score == config.circles.completion_award
        assert game.score == config.circles.completion_award
        assert game.circles_completed == 1
        assert scores == [config.circles.completion_award]

        info = game.get_info()
        assert info["circles_completed"] == 1
        assert info["score"] == config.circles.completion_award

    def test_tick_fires_difficulty_on_drift(self, config):
        difficulties = []
        game = InvokerGame(config=config, seed=1, callbacks=GameCallbacks(
            on_difficulty_change=difficulties.append
        ))

        game.tick(100.0)
        assert difficulties == []

        game.resume()
        game.tick(100.0)
        assert len(difficulties) == 1
        assert difficulties[0] < config.difficulty.initial

    def test_reset_restores_initial_state(self, live_config):
        game = InvokerGame(config=live_config, seed=3)
        first = game.state
        game.resume()
        for _ in range(50):
            game.tick(50.0)

        game.reset()

        assert game.state == first
        assert game.circles_completed == 0

    def test_reset_with_same_seed_reproduces_pieces(self, live_config):
        game = InvokerGame(config=live_config, seed=3)

        def run():
            game.resume()
            for _ in range(100):
                game.tick(50.0)
            return game.state.pieces

        first = run()
        game.reset(seed=3)
        assert run() == first

    def test_render_data(self, config):
        game = InvokerGame(config=config, seed=1)
        game.load_state(game.state.replace(pieces=(at_line(config, 0, PieceColor.GREEN, track=2),)))

        data = game.get_render_data()

        assert data["tracks"] == config.board.tracks
        assert data["keybindings"] == list(config.keybindings)
        assert data["pieces"] == [{
            "id": 0,
            "track": 2,
            "color": "green",
            "quadrant": "upper_right",
            "y": config.board.collection_line_y,
        }]
        assert len(data["circles"]) == config.circles.count
        assert data["paused"] is True
        assert data["events"]["over_collection"] is False
