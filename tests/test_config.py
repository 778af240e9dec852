"""
Tests for configuration loading and validation.
"""

import pytest
import yaml

from invoker.core.colors import PieceColor, Quadrant, parse_color
from invoker.core.config_loader import get_config, load_config, reload_config


@pytest.fixture
def raw_config():
    """Default config as a plain dict, for mutation."""
    config = load_config()
    return {
        "board": {
            "tracks": config.board.tracks,
            "screen_height": config.board.screen_height,
            "collection_line_y": config.board.collection_line_y,
            "hit_window": config.board.hit_window,
            "cull_margin": config.board.cull_margin,
        },
        "keybindings": list(config.keybindings),
        "difficulty": {
            "min": 0.0,
            "max": 1.0,
            "initial": 0.35,
            "drift_per_second": 0.015,
            "completion_delta": 0.05,
            "over_collection_base": 0.03,
            "over_collection_scale": 0.12,
        },
        "spawn": {
            "base_rate": 1.2,
            "max_rate": 5.0,
            "base_fall_speed": 120.0,
            "max_fall_speed": 420.0,
            "speed_jitter": [0.85, 1.15],
        },
        "available_colors": ["red", "green", "yellow", "blue"],
        "circles": {
            "count": 3,
            "completion_award": 10,
            "glitch_color": "blue",
            "color_quadrants": {
                "red": "upper_left",
                "green": "upper_right",
                "yellow": "lower_left",
                "blue": "lower_right",
            },
        },
    }


def write_config(tmp_path, data):
    path = tmp_path / "invoker_config.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


class TestDefaultConfig:
    """Test the shipped configuration."""

    def test_loads(self):
        config = load_config()
        assert config.board.tracks == 5
        assert config.keybindings == ("KeyA", "KeyS", "KeyD", "KeyF", "KeyG")
        assert config.circles.count == 3
        assert config.circles.completion_award == 10
        assert config.circles.glitch_color == PieceColor.BLUE
        assert config.rules.start_paused is True
        assert config.rules.collect_while_paused is False

    def test_color_quadrant_table(self):
        config = load_config()
        assert config.color_quadrant_map == {
            PieceColor.RED: Quadrant.UPPER_LEFT,
            PieceColor.GREEN: Quadrant.UPPER_RIGHT,
            PieceColor.YELLOW: Quadrant.LOWER_LEFT,
            PieceColor.BLUE: Quadrant.LOWER_RIGHT,
        }

    def test_track_for_key(self):
        config = load_config()
        assert config.track_for_key("KeyA") == 0
        assert config.track_for_key("KeyG") == 4
        assert config.track_for_key("KeyQ") is None

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reload_replaces_cache(self):
        before = get_config()
        after = reload_config()
        assert after is not before
        assert get_config() is after

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_optional_sections_default(self, tmp_path, raw_config):
        config = load_config(write_config(tmp_path, raw_config))
        assert config.rules.start_paused is True
        assert config.controls.pause_key == "Escape"
        assert config.controls.end_key == "Enter"
        assert config.observation.max_pieces == 64

    def test_parse_color_rejects_unknown(self):
        with pytest.raises(ValueError):
            parse_color("purple")


class TestValidation:
    """Invalid configurations raise ValueError."""

    def test_keybinding_count_mismatch(self, tmp_path, raw_config):
        raw_config["keybindings"] = ["KeyA", "KeyS"]
        with pytest.raises(ValueError, match="keybindings"):
            load_config(write_config(tmp_path, raw_config))

    def test_duplicate_keybindings(self, tmp_path, raw_config):
        raw_config["keybindings"] = ["KeyA", "KeyA", "KeyD", "KeyF", "KeyG"]
        with pytest.raises(ValueError, match="duplicates"):
            load_config(write_config(tmp_path, raw_config))

    def test_non_positive_tracks(self, tmp_path, raw_config):
        raw_config["board"]["tracks"] = 0
        raw_config["keybindings"] = []
        with pytest.raises(ValueError, match="tracks"):
            load_config(write_config(tmp_path, raw_config))

    def test_line_outside_screen(self, tmp_path, raw_config):
        raw_config["board"]["collection_line_y"] = 900
        with pytest.raises(ValueError, match="collection_line_y"):
            load_config(write_config(tmp_path, raw_config))

    def test_non_positive_hit_window(self, tmp_path, raw_config):
        raw_config["board"]["hit_window"] = 0
        with pytest.raises(ValueError, match="hit_window"):
            load_config(write_config(tmp_path, raw_config))

    def test_difficulty_bounds(self, tmp_path, raw_config):
        raw_config["difficulty"]["min"] = 0.8
        raw_config["difficulty"]["max"] = 0.2
        with pytest.raises(ValueError, match="difficulty bounds"):
            load_config(write_config(tmp_path, raw_config))

    def test_negative_delta(self, tmp_path, raw_config):
        raw_config["difficulty"]["completion_delta"] = -0.1
        with pytest.raises(ValueError, match="completion_delta"):
            load_config(write_config(tmp_path, raw_config))

    def test_negative_spawn_rate(self, tmp_path, raw_config):
        raw_config["spawn"]["base_rate"] = -1.0
        with pytest.raises(ValueError, match="base_rate"):
            load_config(write_config(tmp_path, raw_config))

    def test_bad_jitter(self, tmp_path, raw_config):
        raw_config["spawn"]["speed_jitter"] = [1.2, 0.9]
        with pytest.raises(ValueError, match="speed_jitter"):
            load_config(write_config(tmp_path, raw_config))

    def test_jitter_needs_two_values(self, tmp_path, raw_config):
        raw_config["spawn"]["speed_jitter"] = [1.0]
        with pytest.raises(ValueError, match="speed_jitter"):
            load_config(write_config(tmp_path, raw_config))

    def test_empty_colors(self, tmp_path, raw_config):
        raw_config["available_colors"] = []
        with pytest.raises(ValueError, match="available_colors"):
            load_config(write_config(tmp_path, raw_config))

    def test_unmapped_color(self, tmp_path, raw_config):
        del raw_config["circles"]["color_quadrants"]["yellow"]
        with pytest.raises(ValueError, match="yellow"):
            load_config(write_config(tmp_path, raw_config))

    def test_shared_quadrant(self, tmp_path, raw_config):
        raw_config["circles"]["color_quadrants"]["yellow"] = "upper_left"
        with pytest.raises(ValueError, match="quadrant"):
            load_config(write_config(tmp_path, raw_config))

    def test_unknown_quadrant(self, tmp_path, raw_config):
        raw_config["circles"]["color_quadrants"]["red"] = "middle"
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_non_positive_circle_count(self, tmp_path, raw_config):
        raw_config["circles"]["count"] = 0
        with pytest.raises(ValueError, match="circles.count"):
            load_config(write_config(tmp_path, raw_config))
