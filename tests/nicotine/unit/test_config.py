"""
Unit tests for configuration loading, generation and the character order file.
"""

import tomllib

import pytest

from nicotine.config import (
    Config,
    config_dir,
    config_path,
    load_characters,
    load_config,
    order_windows,
    save_config,
)
from nicotine.errors import ConfigError
from nicotine.models import LayoutConfig, WindowRecord


class TestConfigDir:
    def test_env_override(self, config_home):
        assert config_dir() == config_home
        assert config_path() == config_home / "config.toml"

    def test_xdg_config_home(self, tmp_path, monkeypatch):
        monkeypatch.delenv("NICOTINE_CONFIG_DIR", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert config_dir() == tmp_path / "nicotine"

    def test_home_default(self, tmp_path, monkeypatch):
        monkeypatch.delenv("NICOTINE_CONFIG_DIR", raising=False)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert config_path() == tmp_path / ".config" / "nicotine" / "config.toml"


class TestConfigModel:
    """Tests for defaults and derived values."""

    def test_defaults(self):
        config = Config()

        assert config.backend == "x11"
        assert (config.display_width, config.display_height) == (1920, 1080)
        assert config.eve_width == 1036
        assert config.forward_button == 276
        assert config.backward_button == 275
        assert config.forward_key == 15
        assert config.show_overlay is True
        assert config.minimize_inactive is False
        assert config.primary_character is None

    def test_generate_derives_client_size(self):
        config = Config.generate(2560, 1440)

        assert config.eve_width == int(2560 * 0.54)
        assert config.eve_height == 1440

    def test_explicit_client_size_kept(self):
        config = Config(display_width=2560, eve_width=1200)
        assert config.eve_width == 1200

    def test_backend_validated(self):
        assert Config(backend="Hyprland").backend == "hyprland"
        with pytest.raises(ValueError):
            Config(backend="gnome")

    def test_eve_height_adjusted(self):
        assert Config(display_height=1080, panel_height=40).eve_height_adjusted() == 1040
        assert Config(display_height=100, panel_height=400).eve_height_adjusted() == 0

    def test_layout_view(self):
        config = Config(
            eve_width=1200,
            panel_height=40,
            primary_character="Bob",
            primary_monitor="DP-1",
            fullscreen_stack=True,
        )

        layout = config.layout()

        assert isinstance(layout, LayoutConfig)
        assert layout.eve_width == 1200
        assert layout.panel_height == 40
        assert layout.primary_character == "Bob"
        assert layout.primary_monitor == "DP-1"
        assert layout.fullscreen_stack is True

    def test_empty_primary_treated_as_unset(self):
        assert Config(primary_character="").layout().primary_character is None


class TestLoadSave:
    """Tests for TOML persistence."""

    def test_generates_missing_config(self, config_home, monkeypatch):
        monkeypatch.setattr("nicotine.config.detect_display_size", lambda: (2560, 1440))

        config = load_config()

        assert config.display_width == 2560
        assert config.eve_width == 1382
        assert (config_home / "config.toml").exists()
        assert load_config() == config

    def test_no_generation_when_disabled(self, config_home):
        with pytest.raises(ConfigError):
            load_config(generate=False)

    def test_round_trip_omits_unset_optionals(self, tmp_path):
        path = tmp_path / "config.toml"
        config = Config(backend="sway", primary_character="Bob")

        save_config(config, path)

        with open(path, "rb") as f:
            data = tomllib.load(f)
        assert data["backend"] == "sway"
        assert data["primary_character"] == "Bob"
        assert "primary_monitor" not in data
        assert load_config(path) == config

    def test_save_leaves_no_temp_files(self, tmp_path):
        save_config(Config(), tmp_path / "config.toml")
        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]

    def test_partial_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('backend = "kwin"\ndisplay_width = 3840\n')

        config = load_config(path)

        assert config.backend == "kwin"
        assert config.eve_width == int(3840 * 0.54)
        assert config.forward_button == 276

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("display_width = = 1\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.path == str(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("panel_height = -5\n")

        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)


class TestCharacters:
    """Tests for characters.txt."""

    def test_missing_file(self, config_home):
        assert load_characters() is None

    def test_comments_and_blank_lines_skipped(self, config_home):
        config_home.mkdir(parents=True)
        (config_home / "characters.txt").write_text("# main first\nBob\n\n  Alice  \n#Carol\n")

        assert load_characters() == ["Bob", "Alice"]

    def test_order_windows(self, windows):
        ordered = order_windows(windows, ["Carol", "Nobody", "Alice"])
        assert [w.title for w in ordered] == ["Carol", "Alice", "Bob"]

    def test_order_without_list(self, windows):
        assert order_windows(windows, None) == windows
        assert order_windows(windows, []) == windows

    def test_duplicate_titles(self):
        windows = [WindowRecord(id=1, title="Bob"), WindowRecord(id=2, title="Bob"), WindowRecord(id=3, title="Al")]
        ordered = order_windows(windows, ["Bob"])
        assert [w.id for w in ordered] == [1, 2, 3]
