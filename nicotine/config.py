"""
Configuration for nicotine.

Files (in the config directory, ~/.config/nicotine by default):
- config.toml     settings; generated from the detected display when missing
- characters.txt  optional cycle order, one character name per line

The directory can be moved with NICOTINE_CONFIG_DIR (or XDG_CONFIG_HOME).
"""

import logging
import os
import tempfile
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import tomli_w
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .backends import BACKENDS
from .detection import detect_display_size
from .errors import ConfigError
from .models import LayoutConfig, WindowRecord

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.toml"
CHARACTERS_FILENAME = "characters.txt"

# Default client width as a share of the display width
EVE_WIDTH_RATIO = 0.54


def config_dir() -> Path:
    """Resolve the configuration directory."""
    override = os.environ.get("NICOTINE_CONFIG_DIR")
    if override:
        return Path(override).expanduser()

    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / "nicotine"


def config_path() -> Path:
    return config_dir() / CONFIG_FILENAME


class Config(BaseModel):
    """Contents of config.toml."""

    backend: str = Field("x11", description="Desktop backend (x11, kwin, sway, hyprland)")

    display_width: int = Field(1920, ge=0, description="Display width (fallback when no monitors)")
    display_height: int = Field(1080, ge=0, description="Display height (fallback when no monitors)")
    panel_height: int = Field(0, ge=0, description="Pixels reserved for a panel/bar")
    eve_width: int = Field(1036, ge=0, description="Client width in centered mode")
    eve_height: int = Field(1080, ge=0, description="Client height")

    # Overlay and input-device settings are kept for file compatibility
    overlay_x: float = 10.0
    overlay_y: float = 10.0
    enable_mouse_buttons: bool = True
    forward_button: int = Field(276, ge=0, description="BTN_SIDE (mouse button 9)")
    backward_button: int = Field(275, ge=0, description="BTN_EXTRA (mouse button 8)")
    enable_keyboard_buttons: bool = False
    forward_key: int = Field(15, ge=0, description="KEY_TAB")
    backward_key: int = Field(15, ge=0, description="KEY_TAB (with modifier)")
    show_overlay: bool = True
    mouse_device_name: Optional[str] = None
    mouse_device_path: Optional[str] = None
    keyboard_device_path: Optional[str] = None
    modifier_key: Optional[int] = None

    minimize_inactive: bool = Field(False, description="Minimize other clients when cycling")
    primary_character: Optional[str] = Field(None, description="Character placed on primary_monitor")
    primary_monitor: Optional[str] = Field(None, description="Monitor for the primary character")
    fullscreen_stack: bool = Field(False, description="Fill the monitor instead of centering")

    @model_validator(mode='before')
    @classmethod
    def derive_client_size(cls, data: Any) -> Any:
        """Derive eve_width/eve_height from the display when they are absent."""
        if isinstance(data, dict):
            data = dict(data)
            width = data.get("display_width", 1920)
            height = data.get("display_height", 1080)
            if isinstance(width, int) and "eve_width" not in data:
                data["eve_width"] = int(width * EVE_WIDTH_RATIO)
            if isinstance(height, int) and "eve_height" not in data:
                data["eve_height"] = height
        return data

    @field_validator('backend')
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Backend must be one of the known backends."""
        v = v.strip().lower()
        if v not in BACKENDS:
            raise ValueError(f"Unknown backend '{v}' (expected one of: {', '.join(BACKENDS)})")
        return v

    @classmethod
    def generate(cls, display_width: int, display_height: int, **overrides: Any) -> "Config":
        """Build a default config for a display size."""
        return cls(display_width=display_width, display_height=display_height, **overrides)

    def eve_height_adjusted(self) -> int:
        """Display height minus the panel, never negative."""
        return max(self.display_height - self.panel_height, 0)

    def layout(self) -> LayoutConfig:
        """Layout policy view of this config."""
        return LayoutConfig(
            display_width=self.display_width,
            display_height=self.display_height,
            panel_height=self.panel_height,
            eve_width=self.eve_width,
            eve_height=self.eve_height,
            primary_character=self.primary_character,
            primary_monitor=self.primary_monitor,
            fullscreen_stack=self.fullscreen_stack,
        )

    def to_toml_dict(self) -> Dict[str, Any]:
        # TOML has no null; unset optionals are omitted
        return self.model_dump(exclude_none=True)


def save_config(config: Config, path: Optional[Path] = None) -> Path:
    """
    Write a config atomically (temp file in the same directory, then rename).

    Returns:
        Path written
    """
    path = Path(path) if path else config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="wb", dir=str(path.parent), prefix=f"{path.name}.", delete=False
    ) as tmp:
        tomli_w.dump(config.to_toml_dict(), tmp)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_name = tmp.name

    os.replace(tmp_name, path)
    logger.info(f"Wrote config: {path}")
    return path


def load_config(path: Optional[Path] = None, generate: bool = True) -> Config:
    """
    Load config.toml, generating it from the detected display when missing.

    Args:
        path: Config file (defaults to config_path())
        generate: Create a default file when none exists

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    path = Path(path) if path else config_path()

    if not path.exists():
        if not generate:
            raise ConfigError(f"Config file not found: {path}", path=str(path))
        width, height = detect_display_size()
        config = Config.generate(width, height)
        try:
            save_config(config, path)
        except OSError as e:
            raise ConfigError(f"Failed to write default config: {e}", path=str(path))
        logger.warning(f"Created config {path} for a {width}x{height} display; edit it to customize")
        return config

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}", path=str(path))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse {path.name}: {e}", path=str(path))

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}", path=str(path))

    logger.debug(f"Loaded config from {path} (backend={config.backend})")
    return config


def load_characters(path: Optional[Path] = None) -> Optional[List[str]]:
    """
    Load the character cycle order.

    Blank lines and lines starting with '#' are skipped.

    Returns:
        Names in file order, or None if the file does not exist
    """
    path = Path(path) if path else config_dir() / CHARACTERS_FILENAME
    if not path.exists():
        return None

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"Cannot read {path}: {e}")
        return None

    names = []
    for line in text.splitlines():
        name = line.strip()
        if name and not name.startswith("#"):
            names.append(name)
    return names


def order_windows(windows: Sequence[WindowRecord], characters: Optional[Sequence[str]]) -> List[WindowRecord]:
    """
    Order windows by the character list.

    Listed characters come first in list order; the rest keep their
    enumeration order.
    """
    if not characters:
        return list(windows)

    ordered: List[WindowRecord] = []
    remaining = list(windows)
    for name in characters:
        for window in remaining:
            if window.title == name:
                ordered.append(window)
                remaining.remove(window)
                break

    return ordered + remaining
