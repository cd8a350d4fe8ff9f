"""
Display size detection for generating a default configuration.

Probes are tried in order and the first answer wins:

    xrandr --current          X11 / XWayland
    swaymsg -t get_outputs    sway
    hyprctl monitors -j       Hyprland
    wlr-randr                 other wlroots compositors

Each probe returns None on any failure.
"""

import json
import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple

from .errors import BackendError
from .backends.process import run_command

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_SIZE = (1920, 1080)

Size = Tuple[int, int]

_RESOLUTION_RE = re.compile(r"^(\d+)x(\d+)$")


def _probe_output(cmd: Sequence[str]) -> Optional[str]:
    try:
        result = run_command(cmd)
    except BackendError as e:
        logger.debug(f"Display probe unavailable: {e}")
        return None
    if result.returncode != 0:
        return None
    return result.stdout


def _parse_resolution(token: str) -> Optional[Size]:
    match = _RESOLUTION_RE.match(token)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def _size_of(entry: dict, keys: Tuple[str, str] = ("width", "height")) -> Optional[Size]:
    width, height = entry.get(keys[0]), entry.get(keys[1])
    if isinstance(width, int) and isinstance(height, int) and width > 0 and height > 0:
        return width, height
    return None


def detect_via_xrandr() -> Optional[Size]:
    """Current mode line, e.g. "   2560x1440     59.95*+"."""
    output = _probe_output(["xrandr", "--current"])
    if output is None:
        return None

    for line in output.splitlines():
        if "*" in line and "x" in line:
            parts = line.split()
            size = _parse_resolution(parts[0]) if parts else None
            if size:
                return size
    return None


def detect_via_swaymsg() -> Optional[Size]:
    """First active output's rect."""
    output = _probe_output(["swaymsg", "-t", "get_outputs"])
    if output is None:
        return None

    try:
        outputs = json.loads(output)
    except json.JSONDecodeError:
        return None
    if not isinstance(outputs, list):
        return None

    for entry in outputs:
        if isinstance(entry, dict) and entry.get("active") and isinstance(entry.get("rect"), dict):
            return _size_of(entry["rect"])
    return None


def detect_via_hyprctl() -> Optional[Size]:
    """Focused monitor (or the only one), else the first."""
    output = _probe_output(["hyprctl", "monitors", "-j"])
    if output is None:
        return None

    try:
        monitors = json.loads(output)
    except json.JSONDecodeError:
        return None
    if not isinstance(monitors, list) or not monitors:
        return None

    monitors = [m for m in monitors if isinstance(m, dict)]
    for monitor in monitors:
        if monitor.get("focused") or len(monitors) == 1:
            return _size_of(monitor)
    return _size_of(monitors[0]) if monitors else None


def detect_via_wlr_randr() -> Optional[Size]:
    """Mode line marked current, e.g. "3840x2160 px, 60.000000 Hz (preferred, current)"."""
    output = _probe_output(["wlr-randr"])
    if output is None:
        return None

    for line in output.splitlines():
        stripped = line.strip()
        if "current" in stripped and "px" in stripped:
            parts = stripped.split()
            size = _parse_resolution(parts[0]) if parts else None
            if size:
                return size
    return None


PROBES: List[Tuple[str, Callable[[], Optional[Size]]]] = [
    ("xrandr", detect_via_xrandr),
    ("swaymsg", detect_via_swaymsg),
    ("hyprctl", detect_via_hyprctl),
    ("wlr-randr", detect_via_wlr_randr),
]


def detect_display_size() -> Size:
    """
    Detect the display size.

    Returns:
        (width, height) from the first successful probe, else 1920x1080
    """
    for name, probe in PROBES:
        size = probe()
        if size:
            logger.info(f"Display detected via {name}: {size[0]}x{size[1]}")
            return size

    logger.warning(
        f"Could not detect display size, using default {DEFAULT_DISPLAY_SIZE[0]}x{DEFAULT_DISPLAY_SIZE[1]}; "
        "edit display_width and display_height in config.toml"
    )
    return DEFAULT_DISPLAY_SIZE
