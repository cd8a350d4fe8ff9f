"""
Monitor topology: containment lookup and the shared xrandr source.

Monitors are always queried fresh; displays can be re-plugged at any time,
so nothing here caches a topology between calls.
"""

import logging
import re
from typing import List, Optional, Sequence

from ..errors import BackendError
from ..models import Monitor
from .process import run_command

logger = logging.getLogger(__name__)

# "2560x1440+0+0" (offsets may be negative: "1920x1080+-1920+0")
_GEOMETRY_RE = re.compile(r"^(\d+)x(\d+)\+(-?\d+)\+(-?\d+)$")


def locate(monitors: Sequence[Monitor], x: int, y: int) -> Optional[str]:
    """
    Find the monitor containing a point.

    Args:
        monitors: Topology in query order
        x: Point X
        y: Point Y

    Returns:
        Name of the first monitor containing the point, else the first
        monitor's name, else None for an empty topology
    """
    for monitor in monitors:
        if monitor.contains_point(x, y):
            return monitor.name

    if monitors:
        logger.debug(f"Point ({x}, {y}) outside all monitors, using {monitors[0].name}")
        return monitors[0].name

    return None


def monitor_for_geometry(
    monitors: Sequence[Monitor],
    x: int,
    y: int,
    width: int,
    height: int,
) -> Optional[str]:
    """Locate a window by the center of its bounding box."""
    return locate(monitors, x + width // 2, y + height // 2)


def parse_xrandr(output: str) -> List[Monitor]:
    """
    Parse `xrandr --query` output into monitors.

    Only "connected" outputs with a WxH+X+Y geometry are kept:

        DP-1 connected primary 2560x1440+0+0 (normal left ...) 597mm x 336mm
        HDMI-1 disconnected (normal left inverted right x axis y axis)

    Args:
        output: Raw xrandr text

    Returns:
        Monitors in xrandr order
    """
    monitors: List[Monitor] = []

    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 3 or parts[1] != "connected":
            continue

        name = parts[0]
        for part in parts[2:]:
            match = _GEOMETRY_RE.match(part)
            if match:
                width, height, x, y = (int(v) for v in match.groups())
                monitors.append(Monitor(name=name, x=x, y=y, width=width, height=height))
                break
        else:
            logger.debug(f"Skipping connected output without geometry: {name}")

    return monitors


class XrandrTopology:
    """Monitor source shared by the X11 and KWin backends."""

    def __init__(self, command: Sequence[str] = ("xrandr", "--query")):
        self.command = list(command)

    def list_monitors(self) -> List[Monitor]:
        """Query xrandr; an unavailable or failing xrandr yields no monitors."""
        try:
            result = run_command(self.command)
        except BackendError as e:
            logger.warning(f"Monitor query failed: {e}")
            return []

        if result.returncode != 0:
            logger.warning(f"xrandr exited with {result.returncode}: {result.stderr.strip()}")
            return []

        monitors = parse_xrandr(result.stdout)
        logger.debug(f"xrandr reported {len(monitors)} monitor(s): {[m.name for m in monitors]}")
        return monitors
