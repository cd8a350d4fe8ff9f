"""
KDE Plasma / KWin backend driven through XWayland command-line tools.

    wmctrl -l -G        window table (id, desktop, geometry, host, title)
    xdotool             active window (decimal) and minimize
    kdotool             native KWin activation by title
    xrandr              monitor topology
"""

import logging
import re
from typing import Iterator, List, NamedTuple, Optional

from ..errors import BackendError, WindowNotFoundError
from ..models import Monitor, WindowRecord
from .base import DEFAULT_MATCHER, TitleMatcher, WindowBackend, make_record
from .ids import WMCTRL_CODEC, parse_id
from .process import DEFAULT_COMMAND_TIMEOUT, check_output, require_binary, run_command
from .topology import XrandrTopology, monitor_for_geometry

logger = logging.getLogger(__name__)


class WmctrlRow(NamedTuple):
    """One row of `wmctrl -l -G`."""

    window_id: int
    x: int
    y: int
    width: int
    height: int
    title: str


def parse_wmctrl_geometry(output: str) -> Iterator[WmctrlRow]:
    """
    Parse `wmctrl -l -G` output.

        0x06e00008  0 0    0    1920 1080 host EVE - Alice

    Rows with too few columns or non-numeric geometry are skipped. A title
    may be empty and keeps its internal spacing.
    """
    for line in output.splitlines():
        parts = line.split(None, 7)
        if len(parts) < 7:
            continue
        try:
            x, y, width, height = (int(v) for v in parts[2:6])
        except ValueError:
            logger.debug(f"Skipping wmctrl row with bad geometry: {line!r}")
            continue
        title = parts[7] if len(parts) > 7 else ""
        yield WmctrlRow(WMCTRL_CODEC.canonical_id(parts[0]), x, y, width, height, title)


class KWinBackend(WindowBackend):
    """Backend for KWin (Plasma) using wmctrl/xdotool/kdotool."""

    name = "kwin"

    def __init__(self, topology=None, timeout: float = DEFAULT_COMMAND_TIMEOUT):
        self.timeout = timeout
        self.topology = topology or XrandrTopology()
        require_binary(
            self.name,
            ["wmctrl", "-m"],
            suggestion="Install the wmctrl package",
        )
        logger.info("Using wmctrl/xdotool for KWin")

    def _rows(self) -> List[WmctrlRow]:
        return list(parse_wmctrl_geometry(check_output(["wmctrl", "-l", "-G"], timeout=self.timeout)))

    def _run_ok(self, cmd: List[str]) -> bool:
        try:
            result = run_command(cmd, timeout=self.timeout)
        except BackendError as e:
            logger.warning(str(e))
            return False
        if result.returncode != 0:
            logger.warning(f"{cmd[0]} {cmd[1]} failed ({result.returncode}): {result.stderr.strip()}")
            return False
        return True

    def enumerate_matching(self, matcher: TitleMatcher = DEFAULT_MATCHER) -> List[WindowRecord]:
        rows = self._rows()
        monitors = self.list_monitors()

        records: List[WindowRecord] = []
        for row in rows:
            if not matcher.matches(row.title):
                continue
            monitor = monitor_for_geometry(monitors, row.x, row.y, row.width, row.height)
            record = make_record(matcher, row.window_id, row.title, monitor)
            if record:
                records.append(record)

        logger.debug(f"Enumerated {len(records)} matching KWin window(s)")
        return records

    def get_focused(self) -> int:
        result = run_command(["xdotool", "getactivewindow"], timeout=self.timeout)
        if result.returncode != 0:
            raise WindowNotFoundError(f"xdotool getactivewindow failed: {result.stderr.strip()}")

        # xdotool prints the id in decimal
        window_id = parse_id(result.stdout.strip())
        if not window_id:
            raise WindowNotFoundError(f"Unparseable active window id: {result.stdout.strip()!r}")
        return window_id

    def set_focused(self, window_id: int) -> bool:
        """Activate through kdotool by title (native KWin), else wmctrl."""
        hex_id = WMCTRL_CODEC.native_representation(window_id)

        title = None
        try:
            title = next((row.title for row in self._rows() if row.window_id == window_id), None)
        except BackendError as e:
            logger.debug(f"Title lookup for {hex_id} failed: {e}")

        if title:
            # --name takes a regex
            pattern = f"^{re.escape(title)}$"
            if self._run_ok(["kdotool", "search", "--name", pattern, "windowactivate"]):
                return True
            logger.debug(f"kdotool activation of {hex_id} failed, falling back to wmctrl")

        return self._run_ok(["wmctrl", "-i", "-a", hex_id])

    def find_by_title(self, title: str) -> Optional[int]:
        for row in self._rows():
            if row.title == title and row.window_id:
                return row.window_id
        return None

    def reposition_resize(self, window_id: int, x: int, y: int, width: int, height: int) -> bool:
        hex_id = WMCTRL_CODEC.native_representation(window_id)
        return self._run_ok(["wmctrl", "-i", "-r", hex_id, "-e", f"0,{x},{y},{width},{height}"])

    def minimize(self, window_id: int) -> bool:
        return self._run_ok(["xdotool", "windowminimize", WMCTRL_CODEC.native_representation(window_id)])

    def restore(self, window_id: int) -> bool:
        # Activation also de-iconifies
        return self._run_ok(["wmctrl", "-i", "-a", WMCTRL_CODEC.native_representation(window_id)])

    def list_monitors(self) -> List[Monitor]:
        return self.topology.list_monitors()
