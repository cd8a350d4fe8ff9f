"""
Hyprland backend driven through `hyprctl ... -j` JSON output.

Window ids are client addresses ("0x55ade765da10"). Placement goes through
dispatchers, which answer "ok" on success and a plain-text reason otherwise.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from ..errors import BackendError, WindowNotFoundError
from ..models import Monitor, WindowRecord
from .base import DEFAULT_MATCHER, TitleMatcher, WindowBackend, make_record
from .ids import HYPRLAND_CODEC
from .process import DEFAULT_COMMAND_TIMEOUT, require_binary, run_command
from .topology import monitor_for_geometry

logger = logging.getLogger(__name__)

FULLSCREEN_REJECTION = "Window is fullscreen"


class HyprlandBackend(WindowBackend):
    """Backend for the Hyprland compositor."""

    name = "hyprland"

    def __init__(self, hyprctl: str = "hyprctl", timeout: float = DEFAULT_COMMAND_TIMEOUT):
        self.hyprctl = hyprctl
        self.timeout = timeout
        require_binary(
            self.name,
            [hyprctl, "version"],
            suggestion="Make sure you're running Hyprland and hyprctl is on PATH",
        )
        logger.info("Using hyprctl for Hyprland")

    # ------------------------------------------------------------------
    # hyprctl helpers
    # ------------------------------------------------------------------

    def _query(self, *args: str) -> Any:
        """Run a `hyprctl <args> -j` query and decode its JSON."""
        result = run_command([self.hyprctl, *args, "-j"], timeout=self.timeout)
        if result.returncode != 0:
            raise BackendError(
                f"hyprctl {' '.join(args)} failed ({result.returncode}): {result.stderr.strip()}"
            )
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise BackendError(f"Failed to parse hyprctl {' '.join(args)} output: {e}")

    def _dispatch(self, *args: str) -> str:
        """Run a dispatcher and return its stdout (the compositor's answer)."""
        result = run_command([self.hyprctl, "dispatch", *args], timeout=self.timeout)
        if result.returncode != 0:
            raise BackendError(
                f"hyprctl dispatch {args[0]} failed ({result.returncode}): {result.stderr.strip()}"
            )
        return result.stdout.strip()

    def _dispatch_ok(self, *args: str) -> bool:
        try:
            reply = self._dispatch(*args)
        except BackendError as e:
            logger.warning(str(e))
            return False
        if reply and reply != "ok":
            logger.warning(f"hyprctl dispatch {args[0]} rejected: {reply}")
            return False
        return True

    def _clients(self) -> List[Dict[str, Any]]:
        clients = self._query("clients")
        if not isinstance(clients, list):
            raise BackendError("Unexpected hyprctl clients output (expected a list)")
        return clients

    @staticmethod
    def _address(window_id: int) -> str:
        return f"address:{HYPRLAND_CODEC.native_representation(window_id)}"

    def _monitor_name(self, client: Dict[str, Any], monitors_by_id: Dict[int, str], monitors: Sequence[Monitor]) -> Optional[str]:
        """Map a client to a monitor name by monitor id, else by its geometry."""
        mon_id = client.get("monitor")
        if isinstance(mon_id, int) and not isinstance(mon_id, bool) and mon_id in monitors_by_id:
            return monitors_by_id[mon_id]

        at = client.get("at")
        size = client.get("size")
        if isinstance(at, list) and isinstance(size, list) and len(at) == 2 and len(size) == 2:
            try:
                return monitor_for_geometry(monitors, int(at[0]), int(at[1]), int(size[0]), int(size[1]))
            except (TypeError, ValueError):
                return None
        return None

    def _raw_monitors(self) -> List[Dict[str, Any]]:
        try:
            data = self._query("monitors")
        except BackendError as e:
            logger.warning(f"Monitor query failed: {e}")
            return []
        return data if isinstance(data, list) else []

    # ------------------------------------------------------------------
    # WindowBackend
    # ------------------------------------------------------------------

    def enumerate_matching(self, matcher: TitleMatcher = DEFAULT_MATCHER) -> List[WindowRecord]:
        clients = self._clients()

        raw_monitors = self._raw_monitors()
        monitors = self._monitors_from(raw_monitors)
        monitors_by_id = {
            m["id"]: m["name"]
            for m in raw_monitors
            if isinstance(m, dict) and isinstance(m.get("id"), int) and isinstance(m.get("name"), str)
        }

        records: List[WindowRecord] = []
        for client in clients:
            if not isinstance(client, dict):
                continue
            title = client.get("title")
            if not isinstance(title, str) or not matcher.matches(title):
                continue

            window_id = HYPRLAND_CODEC.canonical_id(client.get("address"))
            record = make_record(matcher, window_id, title, self._monitor_name(client, monitors_by_id, monitors))
            if record:
                records.append(record)

        logger.debug(f"Enumerated {len(records)} matching Hyprland client(s)")
        return records

    def get_focused(self) -> int:
        active = self._query("activewindow")
        # No focused window: hyprctl prints "{}"
        if not isinstance(active, dict) or "address" not in active:
            raise WindowNotFoundError()

        window_id = HYPRLAND_CODEC.canonical_id(active.get("address"))
        if not window_id:
            raise WindowNotFoundError(f"Unparseable active window address: {active.get('address')!r}")
        return window_id

    def set_focused(self, window_id: int) -> bool:
        return self._dispatch_ok("focuswindow", self._address(window_id))

    def find_by_title(self, title: str) -> Optional[int]:
        for client in self._clients():
            if isinstance(client, dict) and client.get("title") == title:
                window_id = HYPRLAND_CODEC.canonical_id(client.get("address"))
                if window_id:
                    return window_id
        return None

    def _exit_fullscreen(self, address: str) -> None:
        logger.info(f"Window {address} is fullscreen, leaving fullscreen before placement")
        self._dispatch_ok("focuswindow", address)
        self._dispatch_ok("fullscreen", "0")

    def reposition_resize(self, window_id: int, x: int, y: int, width: int, height: int) -> bool:
        """
        Float the window, then move and resize it in exact pixels.

        A move rejected with "Window is fullscreen" triggers one exit of
        fullscreen followed by one retry; the same holds for the resize, whose
        retry skips the exit when the move already left fullscreen.
        """
        address = self._address(window_id)

        try:
            # setfloating always floats (togglefloating would flip tiled ones back)
            self._dispatch("setfloating", address)

            move_args = ("movewindowpixel", f"exact {x} {y},{address}")
            exited = False
            reply = self._dispatch(*move_args)
            if FULLSCREEN_REJECTION in reply:
                self._exit_fullscreen(address)
                exited = True
                reply = self._dispatch(*move_args)
            moved = not reply or reply == "ok"

            resize_args = ("resizewindowpixel", f"exact {width} {height},{address}")
            reply = self._dispatch(*resize_args)
            if FULLSCREEN_REJECTION in reply:
                if not exited:
                    self._exit_fullscreen(address)
                reply = self._dispatch(*resize_args)
            resized = not reply or reply == "ok"
        except BackendError as e:
            logger.warning(f"Failed to place window {address}: {e}")
            return False

        if not (moved and resized):
            logger.warning(f"Hyprland rejected placement of {address}")
        return moved and resized

    def minimize(self, window_id: int) -> bool:
        return self._dispatch_ok("movetoworkspacesilent", f"special,{self._address(window_id)}")

    def restore(self, window_id: int) -> bool:
        return self._dispatch_ok("movetoworkspace", f"e+0,{self._address(window_id)}")

    @staticmethod
    def _monitors_from(raw: List[Dict[str, Any]]) -> List[Monitor]:
        monitors: List[Monitor] = []
        for mon in raw:
            if not isinstance(mon, dict):
                continue
            try:
                monitors.append(Monitor(
                    name=mon["name"],
                    x=mon["x"],
                    y=mon["y"],
                    width=mon["width"],
                    height=mon["height"],
                ))
            except (KeyError, ValueError) as e:
                logger.debug(f"Skipping malformed monitor entry: {e}")
        return monitors

    def list_monitors(self) -> List[Monitor]:
        return self._monitors_from(self._raw_monitors())
