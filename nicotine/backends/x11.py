"""
X11 backend speaking the X wire protocol directly via python-xlib.

Windows come from the EWMH _NET_CLIENT_LIST on the root window; focus goes
through _NET_ACTIVE_WINDOW client messages. Monitors come from xrandr.
"""

import logging
from typing import List, Optional, Tuple

from Xlib import X, Xatom, display as xdisplay, error as xerror, protocol

from ..errors import BackendError, BackendUnavailableError, WindowNotFoundError
from ..models import Monitor, WindowRecord
from .base import DEFAULT_MATCHER, TitleMatcher, WindowBackend, make_record
from .ids import X11_CODEC
from .topology import XrandrTopology, monitor_for_geometry

logger = logging.getLogger(__name__)

# ICCCM WM_STATE values
ICONIC_STATE = 3

# EWMH source indication: 2 = pager/tool
SOURCE_PAGER = 2

_ROOT_EVENT_MASK = X.SubstructureRedirectMask | X.SubstructureNotifyMask


class X11Backend(WindowBackend):
    """Backend for EWMH-compliant X11 window managers."""

    name = "x11"

    def __init__(self, display_name: Optional[str] = None, display=None, topology=None):
        """
        Connect to the X server and intern the atoms used on every call.

        Args:
            display_name: X display (defaults to $DISPLAY)
            display: Pre-built Xlib Display (tests)
            topology: Monitor source (defaults to xrandr)

        Raises:
            BackendUnavailableError: If the X server cannot be reached
        """
        if display is None:
            try:
                display = xdisplay.Display(display_name)
            except xerror.DisplayError as e:
                raise BackendUnavailableError(
                    self.name,
                    f"Failed to connect to X11 server: {e}",
                    suggestion="Check that DISPLAY is set and the X server is running",
                )

        self.display = display
        self.root = display.screen().root
        self.topology = topology or XrandrTopology()

        self.net_client_list = display.intern_atom("_NET_CLIENT_LIST")
        self.net_active_window = display.intern_atom("_NET_ACTIVE_WINDOW")
        self.net_wm_name = display.intern_atom("_NET_WM_NAME")
        self.utf8_string = display.intern_atom("UTF8_STRING")
        self.wm_change_state = display.intern_atom("WM_CHANGE_STATE")

        logger.info("Connected to X11 server")

    def close(self) -> None:
        self.display.close()

    # ------------------------------------------------------------------
    # Protocol helpers
    # ------------------------------------------------------------------

    def _window(self, window_id: int):
        return self.display.create_resource_object("window", X11_CODEC.native_representation(window_id))

    def _client_list(self) -> List[int]:
        try:
            prop = self.root.get_full_property(self.net_client_list, X.AnyPropertyType)
        except xerror.XError as e:
            raise BackendError(f"Failed to read _NET_CLIENT_LIST: {e}")

        if prop is None:
            raise BackendError(
                "Failed to get window list",
                suggestion="The window manager does not publish _NET_CLIENT_LIST",
            )
        return [int(wid) for wid in prop.value]

    def _get_title(self, window) -> Optional[str]:
        """Read _NET_WM_NAME (UTF-8), falling back to WM_NAME."""
        try:
            prop = window.get_full_property(self.net_wm_name, self.utf8_string)
            if prop and prop.value:
                value = prop.value
                return value.decode("utf-8", errors="replace") if isinstance(value, bytes) else str(value)

            prop = window.get_full_property(Xatom.WM_NAME, X.AnyPropertyType)
            if prop and prop.value:
                value = prop.value
                return value.decode("latin-1", errors="replace") if isinstance(value, bytes) else str(value)
        except xerror.XError as e:
            # Window vanished between list and query
            logger.debug(f"Cannot read title of window {window.id:#x}: {e}")
            return None

        return ""

    def _get_geometry(self, window) -> Optional[Tuple[int, int, int, int]]:
        """Absolute (x, y, width, height), walking the parent chain up to root."""
        try:
            geom = window.get_geometry()
            abs_x, abs_y = 0, 0
            current = window
            while True:
                g = current.get_geometry()
                abs_x += g.x
                abs_y += g.y
                parent = current.query_tree().parent
                if parent is None or parent.id in (0, self.root.id):
                    break
                current = parent
        except xerror.XError as e:
            logger.debug(f"Cannot read geometry of window {window.id:#x}: {e}")
            return None

        return abs_x, abs_y, geom.width, geom.height

    def _send_client_message(self, window, message_type: int, data: List[int]) -> None:
        event = protocol.event.ClientMessage(
            window=window.id,
            client_type=message_type,
            data=(32, data),
        )
        self.root.send_event(event, event_mask=_ROOT_EVENT_MASK)

    def _active_window(self) -> int:
        try:
            prop = self.root.get_full_property(self.net_active_window, X.AnyPropertyType)
        except xerror.XError as e:
            raise BackendError(f"Failed to read _NET_ACTIVE_WINDOW: {e}")

        if prop is None or len(prop.value) == 0:
            return 0
        return X11_CODEC.canonical_id(int(prop.value[0]))

    # ------------------------------------------------------------------
    # WindowBackend
    # ------------------------------------------------------------------

    def enumerate_matching(self, matcher: TitleMatcher = DEFAULT_MATCHER) -> List[WindowRecord]:
        records: List[WindowRecord] = []
        monitors = self.list_monitors()

        for wid in self._client_list():
            window_id = X11_CODEC.canonical_id(wid)
            if not window_id:
                continue

            window = self._window(window_id)
            title = self._get_title(window)
            if title is None or not matcher.matches(title):
                continue

            geometry = self._get_geometry(window)
            monitor = monitor_for_geometry(monitors, *geometry) if geometry else None

            record = make_record(matcher, window_id, title, monitor)
            if record:
                records.append(record)

        logger.debug(f"Enumerated {len(records)} matching X11 window(s)")
        return records

    def get_focused(self) -> int:
        window_id = self._active_window()
        if not window_id:
            raise WindowNotFoundError()
        return window_id

    def set_focused(self, window_id: int) -> bool:
        try:
            current = self._active_window()
            window = self._window(window_id)
            self._send_client_message(
                window,
                self.net_active_window,
                [SOURCE_PAGER, X.CurrentTime, current, 0, 0],
            )
            window.set_input_focus(X.RevertToParent, X.CurrentTime)
            self.display.flush()
        except (xerror.XError, BackendError, ValueError) as e:
            logger.warning(f"Failed to activate window {window_id:#x}: {e}")
            return False
        return True

    def find_by_title(self, title: str) -> Optional[int]:
        for wid in self._client_list():
            window_id = X11_CODEC.canonical_id(wid)
            if window_id and self._get_title(self._window(window_id)) == title:
                return window_id
        return None

    def reposition_resize(self, window_id: int, x: int, y: int, width: int, height: int) -> bool:
        try:
            self._window(window_id).configure(x=x, y=y, width=width, height=height)
            self.display.flush()
        except (xerror.XError, ValueError) as e:
            logger.warning(f"Failed to configure window {window_id:#x}: {e}")
            return False
        return True

    def minimize(self, window_id: int) -> bool:
        try:
            self._send_client_message(
                self._window(window_id),
                self.wm_change_state,
                [ICONIC_STATE, 0, 0, 0, 0],
            )
            self.display.flush()
        except (xerror.XError, ValueError) as e:
            logger.warning(f"Failed to minimize window {window_id:#x}: {e}")
            return False
        return True

    def restore(self, window_id: int) -> bool:
        try:
            self._window(window_id).map()
            self.display.flush()
        except (xerror.XError, ValueError) as e:
            logger.warning(f"Failed to restore window {window_id:#x}: {e}")
            return False
        return True

    def list_monitors(self) -> List[Monitor]:
        return self.topology.list_monitors()
