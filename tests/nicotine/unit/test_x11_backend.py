"""
Unit tests for the X11 backend against a mocked Xlib display.
"""

from unittest.mock import MagicMock, Mock

import pytest
from Xlib import X, Xatom, error as xerror

from nicotine.backends.x11 import ICONIC_STATE, SOURCE_PAGER, X11Backend
from nicotine.errors import BackendError, BackendUnavailableError, WindowNotFoundError
from nicotine.models import Monitor, WindowRecord

ROOT_ID = 0x100

ATOMS = {
    "_NET_CLIENT_LIST": 301,
    "_NET_ACTIVE_WINDOW": 302,
    "_NET_WM_NAME": 303,
    "UTF8_STRING": 304,
    "WM_CHANGE_STATE": 305,
}


class BadWindow(xerror.XError):
    """XError raised without a wire reply."""

    def __init__(self):
        Exception.__init__(self, "BadWindow")

    def __str__(self):
        return "BadWindow"


class FakeX:
    """Minimal X server: a root window and top-level clients with titles and geometry."""

    def __init__(self):
        self.display = MagicMock()
        self.display.intern_atom.side_effect = lambda name: ATOMS[name]

        self.root = MagicMock()
        self.root.id = ROOT_ID
        self.root.get_full_property.side_effect = self._root_property
        self.display.screen.return_value = Mock(root=self.root)

        self.client_list = []
        self.active = 0
        self.windows = {}
        self.display.create_resource_object.side_effect = lambda kind, wid: self.windows.setdefault(wid, self._window(wid))

    def _root_property(self, atom, prop_type):
        if atom == ATOMS["_NET_CLIENT_LIST"]:
            return Mock(value=list(self.client_list)) if self.client_list is not None else None
        if atom == ATOMS["_NET_ACTIVE_WINDOW"]:
            return Mock(value=[self.active])
        return None

    def _window(self, wid, title=None, geometry=(0, 0, 100, 100), utf8=True):
        window = MagicMock()
        window.id = wid

        def prop(atom, prop_type):
            if title is None:
                return None
            if utf8 and atom == ATOMS["_NET_WM_NAME"]:
                return Mock(value=title.encode("utf-8"))
            if not utf8 and atom == Xatom.WM_NAME:
                return Mock(value=title.encode("latin-1"))
            return None

        window.get_full_property.side_effect = prop
        window.get_geometry.return_value = Mock(x=geometry[0], y=geometry[1], width=geometry[2], height=geometry[3])
        window.query_tree.return_value.parent = self.root
        return window

    def add(self, wid, title, geometry=(0, 0, 100, 100), utf8=True):
        self.client_list.append(wid)
        self.windows[wid] = self._window(wid, title, geometry, utf8)
        return self.windows[wid]


@pytest.fixture
def xserver():
    server = FakeX()
    server.add(0x06e00008, "EVE - Alice", (780, 0, 1000, 1440))
    server.add(0x07200004, "EVE - Bob", (3020, 0, 1000, 1080), utf8=False)
    server.add(0x07400002, "EVE - Bob (Launcher)")
    server.add(0x07600001, "xterm")
    return server


@pytest.fixture
def topology(monitors):
    return Mock(list_monitors=Mock(return_value=monitors))


@pytest.fixture
def x11(xserver, topology):
    return X11Backend(display=xserver.display, topology=topology)


class TestConstruction:
    def test_display_unavailable(self, monkeypatch):
        def refuse(name=None):
            raise xerror.DisplayNameError(":99")

        monkeypatch.setattr("nicotine.backends.x11.xdisplay.Display", refuse)
        with pytest.raises(BackendUnavailableError) as exc_info:
            X11Backend()
        assert exc_info.value.backend == "x11"

    def test_atoms_interned_once(self, x11, xserver):
        x11.enumerate_matching()
        x11.enumerate_matching()
        assert xserver.display.intern_atom.call_count == len(ATOMS)


class TestEnumerate:
    def test_matching_windows(self, x11):
        assert x11.enumerate_matching() == [
            WindowRecord(id=0x06e00008, title="Alice", monitor="DP-1"),
            WindowRecord(id=0x07200004, title="Bob", monitor="DP-2"),
        ]

    def test_geometry_walks_parent_chain(self, xserver, topology):
        frame = MagicMock()
        frame.id = 0x500
        frame.get_geometry.return_value = Mock(x=2600, y=0, width=1010, height=1100)
        frame.query_tree.return_value.parent = xserver.root

        client = xserver.add(0x08000001, "EVE - Carol", (5, 20, 1000, 1080))
        client.query_tree.return_value.parent = frame

        records = X11Backend(display=xserver.display, topology=topology).enumerate_matching()

        # Client offset (5, 20) inside a frame at (2600, 0)
        assert records[-1] == WindowRecord(id=0x08000001, title="Carol", monitor="DP-2")

    def test_vanished_window_skipped(self, x11, xserver):
        xserver.windows[0x06e00008].get_full_property.side_effect = BadWindow()
        assert [r.title for r in x11.enumerate_matching()] == ["Bob"]

    def test_geometry_error_leaves_monitor_unknown(self, x11, xserver):
        xserver.windows[0x06e00008].get_geometry.side_effect = BadWindow()
        assert x11.enumerate_matching()[0] == WindowRecord(id=0x06e00008, title="Alice", monitor=None)

    def test_missing_client_list(self, x11, xserver):
        xserver.client_list = None
        with pytest.raises(BackendError):
            x11.enumerate_matching()


class TestFocus:
    def test_get_focused(self, x11, xserver):
        xserver.active = 0x07200004
        assert x11.get_focused() == 0x07200004

    def test_no_active_window(self, x11, xserver):
        xserver.active = 0
        with pytest.raises(WindowNotFoundError):
            x11.get_focused()

    def test_set_focused_sends_active_window_message(self, x11, xserver):
        xserver.active = 0x07200004

        assert x11.set_focused(0x06e00008) is True

        event = xserver.root.send_event.call_args.args[0]
        assert event.client_type == ATOMS["_NET_ACTIVE_WINDOW"]
        assert event.window == 0x06e00008
        assert list(event.data[1])[:3] == [SOURCE_PAGER, X.CurrentTime, 0x07200004]
        xserver.windows[0x06e00008].set_input_focus.assert_called_once_with(X.RevertToParent, X.CurrentTime)
        xserver.display.flush.assert_called()

    def test_set_focused_x_error(self, x11, xserver):
        xserver.windows[0x06e00008].set_input_focus.side_effect = BadWindow()
        assert x11.set_focused(0x06e00008) is False

    def test_set_focused_id_too_wide(self, x11):
        assert x11.set_focused(0x55ade765da10) is False

    def test_find_by_title(self, x11):
        assert x11.find_by_title("EVE - Bob") == 0x07200004
        assert x11.find_by_title("EVE - Nobody") is None


class TestWindowCommands:
    def test_reposition_resize(self, x11, xserver):
        assert x11.reposition_resize(0x06e00008, 680, 0, 1200, 1400) is True
        xserver.windows[0x06e00008].configure.assert_called_once_with(x=680, y=0, width=1200, height=1400)

    def test_reposition_error(self, x11, xserver):
        xserver.windows[0x06e00008].configure.side_effect = BadWindow()
        assert x11.reposition_resize(0x06e00008, 0, 0, 1, 1) is False

    def test_minimize_requests_iconic_state(self, x11, xserver):
        assert x11.minimize(0x06e00008) is True

        event = xserver.root.send_event.call_args.args[0]
        assert event.client_type == ATOMS["WM_CHANGE_STATE"]
        assert list(event.data[1])[0] == ICONIC_STATE

    def test_restore_maps_window(self, x11, xserver):
        assert x11.restore(0x06e00008) is True
        xserver.windows[0x06e00008].map.assert_called_once()

    def test_list_monitors_uses_topology(self, x11, monitors):
        assert x11.list_monitors() == monitors
        assert x11.list_monitors()[0] == Monitor(name="DP-1", x=0, y=0, width=2560, height=1440)
