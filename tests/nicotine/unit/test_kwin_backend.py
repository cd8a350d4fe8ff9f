"""
Unit tests for the KWin backend (wmctrl/xdotool/kdotool text tools).
"""

import pytest

from nicotine.backends.kwin import KWinBackend, parse_wmctrl_geometry
from nicotine.errors import BackendError, WindowNotFoundError
from nicotine.models import WindowRecord

from tests.nicotine.fixtures.fakes import completed

WMCTRL_OUTPUT = """\
0x02a00003 -1 0    0    2560 30   host Plasma
0x06e00008  0 780  0    1000 1440 host EVE - Alice
0x07200004  0 3020 0    1000 1080 host EVE - Bob  Smith
0x07400002  0 0    0    800  600  host EVE - Launcher
0xzzzzzzzz  0 0    0    800  600  host EVE - Broken
0x07600001  0 x    0    800  600  host EVE - BadGeometry
short line
"""

XRANDR_OUTPUT = """\
DP-1 connected primary 2560x1440+0+0 (normal) 597mm x 336mm
DP-2 connected 1920x1080+2560+0 (normal) 527mm x 296mm
"""


@pytest.fixture
def kwin(fake_run):
    fake_run.on("wmctrl", "-l", "-G", response=completed(WMCTRL_OUTPUT))
    fake_run.on("xrandr", response=completed(XRANDR_OUTPUT))
    return KWinBackend()


class TestParseWmctrl:
    def test_rows(self):
        rows = list(parse_wmctrl_geometry(WMCTRL_OUTPUT))

        assert [r.title for r in rows] == [
            "Plasma",
            "EVE - Alice",
            "EVE - Bob  Smith",
            "EVE - Launcher",
            "EVE - Broken",
        ]
        assert rows[1].window_id == 0x06e00008
        assert (rows[1].x, rows[1].y, rows[1].width, rows[1].height) == (780, 0, 1000, 1440)

    def test_unparseable_id_is_invalid(self):
        rows = list(parse_wmctrl_geometry(WMCTRL_OUTPUT))
        assert rows[4].window_id == 0


class TestEnumerate:
    def test_matching_windows(self, kwin):
        assert kwin.enumerate_matching() == [
            WindowRecord(id=0x06e00008, title="Alice", monitor="DP-1"),
            WindowRecord(id=0x07200004, title="Bob  Smith", monitor="DP-2"),
        ]

    def test_wmctrl_failure(self, fake_run):
        backend = KWinBackend()
        fake_run.on("wmctrl", "-l", "-G", response=completed("", returncode=1, stderr="Cannot open display"))
        with pytest.raises(BackendError):
            backend.enumerate_matching()

    def test_no_monitors_leaves_monitor_unknown(self, fake_run):
        fake_run.on("wmctrl", "-l", "-G", response=completed(WMCTRL_OUTPUT))
        fake_run.on("xrandr", response=FileNotFoundError("xrandr"))

        records = KWinBackend().enumerate_matching()

        assert [r.monitor for r in records] == [None, None]


class TestFocus:
    def test_get_focused_decimal(self, kwin, fake_run):
        fake_run.on("xdotool", "getactivewindow", response=completed("115343368\n"))
        assert kwin.get_focused() == 0x06e00008

    def test_no_active_window(self, kwin, fake_run):
        fake_run.on("xdotool", "getactivewindow", response=completed("", returncode=1))
        with pytest.raises(WindowNotFoundError):
            kwin.get_focused()

    def test_set_focused_via_kdotool(self, kwin, fake_run):
        assert kwin.set_focused(0x06e00008) is True

        assert fake_run.commands("kdotool") == [
            ["kdotool", "search", "--name", "^EVE\\ \\-\\ Alice$", "windowactivate"]
        ]
        assert fake_run.commands("wmctrl", "-i", "-a") == []

    def test_set_focused_falls_back_to_wmctrl(self, kwin, fake_run):
        fake_run.on("kdotool", response=FileNotFoundError("kdotool"))

        assert kwin.set_focused(0x06e00008) is True
        assert fake_run.commands("wmctrl", "-i", "-a") == [["wmctrl", "-i", "-a", "0x06e00008"]]

    def test_unknown_window_uses_wmctrl(self, kwin, fake_run):
        assert kwin.set_focused(0x01) is True
        assert fake_run.commands("kdotool") == []
        assert fake_run.commands("wmctrl", "-i", "-a") == [["wmctrl", "-i", "-a", "0x00000001"]]

    def test_find_by_title(self, kwin):
        assert kwin.find_by_title("EVE - Alice") == 0x06e00008
        assert kwin.find_by_title("EVE - Broken") is None
        assert kwin.find_by_title("EVE - Nobody") is None


class TestWindowCommands:
    def test_reposition_resize(self, kwin, fake_run):
        assert kwin.reposition_resize(0x06e00008, 680, 0, 1200, 1400) is True
        assert fake_run.calls[-1] == ["wmctrl", "-i", "-r", "0x06e00008", "-e", "0,680,0,1200,1400"]

    def test_reposition_failure(self, kwin, fake_run):
        fake_run.on("wmctrl", "-i", "-r", response=completed("", returncode=1))
        assert kwin.reposition_resize(0x06e00008, 0, 0, 1, 1) is False

    def test_minimize(self, kwin, fake_run):
        assert kwin.minimize(0x06e00008) is True
        assert fake_run.calls[-1] == ["xdotool", "windowminimize", "0x06e00008"]

    def test_restore(self, kwin, fake_run):
        assert kwin.restore(0x06e00008) is True
        assert fake_run.calls[-1] == ["wmctrl", "-i", "-a", "0x06e00008"]
