"""Shared fixtures for nicotine tests.

Provides a two-monitor topology, three client windows, a recording fake
backend and a scripted replacement for subprocess.run.
"""

import logging

import pytest

from nicotine.models import LayoutConfig, Monitor, WindowRecord
from tests.nicotine.fixtures.fakes import CommandRecorder, FakeBackend


@pytest.fixture
def fake_run(monkeypatch):
    """Replace subprocess.run for every CLI-driven backend."""
    recorder = CommandRecorder()
    monkeypatch.setattr("nicotine.backends.process.subprocess.run", recorder)
    return recorder


@pytest.fixture
def monitors():
    """DP-1 (2560x1440) with DP-2 (1920x1080) to its right."""
    return [
        Monitor(name="DP-1", x=0, y=0, width=2560, height=1440),
        Monitor(name="DP-2", x=2560, y=0, width=1920, height=1080),
    ]


@pytest.fixture
def windows():
    """Three clients: Alice and Carol on DP-1, Bob on DP-2."""
    return [
        WindowRecord(id=1, title="Alice", monitor="DP-1"),
        WindowRecord(id=2, title="Bob", monitor="DP-2"),
        WindowRecord(id=3, title="Carol", monitor="DP-1"),
    ]


@pytest.fixture
def layout_config():
    """Centered layout with a 1000px client width and no panel."""
    return LayoutConfig(
        display_width=1920,
        display_height=1080,
        panel_height=0,
        eve_width=1000,
        eve_height=1080,
    )


@pytest.fixture
def fake_backend(windows, monitors):
    return FakeBackend(windows=windows, monitors=monitors)


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """Isolated config directory."""
    directory = tmp_path / "nicotine"
    monkeypatch.setenv("NICOTINE_CONFIG_DIR", str(directory))
    return directory


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so caplog sees records in every test."""
    yield
    logger = logging.getLogger("nicotine")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
