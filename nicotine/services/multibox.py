"""
Multibox controller: wires one backend, the config, the layout engine and
the cycle state together for the CLI.
"""

import logging
from typing import List, Optional

from ..backends.base import DEFAULT_MATCHER, TitleMatcher, WindowBackend
from ..config import Config, load_characters, order_windows
from ..errors import BackendError, WindowNotFoundError
from ..models import Monitor, WindowRecord
from .cycle_state import CycleOutcome, CycleState
from .layout_engine import stack_windows

logger = logging.getLogger(__name__)


class MultiboxController:
    """Operations on the set of client windows of one backend."""

    def __init__(
        self,
        backend: WindowBackend,
        config: Config,
        characters: Optional[List[str]] = None,
        matcher: TitleMatcher = DEFAULT_MATCHER,
    ):
        """
        Args:
            backend: Active backend instance
            config: Loaded configuration
            characters: Cycle order (defaults to characters.txt when present)
            matcher: Client window filter
        """
        self.backend = backend
        self.config = config
        self.characters = characters if characters is not None else load_characters()
        self.matcher = matcher
        self.state = CycleState()

    def refresh(self) -> List[WindowRecord]:
        """Re-enumerate, apply character order and resync with the focused window."""
        windows = order_windows(self.backend.enumerate_matching(self.matcher), self.characters)
        self.state.update_windows(windows)

        try:
            active = self.backend.get_focused()
        except WindowNotFoundError:
            logger.debug("No focused window to resync with")
        except BackendError as e:
            logger.warning(f"Cannot query the focused window, keeping cycle position: {e}")
        else:
            if not self.state.sync_with_active(active):
                logger.debug(f"Focused window {active:#x} is not a client window")

        logger.info(f"Found {len(windows)} client window(s)")
        return windows

    def monitors(self) -> List[Monitor]:
        return self.backend.list_monitors()

    def stack(self) -> List[int]:
        """Stack all clients; returns ids the backend failed to place."""
        windows = self.refresh()
        if not windows:
            logger.warning("No client windows found")
            return []
        return stack_windows(self.backend, windows, self.config.layout())

    def _after_cycle(self, outcome: CycleOutcome) -> CycleOutcome:
        if outcome.window is None or not self.config.minimize_inactive:
            return outcome

        self.backend.restore(outcome.window.id)
        for window in self.state.windows:
            if window.id != outcome.window.id:
                self.backend.minimize(window.id)
        return outcome

    def forward(self) -> CycleOutcome:
        self.refresh()
        return self._after_cycle(self.state.cycle_forward(self.backend))

    def backward(self) -> CycleOutcome:
        self.refresh()
        return self._after_cycle(self.state.cycle_backward(self.backend))

    def focus_character(self, character: str) -> Optional[WindowRecord]:
        """
        Focus the client of one character.

        Returns:
            The focused window, or None if no client has that name
        """
        for window in self.refresh():
            if window.title == character:
                self.state.sync_with_active(window.id)
                if self.config.minimize_inactive:
                    self.backend.restore(window.id)
                if not self.backend.set_focused(window.id):
                    logger.warning(f"Backend did not accept focus request for {character}")
                return window

        logger.warning(f"No client window for character '{character}'")
        return None
