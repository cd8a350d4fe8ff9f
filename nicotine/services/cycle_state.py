"""
Cyclic focus state.

States:
    Empty        no known windows (index held at 0)
    Active(i)    0 <= i < len(windows)

Forward/backward move the pointer with wrap-around and request focus of
the new current window exactly once. On Empty they do nothing and report
success. Resync moves the pointer to an externally focused window without
any focus request.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..backends.base import WindowBackend
from ..models import WindowRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleOutcome:
    """Result of one cycle step."""

    window: Optional[WindowRecord]
    focused: bool


class CycleState:
    """Ordered window view with a current pointer."""

    def __init__(self, windows: Optional[Sequence[WindowRecord]] = None):
        self._windows: List[WindowRecord] = []
        self._current_index = 0
        if windows:
            self.update_windows(windows)

    @property
    def windows(self) -> List[WindowRecord]:
        return list(self._windows)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def is_empty(self) -> bool:
        return not self._windows

    @property
    def current(self) -> Optional[WindowRecord]:
        if not self._windows:
            return None
        return self._windows[self._current_index]

    def update_windows(self, windows: Sequence[WindowRecord]) -> None:
        """Replace the window list; keep the index only while it stays in range."""
        self._windows = list(windows)
        if self._current_index >= len(self._windows):
            self._current_index = 0

    def _focus_current(self, backend: WindowBackend) -> CycleOutcome:
        window = self._windows[self._current_index]
        focused = backend.set_focused(window.id)
        if focused:
            logger.info(f"Switched to {window.title}")
        else:
            logger.warning(f"Backend did not accept focus request for {window.title}")
        return CycleOutcome(window=window, focused=focused)

    def cycle_forward(self, backend: WindowBackend) -> CycleOutcome:
        if not self._windows:
            return CycleOutcome(window=None, focused=True)

        self._current_index = (self._current_index + 1) % len(self._windows)
        return self._focus_current(backend)

    def cycle_backward(self, backend: WindowBackend) -> CycleOutcome:
        if not self._windows:
            return CycleOutcome(window=None, focused=True)

        if self._current_index == 0:
            self._current_index = len(self._windows) - 1
        else:
            self._current_index -= 1
        return self._focus_current(backend)

    def sync_with_active(self, window_id: int) -> bool:
        """
        Point at the window with this id, if it is known.

        Returns:
            True if a matching window was found
        """
        for index, window in enumerate(self._windows):
            if window.id == window_id:
                self._current_index = index
                return True
        return False
