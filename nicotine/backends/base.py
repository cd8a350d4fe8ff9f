"""
Backend capability contract.

Every desktop backend implements WindowBackend with identical semantics so
the layout engine and cycle state can be written once. Each implementation
owns the parsing of its own transport output.
"""

import abc
import logging
from dataclasses import dataclass
from typing import List, Optional

from ..models import Monitor, WindowRecord
from .ids import INVALID_ID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TitleMatcher:
    """Application window filter.

    A title matches when it starts with ``prefix`` and does not contain
    ``exclude`` anywhere.
    """

    prefix: str = "EVE - "
    exclude: Optional[str] = "Launcher"

    def matches(self, title: str) -> bool:
        if not title or not title.startswith(self.prefix):
            return False
        if self.exclude and self.exclude in title:
            return False
        return True

    def strip(self, title: str) -> str:
        return title[len(self.prefix):]


DEFAULT_MATCHER = TitleMatcher()


def make_record(
    matcher: TitleMatcher,
    window_id: int,
    title: Optional[str],
    monitor: Optional[str],
) -> Optional[WindowRecord]:
    """
    Build a WindowRecord for a matching window.

    Returns None for non-matching titles and for the reserved invalid id,
    so one bad entry never aborts an enumeration.
    """
    if title is None or not matcher.matches(title):
        return None
    if window_id == INVALID_ID:
        logger.debug(f"Dropping window with unparseable id: {title!r}")
        return None
    return WindowRecord(id=window_id, title=matcher.strip(title), monitor=monitor)


class WindowBackend(abc.ABC):
    """Abstract base class for desktop backends."""

    #: Short backend name used for selection and logging
    name: str = ""

    @abc.abstractmethod
    def enumerate_matching(self, matcher: TitleMatcher = DEFAULT_MATCHER) -> List[WindowRecord]:
        """List application windows whose title satisfies the matcher.

        Args:
            matcher: Title filter (prefix is stripped from stored titles)

        Returns:
            Fresh WindowRecords in backend enumeration order

        Raises:
            BackendError: If the window list itself cannot be obtained
        """
        raise NotImplementedError

    @abc.abstractmethod
    def get_focused(self) -> int:
        """Get the canonical id of the focused window.

        Raises:
            WindowNotFoundError: If the backend reports no active window
            BackendError: If the query fails
        """
        raise NotImplementedError

    @abc.abstractmethod
    def set_focused(self, window_id: int) -> bool:
        """Bring a window to foreground focus (best effort, idempotent).

        Returns:
            True if the backend accepted the request
        """
        raise NotImplementedError

    @abc.abstractmethod
    def find_by_title(self, title: str) -> Optional[int]:
        """Find a window by exact (unstripped) title.

        Returns:
            Canonical id, or None if no window has that title
        """
        raise NotImplementedError

    @abc.abstractmethod
    def reposition_resize(self, window_id: int, x: int, y: int, width: int, height: int) -> bool:
        """Move and resize a window as one logical operation.

        Returns:
            True if every underlying request succeeded
        """
        raise NotImplementedError

    @abc.abstractmethod
    def minimize(self, window_id: int) -> bool:
        """Hide a window from normal view (recoverable with restore)."""
        raise NotImplementedError

    @abc.abstractmethod
    def restore(self, window_id: int) -> bool:
        """Bring a minimized window back to normal view."""
        raise NotImplementedError

    @abc.abstractmethod
    def list_monitors(self) -> List[Monitor]:
        """Query the current monitor topology (never cached)."""
        raise NotImplementedError

    def close(self) -> None:
        """Release transport resources. Default: nothing to release."""
        return None

    def __enter__(self) -> "WindowBackend":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
