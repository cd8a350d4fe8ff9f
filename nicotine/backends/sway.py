"""
Sway backend over the sway IPC socket (i3ipc).

Windows are found by walking the raw layout tree; commands use [con_id=N]
criteria so they never depend on which window currently has focus.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

import i3ipc

from ..errors import BackendError, BackendUnavailableError, WindowNotFoundError
from ..models import Monitor, WindowRecord
from .base import DEFAULT_MATCHER, TitleMatcher, WindowBackend, make_record
from .ids import SWAY_CODEC

logger = logging.getLogger(__name__)

WINDOW_NODE_TYPES = ("con", "floating_con")


def iter_windows(node: Dict[str, Any], output: Optional[str] = None) -> Iterator[Tuple[Dict[str, Any], Optional[str]]]:
    """
    Depth-first walk of a sway tree yielding (window node, output name).

    Both tiled (`nodes`) and floating (`floating_nodes`) children are
    descended at every level. The enclosing output name is passed down
    explicitly; output nodes replace it for their subtree.

    A node is a window when its type is con/floating_con and it carries
    either a Wayland app_id or XWayland window_properties.
    """
    node_type = node.get("type")
    if node_type == "output":
        output = node.get("name")

    if node_type in WINDOW_NODE_TYPES and (
        node.get("app_id") is not None or node.get("window_properties") is not None
    ):
        yield node, output

    for key in ("nodes", "floating_nodes"):
        for child in node.get(key) or []:
            if isinstance(child, dict):
                yield from iter_windows(child, output)


class SwayBackend(WindowBackend):
    """Backend for the sway compositor."""

    name = "sway"

    def __init__(self, connection: Optional[i3ipc.Connection] = None):
        """
        Connect to the sway IPC socket.

        Args:
            connection: Existing i3ipc connection (defaults to $SWAYSOCK)

        Raises:
            BackendUnavailableError: If sway is not reachable
        """
        if connection is None:
            try:
                connection = i3ipc.Connection()
            except Exception as e:
                raise BackendUnavailableError(
                    self.name,
                    f"Failed to connect to sway IPC: {e}",
                    suggestion="Make sure you're running sway and SWAYSOCK is set",
                )
        self.conn = connection
        logger.info("Connected to sway IPC")

    # ------------------------------------------------------------------
    # IPC helpers
    # ------------------------------------------------------------------

    def _tree(self) -> Dict[str, Any]:
        try:
            tree = self.conn.get_tree()
        except Exception as e:
            raise BackendError(f"Failed to query sway tree: {e}")

        data = getattr(tree, "ipc_data", None)
        if not isinstance(data, dict):
            raise BackendError("Unexpected sway tree reply")
        return data

    def _command(self, window_id: int, command: str) -> bool:
        """Run one command against a container; True if every reply succeeded."""
        payload = f"[con_id={SWAY_CODEC.native_representation(window_id)}] {command}"
        try:
            replies = self.conn.command(payload)
        except Exception as e:
            logger.warning(f"sway command failed: {payload}: {e}")
            return False

        ok = bool(replies) and all(reply.success for reply in replies)
        if not ok:
            errors = [reply.error for reply in replies or [] if not reply.success]
            logger.warning(f"sway rejected '{payload}': {errors}")
        return ok

    # ------------------------------------------------------------------
    # WindowBackend
    # ------------------------------------------------------------------

    def enumerate_matching(self, matcher: TitleMatcher = DEFAULT_MATCHER) -> List[WindowRecord]:
        records: List[WindowRecord] = []

        for node, output in iter_windows(self._tree()):
            title = node.get("name")
            if not isinstance(title, str) or not matcher.matches(title):
                continue
            record = make_record(matcher, SWAY_CODEC.canonical_id(node.get("id")), title, output)
            if record:
                records.append(record)

        logger.debug(f"Enumerated {len(records)} matching sway window(s)")
        return records

    def get_focused(self) -> int:
        for node, _output in iter_windows(self._tree()):
            if node.get("focused") is True:
                window_id = SWAY_CODEC.canonical_id(node.get("id"))
                if window_id:
                    return window_id
        raise WindowNotFoundError()

    def set_focused(self, window_id: int) -> bool:
        return self._command(window_id, "focus")

    def find_by_title(self, title: str) -> Optional[int]:
        for node, _output in iter_windows(self._tree()):
            if node.get("name") == title:
                window_id = SWAY_CODEC.canonical_id(node.get("id"))
                if window_id:
                    return window_id
        return None

    def reposition_resize(self, window_id: int, x: int, y: int, width: int, height: int) -> bool:
        # Tiled containers ignore position/size; float first
        return (
            self._command(window_id, "floating enable")
            and self._command(window_id, f"move position {x} {y}")
            and self._command(window_id, f"resize set {width} {height}")
        )

    def minimize(self, window_id: int) -> bool:
        return self._command(window_id, "move scratchpad")

    def restore(self, window_id: int) -> bool:
        return self._command(window_id, "scratchpad show")

    def list_monitors(self) -> List[Monitor]:
        try:
            outputs = self.conn.get_outputs()
        except Exception as e:
            logger.warning(f"Monitor query failed: {e}")
            return []

        monitors: List[Monitor] = []
        for output in outputs:
            if not output.active or output.rect is None:
                continue
            monitors.append(Monitor(
                name=output.name,
                x=output.rect.x,
                y=output.rect.y,
                width=output.rect.width,
                height=output.rect.height,
            ))
        return monitors
