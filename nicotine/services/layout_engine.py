"""
Layout engine.

Computes a placement per window from the monitor topology and layout
policy, then (separately) asks the backend to apply it. The computation is
pure: same inputs, same placements, no inputs mutated.

Placement rules:
- The primary client (first window whose title equals primary_character)
  goes to primary_monitor, or the first monitor when that name is unknown.
- Every other client stays on the monitor it is currently on, or the first
  monitor when that is unknown.
- Stacked mode fills the target monitor (minus panel); centered mode uses
  eve_width clamped to the monitor width, horizontally centered.
- With no monitors at all, the global display size is used.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..backends.base import WindowBackend
from ..models import LayoutConfig, Monitor, Placement, WindowRecord

logger = logging.getLogger(__name__)


def _find_monitor(monitors: Sequence[Monitor], name: Optional[str]) -> Monitor:
    if name is not None:
        for monitor in monitors:
            if monitor.name == name:
                return monitor
    return monitors[0]


def _fallback_placement(config: LayoutConfig) -> Placement:
    return Placement(
        x=max(config.display_width - config.eve_width, 0) // 2,
        y=0,
        width=config.eve_width,
        height=max(config.display_height - config.panel_height, 0),
    )


def placement_on_monitor(monitor: Monitor, config: LayoutConfig) -> Placement:
    """Target rectangle for a client on one monitor."""
    height = max(monitor.height - config.panel_height, 0)

    if config.fullscreen_stack:
        return Placement(x=monitor.x, y=monitor.y, width=monitor.width, height=height)

    width = min(config.eve_width, monitor.width)
    return Placement(
        x=monitor.x + (monitor.width - width) // 2,
        y=monitor.y,
        width=width,
        height=height,
    )


def compute_placements(
    windows: Sequence[WindowRecord],
    monitors: Sequence[Monitor],
    config: LayoutConfig,
) -> Dict[int, Placement]:
    """
    Compute target placements.

    Args:
        windows: Enumerated client windows (enumeration order)
        monitors: Current topology (may be empty)
        config: Layout policy

    Returns:
        Window id -> Placement, with an entry for every window
    """
    placements: Dict[int, Placement] = {}
    primary_seen = False

    for window in windows:
        is_primary = (
            not primary_seen
            and config.primary_character is not None
            and window.title == config.primary_character
        )
        if is_primary:
            primary_seen = True

        if not monitors:
            placements[window.id] = _fallback_placement(config)
            continue

        target_name = config.primary_monitor if is_primary else window.monitor
        target = _find_monitor(monitors, target_name)
        placements[window.id] = placement_on_monitor(target, config)

        logger.debug(
            f"{window.title}: {'primary ' if is_primary else ''}-> {target.name} "
            f"{placements[window.id]}"
        )

    return placements


def apply_placements(backend: WindowBackend, placements: Dict[int, Placement]) -> List[int]:
    """
    Apply placements through the backend, one reposition_resize per window.

    A failure on one window does not stop the others.

    Returns:
        Ids whose placement the backend did not accept
    """
    failed: List[int] = []

    for window_id, placement in placements.items():
        ok = backend.reposition_resize(
            window_id,
            placement.x,
            placement.y,
            placement.width,
            placement.height,
        )
        if not ok:
            failed.append(window_id)

    if failed:
        logger.warning(f"Failed to place {len(failed)} of {len(placements)} window(s)")
    else:
        logger.info(f"Placed {len(placements)} window(s)")

    return failed


def stack_windows(
    backend: WindowBackend,
    windows: Sequence[WindowRecord],
    config: LayoutConfig,
) -> List[int]:
    """Query the topology, compute placements and apply them."""
    placements = compute_placements(windows, backend.list_monitors(), config)
    return apply_placements(backend, placements)
