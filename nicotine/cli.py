"""CLI command handlers for nicotine.

Each invocation loads the config, constructs exactly one backend and runs
one command against it. Cycle commands resync with the focused window first,
so repeated invocations behave like one long-running cycle.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence, Tuple

from rich.console import Console
from rich.table import Table

from . import __version__
from .backends import BACKENDS, create_backend
from .backends.base import WindowBackend
from .config import Config, config_path, load_config, save_config
from .detection import detect_display_size
from .errors import NicotineError
from .logging_config import setup_logging
from .services.cycle_state import CycleOutcome
from .services.multibox import MultiboxController

logger = logging.getLogger(__name__)

console = Console()


# ANSI color codes for output
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    BLUE = "\033[34m"
    GRAY = "\033[90m"


def print_success(message: str) -> None:
    """Print success message in green."""
    print(f"{Colors.GREEN}✓{Colors.RESET} {message}")


def print_error(message: str) -> None:
    """Print error message in red."""
    print(f"{Colors.RED}✗{Colors.RESET} {message}", file=sys.stderr)


def print_info(message: str) -> None:
    """Print info message in blue."""
    print(f"{Colors.BLUE}ℹ{Colors.RESET} {message}")


def print_error_with_remediation(error: str, remediation: Optional[str]) -> None:
    """Print error with remediation steps."""
    print(f"{Colors.RED}✗ Error:{Colors.RESET} {error}", file=sys.stderr)
    if remediation:
        print(f"{Colors.BLUE}  Remediation:{Colors.RESET} {remediation}", file=sys.stderr)


def _open(args: argparse.Namespace) -> Tuple[Config, WindowBackend]:
    """Load the config and construct the selected backend."""
    config = load_config(Path(args.config) if args.config else None)
    name = args.backend or config.backend
    logger.debug(f"Using {name} backend")
    return config, create_backend(name)


def _report_cycle(outcome: CycleOutcome) -> int:
    if outcome.window is None:
        print_info("No EVE clients found")
        return 0
    if not outcome.focused:
        print_error(f"Failed to focus {outcome.window.title}")
        return 1
    print_success(f"Switched to {outcome.window.title}")
    return 0


# ============================================================================
# Commands
# ============================================================================


def cmd_stack(args: argparse.Namespace) -> int:
    """Stack all clients on their monitors.

    Returns:
        0 on success, 1 if any window could not be placed
    """
    config, backend = _open(args)
    with backend:
        controller = MultiboxController(backend, config)
        failed = controller.stack()
        windows = controller.state.windows

    if not windows:
        print_info("No EVE clients found")
        return 0
    if failed:
        print_error(f"Failed to place {len(failed)} of {len(windows)} window(s)")
        return 1
    print_success(f"Stacked {len(windows)} window(s)")
    return 0


def cmd_forward(args: argparse.Namespace) -> int:
    """Focus the next client."""
    config, backend = _open(args)
    with backend:
        outcome = MultiboxController(backend, config).forward()
    return _report_cycle(outcome)


def cmd_backward(args: argparse.Namespace) -> int:
    """Focus the previous client."""
    config, backend = _open(args)
    with backend:
        outcome = MultiboxController(backend, config).backward()
    return _report_cycle(outcome)


def cmd_focus(args: argparse.Namespace) -> int:
    """Focus one character's client by name."""
    config, backend = _open(args)
    with backend:
        window = MultiboxController(backend, config).focus_character(args.character)

    if window is None:
        print_error_with_remediation(
            f"No client for character '{args.character}'",
            "Run 'nicotine list' to see the running clients",
        )
        return 1
    print_success(f"Switched to {window.title}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List client windows in cycle order."""
    config, backend = _open(args)
    with backend:
        controller = MultiboxController(backend, config)
        windows = controller.refresh()
        current = controller.state.current

    if args.json:
        print(json.dumps({
            "total": len(windows),
            "windows": [w.model_dump() for w in windows],
            "current": current.id if current else None,
        }, indent=2))
        return 0

    if not windows:
        print_info("No EVE clients found")
        return 0

    table = Table(title=f"EVE clients ({backend.name})")
    table.add_column("", width=1)
    table.add_column("Character", style="bold")
    table.add_column("Window ID", style="cyan")
    table.add_column("Monitor")

    for window in windows:
        marker = "[green]●[/green]" if current and window.id == current.id else ""
        table.add_row(marker, window.title, f"{window.id:#x}", window.monitor or "-")

    console.print(table)
    return 0


def cmd_monitors(args: argparse.Namespace) -> int:
    """Show the monitor topology."""
    config, backend = _open(args)
    with backend:
        monitors = backend.list_monitors()

    if args.json:
        print(json.dumps([m.model_dump() for m in monitors], indent=2))
        return 0

    if not monitors:
        print_info(
            f"No monitors reported; layout falls back to {config.display_width}x{config.display_height}"
        )
        return 0

    table = Table(title="Monitors")
    table.add_column("Name", style="bold")
    table.add_column("Position")
    table.add_column("Size")
    table.add_column("Primary")

    for monitor in monitors:
        primary = "✓" if monitor.name == config.primary_monitor else ""
        table.add_row(
            monitor.name,
            f"{monitor.x},{monitor.y}",
            f"{monitor.width}x{monitor.height}",
            primary,
        )

    console.print(table)
    return 0


def cmd_init_config(args: argparse.Namespace) -> int:
    """Write a config for the detected display."""
    path = Path(args.config) if args.config else config_path()
    if path.exists() and not args.force:
        print_error_with_remediation(
            f"Config already exists: {path}",
            "Use --force to overwrite it",
        )
        return 1

    width, height = detect_display_size()
    overrides = {"backend": args.backend} if args.backend else {}
    config = Config.generate(width, height, **overrides)
    save_config(config, path)

    print_success(f"Created config: {path}")
    print_info(f"Display {width}x{height}, client width {config.eve_width}, backend {config.backend}")
    return 0


COMMAND_HANDLERS: Dict[str, Callable[[argparse.Namespace], int]] = {
    "stack": cmd_stack,
    "forward": cmd_forward,
    "backward": cmd_backward,
    "focus": cmd_focus,
    "list": cmd_list,
    "monitors": cmd_monitors,
    "init-config": cmd_init_config,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nicotine",
        description="Arrange and cycle EVE Online client windows",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"nicotine {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging (INFO level)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level, includes verbose)"
    )
    parser.add_argument(
        "--config",
        help="Path to config.toml (default: ~/.config/nicotine/config.toml)"
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        help="Desktop backend (overrides the config file)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "stack",
        help="Stack all clients",
        description="Center (or fill) every client on its monitor; the primary character goes to the primary monitor"
    )
    subparsers.add_parser("forward", help="Focus the next client")
    subparsers.add_parser("backward", help="Focus the previous client")

    parser_focus = subparsers.add_parser("focus", help="Focus a character's client")
    parser_focus.add_argument("character", help="Character name (without the 'EVE - ' prefix)")

    parser_list = subparsers.add_parser("list", help="List clients in cycle order")
    parser_list.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format"
    )

    parser_monitors = subparsers.add_parser("monitors", help="Show monitor topology")
    parser_monitors.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format"
    )

    parser_init = subparsers.add_parser(
        "init-config",
        help="Generate config.toml for the detected display"
    )
    parser_init.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, debug=args.debug)

    if not args.command:
        parser.print_help()
        return 0

    handler = COMMAND_HANDLERS[args.command]
    try:
        return handler(args)
    except NicotineError as e:
        print_error_with_remediation(e.message, e.suggestion)
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print_error(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
