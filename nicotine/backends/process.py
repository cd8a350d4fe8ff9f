"""
External process invocation for CLI-driven backends.

All compositor tools (wmctrl, xdotool, kdotool, hyprctl, xrandr) go through
run_command so timeouts and missing binaries surface the same way.
"""

import logging
import subprocess
from typing import List, Sequence

from ..errors import BackendError, BackendUnavailableError
from ..logging_config import log_subprocess_call

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 2.0


def run_command(
    cmd: Sequence[str],
    timeout: float = DEFAULT_COMMAND_TIMEOUT,
) -> subprocess.CompletedProcess:
    """
    Run an external command and capture its text output.

    A non-zero exit status is NOT an error here; callers decide what a
    failed exit means for their operation.

    Args:
        cmd: Command and arguments
        timeout: Seconds before the call is abandoned

    Returns:
        CompletedProcess with text stdout/stderr

    Raises:
        BackendError: If the binary is missing or the call times out
    """
    args: List[str] = [str(part) for part in cmd]
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise BackendError(
            f"{args[0]} not found",
            suggestion=f"Install {args[0]} and make sure it is on PATH",
        )
    except subprocess.TimeoutExpired:
        raise BackendError(f"{args[0]} timed out after {timeout:.1f}s")

    log_subprocess_call(args, result, logger)
    return result


def check_output(cmd: Sequence[str], timeout: float = DEFAULT_COMMAND_TIMEOUT) -> str:
    """Run a command and return stdout, raising BackendError on a non-zero exit."""
    result = run_command(cmd, timeout=timeout)
    if result.returncode != 0:
        raise BackendError(
            f"{cmd[0]} failed ({result.returncode}): {result.stderr.strip()}"
        )
    return result.stdout


def require_binary(backend: str, cmd: Sequence[str], suggestion: str) -> None:
    """
    Verify a backend's tool exists by running a cheap probe command.

    Raises:
        BackendUnavailableError: If the probe binary is missing or hangs
    """
    try:
        run_command(cmd)
    except BackendError as e:
        raise BackendUnavailableError(
            backend,
            f"{backend} backend unavailable: {e.message}",
            suggestion=suggestion,
        )
