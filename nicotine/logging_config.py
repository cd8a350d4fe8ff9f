"""Logging configuration for nicotine.

Provides:
- Configurable log levels (WARNING, INFO, DEBUG)
- Colored output on terminals
- Subprocess call logging for the CLI-driven backends
"""

import logging
import os
import sys
from typing import Any, List


# Default log format
DEFAULT_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        """Format log record with colors."""
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """Configure logging for nicotine.

    The LOG_LEVEL environment variable wins over the flags when set.

    Args:
        verbose: Enable verbose logging (INFO level)
        debug: Enable debug logging (DEBUG level)

    Returns:
        Configured package logger
    """
    logger = logging.getLogger('nicotine')

    # Remove existing handlers
    logger.handlers.clear()

    if debug:
        level = logging.DEBUG
        log_format = DEBUG_FORMAT
    elif verbose:
        level = logging.INFO
        log_format = VERBOSE_FORMAT
    else:
        level = logging.WARNING
        log_format = DEFAULT_FORMAT

    env_level = os.environ.get("LOG_LEVEL", "").upper()
    if env_level in logging.getLevelNamesMapping():
        level = logging.getLevelNamesMapping()[env_level]
        if level <= logging.DEBUG:
            log_format = DEBUG_FORMAT

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    # Use colored formatter if terminal supports it
    if sys.stderr.isatty():
        formatter = ColoredFormatter(log_format)
    else:
        formatter = logging.Formatter(log_format)

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def log_subprocess_call(cmd: List[str], result: Any, logger: logging.Logger) -> None:
    """Log subprocess call with result.

    Args:
        cmd: Command list
        result: subprocess.CompletedProcess result
        logger: Logger instance
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(f"Subprocess call: {' '.join(cmd)}")
    logger.debug(f"  Return code: {result.returncode}")

    if getattr(result, 'stdout', None):
        logger.debug(f"  stdout: {result.stdout[:200]}")

    if getattr(result, 'stderr', None):
        logger.debug(f"  stderr: {result.stderr[:200]}")
