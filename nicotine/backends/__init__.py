"""
Desktop backends.

Exactly one backend is active per process. It is chosen explicitly by name
(config `backend` field or the --backend flag); nothing is auto-detected.
Backend modules are imported lazily so that, for example, the sway backend
can run without an X server library being importable.
"""

import importlib
import logging
from typing import Dict, Tuple

from ..errors import BackendUnavailableError
from .base import DEFAULT_MATCHER, TitleMatcher, WindowBackend

logger = logging.getLogger(__name__)

# name -> (module, class)
_REGISTRY: Dict[str, Tuple[str, str]] = {
    "x11": ("nicotine.backends.x11", "X11Backend"),
    "kwin": ("nicotine.backends.kwin", "KWinBackend"),
    "sway": ("nicotine.backends.sway", "SwayBackend"),
    "hyprland": ("nicotine.backends.hyprland", "HyprlandBackend"),
}

BACKENDS = tuple(_REGISTRY)


def create_backend(name: str, **kwargs) -> WindowBackend:
    """
    Construct the backend registered under `name`.

    Args:
        name: One of BACKENDS
        **kwargs: Passed to the backend constructor

    Raises:
        ValueError: If the name is not a known backend
        BackendUnavailableError: If the backend's transport is missing
    """
    try:
        module_name, class_name = _REGISTRY[name]
    except KeyError:
        raise ValueError(f"Unknown backend '{name}' (expected one of: {', '.join(BACKENDS)})")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise BackendUnavailableError(
            name,
            f"{name} backend cannot be loaded: {e}",
            suggestion="Install nicotine with its runtime dependencies",
        )

    logger.debug(f"Creating {name} backend")
    return getattr(module, class_name)(**kwargs)


__all__ = [
    "BACKENDS",
    "DEFAULT_MATCHER",
    "TitleMatcher",
    "WindowBackend",
    "create_backend",
]
