"""nicotine

Multi-boxing control plane for EVE Online clients.

This package:
- Enumerates client windows through one of four desktop backends
  (X11, KWin, Sway, Hyprland)
- Stacks or centers them per monitor, with a preferred primary client
- Cycles focus forward/backward, resynchronizing with the real focus

License: MIT
"""

__version__ = "0.4.0"
