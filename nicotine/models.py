"""
Canonical data model shared by every backend.

Backends translate their native output (X11 properties, wmctrl tables,
sway trees, hyprctl JSON) into these records. Everything above the backend
layer works on these types only.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Canonical ids are unsigned 64-bit
MAX_ID = 2 ** 64 - 1


class WindowRecord(BaseModel):
    """One application window from a single enumeration snapshot.

    Ids are only comparable within one backend family.
    """

    id: int = Field(..., ge=1, le=MAX_ID, description="Canonical window id (backend-opaque)")
    title: str = Field(..., description="Title with the application prefix stripped")
    monitor: Optional[str] = Field(None, description="Monitor currently hosting the window")

    model_config = {"frozen": True}


class Monitor(BaseModel):
    """Active monitor rectangle in virtual-desktop coordinates."""

    name: str = Field(..., description="Output name (DP-1, HDMI-A-1, ...)")
    x: int = Field(..., description="Origin X")
    y: int = Field(..., description="Origin Y")
    width: int = Field(..., ge=0, description="Width in pixels")
    height: int = Field(..., ge=0, description="Height in pixels")

    model_config = {"frozen": True}

    def contains_point(self, x: int, y: int) -> bool:
        """Half-open containment test."""
        return (self.x <= x < self.x + self.width and
                self.y <= y < self.y + self.height)


class Placement(BaseModel):
    """Target rectangle computed for one window."""

    x: int
    y: int
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)

    model_config = {"frozen": True}


class LayoutConfig(BaseModel):
    """Layout policy consumed by the layout engine.

    Read-only: the engine never mutates it.
    """

    display_width: int = Field(1920, ge=0, description="Fallback display width")
    display_height: int = Field(1080, ge=0, description="Fallback display height")
    panel_height: int = Field(0, ge=0, description="Pixels reserved for a panel/bar")
    eve_width: int = Field(1036, ge=0, description="Target client width in centered mode")
    eve_height: int = Field(1080, ge=0, description="Target client height")
    primary_character: Optional[str] = Field(None, description="Title of the primary client")
    primary_monitor: Optional[str] = Field(None, description="Monitor for the primary client")
    fullscreen_stack: bool = Field(False, description="Fill the monitor instead of centering")

    model_config = {"frozen": True}

    @field_validator("primary_character", "primary_monitor")
    @classmethod
    def empty_as_unset(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty strings as unset."""
        if v is not None and not v.strip():
            return None
        return v
