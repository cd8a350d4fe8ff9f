"""
Window identifier codecs.

Every backend speaks its own id encoding:

    hyprland   "0x55ade765da10"   hex address, no padding
    kwin       "0x06e00008"       wmctrl hex, padded to 8 digits
    sway       94 / "94"          decimal container id
    x11        0x06e00008         32-bit wire integer

Above the backend layer ids are plain ints. The value 0 is reserved as
"invalid"; enumerators drop records that decode to it.
"""

import re
from typing import Any, Union

from ..models import MAX_ID

INVALID_ID = 0
MAX_WIRE_ID = 2 ** 32 - 1

_HEX_RE = re.compile(r"^(?:0[xX])?([0-9a-fA-F]+)$")
_DEC_RE = re.compile(r"^[0-9]+$")


def _in_range(value: int) -> int:
    if value <= 0 or value > MAX_ID:
        return INVALID_ID
    return value


def parse_id(text: Any) -> int:
    """Parse a native id string into a canonical id.

    All-digit strings are decimal; strings with a 0x prefix or hex letters
    are hexadecimal. Anything else yields INVALID_ID.
    """
    if not isinstance(text, str):
        return INVALID_ID
    text = text.strip()
    if _DEC_RE.match(text):
        return _in_range(int(text, 10))
    match = _HEX_RE.match(text)
    if match:
        return _in_range(int(match.group(1), 16))
    return INVALID_ID


class HexAddressCodec:
    """Hexadecimal ids with a 0x prefix (Hyprland addresses, wmctrl ids)."""

    def __init__(self, width: int = 0):
        """
        Args:
            width: Minimum number of hex digits when encoding (0 = no padding)
        """
        self.width = width

    def canonical_id(self, native: Any) -> int:
        if not isinstance(native, str):
            return INVALID_ID
        text = native.strip()
        if not text.lower().startswith("0x"):
            # Unprefixed forms follow the generic digit/hex policy
            return parse_id(text)
        match = _HEX_RE.match(text)
        if not match:
            return INVALID_ID
        return _in_range(int(match.group(1), 16))

    def native_representation(self, window_id: int) -> str:
        return f"0x{window_id:0{self.width}x}"


class DecimalCodec:
    """Decimal container ids (sway con_id)."""

    def canonical_id(self, native: Any) -> int:
        # bool is an int subclass; never a valid id
        if isinstance(native, bool):
            return INVALID_ID
        if isinstance(native, int):
            return _in_range(native)
        if isinstance(native, str) and _DEC_RE.match(native.strip()):
            return _in_range(int(native.strip(), 10))
        return INVALID_ID

    def native_representation(self, window_id: int) -> str:
        return str(window_id)


class WireCodec:
    """32-bit X11 window ids, carried as ints on the wire."""

    def canonical_id(self, native: Union[int, str]) -> int:
        if isinstance(native, bool):
            return INVALID_ID
        if isinstance(native, str):
            value = parse_id(native)
        elif isinstance(native, int):
            value = native
        else:
            return INVALID_ID
        if value <= 0 or value > MAX_WIRE_ID:
            return INVALID_ID
        return value

    def native_representation(self, window_id: int) -> int:
        if window_id <= 0 or window_id > MAX_WIRE_ID:
            raise ValueError(f"Window id {window_id:#x} does not fit an X11 window id")
        return window_id


HYPRLAND_CODEC = HexAddressCodec()
WMCTRL_CODEC = HexAddressCodec(width=8)
SWAY_CODEC = DecimalCodec()
X11_CODEC = WireCodec()
