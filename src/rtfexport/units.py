"""CSS length conversion to RTF units.

RTF sizes fonts in half-points and lays out pages and tables in twips
(1/1440 inch).  Inputs are CSS-style lengths such as ``"18px"``,
``"12pt"`` or ``"2.5cm"``; a bare number is taken as pixels.
"""

from __future__ import annotations

import math
import re
from typing import Optional

PX_PER_INCH = 96.0
PT_PER_INCH = 72.0
TWIPS_PER_INCH = 1440

_PX_PER_UNIT = {
    "px": 1.0,
    "pt": PX_PER_INCH / PT_PER_INCH,
    "in": PX_PER_INCH,
    "cm": PX_PER_INCH / 2.54,
    "mm": PX_PER_INCH / 25.4,
}

_LENGTH_RE = re.compile(
    r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))\s*(px|pt|cm|mm|in)?\s*$",
    re.IGNORECASE,
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_length(value: Optional[str]) -> Optional[tuple[float, str]]:
    """Split ``"12.5pt"`` into ``(12.5, "pt")``; ``None`` if malformed."""
    if not value:
        return None
    match = _LENGTH_RE.match(str(value))
    if match is None:
        return None
    number = float(match.group(1))
    unit = (match.group(2) or "px").lower()
    return number, unit


def to_pixels(value: Optional[str]) -> Optional[float]:
    """Convert a CSS length to CSS pixels."""
    parsed = parse_length(value)
    if parsed is None:
        return None
    number, unit = parsed
    return number * _PX_PER_UNIT[unit]


def to_half_points(value: Optional[str]) -> Optional[int]:
    """Convert a CSS font size to RTF half-points (``\\fsN``), minimum 1."""
    px = to_pixels(value)
    if px is None:
        return None
    return max(1, _round_half_up(px * PT_PER_INCH / PX_PER_INCH * 2))


def pixels_to_twips(px: float) -> int:
    return _round_half_up(px * TWIPS_PER_INCH / PX_PER_INCH)


def to_twips(value: Optional[str]) -> Optional[int]:
    """Convert a CSS length to twips."""
    px = to_pixels(value)
    if px is None:
        return None
    return pixels_to_twips(px)
