from __future__ import annotations

import re
from typing import Tuple

HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

# Above this luminance a dark overlay reads better than a light one.
CONTRAST_THRESHOLD = 0.179


def normalize_hex(hex_color: str) -> str:
    """Return ``#rrggbb`` (lowercase) for a 3- or 6-digit hex string."""
    m = HEX_RE.match((hex_color or "").strip())
    if not m:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return "#" + digits.lower()


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    value = int(normalize_hex(hex_color)[1:], 16)
    return (value >> 16) & 255, (value >> 8) & 255, value & 255


def hex_to_unit_rgb(hex_color: str) -> Tuple[float, float, float]:
    r, g, b = hex_to_rgb(hex_color)
    return r / 255, g / 255, b / 255


def hex_to_rgba(hex_color: str, opacity: float = 1.0) -> Tuple[int, int, int, int]:
    r, g, b = hex_to_rgb(hex_color)
    return r, g, b, int(round(255 * opacity))


def _linear_channel(c: int) -> float:
    val = c / 255
    return val / 12.92 if val <= 0.03928 else ((val + 0.055) / 1.055) ** 2.4


def relative_luminance(rgb: Tuple[int, int, int]) -> float:
    r, g, b = rgb
    return 0.2126 * _linear_channel(r) + 0.7152 * _linear_channel(g) + 0.0722 * _linear_channel(b)


def contrast_color(background_rgb: Tuple[int, int, int]) -> str:
    """Pick the overlay tint ("black" or "white") that reads on the background."""
    return "black" if relative_luminance(background_rgb) > CONTRAST_THRESHOLD else "white"
