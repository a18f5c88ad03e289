from __future__ import annotations

DPI = 300
POINTS_PER_INCH = 72


def to_points(px: float) -> float:
    return px * POINTS_PER_INCH / DPI


def to_pixels(pt: float) -> float:
    return pt * DPI / POINTS_PER_INCH
