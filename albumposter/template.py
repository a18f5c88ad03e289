"""Fixed poster template: every layout constant in canonical pixel space."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class LayoutTemplate:
    # canvas (300 dpi, A4-ish portrait)
    width: int = 2480
    height: int = 3508

    # default text sizes (px)
    title_size: int = 230
    artists_size: int = 110
    tracks_size: int = 50
    release_size: int = 70
    secondary_size: int = 60
    secondary_opacity: float = 0.7

    # title auto-fit
    title_min_size: int = 10

    # title / artists baselines
    title_top_with_tracklist: int = 2500
    title_top_without_tracklist: int = 2790
    artists_line_factor: float = 1.3
    artists_top_without_tracklist: int = 2820

    # release rows
    release_top: int = 3310
    release_gap: int = 100
    secondary_top: int = 3390

    # color swatches
    swatch_xs: Tuple[int, int, int] = (2045, 2190, 2335)
    swatch_top: int = 3368
    swatch_width: int = 145
    swatch_height: int = 30

    # tracklist zone
    tracklist_gap: int = 130
    tracklist_default_artists_factor: float = 1.2
    tracklist_zone_height: int = 500
    tracklist_indent: int = 10
    tracklist_bottom_pad: int = 10
    line_height_factor: float = 1.3
    column_gap_factor: float = 2.5

    # cover fade
    fade_reference_height: int = 3000
    fade_top: int = 500
    fade_draw_height: int = 2500
    fade_stop_clear: float = 0.5
    fade_stop_solid: float = 0.8
    fade_supersample: int = 2

    # watermark logo
    watermark_width: int = 500
    watermark_height: int = 134
    watermark_right: int = 70
    watermark_top: int = 50
    watermark_opacity: float = 0.5
    watermark_supersample: int = 3

    # scan code
    scannable_source_size: int = 640
    scannable_x: int = 2020
    scannable_top: int = 3235
    scannable_width: int = 480
    scannable_height: int = 120
    scannable_supersample: int = 3

    def cover_side(self, margin_cover: int) -> int:
        return self.width - margin_cover * 2

    def seam_top(self, margin_background: int) -> int:
        """Top edge of the background band drawn below the cover."""
        return self.width - margin_background

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Template canvas must have a positive size.")
        if self.height < self.width:
            raise ValueError("Template canvas must be portrait.")
        if not 0.0 <= self.fade_stop_clear < self.fade_stop_solid <= 1.0:
            raise ValueError("Fade stops must satisfy 0 <= clear < solid <= 1.")
        if self.title_min_size < 1:
            raise ValueError("Title floor must be at least 1px.")


DEFAULT_TEMPLATE = LayoutTemplate()
