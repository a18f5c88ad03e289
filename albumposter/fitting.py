from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .model import PosterData
from .template import DEFAULT_TEMPLATE, LayoutTemplate
from .units import to_pixels, to_points

logger = logging.getLogger(__name__)

# (text, size_pt) -> width_pt
MeasureFn = Callable[[str, float], float]


# ============================================================
# Title auto-fit
# ============================================================
@dataclass(frozen=True)
class TitleFitResult:
    size_px: int
    auto_fitted: bool
    iterations: int = 0


def shrink_to_fit(
    text: str,
    measure: MeasureFn,
    start_px: int,
    max_width_pt: float,
    min_px: int,
) -> TitleFitResult:
    size_px = start_px
    iterations = 0
    width_pt = measure(text, to_points(size_px))
    while width_pt > max_width_pt and size_px > min_px:
        size_px -= 1
        iterations += 1
        width_pt = measure(text, to_points(size_px))
    return TitleFitResult(size_px=size_px, auto_fitted=True, iterations=iterations)


def fit_title(
    data: PosterData,
    measure: MeasureFn,
    template: LayoutTemplate = DEFAULT_TEMPLATE,
) -> TitleFitResult:
    """Fixed size if the user (or an earlier fit) already chose one, else shrink to fit."""
    start_px = data.title_size or template.title_size
    if not data.needs_title_fit:
        return TitleFitResult(size_px=start_px, auto_fitted=False)

    max_width_pt = to_points(template.width - data.margin_side * 2)
    result = shrink_to_fit(data.album_name or "", measure, start_px, max_width_pt, template.title_min_size)
    if result.iterations:
        logger.debug("Title shrunk %dpx -> %dpx in %d steps", start_px, result.size_px, result.iterations)
    return result


# ============================================================
# Tracklist column flow
# ============================================================
@dataclass(frozen=True)
class TracklistZone:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class TrackPlacement:
    text: str
    x: float
    y: float
    column: int


def tracklist_zone(data: PosterData, template: LayoutTemplate = DEFAULT_TEMPLATE) -> TracklistZone:
    """Area under the artist line that the tracklist may flow into."""
    top = template.title_top_with_tracklist + data.margin_top
    if data.artists_size:
        y = top + data.artists_size * template.artists_line_factor + template.tracklist_gap
    else:
        y = top + template.artists_size * template.tracklist_default_artists_factor + template.tracklist_gap
    return TracklistZone(
        x=data.margin_side,
        y=y,
        width=template.width - data.margin_side * 2,
        height=template.tracklist_zone_height,
    )


def flow_tracklist(
    tracks: List[str],
    zone: TracklistZone,
    font_size_px: float,
    measure: MeasureFn,
    margin_side: int = 0,
    margin_top: int = 0,
    template: LayoutTemplate = DEFAULT_TEMPLATE,
    line_height_factor: Optional[float] = None,
) -> List[TrackPlacement]:
    """
    Greedy left-to-right columns. Each column is as wide as its widest track
    plus a fixed gap; tracks that would start a column past the zone's right
    edge are dropped.
    """
    line_height = font_size_px * (line_height_factor or template.line_height_factor)
    column_gap = line_height * template.column_gap_factor
    bottom = zone.y + zone.height - template.tracklist_bottom_pad - margin_top
    right = zone.x + zone.width

    padding_music = margin_side + template.tracklist_indent
    padding_column = 0.0
    max_width = 0.0
    text_height = zone.y
    column = 0

    placed: List[TrackPlacement] = []
    for track in tracks:
        if text_height + line_height >= bottom:
            text_height = zone.y
            padding_music = max_width + column_gap + padding_column
            if padding_music >= right:
                logger.debug("Tracklist overflow: dropped %d of %d tracks", len(tracks) - len(placed), len(tracks))
                break
            padding_column = padding_music - column_gap
            max_width = 0.0
            column += 1

        width_px = to_pixels(measure(track, to_points(font_size_px)))
        if width_px + margin_side > max_width:
            max_width = width_px + margin_side

        placed.append(TrackPlacement(text=track, x=padding_music, y=text_height, column=column))
        text_height += line_height

    return placed
