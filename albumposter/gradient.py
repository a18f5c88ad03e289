"""Linear fade used to blend the bottom of the cover into the background."""

from __future__ import annotations

from typing import Callable, Optional

from PIL import Image

from .colors import normalize_hex
from .model import PosterData
from .ops import ImageOp
from .template import DEFAULT_TEMPLATE, LayoutTemplate

# (svg_text, width_px, height_px, scale) -> RGBA bitmap
RasterizeFn = Callable[[str, int, int, int], Image.Image]


def gradient_svg(
    width: int,
    height: int,
    color: str,
    stop_clear: float = 0.5,
    stop_solid: float = 0.8,
) -> str:
    color = normalize_hex(color)
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}">'
        "<defs>"
        '<linearGradient id="g" x1="0" x2="0" y1="0" y2="1">'
        f'<stop offset="{stop_clear}" stop-color="{color}" stop-opacity="0"/>'
        f'<stop offset="{stop_solid}" stop-color="{color}" stop-opacity="1"/>'
        "</linearGradient>"
        "</defs>"
        '<rect width="100%" height="100%" fill="url(#g)"/>'
        "</svg>"
    )


def fade_height(data: PosterData, template: LayoutTemplate = DEFAULT_TEMPLATE) -> int:
    return template.fade_reference_height - data.margin_background


def make_fade(
    data: PosterData,
    rasterize: RasterizeFn,
    template: LayoutTemplate = DEFAULT_TEMPLATE,
) -> Optional[ImageOp]:
    """None when margin_background leaves no room for the fade."""
    cover_w = template.cover_side(data.margin_cover)
    height = fade_height(data, template)
    draw_height = template.fade_draw_height - data.margin_background
    if cover_w <= 0 or height <= 0 or draw_height <= 0:
        return None
    svg = gradient_svg(
        cover_w, height, data.background_color,
        stop_clear=template.fade_stop_clear,
        stop_solid=template.fade_stop_solid,
    )
    bitmap = rasterize(svg, cover_w, height, template.fade_supersample)
    return ImageOp(
        image=bitmap,
        x=0,
        y=template.fade_top,
        w=template.width,
        h=draw_height,
        kind="fade",
    )
