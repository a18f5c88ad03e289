"""
Poster composition: turns PosterData into an ordered list of draw
operations. Later operations paint over earlier ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import requests
from PIL import Image, UnidentifiedImageError

from .assets import AssetServices, make_scannable, square_center_crop, watermark_svg
from .fitting import MeasureFn, TitleFitResult, fit_title, flow_tracklist, tracklist_zone
from .gradient import make_fade
from .model import PosterData
from .ops import DrawOperation, FilledRect, ImageOp, TextRun
from .template import DEFAULT_TEMPLATE, LayoutTemplate
from .units import to_pixels, to_points

logger = logging.getLogger(__name__)

ASSET_ERRORS = (OSError, ValueError, requests.RequestException, UnidentifiedImageError)


@dataclass
class Composition:
    operations: List[DrawOperation] = field(default_factory=list)
    title_fit: Optional[TitleFitResult] = None

    def of_kind(self, kind: str) -> List[ImageOp]:
        return [op for op in self.operations if isinstance(op, ImageOp) and op.kind == kind]

    @property
    def texts(self) -> List[TextRun]:
        return [op for op in self.operations if isinstance(op, TextRun)]


class SceneComposer:
    def __init__(
        self,
        measure: MeasureFn,
        font_name: str,
        services: Optional[AssetServices] = None,
        template: LayoutTemplate = DEFAULT_TEMPLATE,
    ):
        self.measure = measure
        self.font_name = font_name
        self.services = services or AssetServices()
        self.template = template

    # ---------- helpers ----------
    def _text(self, data: PosterData, text: str, x: float, y: float, size_px: float,
              opacity: Optional[float] = None) -> TextRun:
        return TextRun(
            text=text or "",
            x=x,
            y=y,
            size_px=size_px,
            font=self.font_name,
            color=data.text_color,
            opacity=opacity,
        )

    def width_px(self, text: str, size_px: float) -> float:
        return to_pixels(self.measure(text or "", to_points(size_px)))

    # ---------- pipeline ----------
    def compose(self, data: PosterData) -> Composition:
        t = self.template
        out = Composition()
        ops = out.operations

        # 1. background
        ops.append(FilledRect(0, 0, t.width, t.height, data.background_color))

        # 2-3. cover + fade
        cover_drawn = self._cover(data, ops)
        if cover_drawn and data.use_fade:
            fade = make_fade(data, self.services.rasterize_svg, t)
            if fade is not None:
                ops.append(fade)

        # 4. seam band under the cover
        seam_top = t.seam_top(data.margin_background)
        ops.append(FilledRect(0, seam_top, t.width, t.height - seam_top, data.background_color))

        # 5. title
        out.title_fit = fit_title(data, self.measure, t)
        title_size = out.title_fit.size_px
        if data.show_tracklist:
            title_top = t.title_top_with_tracklist + data.margin_top
        else:
            title_top = t.title_top_without_tracklist + data.margin_top
        ops.append(self._text(data, data.album_name, data.margin_side, title_top, title_size))

        # 6. artists
        artists_size = data.artists_size or t.artists_size
        if data.show_tracklist:
            artists_top = t.title_top_with_tracklist + data.margin_top + artists_size * t.artists_line_factor
        else:
            artists_top = t.artists_top_without_tracklist + data.margin_top + artists_size
        ops.append(self._text(data, data.artists_name, data.margin_side, artists_top, artists_size))

        # 7. release title + runtime title
        release_w = self.width_px(data.title_release, t.release_size)
        second_x = data.margin_side + release_w + t.release_gap
        ops.append(self._text(data, data.title_release, data.margin_side, t.release_top, t.release_size))
        ops.append(self._text(data, data.title_runtime, second_x, t.release_top, t.release_size))

        # 8. runtime + release date, faded
        ops.append(self._text(data, data.runtime, second_x, t.secondary_top, t.secondary_size,
                              opacity=t.secondary_opacity))
        ops.append(self._text(data, data.release_date, data.margin_side, t.secondary_top, t.secondary_size,
                              opacity=t.secondary_opacity))

        # 9. swatches
        for x, color in zip(t.swatch_xs, (data.color1, data.color2, data.color3)):
            ops.append(FilledRect(x - data.margin_side, t.swatch_top, t.swatch_width, t.swatch_height, color))

        # 10. tracklist
        if data.show_tracklist:
            ops.extend(self._tracklist(data))

        # 11. watermark
        if data.use_watermark:
            ops.append(self._watermark(data))

        # 12. scan code
        scannable = self._scannable(data)
        if scannable is not None:
            ops.append(scannable)

        return out

    def _cover(self, data: PosterData, ops: List[DrawOperation]) -> bool:
        url = data.cover_url
        side = self.template.cover_side(data.margin_cover)
        if not url or side <= 0:
            return False
        try:
            cover = square_center_crop(self.services.fetch_image(url))
        except ASSET_ERRORS as e:
            logger.warning("Cover art unavailable (%s): %s", url, e)
            return False
        ops.append(ImageOp(cover, data.margin_cover, data.margin_cover, side, side, kind="cover"))
        return True

    def _tracklist(self, data: PosterData) -> List[TextRun]:
        t = self.template
        size = data.tracks_size or t.tracks_size
        placed = flow_tracklist(
            data.tracks,
            tracklist_zone(data, t),
            size,
            self.measure,
            margin_side=data.margin_side,
            margin_top=data.margin_top,
            template=t,
        )
        return [self._text(data, p.text, p.x, p.y, size) for p in placed]

    def _watermark(self, data: PosterData) -> ImageOp:
        t = self.template
        svg = watermark_svg(data.text_color, t.watermark_width, t.watermark_height)
        logo = self.services.rasterize_svg(svg, t.watermark_width, t.watermark_height, t.watermark_supersample)
        return ImageOp(
            logo,
            t.width - t.watermark_right - t.watermark_width,
            t.watermark_top,
            t.watermark_width,
            t.watermark_height,
            opacity=t.watermark_opacity,
            kind="watermark",
        )

    def _scannable(self, data: PosterData) -> Optional[ImageOp]:
        t = self.template
        try:
            img: Image.Image = make_scannable(
                data.background_color,
                data.text_color,
                data.album_id,
                self.services,
                size=t.scannable_source_size,
                scale=t.scannable_supersample,
            )
        except Exception as e:  # any failure omits the scan code
            logger.debug("Scan code omitted: %s", e)
            return None
        return ImageOp(
            img,
            t.scannable_x - data.margin_side,
            t.scannable_top,
            t.scannable_width,
            t.scannable_height,
            kind="scannable",
        )


def compose_poster(
    data: PosterData,
    measure: MeasureFn,
    font_name: str,
    services: Optional[AssetServices] = None,
    template: LayoutTemplate = DEFAULT_TEMPLATE,
) -> Composition:
    return SceneComposer(measure, font_name, services, template).compose(data)
