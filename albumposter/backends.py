"""
Render backends. Both consume the same draw operations in canonical pixel
space; PdfBackend converts to points and flips y, RasterBackend multiplies
by a page scale factor.
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional, Tuple

from PIL import Image, ImageDraw
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from .colors import hex_to_rgba, hex_to_unit_rgb
from .fonts import DEFAULT_PDF_FONT, get_raster_font
from .ops import DrawOperation, FilledRect, ImageOp, TextRun
from .template import DEFAULT_TEMPLATE, LayoutTemplate
from .units import to_pixels, to_points

logger = logging.getLogger(__name__)


def with_opacity(img: Image.Image, opacity: Optional[float]) -> Image.Image:
    img = img.convert("RGBA")
    if opacity is None or opacity >= 1.0:
        return img
    alpha = img.getchannel("A")
    alpha = alpha.point(lambda a: int(a * opacity))
    img.putalpha(alpha)
    return img


class RenderBackend:
    """Drawing surface the composer targets. Subclasses implement the primitives."""

    font_name: str = DEFAULT_PDF_FONT
    media_type: str = "application/octet-stream"

    def text_width(self, text: str, size_pt: float) -> float:
        raise NotImplementedError

    def draw_rect(self, op: FilledRect) -> None:
        raise NotImplementedError

    def draw_text(self, op: TextRun) -> None:
        raise NotImplementedError

    def draw_image(self, op: ImageOp) -> None:
        raise NotImplementedError

    def finalize(self) -> bytes:
        raise NotImplementedError

    def draw(self, op: DrawOperation) -> None:
        if isinstance(op, FilledRect):
            self.draw_rect(op)
        elif isinstance(op, TextRun):
            self.draw_text(op)
        elif isinstance(op, ImageOp):
            self.draw_image(op)
        else:
            raise TypeError(f"Unknown draw operation: {op!r}")

    def render(self, operations: Iterable[DrawOperation]) -> bytes:
        for op in operations:
            self.draw(op)
        return self.finalize()


# ============================================================
# PDF (ReportLab)
# ============================================================
class PdfBackend(RenderBackend):
    media_type = "application/pdf"

    def __init__(self, font_name: str = DEFAULT_PDF_FONT, template: LayoutTemplate = DEFAULT_TEMPLATE):
        self.font_name = font_name
        self.W = to_points(template.width)
        self.H = to_points(template.height)
        self._buf = BytesIO()
        self.c = canvas.Canvas(self._buf, pagesize=(self.W, self.H))

    def _y(self, y_px: float, h_px: float) -> float:
        # PDF origin is bottom-left
        return self.H - to_points(y_px + h_px)

    def text_width(self, text: str, size_pt: float) -> float:
        return pdfmetrics.stringWidth(text or "", self.font_name, size_pt)

    def draw_rect(self, op: FilledRect) -> None:
        c = self.c
        c.saveState()
        c.setFillColorRGB(*hex_to_unit_rgb(op.color))
        if op.opacity is not None:
            c.setFillAlpha(op.opacity)
        c.rect(to_points(op.x), self._y(op.y, op.h), to_points(op.w), to_points(op.h), stroke=0, fill=1)
        c.restoreState()

    def draw_text(self, op: TextRun) -> None:
        c = self.c
        c.saveState()
        c.setFont(op.font, to_points(op.size_px))
        c.setFillColorRGB(*hex_to_unit_rgb(op.color))
        if op.opacity is not None:
            c.setFillAlpha(op.opacity)
        c.drawString(to_points(op.x), self._y(op.y, op.size_px), op.text or "")
        c.restoreState()

    def draw_image(self, op: ImageOp) -> None:
        if op.w <= 0 or op.h <= 0:
            return
        img = with_opacity(op.image, op.opacity)
        self.c.drawImage(
            ImageReader(img),
            to_points(op.x), self._y(op.y, op.h),
            width=to_points(op.w), height=to_points(op.h),
            mask="auto",
        )

    def finalize(self) -> bytes:
        self.c.showPage()
        self.c.save()
        logger.debug("PDF page %.1fx%.1fpt written", self.W, self.H)
        return self._buf.getvalue()


# ============================================================
# Raster (Pillow)
# ============================================================
class RasterBackend(RenderBackend):
    def __init__(
        self,
        font_path: str = "",
        scale: float = 1.0,
        image_format: str = "PNG",
        template: LayoutTemplate = DEFAULT_TEMPLATE,
    ):
        if scale <= 0:
            raise ValueError("Raster scale must be positive.")
        self.font_path = font_path
        self.font_name = Path(font_path).stem if font_path else "default"
        self.scale = scale
        self.image_format = image_format.upper()
        self.media_type = "image/jpeg" if self.image_format in ("JPEG", "JPG") else "image/png"
        self.size = (round(template.width * scale), round(template.height * scale))
        self._image = Image.new("RGBA", self.size, (0, 0, 0, 0))

    @property
    def image(self) -> Image.Image:
        return self._image

    def _s(self, v: float) -> int:
        return int(round(v * self.scale))

    def _composite(self, layer: Image.Image, position: Tuple[int, int]) -> None:
        x, y = position
        # alpha_composite refuses negative destinations
        if x < 0 or y < 0:
            layer = layer.crop((max(0, -x), max(0, -y), layer.width, layer.height))
            x, y = max(0, x), max(0, y)
        if layer.width <= 0 or layer.height <= 0:
            return
        self._image.alpha_composite(layer, dest=(x, y))

    def text_width(self, text: str, size_pt: float) -> float:
        font = get_raster_font(self.font_path, max(1, int(round(to_pixels(size_pt)))))
        return to_points(font.getlength(text or ""))

    def draw_rect(self, op: FilledRect) -> None:
        w, h = self._s(op.w), self._s(op.h)
        if w <= 0 or h <= 0:
            return
        layer = Image.new("RGBA", (w, h), hex_to_rgba(op.color, 1.0 if op.opacity is None else op.opacity))
        self._composite(layer, (self._s(op.x), self._s(op.y)))

    def draw_text(self, op: TextRun) -> None:
        if not op.text:
            return
        font = get_raster_font(self.font_path, max(1, self._s(op.size_px)))
        baseline = self._s(op.baseline)
        left, top, right, bottom = font.getbbox(op.text, anchor="ls")
        if right <= left or bottom <= top:
            return
        layer = Image.new("RGBA", (right - left, bottom - top), (0, 0, 0, 0))
        d = ImageDraw.Draw(layer)
        fill = hex_to_rgba(op.color, 1.0 if op.opacity is None else op.opacity)
        d.text((-left, -top), op.text, font=font, fill=fill, anchor="ls")
        self._composite(layer, (self._s(op.x) + left, baseline + top))

    def draw_image(self, op: ImageOp) -> None:
        w, h = self._s(op.w), self._s(op.h)
        if w <= 0 or h <= 0:
            return
        img = op.image
        if img.size != (w, h):
            img = img.resize((w, h), Image.LANCZOS)
        self._composite(with_opacity(img, op.opacity), (self._s(op.x), self._s(op.y)))

    def finalize(self) -> bytes:
        out = BytesIO()
        if self.media_type == "image/jpeg":
            self._image.convert("RGB").save(out, format="JPEG", quality=95)
        else:
            self._image.save(out, format="PNG")
        return out.getvalue()
