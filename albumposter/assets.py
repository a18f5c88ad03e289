from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Callable

import requests
from PIL import Image

from .colors import contrast_color, hex_to_rgb, normalize_hex

logger = logging.getLogger(__name__)

HTTP_TIMEOUT = 25
SCANNABLE_URL = "https://scannables.scdn.co/uri/plain/svg/{background}/{contrast}/{size}/spotify:album:{album_id}"


# ============================================================
# Fetching
# ============================================================
def is_remote(ref: str) -> bool:
    return ref.startswith(("http://", "https://"))


def fetch_bytes(ref: str) -> bytes:
    """Read a URL or a local file path."""
    if is_remote(ref):
        r = requests.get(ref, timeout=HTTP_TIMEOUT)
        r.raise_for_status()
        return r.content
    path = Path(ref).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"No such asset: {ref}")
    return path.read_bytes()


def fetch_text(ref: str) -> str:
    if is_remote(ref):
        r = requests.get(ref, timeout=HTTP_TIMEOUT)
        r.raise_for_status()
        return r.text
    return fetch_bytes(ref).decode("utf-8")


def fetch_image(ref: str) -> Image.Image:
    img = Image.open(BytesIO(fetch_bytes(ref)))
    img.load()
    return img.convert("RGB")


def square_center_crop(img: Image.Image) -> Image.Image:
    if img.width == img.height:
        return img
    side = min(img.width, img.height)
    left = (img.width - side) // 2
    top = (img.height - side) // 2
    return img.crop((left, top, left + side, top + side))


# ============================================================
# SVG rasterization
# ============================================================
def rasterize_svg(svg: str, width_px: int, height_px: int, scale: int = 3) -> Image.Image:
    """Render SVG to an RGBA bitmap at ``scale`` times the nominal size."""
    # needs libcairo at import time
    import cairosvg

    png = cairosvg.svg2png(
        bytestring=svg.encode("utf-8"),
        output_width=width_px * scale,
        output_height=height_px * scale,
    )
    return Image.open(BytesIO(png)).convert("RGBA")


@dataclass
class AssetServices:
    """Everything a poster run needs from the outside world."""
    fetch_image: Callable[[str], Image.Image] = fetch_image
    fetch_text: Callable[[str], str] = fetch_text
    rasterize_svg: Callable[[str, int, int, int], Image.Image] = rasterize_svg


# ============================================================
# Watermark logo
# ============================================================
def watermark_svg(color: str, width: int, height: int) -> str:
    color = normalize_hex(color)
    stroke = max(2, height // 20)
    radius = height // 2 - stroke
    font_size = int(height * 0.42)
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
        f'<circle cx="{height // 2}" cy="{height // 2}" r="{radius}" fill="none" '
        f'stroke="{color}" stroke-width="{stroke}"/>'
        f'<circle cx="{height // 2}" cy="{height // 2}" r="{radius // 3}" fill="{color}"/>'
        f'<text x="{height + stroke * 4}" y="{height // 2}" dominant-baseline="central" '
        f'font-family="Helvetica, Arial, sans-serif" font-weight="bold" '
        f'font-size="{font_size}" fill="{color}">albumposter</text>'
        "</svg>"
    )


# ============================================================
# Scan code
# ============================================================
def scannable_url(background_color: str, album_id: str, size: int = 640) -> str:
    background = normalize_hex(background_color)
    return SCANNABLE_URL.format(
        background=background[1:],
        contrast=contrast_color(hex_to_rgb(background)),
        size=size,
        album_id=album_id,
    )


def recolor_scannable(svg: str, background_color: str, text_color: str) -> str:
    """
    Paint the code's foreground in the text color and knock out its
    background so the poster fill shows through.
    """
    background = normalize_hex(background_color)
    text = normalize_hex(text_color)
    if contrast_color(hex_to_rgb(background)) == "black":
        foreground = 'fill="#000000"'
    else:
        foreground = 'fill="#ffffff"'
    svg = re.sub(re.escape(foreground), f'fill="{text}"', svg, flags=re.IGNORECASE)
    return re.sub(re.escape(background), "transparent", svg, count=1, flags=re.IGNORECASE)


def make_scannable(
    background_color: str,
    text_color: str,
    album_id: str,
    services: AssetServices,
    size: int = 640,
    scale: int = 3,
) -> Image.Image:
    if not album_id:
        raise ValueError("Scan code needs an album id.")
    svg = services.fetch_text(scannable_url(background_color, album_id, size))
    svg = recolor_scannable(svg, background_color, text_color)
    return services.rasterize_svg(svg, size, size, scale)
