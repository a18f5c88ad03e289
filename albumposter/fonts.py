"""Custom font resolution: download, WOFF -> TTF, register, fall back."""

from __future__ import annotations

import hashlib
import logging
import os
import re
import sys
import tempfile
from pathlib import Path
from typing import Dict, Optional, Tuple

import requests
from fontTools.ttLib import TTFont as FTFont
from fontTools.ttLib import TTLibError
from PIL import ImageFont
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont

from .assets import fetch_bytes, is_remote

logger = logging.getLogger(__name__)

FONT_DIR = Path(os.environ.get("ALBUMPOSTER_FONT_DIR") or Path(tempfile.gettempdir()) / "albumposter-fonts")
FONT_FILE_RE = re.compile(r"\.(ttf|otf|woff2?)$", re.IGNORECASE)

DEFAULT_PDF_FONT = "Helvetica-Bold"

FONT_ERRORS = (OSError, ValueError, requests.RequestException, TTFError, TTLibError)


def is_font_reference(custom_font: Optional[str]) -> bool:
    """True for a URL or a font file path, False for a bare family name."""
    if not custom_font or not isinstance(custom_font, str):
        return False
    return is_remote(custom_font) or bool(FONT_FILE_RE.search(custom_font))


def to_truetype(src: Path, dst: Path) -> Path:
    """Strip WOFF/WOFF2 compression so ReportLab and Pillow can read the font."""
    font = FTFont(str(src))
    font.flavor = None
    font.save(str(dst))
    return dst


def fetch_font_file(ref: str) -> Path:
    if not is_remote(ref):
        path = Path(ref).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Font file not found: {ref}")
        if path.suffix.lower() in (".woff", ".woff2"):
            FONT_DIR.mkdir(parents=True, exist_ok=True)
            return to_truetype(path, FONT_DIR / f"{path.stem}.ttf")
        return path

    FONT_DIR.mkdir(parents=True, exist_ok=True)
    digest = hashlib.sha1(ref.encode("utf-8")).hexdigest()[:16]
    m = FONT_FILE_RE.search(ref.split("?", 1)[0])
    suffix = m.group(0).lower() if m else ".ttf"
    ttf_path = FONT_DIR / f"{digest}.ttf"
    if ttf_path.exists():
        return ttf_path

    raw_path = FONT_DIR / f"{digest}{suffix}"
    raw_path.write_bytes(fetch_bytes(ref))
    if suffix in (".woff", ".woff2"):
        return to_truetype(raw_path, ttf_path)
    if suffix == ".ttf":
        return raw_path
    # .otf or unknown: re-save as sfnt so the name ends in .ttf
    return to_truetype(raw_path, ttf_path)


# ============================================================
# ReportLab
# ============================================================
def register_pdf_font(path: Path) -> str:
    name = f"Poster-{path.stem}"
    if name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(name, str(path)))
    return name


def load_pdf_font(custom_font: Optional[str]) -> str:
    """Registered ReportLab font name; Helvetica-Bold when anything goes wrong."""
    if custom_font and custom_font in pdfmetrics.standardFonts:
        return custom_font
    if not is_font_reference(custom_font):
        return DEFAULT_PDF_FONT
    try:
        return register_pdf_font(fetch_font_file(custom_font))
    except FONT_ERRORS as e:
        logger.warning("Custom font %r unusable, falling back to %s: %s", custom_font, DEFAULT_PDF_FONT, e)
        return DEFAULT_PDF_FONT


# ============================================================
# Pillow
# ============================================================
def _find_fallback() -> str:
    if sys.platform == "win32":
        candidates = ["C:/Windows/Fonts/arialbd.ttf"]
    elif sys.platform == "darwin":
        candidates = ["/System/Library/Fonts/Helvetica.ttc", "/Library/Fonts/Arial Bold.ttf"]
    else:
        candidates = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
            "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        ]
    for path in candidates:
        if os.path.exists(path):
            return path
    return ""


def load_raster_font_path(custom_font: Optional[str]) -> str:
    """TrueType path for Pillow, or "" to use Pillow's built-in font."""
    if is_font_reference(custom_font):
        try:
            path = fetch_font_file(custom_font)
            ImageFont.truetype(str(path), 12)
            return str(path)
        except FONT_ERRORS as e:
            logger.warning("Custom font %r unusable, using fallback: %s", custom_font, e)
    return _find_fallback()


_font_cache: Dict[Tuple[str, int], ImageFont.ImageFont] = {}


def get_raster_font(path: str, size: int):
    key = (path, size)
    if key not in _font_cache:
        if path and os.path.exists(path):
            _font_cache[key] = ImageFont.truetype(path, size)
        else:
            _font_cache[key] = ImageFont.load_default(size)
    return _font_cache[key]
