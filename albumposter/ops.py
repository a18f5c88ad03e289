"""Backend-agnostic draw operations in canonical pixel space (origin top-left)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from PIL import Image


@dataclass(frozen=True)
class FilledRect:
    x: float
    y: float
    w: float
    h: float
    color: str
    opacity: Optional[float] = None


@dataclass(frozen=True)
class TextRun:
    # y is the top of the em box; the baseline sits at y + size_px
    text: str
    x: float
    y: float
    size_px: float
    font: str
    color: str
    opacity: Optional[float] = None

    @property
    def baseline(self) -> float:
        return self.y + self.size_px


@dataclass(frozen=True)
class ImageOp:
    image: Image.Image
    x: float
    y: float
    w: float
    h: float
    opacity: Optional[float] = None
    kind: str = "image"


DrawOperation = Union[FilledRect, TextRun, ImageOp]
