from __future__ import annotations

from typing import List, Tuple

import pytest
import requests
from PIL import Image

from albumposter.assets import AssetServices

SCANNABLE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="640" height="160">'
    '<rect x="0" y="0" width="640" height="160" fill="#ffffff"/>'
    '<rect x="60" y="60" width="10" height="40" fill="#000000"/>'
    "</svg>"
)


def fake_measure(text: str, size_pt: float) -> float:
    """Every glyph is half an em wide."""
    return len(text) * size_pt * 0.5


class FakeAssets:
    def __init__(self, cover: bool = True, scannable_svg: str | None = SCANNABLE_SVG):
        self.cover = cover
        self.scannable_svg = scannable_svg
        self.fetched: List[str] = []
        self.rasterized: List[Tuple[int, int, int]] = []

    def fetch_image(self, url: str) -> Image.Image:
        self.fetched.append(url)
        if not self.cover:
            raise requests.ConnectionError("cover offline")
        return Image.new("RGB", (40, 30), (200, 10, 10))

    def fetch_text(self, url: str) -> str:
        self.fetched.append(url)
        if self.scannable_svg is None:
            raise requests.ConnectionError("scannables offline")
        return self.scannable_svg

    def rasterize_svg(self, svg: str, width: int, height: int, scale: int = 3) -> Image.Image:
        self.rasterized.append((width, height, scale))
        return Image.new("RGBA", (max(1, width // 20), max(1, height // 20)), (0, 0, 0, 128))

    def services(self) -> AssetServices:
        return AssetServices(
            fetch_image=self.fetch_image,
            fetch_text=self.fetch_text,
            rasterize_svg=self.rasterize_svg,
        )


@pytest.fixture
def assets() -> FakeAssets:
    return FakeAssets()


@pytest.fixture
def offline_assets() -> FakeAssets:
    return FakeAssets(cover=False, scannable_svg=None)
