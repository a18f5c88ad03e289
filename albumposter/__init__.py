"""Album poster layout engine with PDF and raster backends."""

from .composer import Composition, SceneComposer, compose_poster
from .generator import PosterGenerationError, PosterGenerator, PosterResult
from .model import PosterData
from .template import DEFAULT_TEMPLATE, LayoutTemplate

__version__ = "0.1.0"

__all__ = [
    "Composition",
    "DEFAULT_TEMPLATE",
    "LayoutTemplate",
    "PosterData",
    "PosterGenerationError",
    "PosterGenerator",
    "PosterResult",
    "SceneComposer",
    "compose_poster",
]
