from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .assets import AssetServices
from .backends import PdfBackend, RasterBackend, RenderBackend
from .composer import Composition, SceneComposer
from .fitting import TitleFitResult
from .fonts import load_pdf_font, load_raster_font_path
from .model import PosterData
from .template import DEFAULT_TEMPLATE, LayoutTemplate

logger = logging.getLogger(__name__)

FORMATS = ("pdf", "png", "jpeg")


class PosterGenerationError(RuntimeError):
    pass


@dataclass
class PosterResult:
    document: bytes
    media_type: str
    composition: Composition

    @property
    def title_fit(self) -> Optional[TitleFitResult]:
        return self.composition.title_fit


def make_backend(
    fmt: str,
    custom_font: Optional[str] = None,
    scale: float = 1.0,
    template: LayoutTemplate = DEFAULT_TEMPLATE,
) -> RenderBackend:
    fmt = fmt.lower()
    if fmt == "pdf":
        return PdfBackend(font_name=load_pdf_font(custom_font), template=template)
    if fmt in ("png", "jpeg", "jpg"):
        return RasterBackend(
            font_path=load_raster_font_path(custom_font),
            scale=scale,
            image_format="JPEG" if fmt in ("jpeg", "jpg") else "PNG",
            template=template,
        )
    raise ValueError(f"Unknown output format {fmt!r}; expected one of {', '.join(FORMATS)}")


class PosterGenerator:
    """
    Runs one poster generation per ``generate`` call.

    Every call takes a run token. A run that finishes after a newer one has
    started is superseded: its callbacks are not fired and ``generate``
    returns None, so a stale poster never replaces a fresh one.
    """

    def __init__(
        self,
        services: Optional[AssetServices] = None,
        template: LayoutTemplate = DEFAULT_TEMPLATE,
        backend_factory: Callable[..., RenderBackend] = make_backend,
    ):
        template.validate()
        self.services = services or AssetServices()
        self.template = template
        self.backend_factory = backend_factory
        self._lock = threading.Lock()
        self._latest = 0

    def _next_token(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._latest

    def generate(
        self,
        data: PosterData,
        fmt: str = "pdf",
        scale: float = 1.0,
        on_ready: Optional[Callable[[bytes], None]] = None,
        on_title_size_adjust: Optional[Callable[[int, bool], None]] = None,
    ) -> Optional[PosterResult]:
        token = self._next_token()
        try:
            backend = self.backend_factory(fmt, custom_font=data.custom_font, scale=scale, template=self.template)
            composer = SceneComposer(backend.text_width, backend.font_name, self.services, self.template)
            composition = composer.compose(data)
            document = backend.render(composition.operations)
        except PosterGenerationError:
            raise
        except Exception as e:
            raise PosterGenerationError(f"Poster generation failed: {e}") from e

        if not self.is_current(token):
            logger.info("Run %d superseded by a newer run; dropping its result", token)
            return None

        result = PosterResult(document=document, media_type=backend.media_type, composition=composition)
        fit = composition.title_fit
        if fit is not None and fit.auto_fitted and on_title_size_adjust:
            on_title_size_adjust(fit.size_px, True)
        if on_ready:
            on_ready(document)
        logger.info("Poster ready: %s, %d bytes", result.media_type, len(document))
        return result
