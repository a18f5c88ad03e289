import pytest

from albumposter.backends import PdfBackend, RasterBackend
from albumposter.generator import PosterGenerationError, PosterGenerator, make_backend
from albumposter.model import PosterData

from .conftest import FakeAssets


def poster(**overrides):
    fields = dict(
        album_name="A Very Long Album Title",
        artists_name="Some Artist",
        margin_side=100,
        tracklist="\n".join(f"Track {i}" for i in range(1, 41)),
        show_tracklist=True,
    )
    fields.update(overrides)
    return PosterData(**fields)


def test_make_backend():
    assert isinstance(make_backend("pdf"), PdfBackend)
    raster = make_backend("png", scale=0.5)
    assert isinstance(raster, RasterBackend)
    assert raster.size == (1240, 1754)
    assert make_backend("jpeg", scale=0.1).media_type == "image/jpeg"
    with pytest.raises(ValueError):
        make_backend("tiff")


def test_generate_pdf_and_title_callback(assets):
    calls = []
    ready = []
    gen = PosterGenerator(services=assets.services())
    result = gen.generate(
        poster(),
        on_ready=ready.append,
        on_title_size_adjust=lambda size, auto: calls.append((size, auto)),
    )
    assert result.document.startswith(b"%PDF")
    assert ready == [result.document]
    assert len(calls) == 1
    size, auto = calls[0]
    assert auto is True
    assert 10 <= size < 230
    assert size == result.title_fit.size_px

    backend = PdfBackend()
    assert backend.text_width("A Very Long Album Title", size * 72 / 300) <= (2480 - 200) * 72 / 300


def test_no_callback_when_size_already_set(assets):
    calls = []
    gen = PosterGenerator(services=assets.services())
    gen.generate(
        poster(title_size=120, initial_title_size_set=True),
        on_title_size_adjust=lambda size, auto: calls.append(size),
    )
    assert calls == []


def test_write_back_prevents_refit(assets):
    gen = PosterGenerator(services=assets.services())
    data = poster()
    first = gen.generate(data)
    fitted = data.with_title_fit(first.title_fit)
    calls = []
    second = gen.generate(fitted, on_title_size_adjust=lambda size, auto: calls.append(size))
    assert calls == []
    assert second.title_fit.size_px == first.title_fit.size_px


def test_tracks_drawn_once(assets):
    result = PosterGenerator(services=assets.services()).generate(poster())
    names = [t.text for t in result.composition.texts if t.text.startswith("Track ")]
    assert len(names) == len(set(names))
    assert len(names) >= 8


def test_raster_generation(assets):
    result = PosterGenerator(services=assets.services()).generate(poster(), fmt="png", scale=0.05)
    assert result.media_type == "image/png"
    assert result.document.startswith(b"\x89PNG")


def test_failures_are_wrapped(assets):
    gen = PosterGenerator(services=assets.services())
    with pytest.raises(PosterGenerationError):
        gen.generate(poster(), fmt="tiff")
    with pytest.raises(PosterGenerationError):
        gen.generate(poster(color1="not-a-color"))


def test_superseded_run_is_dropped():
    assets = FakeAssets()
    gen = PosterGenerator(services=assets.services())
    inner_results = []
    ready = []
    fired = {"done": False}

    real_fetch = assets.fetch_image

    def fetch_and_restart(url):
        # a newer run starts while this one is still fetching its cover
        if not fired["done"]:
            fired["done"] = True
            inner_results.append(gen.generate(poster(album_name="Newer"), on_ready=ready.append))
        return real_fetch(url)

    services = assets.services()
    services.fetch_image = fetch_and_restart
    gen.services = services

    outer = gen.generate(poster(album_cover="https://img.example/a.jpg"), on_ready=ready.append)
    assert outer is None
    assert inner_results[0] is not None
    assert ready == [inner_results[0].document]


def test_scannable_rasterizer_error_does_not_fail_generation(assets):
    class CairoError(Exception):
        pass

    def rasterize(svg, w, h, scale=3):
        if w == 640:
            raise CairoError("cairo surface error")
        return assets.rasterize_svg(svg, w, h, scale)

    services = assets.services()
    services.rasterize_svg = rasterize
    result = PosterGenerator(services=services).generate(poster(album_id="1440857781"))
    assert result.document.startswith(b"%PDF")
    assert result.composition.of_kind("scannable") == []


def test_superseded_run_logs_its_token(caplog):
    assets = FakeAssets()
    gen = PosterGenerator(services=assets.services())
    real_fetch = assets.fetch_image

    def fetch_and_restart(url):
        gen._next_token()
        return real_fetch(url)

    services = assets.services()
    services.fetch_image = fetch_and_restart
    gen.services = services
    with caplog.at_level("INFO", logger="albumposter.generator"):
        assert gen.generate(poster(album_cover="https://img.example/a.jpg")) is None
    assert "Run 1 superseded" in caplog.text
