from albumposter.gradient import fade_height, gradient_svg, make_fade
from albumposter.model import PosterData


def test_gradient_svg_stops():
    svg = gradient_svg(2480, 3000, "#1A2B3C")
    assert 'width="2480"' in svg and 'height="3000"' in svg
    assert '<stop offset="0.5" stop-color="#1a2b3c" stop-opacity="0"/>' in svg
    assert '<stop offset="0.8" stop-color="#1a2b3c" stop-opacity="1"/>' in svg
    assert 'x1="0" x2="0" y1="0" y2="1"' in svg


def test_fade_geometry(assets):
    data = PosterData(background_color="#102030", margin_cover=40, margin_background=100, use_fade=True)
    op = make_fade(data, assets.rasterize_svg)

    assert assets.rasterized == [(2400, 2900, 2)]
    assert fade_height(data) == 2900
    assert op.kind == "fade"
    assert (op.x, op.y, op.w, op.h) == (0, 500, 2480, 2400)
    assert op.opacity is None


def test_no_fade_when_background_margin_leaves_no_room(assets):
    data = PosterData(margin_background=2600, use_fade=True)
    assert make_fade(data, assets.rasterize_svg) is None
    assert assets.rasterized == []
