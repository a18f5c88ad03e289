import pytest

from albumposter.fitting import TitleFitResult
from albumposter.model import PosterData, coerce_int


@pytest.mark.parametrize("raw,expected", [
    (None, 0), ("", 0), ("abc", 0), ("12px", 12), (" 40 ", 40), (-5, 0), ("-3", 0), (7.9, 7), (True, 0),
])
def test_margins_are_coerced(raw, expected):
    data = PosterData(margin_side=raw, margin_top=raw, margin_cover=raw, margin_background=raw)
    assert data.margin_side == expected
    assert data.margin_top == expected
    assert data.margin_cover == expected
    assert data.margin_background == expected


def test_sizes_default_to_none():
    data = PosterData(title_size="", artists_size="0", tracks_size="48")
    assert data.title_size is None
    assert data.artists_size is None
    assert data.tracks_size == 48


def test_coerce_int():
    assert coerce_int("230") == 230
    assert coerce_int("x1") is None


def test_from_dict_accepts_camel_and_snake_case():
    data = PosterData.from_dict({
        "albumName": "Blue",
        "artists_name": "Joni Mitchell",
        "marginSide": "100",
        "showTracklist": True,
        "albumCover": "https://img.example/blue.jpg",
        "somethingElse": 1,
    })
    assert data.album_name == "Blue"
    assert data.artists_name == "Joni Mitchell"
    assert data.margin_side == 100
    assert data.show_tracklist is True
    assert data.cover_url == "https://img.example/blue.jpg"


def test_to_dict_round_trips():
    data = PosterData(album_name="Blue", margin_top=20, title_size=180, initial_title_size_set=True)
    again = PosterData.from_dict(data.to_dict())
    assert again == data
    assert data.to_dict()["albumName"] == "Blue"


def test_cover_url_follows_uncompressed_flag():
    data = PosterData(album_cover="small.jpg", uncompressed_album_cover="big.png")
    assert data.cover_url == "small.jpg"
    assert PosterData(album_cover="small.jpg", uncompressed_album_cover="big.png", use_uncompressed=True).cover_url == "big.png"


def test_tracks_split_on_newlines():
    assert PosterData(tracklist="One\r\nTwo\nThree").tracks == ["One", "Two", "Three"]
    assert PosterData().tracks == []


def test_with_title_fit_marks_size_as_set():
    data = PosterData(album_name="Blue")
    assert data.needs_title_fit
    fitted = data.with_title_fit(TitleFitResult(size_px=180, auto_fitted=True, iterations=50))
    assert fitted.title_size == 180
    assert fitted.initial_title_size_set
    assert not fitted.needs_title_fit
    # input untouched
    assert data.title_size is None


def test_with_title_fit_ignores_fixed_results():
    data = PosterData(title_size=150, user_adjusted_title_size=True)
    assert data.with_title_fit(TitleFitResult(size_px=150, auto_fitted=False)) is data
