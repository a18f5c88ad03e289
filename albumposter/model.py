from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Optional

LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

MARGIN_FIELDS = ("margin_side", "margin_top", "margin_cover", "margin_background")
SIZE_FIELDS = ("title_size", "artists_size", "tracks_size")

# JSON poster files use the editor's camelCase keys.
CAMEL_KEYS = {
    "albumName": "album_name",
    "artistsName": "artists_name",
    "titleRelease": "title_release",
    "titleRuntime": "title_runtime",
    "runtime": "runtime",
    "releaseDate": "release_date",
    "albumID": "album_id",
    "tracklist": "tracklist",
    "marginSide": "margin_side",
    "marginTop": "margin_top",
    "marginCover": "margin_cover",
    "marginBackground": "margin_background",
    "backgroundColor": "background_color",
    "textColor": "text_color",
    "color1": "color1",
    "color2": "color2",
    "color3": "color3",
    "customFont": "custom_font",
    "useFade": "use_fade",
    "useWatermark": "use_watermark",
    "showTracklist": "show_tracklist",
    "useUncompressed": "use_uncompressed",
    "titleSize": "title_size",
    "artistsSize": "artists_size",
    "tracksSize": "tracks_size",
    "userAdjustedTitleSize": "user_adjusted_title_size",
    "initialTitleSizeSet": "initial_title_size_set",
    "albumCover": "album_cover",
    "uncompressedAlbumCover": "uncompressed_album_cover",
}


def coerce_int(value: Any) -> Optional[int]:
    """Parse a leading integer the way a form field would ("12px" -> 12)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    m = LEADING_INT_RE.match(str(value))
    return int(m.group(1)) if m else None


def coerce_margin(value: Any) -> int:
    n = coerce_int(value)
    return n if n and n > 0 else 0


def coerce_size(value: Any) -> Optional[int]:
    n = coerce_int(value)
    return n if n and n > 0 else None


@dataclass(frozen=True)
class PosterData:
    album_name: str = ""
    artists_name: str = ""
    title_release: str = ""
    title_runtime: str = ""
    runtime: str = ""
    release_date: str = ""
    album_id: str = ""
    tracklist: str = ""

    margin_side: int = 0
    margin_top: int = 0
    margin_cover: int = 0
    margin_background: int = 0

    background_color: str = "#ffffff"
    text_color: str = "#000000"
    color1: str = "#000000"
    color2: str = "#000000"
    color3: str = "#000000"
    custom_font: Optional[str] = None

    use_fade: bool = False
    use_watermark: bool = False
    show_tracklist: bool = False
    use_uncompressed: bool = False

    title_size: Optional[int] = None
    artists_size: Optional[int] = None
    tracks_size: Optional[int] = None
    user_adjusted_title_size: bool = False
    initial_title_size_set: bool = False

    album_cover: Optional[str] = None
    uncompressed_album_cover: Optional[str] = None

    def __post_init__(self) -> None:
        for name in MARGIN_FIELDS:
            object.__setattr__(self, name, coerce_margin(getattr(self, name)))
        for name in SIZE_FIELDS:
            object.__setattr__(self, name, coerce_size(getattr(self, name)))

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PosterData":
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in raw.items():
            name = CAMEL_KEYS.get(key, key)
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {camel: getattr(self, name) for camel, name in CAMEL_KEYS.items()}

    @property
    def cover_url(self) -> Optional[str]:
        return self.uncompressed_album_cover if self.use_uncompressed else self.album_cover

    @property
    def tracks(self) -> List[str]:
        if not self.tracklist:
            return []
        return [t.rstrip("\r") for t in self.tracklist.split("\n")]

    @property
    def needs_title_fit(self) -> bool:
        return not (self.user_adjusted_title_size or self.initial_title_size_set)

    def with_title_fit(self, result) -> "PosterData":
        """Copy carrying an auto-fitted title size; fitting won't run again."""
        if not result.auto_fitted:
            return self
        return replace(self, title_size=result.size_px, initial_title_size_set=True)
