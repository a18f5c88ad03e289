from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from .generator import FORMATS, PosterGenerationError, PosterGenerator
from .model import PosterData

logger = logging.getLogger(__name__)

SUFFIXES = {"pdf": ".pdf", "png": ".png", "jpeg": ".jpg"}


def slug(s: str) -> str:
    s = s.lower().strip()
    s = re.sub(r"[^a-z0-9]+", "-", s)
    return re.sub(r"-+", "-", s).strip("-") or "poster"


def load_poster(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Poster file not found: {path}")
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return raw


def default_output(data: PosterData, fmt: str) -> Path:
    name = f"{slug(data.artists_name)}-{slug(data.album_name)}{SUFFIXES[fmt]}"
    return Path.cwd() / "albumposter_out" / name


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="albumposter", description="Render an album poster from a JSON description.")
    ap.add_argument("poster", help="JSON file with the poster fields (camelCase or snake_case keys)")
    ap.add_argument("-o", "--output", help="Output file (default: albumposter_out/<artist>-<album>.<ext>)")
    ap.add_argument("-f", "--format", choices=FORMATS, default="pdf", help="Output document type")
    ap.add_argument("--scale", type=float, default=1.0, help="Raster page scale (png/jpeg only)")
    ap.add_argument("--font", help="Font URL, font file, or standard PDF font name (overrides customFont)")
    ap.add_argument("--write-back", action="store_true",
                    help="Store an auto-fitted title size in the poster file so it is not refitted")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    poster_path = Path(args.poster)
    try:
        raw = load_poster(poster_path)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.font:
        raw["customFont"] = args.font
    data = PosterData.from_dict(raw)

    fitted = []
    try:
        result = PosterGenerator().generate(
            data,
            fmt=args.format,
            scale=args.scale,
            on_title_size_adjust=lambda size, auto: fitted.append(size),
        )
    except PosterGenerationError as e:
        logger.error("%s", e)
        return 1

    out_path = Path(args.output) if args.output else default_output(data, args.format)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(result.document)

    if args.write_back and fitted:
        updated = dict(raw, **data.with_title_fit(result.title_fit).to_dict())
        with open(poster_path, "w", encoding="utf-8") as f:
            json.dump(updated, f, indent=2, ensure_ascii=False)
        logger.info("Saved title size %dpx to %s", fitted[0], poster_path)

    print("Wrote:", out_path)
    return 0
