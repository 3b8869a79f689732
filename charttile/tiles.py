from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, ImageOps, ImageStat, UnidentifiedImageError

from .canvas import NEUTRAL_GRAY, RGBA, Canvas, WriteMode
from .errors import DecodeFailure

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

LIGHT_THRESHOLD = 128.0


# ============================================================
# Cover art
# ============================================================
def decode_cover(data: bytes) -> Image.Image:
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeFailure(f"Not a readable image: {exc}") from exc
    return img.convert("RGB")


def average_color(img: Image.Image) -> RGB:
    """Unweighted per-channel mean of R, G and B, truncated."""
    if img.mode != "RGB":
        img = img.convert("RGB")
    count = img.width * img.height
    sums = ImageStat.Stat(img).sum
    r, g, b = (int(s) // count for s in sums[:3])
    return r, g, b


def pick_filter(img: Image.Image, tile_size: int) -> Image.Resampling:
    # Lanczos rings when enlarging; Pillow's bicubic is Catmull-Rom
    if img.width < tile_size or img.height < tile_size:
        return Image.Resampling.BICUBIC
    return Image.Resampling.LANCZOS


def resize_to_fill(img: Image.Image, tile_size: int) -> Image.Image:
    return ImageOps.fit(img, (tile_size, tile_size), method=pick_filter(img, tile_size))


def place_cover(
    canvas: Canvas,
    data: Optional[bytes],
    origin: Tuple[int, int],
    tile_size: int,
) -> Optional[RGB]:
    """
    Overwrite one tile with its cover and return the cover's average color.

    Missing or undecodable covers leave a neutral gray tile and return None.
    """
    x, y = origin
    if data is not None:
        try:
            img = decode_cover(data)
        except DecodeFailure as exc:
            logger.warning("Tile at %s: %s; using fallback fill", origin, exc)
        else:
            avg = average_color(img)
            canvas.paste(resize_to_fill(img, tile_size), origin)
            return avg

    canvas.fill_rect((x, y, x + tile_size, y + tile_size), NEUTRAL_GRAY, WriteMode.OVERWRITE)
    return None


# ============================================================
# Theme
# ============================================================
@dataclass(frozen=True)
class Theme:
    text: RGBA
    card: RGBA


LIGHT_THEME = Theme(text=(0, 0, 0, 255), card=(255, 255, 255, 128))
DARK_THEME = Theme(text=(255, 255, 255, 255), card=(0, 0, 0, 128))


def luminance(color: RGB) -> float:
    """BT.709 relative luminance on the 0..255 scale."""
    r, g, b = color[:3]
    # integer weights keep grays exact: (128, 128, 128) -> 128.0
    return (2126 * r + 7152 * g + 722 * b) / 10000


def is_light(color: RGB) -> bool:
    return luminance(color) >= LIGHT_THRESHOLD


def theme_for(avg: Optional[RGB]) -> Theme:
    """Dark text on a light card over light covers, light on dark otherwise."""
    if avg is not None and is_light(avg):
        return LIGHT_THEME
    return DARK_THEME
