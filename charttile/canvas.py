from __future__ import annotations

import math
from enum import Enum
from typing import Tuple

from PIL import Image, ImageDraw, ImageFont

RGBA = Tuple[int, int, int, int]
Box = Tuple[int, int, int, int]  # x0, y0, x1, y1 (exclusive)

NEUTRAL_GRAY: RGBA = (128, 128, 128, 255)


class WriteMode(Enum):
    OVERWRITE = "overwrite"
    BLEND = "blend"


def blend_over(dst: RGBA, src: RGBA, coverage: float = 1.0) -> RGBA:
    """Source-over composite of ``src`` (alpha scaled by coverage) onto ``dst``."""
    sa = src[3] / 255.0 * coverage
    if sa <= 0.0:
        return dst
    da = dst[3] / 255.0
    out_a = sa + da * (1.0 - sa)
    if out_a <= 0.0:
        return (0, 0, 0, 0)
    channels = tuple(
        int(round((s * sa + d * da * (1.0 - sa)) / out_a))
        for s, d in zip(src[:3], dst[:3])
    )
    return channels + (int(round(out_a * 255)),)


class Canvas:
    """
    The one RGBA pixel buffer a chart is drawn into.

    Every write picks a mode: OVERWRITE replaces destination pixels outright
    (cover art, fallback fills), BLEND composites source-over onto whatever is
    already there (card backdrops, text).
    """

    def __init__(self, width: int, height: int, background: RGBA = NEUTRAL_GRAY) -> None:
        self.image = Image.new("RGBA", (width, height), background)
        self._pixels = self.image.load()

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def _clip(self, box: Box) -> Box:
        x0, y0, x1, y1 = box
        return max(0, x0), max(0, y0), min(self.width, x1), min(self.height, y1)

    def paste(self, img: Image.Image, origin: Tuple[int, int]) -> None:
        """Overwrite a region with ``img`` (no blending)."""
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        self.image.paste(img, origin)

    def fill_rect(self, box: Box, color: RGBA, mode: WriteMode = WriteMode.OVERWRITE) -> None:
        x0, y0, x1, y1 = self._clip(box)
        if x1 <= x0 or y1 <= y0:
            return
        if mode is WriteMode.OVERWRITE:
            self.image.paste(color, (x0, y0, x1, y1))
        else:
            layer = Image.new("RGBA", (x1 - x0, y1 - y0), color)
            self.image.alpha_composite(layer, dest=(x0, y0))

    def get_pixel(self, x: int, y: int) -> RGBA:
        return self._pixels[x, y]

    def put_pixel(
        self,
        x: int,
        y: int,
        color: RGBA,
        mode: WriteMode = WriteMode.OVERWRITE,
        coverage: float = 1.0,
    ) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return
        if mode is WriteMode.OVERWRITE:
            self._pixels[x, y] = color
        else:
            self._pixels[x, y] = blend_over(self._pixels[x, y], color, coverage)

    def draw_text(self, xy: Tuple[int, int], text: str, font: ImageFont.FreeTypeFont, color: RGBA) -> None:
        """Blend ``text`` so the top-left of its ink box lands on ``xy``."""
        left, top, _, _ = font.getbbox(text)
        draw = ImageDraw.Draw(self.image, "RGBA")
        draw.text((xy[0] - left, xy[1] - top), text, font=font, fill=color)


# ============================================================
# Rounded rectangles
# ============================================================
def corner_coverage(distance: float, radius: float) -> float:
    """
    Fraction of a pixel covered by a circle of ``radius``, given the distance
    from the circle center to the pixel center. Half a pixel either side of
    the boundary is the anti-aliased ramp.
    """
    if distance > radius + 1:
        return 0.0
    return min(1.0, max(0.0, radius + 0.5 - distance))


def fill_rounded_rect(canvas: Canvas, box: Box, radius: int, color: RGBA) -> None:
    """Blend a filled rectangle with anti-aliased quarter-circle corners."""
    x0, y0, x1, y1 = box
    w, h = x1 - x0, y1 - y0
    if w <= 0 or h <= 0:
        return
    r = max(0, min(radius, w // 2, h // 2))

    # straight-edged parts: middle band, then the strips between the corners
    canvas.fill_rect((x0, y0 + r, x1, y1 - r), color, WriteMode.BLEND)
    if r == 0:
        return
    canvas.fill_rect((x0 + r, y0, x1 - r, y0 + r), color, WriteMode.BLEND)
    canvas.fill_rect((x0 + r, y1 - r, x1 - r, y1), color, WriteMode.BLEND)

    # corner squares, each with the circle center on its inner corner point
    corners = (
        (x0, y0, x0 + r, y0 + r),
        (x1 - r, y0, x1 - r, y0 + r),
        (x0, y1 - r, x0 + r, y1 - r),
        (x1 - r, y1 - r, x1 - r, y1 - r),
    )
    for px0, py0, cx, cy in corners:
        for py in range(py0, py0 + r):
            for px in range(px0, px0 + r):
                d = math.hypot(px + 0.5 - cx, py + 0.5 - cy)
                coverage = corner_coverage(d, r)
                if coverage > 0.0:
                    canvas.put_pixel(px, py, color, WriteMode.BLEND, coverage)
