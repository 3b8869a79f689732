from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from .fonts import FontFamily

COARSE_STEP = 1.0
FINE_STEP = 0.1
# FreeType needs at least one pixel per em; smaller sizes are measured by scaling
MIN_FACE_SIZE = 1.0


def text_size(fonts: FontFamily, text: str, size: float, bold: bool = False) -> Tuple[int, int]:
    """Ink-box (width, height) of ``text`` at ``size``."""
    if size < MIN_FACE_SIZE:
        width, height = text_size(fonts, text, MIN_FACE_SIZE, bold=bold)
        return int(width * size), int(height * size)
    left, top, right, bottom = fonts.face(size, bold=bold).getbbox(text)
    return right - left, bottom - top


def fit_font_size(
    fonts: FontFamily,
    text: str,
    ceiling: float,
    max_width: float,
    bold: bool = False,
) -> Tuple[float, Tuple[int, int]]:
    """
    Largest size at or below ``ceiling`` whose rendered width fits ``max_width``.

    Walks down in whole steps while above 1.0, then in tenths. Returns
    ``(0, (0, 0))`` when nothing fits.
    """
    size = math.floor(ceiling * 10 + 1e-9) / 10
    while size > 0:
        width, height = text_size(fonts, text, size, bold=bold)
        if width <= max_width:
            return size, (width, height)
        step = COARSE_STEP if size > 1.0 else FINE_STEP
        # keep to one decimal so repeated steps never drift off the grid
        size = round(size - step, 1)
    return 0, (0, 0)


@dataclass
class TextLine:
    content: str
    bold: bool = False
    size: float = 0
    width: int = 0
    height: int = 0

    @classmethod
    def fitted(cls, fonts: FontFamily, content: str, ceiling: float, max_width: float, bold: bool = False) -> "TextLine":
        size, (width, height) = fit_font_size(fonts, content, ceiling, max_width, bold=bold)
        return cls(content=content, bold=bold, size=size, width=width, height=height)

    @property
    def drawable(self) -> bool:
        return self.size >= MIN_FACE_SIZE and bool(self.content)
