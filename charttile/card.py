from __future__ import annotations

from typing import List, Optional, Tuple

from .canvas import Box, Canvas, fill_rounded_rect
from .fonts import FontFamily
from .geometry import ResolvedLayout
from .models import Entry
from .text import TextLine
from .tiles import Theme

FULL_STAR = "★"
HALF_STAR = "½"


def rating_glyphs(rating: Optional[int]) -> Optional[str]:
    """Half-star string for a 1..10 rating; None for anything else."""
    if rating is None or isinstance(rating, bool) or not 1 <= rating <= 10:
        return None
    full, half = divmod(rating, 2)
    return FULL_STAR * full + HALF_STAR * half


def rating_text(rating: Optional[int], fonts: FontFamily) -> Optional[str]:
    glyphs = rating_glyphs(rating)
    if glyphs is None or fonts.covers(glyphs):
        return glyphs
    return f"{rating / 2:g}/5"


def build_lines(entry: Entry, fonts: FontFamily, layout: ResolvedLayout) -> List[TextLine]:
    """Artist (bold), title, then the rating when there is one; top to bottom."""
    ceiling = layout.font_ceiling
    max_width = layout.text_max_width
    lines = [
        TextLine.fitted(fonts, entry.artist, ceiling, max_width, bold=True),
        TextLine.fitted(fonts, entry.title, ceiling, max_width),
    ]
    stars = rating_text(entry.rating, fonts)
    if stars:
        lines.append(TextLine.fitted(fonts, stars, ceiling, max_width))
    return lines


def card_box(lines: List[TextLine], layout: ResolvedLayout, origin: Tuple[int, int]) -> Box:
    x, y = origin
    tile = layout.tile_size
    inner = layout.inner_margin

    width = max((line.width for line in lines), default=0) + 2 * inner
    height = (
        sum(line.height for line in lines)
        + layout.line_spacing * max(0, len(lines) - 1)
        + 2 * inner
    )
    width = min(width, tile - 2 * layout.outer_margin)
    height = min(height, tile - 2 * layout.outer_margin)

    x0 = x + (tile - width) // 2
    y1 = y + tile - layout.outer_margin
    return x0, y1 - height, x0 + width, y1


def draw_card(
    canvas: Canvas,
    entry: Entry,
    theme: Theme,
    fonts: FontFamily,
    layout: ResolvedLayout,
    origin: Tuple[int, int],
) -> Box:
    lines = build_lines(entry, fonts, layout)
    box = card_box(lines, layout, origin)
    x0, y0, x1, y1 = box

    fill_rounded_rect(canvas, box, layout.corner_radius, theme.card)

    # bottom-up, so the last line sits just above the bottom margin
    cursor = y1 - layout.inner_margin
    for line in reversed(lines):
        cursor -= line.height
        if line.drawable:
            lx = x0 + (x1 - x0 - line.width) // 2
            canvas.draw_text((lx, cursor), line.content, fonts.face(line.size, bold=line.bold), theme.text)
        cursor -= layout.line_spacing
    return box
