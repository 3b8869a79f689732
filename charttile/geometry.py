from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .models import ChartRequest

DEFAULT_COVER_SIZE = 300

# Proportions of the tile size. Integer values are truncated.
OUTER_MARGIN_RATIO = 0.025
INNER_MARGIN_RATIO = 0.025
CORNER_RADIUS_RATIO = 0.02
LINE_SPACING_RATIO = 0.01
# 16px text on a 300px tile
FONT_CEILING_PX = 16
FONT_CEILING_TILE = 300


def optimal_square(num_items: int) -> Tuple[int, int]:
    """Smallest near-square (rows, cols) with rows * cols >= num_items."""
    rows = math.isqrt(num_items)
    cols = rows

    while rows * cols < num_items:
        if cols <= rows:
            cols += 1
        else:
            rows += 1

    return rows, cols


def resolve_grid(rows: Optional[int], cols: Optional[int], count: int) -> Tuple[int, int]:
    if rows and cols:
        return rows, cols
    if rows:
        return rows, math.ceil(count / rows)
    if cols:
        return math.ceil(count / cols), cols
    return optimal_square(count)


@dataclass(frozen=True)
class ResolvedLayout:
    rows: int
    cols: int
    tile_size: int

    @property
    def canvas_width(self) -> int:
        return self.cols * self.tile_size

    @property
    def canvas_height(self) -> int:
        return self.rows * self.tile_size

    @property
    def cells(self) -> int:
        return self.rows * self.cols

    @property
    def outer_margin(self) -> int:
        return int(self.tile_size * OUTER_MARGIN_RATIO)

    @property
    def inner_margin(self) -> int:
        return int(self.tile_size * INNER_MARGIN_RATIO)

    @property
    def corner_radius(self) -> int:
        return int(self.tile_size * CORNER_RADIUS_RATIO)

    @property
    def line_spacing(self) -> int:
        return int(self.tile_size * LINE_SPACING_RATIO)

    @property
    def font_ceiling(self) -> float:
        return self.tile_size * FONT_CEILING_PX / FONT_CEILING_TILE

    @property
    def text_max_width(self) -> int:
        """Widest a text line may be so its card stays inside the tile."""
        return self.tile_size - 2 * self.outer_margin - 2 * self.inner_margin

    def tile_origin(self, index: int) -> Tuple[int, int]:
        """Top-left pixel of the index-th cell in row-major order."""
        return (index % self.cols) * self.tile_size, (index // self.cols) * self.tile_size


def resolve_layout(request: ChartRequest) -> ResolvedLayout:
    rows, cols = resolve_grid(request.rows, request.cols, len(request.entries))
    return ResolvedLayout(
        rows=rows,
        cols=cols,
        tile_size=request.cover_size or DEFAULT_COVER_SIZE,
    )


def displayed_count(request: ChartRequest, layout: ResolvedLayout) -> int:
    return min(len(request.entries), layout.cells)
