from __future__ import annotations

import logging
from io import BytesIO
from typing import Dict, Optional

import requests
from PIL import Image

from .canvas import Canvas
from .card import draw_card
from .errors import EncodeFailure
from .fetch import fetch_images
from .fonts import FontFamily, load_fonts
from .geometry import displayed_count, resolve_layout
from .models import ChartRequest
from .tiles import place_cover, theme_for

logger = logging.getLogger(__name__)

FORMATS = ("PNG", "JPEG")


def render_chart(
    request: ChartRequest,
    fonts: Optional[FontFamily] = None,
    session: Optional[requests.Session] = None,
    images: Optional[Dict[str, bytes]] = None,
) -> Image.Image:
    """
    Draw the whole chart and return the RGBA canvas.

    Covers are fetched up front (unless ``images`` is given); tiles are then
    drawn one at a time in row-major order.
    """
    if fonts is None:
        fonts = load_fonts()

    layout = resolve_layout(request)
    shown = request.entries[: displayed_count(request, layout)]
    logger.info(
        "Rendering %d entries on a %dx%d grid of %dpx tiles",
        len(shown), layout.rows, layout.cols, layout.tile_size,
    )

    if images is None:
        images = fetch_images(shown, session=session)

    canvas = Canvas(layout.canvas_width, layout.canvas_height)
    for i, entry in enumerate(shown):
        origin = layout.tile_origin(i)
        data = images.get(entry.image_url.strip()) if entry.image_url else None
        avg = place_cover(canvas, data, origin, layout.tile_size)
        draw_card(canvas, entry, theme_for(avg), fonts, layout, origin)

    return canvas.image


def encode_image(img: Image.Image, fmt: str = "PNG") -> bytes:
    fmt = fmt.upper()
    if fmt == "JPG":
        fmt = "JPEG"
    if fmt not in FORMATS:
        raise EncodeFailure(f"Unsupported output format {fmt!r}; expected one of {', '.join(FORMATS)}")

    if fmt == "JPEG":
        img = img.convert("RGB")

    out = BytesIO()
    try:
        img.save(out, format=fmt)
    except (OSError, ValueError) as exc:
        raise EncodeFailure(f"Could not encode chart as {fmt}: {exc}") from exc
    return out.getvalue()


def create_chart(
    request: ChartRequest,
    fonts: Optional[FontFamily] = None,
    session: Optional[requests.Session] = None,
    fmt: str = "PNG",
) -> bytes:
    """Render ``request`` and return the encoded image bytes."""
    return encode_image(render_chart(request, fonts=fonts, session=session), fmt)
