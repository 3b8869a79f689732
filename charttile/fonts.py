from __future__ import annotations

import logging
import os
import shutil
import zipfile
from dataclasses import dataclass, field
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import FrozenSet, Optional

from fontTools.ttLib import TTFont as FTFont
from fontTools.ttLib import TTLibError
from PIL import ImageFont

from .errors import FontLoadFailure

logger = logging.getLogger(__name__)

HERE = Path(__file__).resolve().parent

# Faces shipped with the package
EMBEDDED_DIR = HERE / "fonts"
EMBEDDED_REGULAR = "DejaVuSans.ttf"
EMBEDDED_BOLD = "DejaVuSans-Bold.ttf"

# ============================================================
# Inter override: a directory holding the faces, or an Inter.zip inside it
# ============================================================
FONT_DIR_ENV = "CHARTTILE_FONT_DIR"

REGULAR_FONT = "Inter-Regular.ttf"
BOLD_FONT = "Inter-Bold.ttf"

INTER_STATIC_MAP = {
    REGULAR_FONT: "Inter_18pt-Regular.ttf",
    BOLD_FONT: "Inter_18pt-Bold.ttf",
}


def extract_inter_fonts(font_dir: Path) -> None:
    """Fill in missing Inter faces from ``font_dir/Inter.zip`` (static/ folder)."""
    inter_zip = font_dir / "Inter.zip"
    missing = [name for name in INTER_STATIC_MAP if not (font_dir / name).exists()]
    if not missing or not inter_zip.exists():
        return

    try:
        with zipfile.ZipFile(inter_zip, "r") as z:
            members = z.namelist()
            for out_name in missing:
                zip_name = INTER_STATIC_MAP[out_name]
                hits = [m for m in members if m == f"static/{zip_name}" or m.endswith(f"/static/{zip_name}")]
                if not hits:
                    continue
                with z.open(hits[0]) as src, open(font_dir / out_name, "wb") as dst:
                    shutil.copyfileobj(src, dst)
    except (OSError, zipfile.BadZipFile) as exc:
        raise FontLoadFailure(f"Could not extract fonts from {inter_zip}: {exc}") from exc


def _codepoints(data: bytes, label: str) -> FrozenSet[int]:
    try:
        cmap = FTFont(BytesIO(data), lazy=True).getBestCmap()
    except (TTLibError, KeyError, ValueError, OSError) as exc:
        raise FontLoadFailure(f"{label} is not a usable TrueType font: {exc}") from exc
    if not cmap:
        raise FontLoadFailure(f"{label} has no Unicode character map.")
    return frozenset(cmap)


@lru_cache(maxsize=256)
def _face(data: bytes, size: float) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(BytesIO(data), size)


@dataclass(frozen=True)
class FontFamily:
    """Regular and bold font data, parsed once and shared read-only."""

    regular: bytes = field(repr=False)
    bold: bytes = field(repr=False)
    codepoints: FrozenSet[int] = field(repr=False)

    @classmethod
    def from_bytes(cls, regular: bytes, bold: bytes) -> "FontFamily":
        covered = _codepoints(regular, "Regular face") & _codepoints(bold, "Bold face")
        family = cls(regular=regular, bold=bold, codepoints=covered)
        # make sure FreeType accepts both faces before any tile is drawn
        for weight in (False, True):
            try:
                family.face(12.0, bold=weight)
            except OSError as exc:
                raise FontLoadFailure(f"FreeType rejected font data: {exc}") from exc
        return family

    def face(self, size: float, bold: bool = False) -> ImageFont.FreeTypeFont:
        return _face(self.bold if bold else self.regular, float(size))

    def covers(self, text: str) -> bool:
        return all(ord(ch) in self.codepoints for ch in text if not ch.isspace())


def _read_family(font_dir: Path, regular_name: str, bold_name: str) -> FontFamily:
    try:
        regular = (font_dir / regular_name).read_bytes()
        bold = (font_dir / bold_name).read_bytes()
    except OSError as exc:
        raise FontLoadFailure(f"Could not read fonts from {font_dir}: {exc}") from exc
    logger.debug("Loaded %s and %s from %s", regular_name, bold_name, font_dir)
    return FontFamily.from_bytes(regular, bold)


def read_font_family(font_dir: Path) -> FontFamily:
    """Inter Regular and Bold from ``font_dir``, extracting them from Inter.zip if needed."""
    extract_inter_fonts(font_dir)
    missing = [name for name in INTER_STATIC_MAP if not (font_dir / name).exists()]
    if missing:
        raise FontLoadFailure(
            f"Inter fonts not found in {font_dir}.\n\n"
            "Do one of:\n"
            f"  1) Copy in {REGULAR_FONT} and {BOLD_FONT}\n"
            "  2) Or put Inter.zip there; these are read from its static/ folder:\n"
            + "\n".join(f"     - {INTER_STATIC_MAP[n]}" for n in missing)
        )
    return _read_family(font_dir, REGULAR_FONT, BOLD_FONT)


def embedded_font_family() -> FontFamily:
    return _read_family(EMBEDDED_DIR, EMBEDDED_REGULAR, EMBEDDED_BOLD)


@lru_cache(maxsize=None)
def _default_family() -> FontFamily:
    override = os.environ.get(FONT_DIR_ENV)
    if override:
        return read_font_family(Path(override))
    return embedded_font_family()


def load_fonts(font_dir: Optional[Path] = None) -> FontFamily:
    """
    The shared font family, loaded once per process.

    Uses the embedded faces unless ``font_dir`` (or CHARTTILE_FONT_DIR) names
    a directory of Inter fonts.
    """
    if font_dir is None:
        return _default_family()
    return read_font_family(Path(font_dir))
