from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple


def clean_text(s: str) -> str:
    """Collapse whitespace (incl newlines) to single spaces."""
    return " ".join((s or "").split())


@dataclass(frozen=True)
class Entry:
    title: str
    artist: str
    image_url: Optional[str] = None
    rating: Optional[int] = None


@dataclass(frozen=True)
class ChartRequest:
    """A validated chart request.

    ``entries`` are in raster order (row-major). ``rows``, ``cols`` and
    ``cover_size`` are optional; missing grid dimensions are derived from the
    entry count.
    """

    entries: Tuple[Entry, ...]
    rows: Optional[int] = None
    cols: Optional[int] = None
    cover_size: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))
        if not self.entries:
            raise ValueError("A chart needs at least one entry.")
        for name in ("rows", "cols", "cover_size"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")


def _optional_int(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key!r} must be an integer, got {value!r}")
    return value


def entry_from_dict(data: Mapping[str, Any]) -> Entry:
    if not isinstance(data, Mapping):
        raise ValueError(f"Each entry must be an object, got {type(data).__name__}")
    image_url = data.get("imageUrl")
    if image_url is not None and not isinstance(image_url, str):
        raise ValueError(f"'imageUrl' must be a string, got {image_url!r}")
    return Entry(
        title=clean_text(str(data.get("title", ""))),
        artist=clean_text(str(data.get("artist", ""))),
        image_url=(image_url or "").strip() or None,
        rating=_optional_int(data, "rating"),
    )


def request_from_dict(data: Mapping[str, Any]) -> ChartRequest:
    """
    Build a ChartRequest from the camelCase wire shape:

        {"entries": [{"imageUrl": ..., "title": ..., "artist": ..., "rating": 7}],
         "rows": 2, "cols": 3, "coverSize": 300}

    Bounds checks beyond "at least one entry" and "positive sizes" belong to
    whoever accepted the request.
    """
    if not isinstance(data, Mapping):
        raise ValueError("Request body must be a JSON object.")
    entries = data.get("entries")
    if not isinstance(entries, list):
        raise ValueError("'entries' must be a list.")
    return ChartRequest(
        entries=tuple(entry_from_dict(e) for e in entries),
        rows=_optional_int(data, "rows"),
        cols=_optional_int(data, "cols"),
        cover_size=_optional_int(data, "coverSize"),
    )
