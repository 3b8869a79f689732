from __future__ import annotations


class ChartError(Exception):
    """Base class for every failure raised while building a chart."""


class FetchFailure(ChartError):
    """A cover URL could not be retrieved (network error or non-2xx)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class DecodeFailure(ChartError):
    """Fetched bytes are not a readable image."""


class FontLoadFailure(ChartError):
    """Font assets are missing or unreadable. No text can be drawn."""


class EncodeFailure(ChartError):
    """The finished canvas could not be serialized."""
