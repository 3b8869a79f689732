"""Pytest fixtures shared across the charttile tests."""

from __future__ import annotations

import threading
from io import BytesIO
from typing import Dict, List, Optional, Tuple

import pytest
import requests
from PIL import Image, ImageFont

from charttile.fonts import FontFamily


@pytest.fixture(scope="session")
def font_bytes() -> bytes:
    """Return the TrueType data of Pillow's bundled default face."""

    font = ImageFont.load_default(size=16)
    data = getattr(font, "font_bytes", None)
    if not data:
        pytest.skip("Pillow was built without FreeType support")
    return data


@pytest.fixture(scope="session")
def fonts(font_bytes: bytes) -> FontFamily:
    """Return a FontFamily using the bundled face for both weights."""

    return FontFamily.from_bytes(font_bytes, font_bytes)


def make_png(size: Tuple[int, int] = (40, 40), color=(200, 30, 30)) -> bytes:
    out = BytesIO()
    Image.new("RGB", size, color).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def png_bytes():
    """Return the in-memory PNG factory."""

    return make_png


class FakeResponse:
    def __init__(self, url: str, status_code: int, content: bytes) -> None:
        self.url = url
        self.status_code = status_code
        self.content = content

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")


class FakeSession:
    """Stand-in for requests.Session serving canned responses and counting calls."""

    def __init__(self, routes: Optional[Dict[str, Tuple[int, bytes]]] = None, delay: float = 0.0) -> None:
        self.routes = routes or {}
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def get(self, url: str, timeout=None) -> FakeResponse:
        with self._lock:
            self.calls.append(url)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                threading.Event().wait(self.delay)
            if url not in self.routes:
                raise requests.ConnectionError(f"cannot reach {url}")
            status, content = self.routes[url]
            return FakeResponse(url, status, content)
        finally:
            with self._lock:
                self.in_flight -= 1

    def close(self) -> None:
        pass


@pytest.fixture
def fake_session():
    """Return the FakeSession class so tests can seed their own routes."""

    return FakeSession
