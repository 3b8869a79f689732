"""Concurrent, deduplicated cover fetching."""

from __future__ import annotations

import logging

from charttile.fetch import MAX_IN_FLIGHT, fetch_images, unique_image_urls
from charttile.models import Entry

A = "https://covers.example.com/a.png"
B = "https://covers.example.com/b.png"


def test_unique_image_urls_dedupes_in_first_seen_order() -> None:
    """Repeated and blank URLs collapse to one fetch list."""

    entries = [
        Entry(title="1", artist="x", image_url=B),
        Entry(title="2", artist="x"),
        Entry(title="3", artist="x", image_url=A),
        Entry(title="4", artist="x", image_url=B),
        Entry(title="5", artist="x", image_url="   "),
    ]

    assert unique_image_urls(entries) == [B, A]


def test_shared_url_is_fetched_once(fake_session, png_bytes) -> None:
    """Two entries with the same imageUrl trigger exactly one request."""

    session = fake_session({A: (200, png_bytes())})
    entries = [Entry(title="1", artist="x", image_url=A), Entry(title="2", artist="y", image_url=A)]

    images = fetch_images(entries, session=session)

    assert session.calls == [A]
    assert set(images) == {A}


def test_entries_without_urls_fetch_nothing(fake_session) -> None:
    """No URLs means no requests at all."""

    session = fake_session()

    assert fetch_images([Entry(title="t", artist="a")], session=session) == {}
    assert session.calls == []


def test_failed_fetches_are_dropped(fake_session, png_bytes, caplog) -> None:
    """Non-2xx and connection errors are logged and left out of the result."""

    missing = "https://covers.example.com/missing.png"
    unreachable = "https://unreachable.example.com/c.png"
    session = fake_session({A: (200, png_bytes()), missing: (404, b"")})
    entries = [
        Entry(title="1", artist="x", image_url=A),
        Entry(title="2", artist="x", image_url=missing),
        Entry(title="3", artist="x", image_url=unreachable),
    ]

    with caplog.at_level(logging.WARNING, logger="charttile.fetch"):
        images = fetch_images(entries, session=session)

    assert set(images) == {A}
    assert sorted(session.calls) == sorted([A, missing, unreachable])
    assert "missing.png" in caplog.text
    assert "unreachable.example.com" in caplog.text


def test_in_flight_requests_are_capped(fake_session) -> None:
    """No more than MAX_IN_FLIGHT requests run at once."""

    urls = [f"https://covers.example.com/{i}.png" for i in range(3 * MAX_IN_FLIGHT)]
    session = fake_session({u: (200, b"img") for u in urls}, delay=0.02)

    images = fetch_images([Entry(title=u, artist="x", image_url=u) for u in urls], session=session)

    assert len(images) == len(urls)
    assert 1 <= session.max_in_flight <= MAX_IN_FLIGHT
