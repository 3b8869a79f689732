from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List, Optional

import requests

from .errors import FetchFailure
from .models import Entry

logger = logging.getLogger(__name__)

MAX_IN_FLIGHT = 10
FETCH_TIMEOUT = 25


def unique_image_urls(entries: Iterable[Entry]) -> List[str]:
    """Distinct non-empty cover URLs, in first-seen order."""
    seen: Dict[str, None] = {}
    for entry in entries:
        url = (entry.image_url or "").strip()
        if url:
            seen.setdefault(url, None)
    return list(seen)


def fetch_one(session: requests.Session, url: str, timeout: Optional[float] = FETCH_TIMEOUT) -> bytes:
    try:
        r = session.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as exc:
        raise FetchFailure(url, str(exc)) from exc
    return r.content


def fetch_images(
    entries: Iterable[Entry],
    session: Optional[requests.Session] = None,
    max_workers: int = MAX_IN_FLIGHT,
    timeout: Optional[float] = FETCH_TIMEOUT,
) -> Dict[str, bytes]:
    """
    Fetch every distinct cover URL once, at most ``max_workers`` at a time.

    Failed URLs are logged and left out of the result, so entries that
    reference them render as if no image had been given.
    """
    urls = unique_image_urls(entries)
    if not urls:
        return {}

    own_session = session is None
    if own_session:
        session = requests.Session()

    images: Dict[str, bytes] = {}
    try:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(urls))) as ex:
            futs = {ex.submit(fetch_one, session, url, timeout): url for url in urls}
            for fut in as_completed(futs):
                url = futs[fut]
                try:
                    images[url] = fut.result()
                except FetchFailure as exc:
                    logger.warning("%s; rendering without cover", exc)
    finally:
        if own_session:
            session.close()

    logger.debug("Fetched %d of %d cover images", len(images), len(urls))
    return images
