"""Shared fixtures: an in-memory site that stands in for HTTP and HTML parsing."""

from __future__ import annotations

from collections import deque
from typing import Callable, Dict, List, Optional, Sequence

import pytest

from bfs_crawler.adapters import FetchError, FetchResponse, HTTPStatusError
from bfs_crawler.urls import normalize_url

ROOT = "https://example.com/"


class FakeSite:
    """Implements both Fetcher and LinkExtractor over a dict of pages.

    ``pages`` maps a URL to the hrefs found on it (in document order).
    ``failures`` maps a URL to the FetchError its fetch raises. Any URL in
    neither mapping fails with a 404. ``redirects`` maps a requested URL to
    the final URL reported for it.
    """

    def __init__(
        self,
        pages: Dict[str, Sequence[str]],
        failures: Optional[Dict[str, FetchError]] = None,
        content_types: Optional[Dict[str, str]] = None,
        redirects: Optional[Dict[str, str]] = None,
    ) -> None:
        self.pages = pages
        self.failures = failures or {}
        self.content_types = content_types or {}
        self.redirects = redirects or {}
        self.fetched: List[str] = []
        self.extracted: List[str] = []
        self.on_fetch: Optional[Callable[[str], None]] = None

    def fetch(self, url: str) -> FetchResponse:
        self.fetched.append(url)
        if self.on_fetch is not None:
            self.on_fetch(url)
        if url in self.failures:
            raise self.failures[url]
        if url not in self.pages:
            raise HTTPStatusError(404, "HTTP 404 Not Found")
        return FetchResponse(
            status_code=200,
            body=url.encode("utf-8"),
            content_type=self.content_types.get(url),
            url=self.redirects.get(url),
        )

    def extract(self, body: bytes, base_url: str) -> List[str]:
        self.extracted.append(base_url)
        return list(self.pages[body.decode("utf-8")])


def bfs_order(pages: Dict[str, Sequence[str]], root: str, max_depth: int) -> List[str]:
    """Reference breadth-first order over a graph of absolute, same-host URLs."""
    order: List[str] = []
    seen = {root}
    queue = deque([(root, 0)])
    while queue:
        url, depth = queue.popleft()
        order.append(url)
        if depth == max_depth:
            continue
        for href in pages.get(url, ()):
            target = normalize_url(href, url)
            if target not in seen:
                seen.add(target)
                queue.append((target, depth + 1))
    return order


@pytest.fixture
def make_site():
    def _make(pages, failures=None, content_types=None, redirects=None) -> FakeSite:
        return FakeSite(pages, failures, content_types, redirects)

    return _make
