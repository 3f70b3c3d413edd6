"""
Fetch and link-extraction collaborators used by the crawl engine.

The engine only talks to the Fetcher and LinkExtractor protocols, so tests
can swap in an in-memory site. RequestsFetcher and HtmlLinkExtractor are the
real implementations.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol

import requests
from bs4 import BeautifulSoup, SoupStrainer

from bfs_crawler.results import ErrorKind

DEFAULT_TIMEOUT_S = 15.0
DEFAULT_USER_AGENT = "BfsCrawler/1.0"

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)


class FetchError(Exception):
    """A fetch that did not produce a usable response."""

    kind: ErrorKind = ErrorKind.OTHER
    status_code: Optional[int] = None

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FetchTimeout(FetchError):
    kind = ErrorKind.TIMEOUT


class ConnectionFailed(FetchError):
    kind = ErrorKind.CONNECTION_FAILED


class HTTPStatusError(FetchError):
    kind = ErrorKind.HTTP_STATUS

    def __init__(self, status_code: int, message: Optional[str] = None) -> None:
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class FetchResponse:
    """Successful fetch: final status code, raw body, content type and final URL if known."""
    status_code: int
    body: bytes
    content_type: Optional[str] = None
    # Final URL after redirects, when the fetcher reports one
    url: Optional[str] = None

    @property
    def is_html(self) -> bool:
        # Unknown content type is given the benefit of the doubt
        if self.content_type is None:
            return True
        return "html" in self.content_type.lower()


class Fetcher(Protocol):
    def fetch(self, url: str) -> FetchResponse:
        """Fetch url, raising FetchError on any failure."""
        ...


class LinkExtractor(Protocol):
    def extract(self, body: bytes, base_url: str) -> List[str]:
        """Return raw href values in document order."""
        ...


class RequestsFetcher:
    """Blocking HTTP GET over a shared requests.Session."""

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent

    def fetch(self, url: str) -> FetchResponse:
        try:
            resp = self.session.get(url, timeout=self.timeout_s, allow_redirects=True)
        except requests.Timeout as e:
            raise FetchTimeout(f"timed out after {self.timeout_s}s: {e}") from e
        except requests.ConnectionError as e:
            raise ConnectionFailed(str(e)) from e
        except requests.RequestException as e:
            raise FetchError(str(e)) from e

        if resp.status_code >= 400:
            reason = resp.reason or ""
            raise HTTPStatusError(resp.status_code, f"HTTP {resp.status_code} {reason}".strip())

        return FetchResponse(
            status_code=resp.status_code,
            body=resp.content,
            content_type=resp.headers.get("content-type"),
            url=resp.url or None,
        )

    def close(self) -> None:
        self.session.close()


class HtmlLinkExtractor:
    """Pulls href values out of <a> tags."""

    def __init__(self, parser: str = "lxml") -> None:
        self.parser = parser

    def extract(self, body: bytes, base_url: str) -> List[str]:
        # base_url is part of the protocol; resolution happens in normalize_url
        soup = BeautifulSoup(body, self.parser, parse_only=LINK_STRAINER)
        return [a["href"] for a in soup.find_all("a") if a.get("href")]
