"""
Breadth-first crawl engine.
"""
from __future__ import annotations

import sys
import threading
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Optional

from bfs_crawler.adapters import (
    DEFAULT_TIMEOUT_S,
    DEFAULT_USER_AGENT,
    FetchError,
    Fetcher,
    HtmlLinkExtractor,
    LinkExtractor,
    RequestsFetcher,
)
from bfs_crawler.registry import VisitedRegistry
from bfs_crawler.results import CrawlResult, ResultAccumulator
from bfs_crawler.urls import InvalidURL, normalize_url, same_domain


class EngineError(ValueError):
    """Fatal configuration problem; raised before anything is fetched."""


class EngineState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class FrontierEntry:
    url: str
    depth: int


def print_progress(visited: int, errors: int, queue_size: int, depth: int) -> None:
    """Print real-time progress to stderr."""
    progress = f"\r\033[K[depth {depth}] Visited: {visited} | Errors: {errors} | Queue: {queue_size}"
    sys.stderr.write(progress)
    sys.stderr.flush()


def print_scan_line(url: str, status: Optional[int], new_links: int) -> None:
    """Print single scan result line."""
    sys.stderr.write(f"\n  → {status} {url} (+{new_links} links)")
    sys.stderr.flush()


def print_error_line(url: str, message: str) -> None:
    sys.stderr.write(f"\n  ✗ ERROR {url}: {message}")
    sys.stderr.flush()


class CrawlEngine:
    """
    Single-use BFS crawler over a Fetcher/LinkExtractor pair.

    Pages are processed in strict FIFO order, so every page at depth d is
    fetched before any page at depth d+1. Each scheduled URL gets exactly one
    fetch attempt; failures are recorded and never retried.

    Args:
        fetcher: Fetches a URL or raises FetchError.
        extractor: Returns raw hrefs from a page body in document order.
        include_subdomains: Treat subdomains of the root host as in scope.
        verbose: Whether to print progress information.
        stop_event: Checked between pages; when set the crawl ends early.
        time_limit_s: Wall-clock budget, checked between pages.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        extractor: LinkExtractor,
        *,
        include_subdomains: bool = False,
        verbose: bool = False,
        stop_event: Optional[threading.Event] = None,
        time_limit_s: Optional[float] = None,
    ) -> None:
        self.fetcher = fetcher
        self.extractor = extractor
        self.include_subdomains = include_subdomains
        self.verbose = verbose
        self.stop_event = stop_event
        self.time_limit_s = time_limit_s

        self.state = EngineState.IDLE
        self.registry = VisitedRegistry()
        self.frontier: Deque[FrontierEntry] = deque()
        self._started_at: Optional[float] = None

    def run(self, root_url: str, max_depth: int = 0) -> CrawlResult:
        """Crawl from root_url, expanding links on pages shallower than max_depth."""
        if self.state is not EngineState.IDLE:
            raise EngineError("CrawlEngine instances can only run once")

        if isinstance(max_depth, bool) or not isinstance(max_depth, int):
            raise EngineError(f"max_depth must be an integer, got {max_depth!r}")
        if max_depth < 0:
            raise EngineError(f"max_depth must be >= 0, got {max_depth}")

        try:
            root = normalize_url(root_url, root_url)
        except InvalidURL as e:
            raise EngineError(f"Invalid root URL {root_url!r}: {e}") from e

        self.state = EngineState.RUNNING
        self._started_at = time.monotonic()
        results = ResultAccumulator(root_url=root, max_depth=max_depth)
        self.registry.try_register(root)
        self.frontier.append(FrontierEntry(root, 0))

        if self.verbose:
            sys.stderr.write(f"Starting crawl from: {root}\n")
            sys.stderr.write(f"Max depth: {max_depth}\n")

        stopped = False
        while self.frontier:
            if self._should_stop():
                stopped = True
                if self.verbose:
                    sys.stderr.write(f"\n  ⊘ STOPPED with {len(self.frontier)} URLs still queued")
                break

            entry = self.frontier.popleft()
            if self.verbose:
                print_progress(results.visited_count, results.error_count, len(self.frontier), entry.depth)
            self._process(entry, root, max_depth, results)

        if self.verbose:
            sys.stderr.write("\n\n")

        self.state = EngineState.DONE
        return results.snapshot(stopped=stopped)

    def _process(self, entry: FrontierEntry, root: str, max_depth: int, results: ResultAccumulator) -> None:
        try:
            response = self.fetcher.fetch(entry.url)
        except FetchError as e:
            results.record_error(entry.url, e.kind, e.message, e.status_code)
            if self.verbose:
                print_error_line(entry.url, e.message)
            return

        # No-op for anything that came off the frontier
        self.registry.try_register(entry.url)
        results.record_success(entry.url)

        new_links = 0
        if entry.depth < max_depth and response.is_html:
            new_links = self._expand(entry, response.body, response.url or entry.url, root)

        if self.verbose:
            print_scan_line(entry.url, response.status_code, new_links)

    def _expand(self, entry: FrontierEntry, body: bytes, base_url: str, root: str) -> int:
        """
        Enqueue unseen same-domain links found on a page. Returns how many.

        base_url is where the page actually came from, which differs from
        entry.url after a redirect.
        """
        try:
            hrefs = self.extractor.extract(body, base_url)
        except Exception as e:  # extraction failures stay local to the page
            if self.verbose:
                sys.stderr.write(f"\n  ✗ PARSE {entry.url}: {e}")
            return 0

        added = 0
        for href in hrefs:
            try:
                target = normalize_url(href, base=base_url)
            except InvalidURL:
                continue
            if not same_domain(target, root, self.include_subdomains):
                continue
            if self.registry.try_register(target):
                self.frontier.append(FrontierEntry(target, entry.depth + 1))
                added += 1
        return added

    def _should_stop(self) -> bool:
        if self.stop_event is not None and self.stop_event.is_set():
            return True
        if self.time_limit_s is not None and self._started_at is not None:
            return time.monotonic() - self._started_at >= self.time_limit_s
        return False


def crawl(
    root_url: str,
    max_depth: int = 0,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    user_agent: str = DEFAULT_USER_AGENT,
    include_subdomains: bool = False,
    verbose: bool = False,
    time_limit_s: Optional[float] = None,
    stop_event: Optional[threading.Event] = None,
) -> CrawlResult:
    """
    Crawl same-domain links breadth-first from root_url over HTTP.

    Args:
        root_url: The URL to start crawling from.
        max_depth: How many link hops to follow from the root (0 = root only).
        timeout_s: HTTP request timeout in seconds.
        user_agent: User-Agent header to use for requests.
        include_subdomains: Also follow links to subdomains of the root host.
        verbose: Whether to print progress information.
        time_limit_s: Stop scheduling new fetches after this many seconds.
        stop_event: Once set, the crawl ends after the page in flight.

    Returns:
        The CrawlResult snapshot.
    """
    fetcher = RequestsFetcher(timeout_s=timeout_s, user_agent=user_agent)
    engine = CrawlEngine(
        fetcher,
        HtmlLinkExtractor(),
        include_subdomains=include_subdomains,
        verbose=verbose,
        time_limit_s=time_limit_s,
        stop_event=stop_event,
    )
    try:
        return engine.run(root_url, max_depth)
    finally:
        fetcher.close()
