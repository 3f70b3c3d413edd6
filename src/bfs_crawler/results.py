"""
Crawl outcome records and the append-only accumulator that builds them.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ErrorKind(str, Enum):
    """Category of a failed fetch."""

    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    CONNECTION_FAILED = "connection_failed"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class CrawlError:
    """One failed fetch attempt."""
    url: str
    kind: ErrorKind
    message: str
    status_code: Optional[int] = None

    def label(self) -> str:
        """Short grouping key: the HTTP code for status errors, else the kind."""
        if self.kind is ErrorKind.HTTP_STATUS and self.status_code is not None:
            return str(self.status_code)
        return self.kind.value


@dataclass(frozen=True, slots=True)
class CrawlResult:
    """Terminal snapshot of a crawl."""
    root_url: str
    max_depth: int
    visited: Tuple[str, ...] = ()
    errors: Tuple[CrawlError, ...] = ()
    stopped: bool = False

    def error_counts(self) -> Dict[str, int]:
        """Count errors by HTTP status code or error kind."""
        counts: Dict[str, int] = defaultdict(int)
        for error in self.errors:
            counts[error.label()] += 1
        return dict(counts)


@dataclass(slots=True)
class ResultAccumulator:
    """Collects successes and failures in the order the engine reports them."""
    root_url: str
    max_depth: int
    _visited: List[str] = field(default_factory=list)
    _errors: List[CrawlError] = field(default_factory=list)

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    @property
    def error_count(self) -> int:
        return len(self._errors)

    def record_success(self, url: str) -> None:
        self._visited.append(url)

    def record_error(
        self,
        url: str,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
    ) -> CrawlError:
        error = CrawlError(url=url, kind=kind, message=message, status_code=status_code)
        self._errors.append(error)
        return error

    def snapshot(self, stopped: bool = False) -> CrawlResult:
        """
        Freeze the current state into a CrawlResult.

        Safe to call mid-run; the result is a consistent partial view.
        """
        return CrawlResult(
            root_url=self.root_url,
            max_depth=self.max_depth,
            visited=tuple(self._visited),
            errors=tuple(self._errors),
            stopped=stopped,
        )
