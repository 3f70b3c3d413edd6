"""
Plain-text and JSON renderings of a CrawlResult.
"""
from __future__ import annotations

import json
from typing import Any, Dict

from bfs_crawler.results import CrawlError, CrawlResult

FORMATS = ("text", "json")

ERRORS_HEADER = "# errors"


def error_to_dict(error: CrawlError) -> Dict[str, Any]:
    return {
        "url": error.url,
        "kind": error.kind.value,
        "status_code": error.status_code,
        "message": error.message,
    }


def to_payload(result: CrawlResult) -> Dict[str, Any]:
    """Structured form of a result, ready for json.dumps."""
    return {
        "root_url": result.root_url,
        "max_depth": result.max_depth,
        "stopped": result.stopped,
        "visited": list(result.visited),
        "errors": [error_to_dict(e) for e in result.errors],
    }


def format_text(result: CrawlResult, include_errors: bool = False) -> str:
    """One visited URL per line, optionally followed by a tab-separated error section."""
    lines = list(result.visited)
    if include_errors and result.errors:
        if lines:
            lines.append("")
        lines.append(ERRORS_HEADER)
        # Newlines inside messages would break the one-error-per-line layout
        lines.extend(
            f"{e.url}\t{e.label()}\t{' '.join(e.message.split())}" for e in result.errors
        )
    return "\n".join(lines) + "\n" if lines else ""


def format_json(result: CrawlResult, pretty: bool = False) -> str:
    return json.dumps(to_payload(result), ensure_ascii=False, indent=2 if pretty else None)


def render(result: CrawlResult, fmt: str = "text", include_errors: bool = False, pretty: bool = False) -> str:
    if fmt == "json":
        return format_json(result, pretty=pretty)
    if fmt == "text":
        return format_text(result, include_errors=include_errors)
    raise ValueError(f"Unknown output format: {fmt!r} (expected one of {', '.join(FORMATS)})")
