"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import signal
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional
from urllib.parse import urlparse

from bfs_crawler.adapters import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT
from bfs_crawler.core import EngineError, crawl
from bfs_crawler.report import FORMATS, render
from bfs_crawler.results import CrawlResult


def print_summary(result: CrawlResult) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Root URL:               {result.root_url}\n")
    sys.stderr.write(f"Max depth:              {result.max_depth}\n")
    sys.stderr.write(f"Pages visited:          {len(result.visited)}\n")
    sys.stderr.write(f"Failed requests:        {len(result.errors)}\n")
    if result.stopped:
        sys.stderr.write("Crawl stopped early (time limit or interrupt).\n")
    sys.stderr.write("\n")

    error_counts = result.error_counts()
    if error_counts:
        sys.stderr.write("Errors by type:\n")
        for error_type, count in sorted(error_counts.items()):
            label = f"HTTP {error_type}" if error_type.isdigit() else error_type.replace("_", " ")
            sys.stderr.write(f"  {label}: {count}\n")
    else:
        sys.stderr.write("No errors encountered.\n")

    sys.stderr.write("\n")


def generate_output_path(root_url: str, fmt: str) -> Path:
    """Generate output path: crawls/{hostname}_{datetime}.{txt|json}"""
    parsed = urlparse(root_url)
    hostname = parsed.hostname or "unknown"
    hostname_safe = hostname.replace(".", "_")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    suffix = "json" if fmt == "json" else "txt"

    crawls_dir = Path("crawls")
    crawls_dir.mkdir(exist_ok=True)

    return crawls_dir / f"{hostname_safe}_{timestamp}.{suffix}"


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfs-crawler",
        description="Crawl same-domain links breadth-first from a URL and list every page visited.",
    )
    parser.add_argument("root_url", help="Root URL (e.g. https://example.com)")
    parser.add_argument(
        "--depth",
        type=_non_negative_int,
        default=0,
        help="Link hops to follow from the root; 0 fetches only the root (default: 0)",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=DEFAULT_TIMEOUT_S,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument(
        "--include-subdomains",
        action="store_true",
        help="Also follow links to subdomains of the root host",
    )
    parser.add_argument(
        "--time-limit",
        type=_positive_float,
        help="Stop fetching new pages after this many seconds",
    )
    parser.add_argument("--format", choices=FORMATS, default="text", help="Output format (default: text)")
    parser.add_argument("--errors", action="store_true", help="Append failed requests to text output")
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated in crawls/)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    return parser


def install_interrupt_handler(stop_event: threading.Event) -> Any:
    """
    Make the first Ctrl-C set stop_event instead of raising.

    The crawl then ends after the request in flight and its partial result is
    still written out. A second Ctrl-C raises KeyboardInterrupt as usual.
    Returns the previous SIGINT handler.
    """
    def _on_interrupt(signum, frame):
        if stop_event.is_set():
            raise KeyboardInterrupt
        stop_event.set()
        sys.stderr.write("\nInterrupted: finishing the current request (Ctrl-C again to abort).\n")
        sys.stderr.flush()

    return signal.signal(signal.SIGINT, _on_interrupt)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    args = build_parser().parse_args(argv)

    stop_event = threading.Event()
    previous_handler = install_interrupt_handler(stop_event)
    try:
        result = crawl(
            root_url=args.root_url,
            max_depth=args.depth,
            timeout_s=args.timeout,
            user_agent=args.user_agent,
            include_subdomains=args.include_subdomains,
            verbose=args.verbose,
            time_limit_s=args.time_limit,
            stop_event=stop_event,
        )
    except EngineError as e:
        sys.stderr.write(f"error: {e}\n")
        return 2
    except KeyboardInterrupt:
        sys.stderr.write("\nAborted.\n")
        return 130
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    if args.verbose:
        print_summary(result)

    text = render(result, fmt=args.format, include_errors=args.errors, pretty=args.pretty)

    if args.out == "-":
        sys.stdout.write(text if text.endswith("\n") or not text else text + "\n")
    else:
        output_path = Path(args.out) if args.out else generate_output_path(result.root_url, args.format)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Results written to: {output_path}\n")

    # Partial results were written; still report the interrupt to the shell
    return 130 if stop_event.is_set() else 0


if __name__ == "__main__":
    raise SystemExit(main())
