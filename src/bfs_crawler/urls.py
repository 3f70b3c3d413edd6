"""
URL normalization and domain matching.
"""
from __future__ import annotations

from urllib.parse import urldefrag, urljoin, urlparse, urlunparse

ALLOWED_SCHEMES: frozenset[str] = frozenset(("http", "https"))

DEFAULT_PORTS = {"http": 80, "https": 443}


class InvalidURL(ValueError):
    """Raised when a link cannot be turned into a crawlable absolute URL."""


def normalize_url(url: str, base: str) -> str:
    """
    Normalize URL for deduplication and comparison.

    - Joins relative URLs against base
    - Drops fragments (#...)
    - Normalizes scheme/host case
    - Removes default ports (:80, :443)
    - Keeps querystrings (they matter for uniqueness)

    Raises InvalidURL for blank links, non-HTTP(S) schemes and links
    urllib cannot parse.
    """
    if not url or not url.strip():
        raise InvalidURL("empty link")

    try:
        joined, _ = urldefrag(urljoin(base, url.strip()))
        parsed = urlparse(joined)
        scheme = parsed.scheme.lower()
        hostname = (parsed.hostname or "").lower()
        port = parsed.port
    except ValueError as e:
        raise InvalidURL(f"malformed link {url!r}: {e}") from e

    if scheme not in ALLOWED_SCHEMES:
        raise InvalidURL(f"unsupported scheme in {url!r}")
    if not hostname:
        raise InvalidURL(f"no host in {url!r}")

    # IPv6 literals lose their brackets in .hostname
    if ":" in hostname:
        hostname = f"[{hostname}]"

    if port is None or port == DEFAULT_PORTS[scheme]:
        netloc = hostname
    else:
        netloc = f"{hostname}:{port}"

    return urlunparse((
        scheme,
        netloc,
        parsed.path or "/",
        parsed.params,
        parsed.query,
        "",
    ))


def host_of(url: str) -> str:
    """Return the lowercased host of a URL ("" if it has none)."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def same_domain(candidate: str, root: str, include_subdomains: bool = False) -> bool:
    """
    Check whether candidate lives on the root's host.

    Only hosts are compared: scheme and port are ignored. With
    include_subdomains, "blog.example.com" also matches a root on
    "example.com" (but "notexample.com" does not).
    """
    candidate_host = host_of(candidate)
    root_host = host_of(root)
    if not candidate_host or not root_host:
        return False
    if candidate_host == root_host:
        return True
    return include_subdomains and candidate_host.endswith("." + root_host)
