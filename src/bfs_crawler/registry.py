"""
Visited registry: the single record of every URL scheduled during a crawl.
"""
from __future__ import annotations

from typing import List, Set


class VisitedRegistry:
    """
    Deduplicates URLs across one crawl.

    Membership means "scheduled", not "fetched successfully": a registered
    URL may still end up in the error list.
    """

    __slots__ = ("_seen", "_order")

    def __init__(self) -> None:
        self._seen: Set[str] = set()
        self._order: List[str] = []

    def try_register(self, url: str) -> bool:
        """Insert url if absent. Returns True iff this call inserted it."""
        if url in self._seen:
            return False
        self._seen.add(url)
        self._order.append(url)
        return True

    def as_ordered_list(self) -> List[str]:
        return list(self._order)

    def __contains__(self, url: object) -> bool:
        return url in self._seen

    def __len__(self) -> int:
        return len(self._order)
