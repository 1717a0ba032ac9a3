"""A fixed-size cache of rendered pages with least-recently-viewed eviction."""

from __future__ import annotations

import logging
from typing import Callable, Iterator, Optional

_LOG = logging.getLogger(__name__)

ViewTime = Callable[[int], Optional[int]]


class PageCache:
    """Remembers which page indices hold rendered surfaces.

    The cache has a fixed number of slots. When it is full, adding a page
    evicts the cached page that was viewed least recently. View times are
    not stored here; callers pass a function that maps a page index to the
    time it was last viewed.
    """

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("the page cache needs at least one slot")
        self._slots: list[Optional[int]] = [None] * size
        self._count = 0

    @property
    def size(self) -> int:
        """The number of slots."""
        return len(self._slots)

    @property
    def slots(self) -> tuple[Optional[int], ...]:
        """The page index held by each slot, None for a free slot."""
        return tuple(self._slots)

    def __len__(self) -> int:
        return self._count

    def __contains__(self, page_index: object) -> bool:
        return isinstance(page_index, int) and self.is_cached(page_index)

    def __iter__(self) -> Iterator[int]:
        return (page for page in self._slots if page is not None)

    def is_cached(self, page_index: int) -> bool:
        """Return True if the page is in the cache."""
        cached = self._count != 0 and page_index in self._slots
        _LOG.debug(
            "Page %d is a cache %s", page_index + 1, "hit" if cached else "miss"
        )
        return cached

    def is_full(self) -> bool:
        """Return True if every slot holds a page."""
        return self._count == len(self._slots)

    def add(self, page_index: int, view_time: ViewTime) -> Optional[int]:
        """Cache a page, evicting the least recently viewed one if full.

        Return the index of the evicted page, or None if nothing was
        evicted. Adding a page that is already cached changes nothing.
        """
        if page_index < 0:
            raise ValueError("page indices must not be negative")
        if self.is_cached(page_index):
            return None

        evicted: Optional[int] = None
        if self.is_full():
            slot, evicted = self._evict(view_time)
        else:
            slot = self._slots.index(None)
        self._slots[slot] = page_index
        self._count += 1
        _LOG.debug("Page %d is cached at cache index %d", page_index + 1, slot)
        return evicted

    def invalidate_lru(self, view_time: ViewTime) -> int:
        """Remove the least recently viewed page and return its index."""
        _, page = self._evict(view_time)
        return page

    def invalidate_all(self) -> None:
        """Empty the cache."""
        self._slots = [None] * len(self._slots)
        self._count = 0

    def _evict(self, view_time: ViewTime) -> tuple[int, int]:
        best_slot: Optional[int] = None
        best_time: Optional[int] = None
        for slot, page in enumerate(self._slots):
            if page is None:
                continue
            time = view_time(page)
            if time is None:
                raise LookupError(f"no view time known for page {page}")
            if best_time is None or time < best_time:
                best_slot, best_time = slot, time
        if best_slot is None:
            raise LookupError("the page cache is empty")

        page = self._slots[best_slot]
        assert page is not None
        self._slots[best_slot] = None
        self._count -= 1
        _LOG.debug("Invalidated page %d at cache index %d", page + 1, best_slot)
        return best_slot, page