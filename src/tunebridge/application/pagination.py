"""Cursor-driven accumulation over paginated list endpoints.

Hey future me - EVERY "get all X" goes through fetch_all(). Spotify hands out a full "next" URL,
YouTube a nextPageToken; both are just opaque cursors here. The page fetcher decides what the
cursor means, this module only loops.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a list endpoint.

    Attributes:
        items: Items on this page (already mapped to domain objects)
        next_cursor: Opaque continuation token, None/"" when this is the last page
        raw_count: Number of raw items the API returned. Can be larger than
            len(items) when the fetcher drops unusable entries; bounded fetches
            count against this.
    """

    items: list[T] = field(default_factory=list)
    next_cursor: str | None = None
    raw_count: int | None = None

    @property
    def consumed(self) -> int:
        return self.raw_count if self.raw_count is not None else len(self.items)


PageFetcher = Callable[[str | None, int], Awaitable[Page[T]]]


async def fetch_all(
    fetch_page: PageFetcher[T],
    *,
    page_size: int,
    max_items: int | None = None,
) -> list[T]:
    """Follow continuation cursors until the list is exhausted.

    Args:
        fetch_page: Called as fetch_page(cursor, size); cursor is None for the
            first page
        page_size: Maximum items to request per page
        max_items: Optional ceiling for bounded variants. Each request asks for
            at most the remaining amount, and the loop stops once that many raw
            items were seen. The page in flight is always appended whole.

    Returns:
        All items in original order
    """
    out: list[T] = []
    cursor: str | None = None
    remaining = max_items
    pages = 0

    while True:
        size = page_size if remaining is None else min(page_size, remaining)
        page = await fetch_page(cursor, size)
        pages += 1

        out.extend(page.items or [])
        cursor = page.next_cursor or None

        if remaining is not None:
            remaining -= page.consumed
            if remaining <= 0:
                break
        if cursor is None:
            break

    logger.debug("Fetched %d items over %d pages", len(out), pages)
    return out
