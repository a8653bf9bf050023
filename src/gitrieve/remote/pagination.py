"""Lazy pagination helpers."""

from collections.abc import Callable, Iterator
from typing import TypeVar

T = TypeVar("T")

# A page fetcher takes the cursor of the page to load (None for the first)
# and returns the page items plus the next cursor (None when exhausted).
PageFetcher = Callable[[str | None], tuple[list[T], str | None]]


def iter_pages(fetch_page: PageFetcher[T]) -> Iterator[T]:
    """Yield items page by page until the fetcher reports no next cursor.

    The next page is only requested once the caller has consumed the
    current one, so nested listings drain their inner level first. Each
    call starts again from the first page.
    """
    cursor: str | None = None
    while True:
        items, cursor = fetch_page(cursor)
        yield from items
        if cursor is None:
            return
