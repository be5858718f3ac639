"""
Cursor pagination with fixed pacing.

Drives a fetch_page(cursor) -> Page function until the API stops handing
out cursors, sleeping a fixed delay between fetches. Adapters build the
fetch functions; tools consume the item stream.

Lives outside extractors/ because it sleeps and logs.
"""

import time
from collections.abc import Callable, Iterable, Iterator

from logging_config import log_page
from models import FetchFailedError, Page, PageCollection, RawItem

FetchPage = Callable[[str | None], Page]
Sleep = Callable[[float], None]


class Pacer:
    """
    Fixed-delay pacing between successive calls.

    The first wait() returns immediately; every later one sleeps delay_ms.
    N paced operations therefore cost N-1 sleeps.
    """

    def __init__(self, delay_ms: int = 0, sleep: Sleep = time.sleep):
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        self.delay_ms = delay_ms
        self._sleep = sleep
        self._started = False

    def wait(self) -> None:
        if self._started and self.delay_ms:
            self._sleep(self.delay_ms / 1000)
        self._started = True


def paginate(
    fetch_page: FetchPage,
    *,
    max_results: int | None = None,
    delay_ms: int = 0,
    sleep: Sleep = time.sleep,
    collection: str = "",
) -> Iterator[RawItem]:
    """
    Enumerate a cursor-paginated collection lazily.

    Args:
        fetch_page: Called with None first, then with each next_cursor
        max_results: Stop after exactly this many items (None = everything)
        delay_ms: Fixed delay slept between successive fetches
        sleep: Sleep function (injectable for tests)
        collection: Name used in logs and in FetchFailedError

    Returns:
        Iterator over raw items in API response order

    Raises:
        ValueError: max_results is not positive (raised immediately)
        FetchFailedError: fetch_page raised; items already yielded stand
    """
    if max_results is not None and max_results <= 0:
        raise ValueError(f"max_results must be positive, got {max_results}")

    return _paginate(fetch_page, max_results, Pacer(delay_ms, sleep), collection)


def _paginate(
    fetch_page: FetchPage,
    max_results: int | None,
    pacer: Pacer,
    collection: str,
) -> Iterator[RawItem]:
    cursor: str | None = None
    pages = 0
    yielded = 0

    while True:
        pacer.wait()
        try:
            page = fetch_page(cursor)
        except Exception as e:
            raise FetchFailedError(collection, e, pages_fetched=pages, items_yielded=yielded) from e
        pages += 1

        # Slack returns "" rather than omitting the cursor on the last page
        cursor = page.next_cursor or None
        log_page(collection, pages, len(page.items), cursor is not None)

        for item in page.items:
            yield item
            yielded += 1
            if max_results is not None and yielded >= max_results:
                return

        if cursor is None:
            return


def drain(items: Iterable[RawItem]) -> PageCollection:
    """
    Consume an item stream completely, keeping partial results on failure.

    Used where the whole collection must be in hand before processing
    (chat history needs sorting, calendar events need month grouping).
    """
    collected: list[RawItem] = []
    try:
        for item in items:
            collected.append(item)
    except FetchFailedError as e:
        return PageCollection(items=collected, error=e)
    return PageCollection(items=collected)
