"""Lazy iteration over consecutive pages.

The driver keeps only the current cursor.  Each step asks the fetcher for the
page after it, yields that page and moves the cursor to the page's last key.
An empty page ends the iteration; nothing else does, so callers wanting a
bound wrap the driver (for example with :func:`itertools.islice`).

Delivery is exactly-once and in key order as long as new documents are only
inserted with keys above the current cursor.  Documents inserted behind the
cursor are not seen by this walk, and deleting already yielded documents has
no effect on it.
"""

from __future__ import annotations

from collections.abc import Iterator

from .fetcher import PageFetcher
from .models import Document, Key, Page, PageRequest


class PaginationDriver:
    """Iterate the pages of a collection from ``start_after`` onward.

    Errors raised by the fetcher propagate unchanged and end the iteration;
    no retry is attempted.  :attr:`cursor` always holds the key of the last
    yielded document, so a fresh driver built with ``start_after=cursor``
    resumes exactly where this one stopped.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        limit: int,
        *,
        start_after: Key | None = None,
        timeout: float | None = None,
    ) -> None:
        PageRequest(cursor=start_after, limit=limit)
        self.fetcher = fetcher
        self.limit = limit
        self.start_after = start_after
        self.timeout = timeout
        self.cursor: Key | None = start_after
        self.pages_fetched = 0
        self.exhausted = False

    def __iter__(self) -> Iterator[Page]:
        return self.pages()

    def pages(self) -> Iterator[Page]:
        cursor = self.start_after
        self.cursor = cursor
        self.exhausted = False
        while True:
            page = self.fetcher.fetch(cursor, self.limit, timeout=self.timeout)
            self.pages_fetched += 1
            if page.is_empty:
                self.exhausted = True
                return
            # set before yielding: resuming from it never repeats this page
            cursor = self.cursor = page.last_key
            yield page

    def documents(self) -> Iterator[Document]:
        """Yield the documents of every page in order."""

        for page in self.pages():
            yield from page


def paginate(
    fetcher: PageFetcher,
    limit: int,
    start_after: Key | None = None,
    *,
    timeout: float | None = None,
) -> Iterator[Page]:
    """Shorthand for ``iter(PaginationDriver(fetcher, limit, ...))``."""

    return iter(PaginationDriver(fetcher, limit, start_after=start_after, timeout=timeout))


__all__ = ["PaginationDriver", "paginate"]
