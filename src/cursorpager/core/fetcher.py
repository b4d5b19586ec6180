"""Single page retrieval.

:class:`PageFetcher` turns a cursor and a page size into one bounded query:
documents whose identifying key is strictly greater than the cursor, sorted
ascending by that key, at most ``limit`` of them.  Each call is a complete
round trip, so any call can be retried or replayed from a known cursor
without server coordination.
"""

from __future__ import annotations

import copy
import itertools
import logging
from collections.abc import Mapping, Sequence
from time import perf_counter
from typing import Any

from cursorpager.utils.errors import DecodeError

from .hooks import NullHook, QueryHook, notify
from .models import DEFAULT_KEY_FIELD, Document, Key, Page, PageRequest, QueryEvent
from .store import DocumentStore

logger = logging.getLogger(__name__)

OPERATION = "find"


class PageFetcher:
    """Fetch ascending pages of documents after a cursor.

    Parameters
    ----------
    store:
        Store executing the bounded query.
    key_field:
        Unique, totally ordered field used for ordering and cursors.
    hook:
        Observer notified around every query.
    timeout:
        Default per-call deadline in seconds.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        key_field: str = DEFAULT_KEY_FIELD,
        hook: QueryHook | None = None,
        timeout: float | None = None,
    ) -> None:
        self.store = store
        self.key_field = key_field
        self.hook: QueryHook = hook or NullHook()
        self.timeout = timeout
        self._request_ids = itertools.count(1)

    def fetch(self, cursor: Key | None = None, limit: int = 10, *, timeout: float | None = None) -> Page:
        """Return the page of documents following ``cursor``.

        Raises
        ------
        QueryError
            If ``limit`` is not positive or the store rejects the query.
        StoreConnectionError
            If the store is unreachable.
        QueryTimeoutError
            If the deadline elapses before the reply arrives.
        DecodeError
            If the reply is not a sequence of keyed documents.
        """

        request = PageRequest(cursor=cursor, limit=limit)
        query_filter = request.filter(self.key_field)
        sort = request.sort(self.key_field)
        deadline = self.timeout if timeout is None else timeout

        # hooks only ever see copies of the command and the returned documents
        command: dict[str, Any] = {"filter": query_filter, "sort": dict(sort), "limit": limit}
        request_id = next(self._request_ids)
        notify(self.hook, "start", QueryEvent(OPERATION, request_id, copy.deepcopy(command)))

        started = perf_counter()
        try:
            raw = self.store.query(query_filter, sort, limit, timeout=deadline)
            documents = self._decode(raw, limit)
        except Exception as exc:
            notify(
                self.hook,
                "failure",
                QueryEvent(
                    OPERATION,
                    request_id,
                    copy.deepcopy(command),
                    outcome={"error": type(exc).__name__, "message": str(exc)},
                    duration_ms=(perf_counter() - started) * 1000.0,
                ),
            )
            raise

        notify(
            self.hook,
            "success",
            QueryEvent(
                OPERATION,
                request_id,
                copy.deepcopy(command),
                outcome={"count": len(documents), "documents": copy.deepcopy(list(documents))},
                duration_ms=(perf_counter() - started) * 1000.0,
            ),
        )
        logger.debug("Fetched %d document(s) after cursor %r", len(documents), cursor)
        return Page(documents=documents, request=request, key_field=self.key_field)

    def _decode(self, raw: Any, limit: int) -> tuple[Document, ...]:
        if isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Sequence):
            raise DecodeError(f"expected a sequence of documents, got {type(raw).__name__}")
        if len(raw) > limit:
            raise DecodeError(f"store returned {len(raw)} documents for limit {limit}")
        for position, doc in enumerate(raw):
            if not isinstance(doc, Mapping):
                raise DecodeError(f"item {position} is a {type(doc).__name__}, not a document")
            if self.key_field not in doc:
                raise DecodeError(f"document {position} has no {self.key_field!r} field")
        return tuple(raw)


__all__ = ["OPERATION", "PageFetcher"]
