"""Store access behind a single bounded query operation.

The pagination core only needs one capability from a document store::

    query(filter, sort, limit, *, timeout=None) -> list[Document]

:class:`DocumentStore` captures that contract.  :class:`MongoStore` implements
it on top of a pymongo collection: every call is one ``find`` that is fully
drained and closed before returning, so no server-side cursor outlives the
call.  pymongo exceptions are translated into the package error taxonomy with
the original exception chained.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, Protocol, runtime_checkable

import pymongo
from bson.errors import InvalidBSON, InvalidDocument
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import (
    ConfigurationError,
    ConnectionFailure,
    OperationFailure,
    PyMongoError,
    ServerSelectionTimeoutError,
)
from pymongo.monitoring import CommandListener

from cursorpager.config import ConfigModel, require_store
from cursorpager.utils.errors import (
    DecodeError,
    PagerError,
    QueryError,
    QueryTimeoutError,
    StoreConnectionError,
)

from .models import Document

logger = logging.getLogger(__name__)

# Unauthorized, AuthenticationFailed
_AUTH_ERROR_CODES = frozenset({13, 18})


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for stores able to run a bounded, sorted, filtered query."""

    def query(
        self,
        filter: Mapping[str, Any],
        sort: Sequence[tuple[str, int]],
        limit: int,
        *,
        timeout: float | None = None,
    ) -> list[Document]:
        """Return at most ``limit`` documents matching ``filter`` in ``sort`` order.

        Parameters
        ----------
        filter:
            Store filter document.
        sort:
            Sequence of ``(field, direction)`` pairs.
        limit:
            Maximum number of documents to return.
        timeout:
            Deadline in seconds for the whole round trip, ``None`` for the
            store default.
        """

        ...


def translate_error(exc: PyMongoError) -> PagerError:
    """Map a pymongo exception onto the package error taxonomy."""

    if isinstance(exc, ServerSelectionTimeoutError):
        return StoreConnectionError(str(exc))
    if getattr(exc, "timeout", False):
        return QueryTimeoutError(str(exc) or "query deadline exceeded")
    if isinstance(exc, (ConnectionFailure, ConfigurationError)):
        return StoreConnectionError(str(exc))
    if isinstance(exc, OperationFailure) and exc.code in _AUTH_ERROR_CODES:
        return StoreConnectionError(str(exc))
    return QueryError(str(exc))


class MongoStore:
    """:class:`DocumentStore` backed by a pymongo :class:`Collection`."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    @property
    def collection(self) -> Collection:
        return self._collection

    def query(
        self,
        filter: Mapping[str, Any],
        sort: Sequence[tuple[str, int]],
        limit: int,
        *,
        timeout: float | None = None,
    ) -> list[Document]:
        try:
            if timeout is not None:
                with pymongo.timeout(timeout):
                    return self._find(filter, sort, limit)
            return self._find(filter, sort, limit)
        except (InvalidBSON, InvalidDocument) as exc:
            raise DecodeError(str(exc)) from exc
        except PyMongoError as exc:
            raise translate_error(exc) from exc

    def _find(
        self,
        filter: Mapping[str, Any],
        sort: Sequence[tuple[str, int]],
        limit: int,
    ) -> list[Document]:
        cursor = self._collection.find(dict(filter), sort=list(sort), limit=limit, batch_size=limit)
        try:
            return list(cursor)
        finally:
            cursor.close()


@contextmanager
def open_store(
    cfg: ConfigModel,
    *,
    listeners: Sequence[CommandListener] = (),
    env: Mapping[str, str] | None = None,
) -> Iterator[MongoStore]:
    """Connect to the configured collection and close the client on exit.

    Raises
    ------
    ConfigError
        If the URI, database or collection name is missing.
    StoreConnectionError
        If the client cannot be created from the URI.
    """

    uri, database, collection = require_store(cfg, env=env)
    try:
        client: MongoClient = MongoClient(
            uri,
            appname=cfg.store.app_name,
            event_listeners=list(listeners),
            serverSelectionTimeoutMS=cfg.store.server_selection_timeout_ms,
        )
    except PyMongoError as exc:
        raise translate_error(exc) from exc
    logger.debug("Opened client for %s.%s (app=%s)", database, collection, cfg.store.app_name)
    try:
        yield MongoStore(client[database][collection])
    finally:
        client.close()
        logger.debug("Closed client for %s.%s", database, collection)


__all__ = ["DocumentStore", "MongoStore", "open_store", "translate_error"]
