"""Core pagination data model.

A :class:`Page` is an immutable, ascending run of documents produced by one
fetch.  The cursor is not a server resource: it is the identifying key of the
last document of the previous page, exposed as :attr:`Page.last_key`, and is
carried by the caller into the next :class:`PageRequest`.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeAlias

from bson import ObjectId

from cursorpager.utils.errors import QueryError

Document: TypeAlias = Mapping[str, Any]
Key: TypeAlias = Any

DEFAULT_KEY_FIELD = "_id"

_INT_RE = re.compile(r"^[+-]?\d+$")


@dataclass(slots=True, frozen=True)
class PageRequest:
    """Arguments of a single page fetch.

    ``cursor`` is the key of the last document already consumed, or ``None``
    for the start of the collection.  ``limit`` must be a positive integer.
    """

    cursor: Key | None
    limit: int

    def __post_init__(self) -> None:  # noqa: D401 - simple validation
        if isinstance(self.limit, bool) or not isinstance(self.limit, int):
            raise QueryError(f"limit must be an integer, got {type(self.limit).__name__}")
        if self.limit <= 0:
            raise QueryError("limit must be positive")

    def filter(self, key_field: str = DEFAULT_KEY_FIELD) -> dict[str, Any]:
        """Return the store filter selecting documents after ``cursor``."""

        if self.cursor is None:
            return {}
        return {key_field: {"$gt": self.cursor}}

    @staticmethod
    def sort(key_field: str = DEFAULT_KEY_FIELD) -> list[tuple[str, int]]:
        """Return the ascending sort specification on ``key_field``."""

        return [(key_field, 1)]


@dataclass(slots=True, frozen=True)
class Page:
    """Ordered batch of documents returned by one fetch."""

    documents: tuple[Document, ...]
    request: PageRequest
    key_field: str = DEFAULT_KEY_FIELD

    def __len__(self) -> int:
        return len(self.documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self.documents)

    def __getitem__(self, index: int) -> Document:
        return self.documents[index]

    @property
    def is_empty(self) -> bool:
        """``True`` when the page signals exhaustion."""

        return not self.documents

    @property
    def is_partial(self) -> bool:
        """``True`` when fewer documents than requested were returned."""

        return len(self.documents) < self.request.limit

    @property
    def last_key(self) -> Key | None:
        """Key of the last document, i.e. the cursor for the next page."""

        if not self.documents:
            return None
        return self.documents[-1][self.key_field]

    def keys(self) -> list[Key]:
        return [doc[self.key_field] for doc in self.documents]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class QueryEvent:
    """Observation of one query lifecycle step.

    ``request`` is the command sent to the store and ``outcome`` the reply or
    failure description; both are plain JSON-compatible payloads (BSON types
    allowed).  ``request_id`` is shared by the start event and its matching
    success or failure event.
    """

    operation: str
    request_id: int
    request: Mapping[str, Any] = field(default_factory=dict)
    outcome: Mapping[str, Any] | None = None
    timestamp: datetime = field(default_factory=_utcnow)
    duration_ms: float | None = None

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "operation": self.operation,
            "request_id": self.request_id,
            "timestamp": self.timestamp,
            "request": dict(self.request),
        }
        if self.outcome is not None:
            data["outcome"] = dict(self.outcome)
        if self.duration_ms is not None:
            data["duration_ms"] = round(self.duration_ms, 3)
        return data


def parse_key(text: str) -> Key:
    """Convert a textual cursor into a typed key.

    A 24 character hexadecimal string becomes an :class:`~bson.ObjectId`,
    an optionally signed run of digits becomes an ``int`` and anything else is
    returned unchanged.
    """

    value = text.strip()
    if ObjectId.is_valid(value) and len(value) == 24:
        return ObjectId(value)
    if _INT_RE.match(value):
        return int(value)
    return value


__all__ = [
    "DEFAULT_KEY_FIELD",
    "Document",
    "Key",
    "Page",
    "PageRequest",
    "QueryEvent",
    "parse_key",
]
