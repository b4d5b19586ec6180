"""Shared test doubles: an in-memory store and a recording hook."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from cursorpager.core.models import QueryEvent


class MemoryStore:
    """Document store double supporting ``$gt`` filters, one sort key and limit."""

    def __init__(self, documents: Sequence[Mapping[str, Any]] = ()) -> None:
        self.documents = [dict(doc) for doc in documents]
        self.calls: list[dict[str, Any]] = []

    def query(
        self,
        filter: Mapping[str, Any],
        sort: Sequence[tuple[str, int]],
        limit: int,
        *,
        timeout: float | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append({"filter": filter, "sort": list(sort), "limit": limit, "timeout": timeout})
        docs = self.documents
        for field, condition in filter.items():
            docs = [d for d in docs if field in d and d[field] > condition["$gt"]]
        (key, direction), = sort
        docs = sorted(docs, key=lambda d: d[key], reverse=direction < 0)
        return [dict(d) for d in docs[:limit]]


class FailingStore:
    """Store raising ``error`` after ``fail_after`` successful calls."""

    def __init__(self, inner: MemoryStore, error: Exception, fail_after: int = 0) -> None:
        self.inner = inner
        self.error = error
        self.fail_after = fail_after
        self.calls = 0

    def query(self, filter: Any, sort: Any, limit: int, *, timeout: float | None = None) -> Any:
        self.calls += 1
        if self.calls > self.fail_after:
            raise self.error
        return self.inner.query(filter, sort, limit, timeout=timeout)


class RecordingHook:
    """Hook keeping ``(phase, event)`` tuples in call order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, QueryEvent]] = []

    def on_query_start(self, event: QueryEvent) -> None:
        self.events.append(("start", event))

    def on_query_success(self, event: QueryEvent) -> None:
        self.events.append(("success", event))

    def on_query_failure(self, event: QueryEvent) -> None:
        self.events.append(("failure", event))

    @property
    def phases(self) -> list[str]:
        return [phase for phase, _ in self.events]


def make_docs(n: int, start: int = 1) -> list[dict[str, Any]]:
    return [{"_id": i, "title": f"doc {i}", "meta": {"rank": i % 3}} for i in range(start, start + n)]


@pytest.fixture()
def store25() -> MemoryStore:
    return MemoryStore(make_docs(25))


@pytest.fixture()
def hook() -> RecordingHook:
    return RecordingHook()
