"""Query observation hooks.

A hook is told about every query the fetcher issues: once right before it is
sent and once after its reply or failure.  Hooks only observe.  Events are
frozen, and any exception raised by a hook is logged and discarded so it can
never change the outcome of the query being observed.

Two adapters ship with the package:

* :class:`LoggingHook` renders events as indented extended JSON into a
  :mod:`logging` logger, skipping session housekeeping operations.
* :class:`CommandEventListener` plugs a hook into pymongo's command
  monitoring so the raw wire commands issued by the driver are observed too.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from bson import json_util
from pymongo.monitoring import (
    CommandFailedEvent,
    CommandListener,
    CommandStartedEvent,
    CommandSucceededEvent,
)

from .models import QueryEvent

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_OPERATIONS: frozenset[str] = frozenset({"endSessions", "ping"})

_JSON_OPTIONS = json_util.RELAXED_JSON_OPTIONS


@runtime_checkable
class QueryHook(Protocol):
    """Protocol for query observers."""

    def on_query_start(self, event: QueryEvent) -> None:
        """Called immediately before a query is sent."""

        ...

    def on_query_success(self, event: QueryEvent) -> None:
        """Called after a reply was received for the query."""

        ...

    def on_query_failure(self, event: QueryEvent) -> None:
        """Called after the query failed."""

        ...


class NullHook:
    """Hook that ignores every event."""

    def on_query_start(self, event: QueryEvent) -> None:
        pass

    def on_query_success(self, event: QueryEvent) -> None:
        pass

    def on_query_failure(self, event: QueryEvent) -> None:
        pass


def notify(hook: QueryHook, phase: str, event: QueryEvent) -> None:
    """Invoke ``hook.on_query_<phase>(event)`` without letting it raise."""

    try:
        getattr(hook, f"on_query_{phase}")(event)
    except Exception:
        logger.warning(
            "Query hook %s failed on %s of %s #%d",
            type(hook).__name__,
            phase,
            event.operation,
            event.request_id,
            exc_info=True,
        )


def format_event(event: QueryEvent, indent: int = 2) -> str:
    """Render ``event`` as indented relaxed extended JSON."""

    return json_util.dumps(event.as_dict(), indent=indent or None, json_options=_JSON_OPTIONS)


class LoggingHook:
    """Write query events to a logger as indented key/value text.

    Parameters
    ----------
    logger:
        Destination logger, defaults to ``cursorpager.queries``.
    excluded_operations:
        Operation names treated as housekeeping noise and never logged.
    indent:
        JSON indentation; ``0`` renders each event on one line.
    level:
        Level used for start and success events.  Failures are always logged
        at ``WARNING`` or above.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        excluded_operations: Iterable[str] = DEFAULT_EXCLUDED_OPERATIONS,
        indent: int = 2,
        level: int = logging.DEBUG,
    ) -> None:
        self.logger = logger or logging.getLogger("cursorpager.queries")
        self.excluded_operations = frozenset(excluded_operations)
        self.indent = indent
        self.level = level

    def is_excluded(self, event: QueryEvent) -> bool:
        return event.operation in self.excluded_operations

    def _emit(self, level: int, label: str, event: QueryEvent) -> None:
        if self.is_excluded(event) or not self.logger.isEnabledFor(level):
            return
        self.logger.log(level, "%s\n%s", label, format_event(event, self.indent))

    def on_query_start(self, event: QueryEvent) -> None:
        self._emit(self.level, "query started", event)

    def on_query_success(self, event: QueryEvent) -> None:
        self._emit(self.level, "query succeeded", event)

    def on_query_failure(self, event: QueryEvent) -> None:
        self._emit(max(self.level, logging.WARNING), "query failed", event)


class CommandEventListener(CommandListener):
    """pymongo command listener forwarding driver commands to a hook.

    Register it through ``MongoClient(event_listeners=[...])``.  Command names
    become event operations, so the exclusion set of :class:`LoggingHook`
    applies to driver housekeeping such as ``endSessions``.
    """

    def __init__(self, hook: QueryHook) -> None:
        self.hook = hook

    def started(self, event: CommandStartedEvent) -> None:
        notify(
            self.hook,
            "start",
            QueryEvent(
                operation=event.command_name,
                request_id=event.request_id,
                request=event.command,
            ),
        )

    def succeeded(self, event: CommandSucceededEvent) -> None:
        notify(
            self.hook,
            "success",
            QueryEvent(
                operation=event.command_name,
                request_id=event.request_id,
                outcome=event.reply,
                duration_ms=event.duration_micros / 1000.0,
            ),
        )

    def failed(self, event: CommandFailedEvent) -> None:
        notify(
            self.hook,
            "failure",
            QueryEvent(
                operation=event.command_name,
                request_id=event.request_id,
                outcome={"failure": event.failure},
                duration_ms=event.duration_micros / 1000.0,
            ),
        )


__all__ = [
    "DEFAULT_EXCLUDED_OPERATIONS",
    "CommandEventListener",
    "LoggingHook",
    "NullHook",
    "QueryHook",
    "format_event",
    "notify",
]
