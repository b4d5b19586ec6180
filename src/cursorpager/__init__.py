"""Cursor-based pagination over document stores.

Pages are fetched with fresh bounded queries sorted by an identifying key, and
the key of the last document of each page seeds the filter of the next one.
"""

from __future__ import annotations

from .core.driver import PaginationDriver, paginate
from .core.fetcher import PageFetcher
from .core.hooks import CommandEventListener, LoggingHook, NullHook, QueryHook
from .core.models import Page, PageRequest, QueryEvent, parse_key
from .utils.errors import (
    ConfigError,
    DecodeError,
    PagerError,
    QueryError,
    QueryTimeoutError,
    StoreConnectionError,
)

__version__ = "0.1.0"

__all__ = [
    "CommandEventListener",
    "ConfigError",
    "DecodeError",
    "LoggingHook",
    "NullHook",
    "Page",
    "PageFetcher",
    "PageRequest",
    "PagerError",
    "PaginationDriver",
    "QueryError",
    "QueryEvent",
    "QueryHook",
    "QueryTimeoutError",
    "StoreConnectionError",
    "paginate",
    "parse_key",
    "__version__",
]
