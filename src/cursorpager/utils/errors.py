"""Typed exceptions for store access, queries and configuration.

Each error also derives from the closest builtin so callers may catch either
the package type or the builtin category (``ConnectionError``,
``TimeoutError``, ``ValueError``).
"""


class PagerError(Exception):
    """Base class for all package errors."""


class StoreConnectionError(PagerError, ConnectionError):
    """Raised when the store is unreachable or rejects the credentials."""


class QueryError(PagerError, ValueError):
    """Raised when a query is malformed or rejected by the store."""


class QueryTimeoutError(PagerError, TimeoutError):
    """Raised when a query exceeds its deadline.

    Retrying with the same cursor is safe.
    """


class DecodeError(PagerError, ValueError):
    """Raised when a store response cannot be read as a document sequence."""


class ConfigError(PagerError, ValueError):
    """Raised when configuration is incomplete or invalid."""
