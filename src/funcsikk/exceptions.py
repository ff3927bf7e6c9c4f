"""Custom exception hierarchy for funcsikk.

Access denials are never raised; they are returned as result values.
Only caller misuse and infrastructure failures surface as exceptions.
"""


class SikkError(Exception):
    """Base exception for all funcsikk errors."""


class InvalidArgumentError(SikkError, ValueError):
    """Raised when a required argument is missing or malformed."""


class StoreUnavailableError(SikkError):
    """Raised on storage failures (DB connection, timeouts, integrity)."""


class ContentNotFoundError(SikkError):
    """Raised by admin services when the targeted post or category does not exist."""
