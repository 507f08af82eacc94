"""
Core Exceptions
================

Custom exceptions for the poem collector.

Startup errors (config, connect, schedule) end the process. Per-run errors
(fetch, store) are caught at the scheduled task boundary and logged.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(ApplicationException):
    """Configuration file missing, unreadable or malformed."""


# ========== Database connection ==========

class ConnectError(ApplicationException):
    """Base exception for database connection failures."""


class ConnectOpenError(ConnectError):
    """The engine could not be created from the connection parameters."""


class ConnectPingError(ConnectError):
    """The engine was created but the database did not answer."""


# ========== Poem fetching ==========

class FetchError(ApplicationException):
    """Base exception for poem API failures."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(f"Poem API: {message}", details)


class FetchTransportError(FetchError):
    """Connection refused, timeout, DNS failure and similar."""


class FetchDecodeError(FetchError):
    """The response body is not JSON of the expected shape."""


# ========== Poem storage ==========

class StoreError(ApplicationException):
    """Base exception for poem persistence failures."""


class StorePrepareError(StoreError):
    """The insert statement could not be prepared."""


class StoreExecError(StoreError):
    """The insert statement failed while executing."""


# ========== Scheduling ==========

class ScheduleError(ApplicationException):
    """The schedule expression is not a valid cron expression."""

    def __init__(self, expression: str, reason: str):
        self.expression = expression
        super().__init__(
            f"Invalid schedule expression {expression!r}: {reason}",
            {"expression": expression},
        )


InvalidExpression = ScheduleError
