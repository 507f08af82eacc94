"""
Core Module
============

Shared core utilities and abstractions used across the application.
"""

from poem_collector.core.exceptions import (
    ApplicationException,
    ConfigError,
    ConnectError,
    ConnectOpenError,
    ConnectPingError,
    FetchError,
    FetchTransportError,
    FetchDecodeError,
    StoreError,
    StorePrepareError,
    StoreExecError,
    ScheduleError,
    InvalidExpression,
)

__all__ = [
    "ApplicationException",
    "ConfigError",
    "ConnectError",
    "ConnectOpenError",
    "ConnectPingError",
    "FetchError",
    "FetchTransportError",
    "FetchDecodeError",
    "StoreError",
    "StorePrepareError",
    "StoreExecError",
    "ScheduleError",
    "InvalidExpression",
]
