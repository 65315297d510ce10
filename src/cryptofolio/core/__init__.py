"""Core utilities and shared functionality."""

from cryptofolio.core.clock import (
    Clock,
    SystemClock,
    now_utc,
    to_utc,
    parse_datetime_utc,
    UTC,
)
from cryptofolio.core.exceptions import (
    ErrorKind,
    AppError,
    MissingCredentialsError,
    OfflineError,
    AuthorizationDeniedError,
    NotFoundError,
    TransientError,
    ValidationError,
    RetryExhaustedError,
)

__all__ = [
    "Clock",
    "SystemClock",
    "now_utc",
    "to_utc",
    "parse_datetime_utc",
    "UTC",
    "ErrorKind",
    "AppError",
    "MissingCredentialsError",
    "OfflineError",
    "AuthorizationDeniedError",
    "NotFoundError",
    "TransientError",
    "ValidationError",
    "RetryExhaustedError",
]
