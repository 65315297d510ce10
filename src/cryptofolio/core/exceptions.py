"""Application-level exceptions."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification used to decide retry and presentation behavior."""

    MISSING_CREDENTIALS = "MISSING_CREDENTIALS"
    OFFLINE = "OFFLINE"
    AUTHORIZATION_DENIED = "AUTHORIZATION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    TRANSIENT = "TRANSIENT"
    VALIDATION = "VALIDATION"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    APP = "APP_ERROR"


class AppError(Exception):
    """Base exception for application errors."""

    kind: ErrorKind = ErrorKind.APP

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.kind.value
        super().__init__(message)


class MissingCredentialsError(AppError):
    """Raised when required remote configuration is absent."""

    kind = ErrorKind.MISSING_CREDENTIALS

    def __init__(self, message: str = "Record store credentials are not configured"):
        super().__init__(message)


class OfflineError(AppError):
    """Raised before any I/O is attempted while the client is offline."""

    kind = ErrorKind.OFFLINE

    def __init__(self, message: str = "You are currently offline. Please check your internet connection."):
        super().__init__(message)


class AuthorizationDeniedError(AppError):
    """Raised when the remote side rejects an operation."""

    kind = ErrorKind.AUTHORIZATION_DENIED

    def __init__(self, message: str):
        super().__init__(message)


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class TransientError(AppError):
    """Raised for timeouts, dropped connections and 5xx-class failures."""

    kind = ErrorKind.TRANSIENT

    def __init__(self, message: str):
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)


class RetryExhaustedError(AppError):
    """Raised when a transient failure persists past the retry budget."""

    kind = ErrorKind.RETRY_EXHAUSTED

    def __init__(self, operation: str, retries: int, cause: BaseException):
        self.operation = operation
        self.retries = retries
        self.cause = cause
        detail = getattr(cause, "message", None) or str(cause) or type(cause).__name__
        super().__init__(f"{operation} failed: {detail} (after {retries} retries)")
