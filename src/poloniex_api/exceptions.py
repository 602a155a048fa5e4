"""Exception hierarchy for the Poloniex trading API client."""

from typing import Any


class PoloniexError(Exception):
    """Base exception for all Poloniex client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(PoloniexError):
    """Raised when credentials or client configuration are malformed."""

    pass


class ValidationError(PoloniexError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class TransportError(PoloniexError):
    """Raised when the HTTP exchange with the API fails."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class RequestTimeoutError(TransportError, TimeoutError):
    """Raised when a request gets no response within the configured timeout."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        timeout: float | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, endpoint=endpoint, details=details)
        self.timeout = timeout


class DecodeError(PoloniexError):
    """Raised when a response body does not match the expected shape."""

    def __init__(
        self,
        message: str,
        raw_body: bytes | None = None,
        detail: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.raw_body = raw_body
        self.detail = detail


class ExchangeRejectedError(PoloniexError):
    """Raised by ``Result.unwrap`` when the exchange answered with an error."""

    def __init__(self, message: str, command: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.command = command
