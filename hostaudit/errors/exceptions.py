"""Custom exception classes for the audit pipeline."""

from typing import Any


class AuditError(Exception):
    """Base exception for audit failures."""

    pass


class APIError(AuditError):
    """Exception for external API failures (PageSpeed, DataForSEO, SEMrush)."""

    pass


class TransportError(APIError):
    """Network failure or timeout talking to an external source."""

    pass


class ProviderError(APIError):
    """External source answered with a non-success status or an error body."""

    def __init__(
        self, message: str, status_code: int | None = None, body: Any = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ParseError(AuditError):
    """A provider payload could not be decoded into the expected shape."""

    pass


class ValidationError(AuditError):
    """Exception for input validation failures."""

    pass
