"""Custom exceptions."""

from hostaudit.errors.exceptions import (
    APIError,
    AuditError,
    ParseError,
    ProviderError,
    TransportError,
    ValidationError,
)

__all__ = [
    "AuditError",
    "APIError",
    "TransportError",
    "ProviderError",
    "ParseError",
    "ValidationError",
]
