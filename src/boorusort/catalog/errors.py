"""Errors raised by the remote catalog layer."""

from __future__ import annotations


class CatalogError(Exception):
    """Base exception for remote catalog failures."""


class TransportError(CatalogError):
    """Raised when a request fails at the network or HTTP level."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ThrottleError(TransportError):
    """Raised when the API keeps answering HTTP 429 after the retry."""


class MalformedResponseError(CatalogError):
    """Raised when the API answers with a body of the wrong shape."""


class QueryError(CatalogError):
    """Raised when a tag query cannot be issued as written."""


class ConversionError(CatalogError):
    """Raised when an image cannot be decoded for re-encoding."""


__all__ = [
    "CatalogError",
    "TransportError",
    "ThrottleError",
    "MalformedResponseError",
    "QueryError",
    "ConversionError",
]
