"""Custom exceptions for the Meta Graph API client."""
from typing import Optional


class MetaGraphError(Exception):
    """Base exception for all Meta Graph client errors."""


class MetaApiError(MetaGraphError):
    """Raised when the Graph API rejects a request (non-2xx or error envelope).

    ``status`` is normalized to the 400-599 range: an error body reported
    with code 200 becomes 403, anything else outside the range becomes 500.
    """

    def __init__(self, message: str, status: int = 500):
        self.message = message
        self.status = normalize_error_status(status)
        super().__init__(message)

    def __str__(self) -> str:
        return f"Meta API error (status={self.status}): {self.message}"


class MetaTransportError(MetaApiError):
    """Raised for network failures and unparseable response bodies."""

    def __init__(self, message: str):
        super().__init__(message, status=500)


def normalize_error_status(status: Optional[int]) -> int:
    if status is None:
        return 500
    try:
        status = int(status)
    except (TypeError, ValueError):
        return 500
    if status == 200:
        status = 403
    if status < 400 or status >= 600:
        status = 500
    return status
