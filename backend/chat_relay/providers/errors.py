from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Provider-independent failure categories."""

    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    BAD_REQUEST = "bad_request"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class ProviderError(Exception):
    """
    Raised by a ChatProvider when the upstream call cannot produce a reply.

    ``status_code`` is the upstream HTTP status when one was received.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.provider = provider
        self.status_code = status_code

    def __repr__(self) -> str:
        return (
            f"ProviderError(kind={self.kind.value!r}, provider={self.provider!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


def kind_from_status(status_code: Optional[int]) -> ErrorKind:
    """Classify a bare upstream HTTP status."""
    if status_code is None:
        return ErrorKind.UNKNOWN
    if status_code in (401, 403):
        return ErrorKind.AUTHENTICATION
    if status_code == 402:
        return ErrorKind.QUOTA_EXCEEDED
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code == 408 or status_code >= 500:
        return ErrorKind.UNAVAILABLE
    if 400 <= status_code < 500:
        return ErrorKind.BAD_REQUEST
    return ErrorKind.UNKNOWN
