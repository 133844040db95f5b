"""Error taxonomy and the HTTP-facing error classifier.

Every failure that crosses a component boundary is one of the exceptions
below.  Provider clients tag their errors with an :class:`ErrorKind` so that
retry decisions and HTTP mapping are a pattern match on the kind rather
than a scan of provider-specific exception text.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

BUSY_MESSAGE = "Service is currently busy. Please try again in a few moments."
GENERIC_MESSAGE = "An error occurred processing your request"

_RATE_LIMIT_MARKERS = ("rate limit", "rate_limit", "ratelimit")


class ErrorKind(str, enum.Enum):
    """Classification attached to a :class:`ProviderError`."""

    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    FATAL = "fatal"


class WellnessRagError(Exception):
    """Base class for all errors raised by this package."""


class BadRequest(WellnessRagError):
    """The caller sent something we cannot act on (surfaced as 400)."""


class ProviderError(WellnessRagError):
    """A remote embedding or chat-completion call failed."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.FATAL) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def retryable(self) -> bool:
        return self.kind is not ErrorKind.FATAL

    def __repr__(self) -> str:
        return f"ProviderError({str(self)!r}, kind={self.kind.value})"


class StoreError(WellnessRagError):
    """The vector store could not complete a read or write."""


class FetchError(WellnessRagError):
    """A source page could not be fetched or rendered."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


# ── Classification ────────────────────────────────────────────────────


@dataclass(frozen=True)
class ErrorOutcome:
    """What the HTTP layer tells the caller about a failure."""

    status_code: int
    message: str
    retryable: bool = False


def is_rate_limited(exc: BaseException) -> bool:
    """Return ``True`` when *exc* signals rate limiting.

    Tagged provider errors are decided by their kind; anything else falls
    back to looking for a rate-limit marker in the message.
    """
    if isinstance(exc, ProviderError):
        return exc.kind is ErrorKind.RATE_LIMITED
    text = str(exc).lower()
    return any(marker in text for marker in _RATE_LIMIT_MARKERS)


def classify_error(exc: BaseException) -> ErrorOutcome:
    """Map *exc* to a status code and a user-safe message."""
    if isinstance(exc, BadRequest):
        return ErrorOutcome(status_code=400, message=str(exc) or "Bad request")
    if is_rate_limited(exc):
        return ErrorOutcome(status_code=429, message=BUSY_MESSAGE, retryable=True)
    return ErrorOutcome(status_code=500, message=GENERIC_MESSAGE)
