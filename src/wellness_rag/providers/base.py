"""Boundary helpers shared by the embedding and generation clients."""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

import openai

from wellness_rag.errors import ErrorKind, ProviderError, is_rate_limited

T = TypeVar("T")

_TRANSIENT_ERRORS = (
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.InternalServerError,
    asyncio.TimeoutError,
)


def to_provider_error(exc: BaseException) -> ProviderError:
    """Translate any exception raised by a provider SDK into a tagged error."""
    if isinstance(exc, ProviderError):
        return exc
    if isinstance(exc, openai.RateLimitError):
        kind = ErrorKind.RATE_LIMITED
    elif isinstance(exc, _TRANSIENT_ERRORS):
        kind = ErrorKind.TRANSIENT
    elif isinstance(exc, openai.APIStatusError):
        kind = ErrorKind.FATAL
    elif is_rate_limited(exc):
        kind = ErrorKind.RATE_LIMITED
    else:
        kind = ErrorKind.FATAL
    return ProviderError(f"{type(exc).__name__}: {exc}", kind=kind)


async def call_provider(call: Awaitable[T], timeout: float) -> T:
    """Await *call* under *timeout*, re-raising failures as :class:`ProviderError`."""
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        raise to_provider_error(exc) from exc
