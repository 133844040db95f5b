"""Bounded retry with exponential back-off for provider calls."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from wellness_rag.errors import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for :func:`with_retry`.

    Attributes
    ----------
    max_attempts:
        Total number of invocations, including the first one.
    initial_delay:
        Seconds to wait before the second attempt.
    max_delay:
        Upper bound on any single wait.
    multiplier:
        Growth factor applied per attempt.
    """

    max_attempts: int = 3
    initial_delay: float = 0.5
    max_delay: float = 8.0
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("retry delays must be non-negative")
        if self.multiplier < 1:
            raise ValueError(f"multiplier must be >= 1, got {self.multiplier}")

    def delay_for(self, attempt: int) -> float:
        """Back-off before retry number *attempt* (0-based); never decreases."""
        return min(self.initial_delay * (self.multiplier**attempt), self.max_delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    operation_name: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``operation()`` until it succeeds or the policy gives up.

    Only :class:`ProviderError` instances whose kind is retryable are
    retried.  Fatal provider errors and every other exception propagate on
    the first failure.  When attempts run out the last error is re-raised.
    Cancellation is never retried and interrupts the back-off sleep.
    """
    for attempt in range(policy.max_attempts):
        try:
            result = await operation()
        except ProviderError as exc:
            if not exc.retryable:
                logger.error("%s failed with non-retryable error: %s", operation_name, exc)
                raise
            if attempt == policy.max_attempts - 1:
                logger.error("%s exhausted all %d attempts", operation_name, policy.max_attempts)
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "%s failed on attempt %d/%d (%s); retrying in %.2fs",
                operation_name,
                attempt + 1,
                policy.max_attempts,
                exc.kind.value,
                delay,
            )
            await sleep(delay)
        else:
            if attempt > 0:
                logger.info("%s succeeded after %d attempts", operation_name, attempt + 1)
            return result

    raise AssertionError("unreachable")  # pragma: no cover
