"""Bounded retry with exponential backoff for store round-trips."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from .errors import IntegrityError, RetryExhausted, StoreError, ValidationError
from .results import Err, Ok, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_ms: int = 500
    backoff_factor: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must be >= 0")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before ``attempt`` (1-indexed). Zero for the first."""
        if attempt <= 1:
            return 0.0
        return self.base_delay_ms * self.backoff_factor ** (attempt - 2) / 1000.0

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay_ms=settings.retry_base_delay_ms,
            backoff_factor=settings.retry_backoff_factor,
        )


class RetryExecutor:
    """Runs a store operation up to ``max_attempts`` times.

    Both ``Err`` results and raised exceptions count as failures, since the
    backing client reports most errors as data. Validation and integrity
    errors are the caller's bug, not a transient condition, and propagate on
    the first attempt. When every attempt fails a single ``RetryExhausted`` is
    raised whose cause is the last attempt's error.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    async def execute(self, op: Callable[[], Awaitable[Result[T]]]) -> Ok[T]:
        last_error: BaseException | None = None
        attempts = self.policy.max_attempts

        for attempt in range(1, attempts + 1):
            if attempt > 1:
                await self._sleep(self.policy.delay_for(attempt))
            try:
                result = await op()
            except (ValidationError, IntegrityError):
                raise
            except (StoreError, OSError, TimeoutError) as exc:
                last_error = exc
            else:
                if isinstance(result, Err):
                    last_error = result.error
                else:
                    return result

            logger.warning(
                "Store call failed (attempt %d/%d): %s", attempt, attempts, last_error
            )

        logger.error("Store call failed after %d attempts: %s", attempts, last_error)
        raise RetryExhausted(attempts, last_error) from last_error
