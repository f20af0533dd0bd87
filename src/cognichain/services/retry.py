"""Retry with exponential backoff and jitter."""

import asyncio
import functools
import logging
import random
from typing import Any, Awaitable, Callable, Iterator, Optional, TypeVar

from ..models.config import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryError(Exception):
    """Raised when an operation keeps failing until the attempt budget runs out."""

    def __init__(self, message: str, attempts: int, last_error: Exception):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class RetryHandler:
    """Re-invokes a failing coroutine under a RetryPolicy.

    Each call to ``execute`` owns its own attempt and delay counters, so one
    handler can serve many concurrent callers. The backoff wait is an
    ``asyncio.sleep``; cancelling the calling task interrupts it and the
    resulting ``asyncio.CancelledError`` propagates as is.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        is_retryable: Optional[Callable[[Exception], bool]] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.policy = policy or RetryPolicy.default()
        self.is_retryable = is_retryable
        self._sleep = sleep
        self._rng = rng or random.Random()

    def backoff_schedule(self) -> Iterator[int]:
        """Yield the capped delay (ms) before each retry, without jitter."""
        delay = self.policy.initial_delay_ms
        while True:
            yield min(delay, self.policy.max_delay_ms)
            delay = min(int(delay * self.policy.backoff_multiplier), self.policy.max_delay_ms)

    def apply_jitter(self, delay_ms: int) -> int:
        """Resample a delay uniformly from [0.5x, 1.5x]."""
        return self._rng.randint(int(delay_ms * 0.5), int(delay_ms * 1.5))

    async def execute(self, operation: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Run ``operation`` until it succeeds or the policy gives up.

        Raises:
            RetryError: After ``max_retries`` failed attempts. It is chained to
                the last failure, which is also kept in ``last_error``.
        """
        attempt = 0
        schedule = self.backoff_schedule()

        while True:
            try:
                return await operation(*args, **kwargs)
            except Exception as e:
                if self.is_retryable is not None and not self.is_retryable(e):
                    logger.info(f"Not retrying non-retryable error: {type(e).__name__}: {e}")
                    raise

                attempt += 1
                if attempt >= self.policy.max_retries:
                    logger.error(f"Operation failed after {attempt} attempts: {e}")
                    raise RetryError(
                        f"Operation failed after {attempt} attempts", attempt, e
                    ) from e

                delay_ms = next(schedule)
                if self.policy.use_jitter:
                    delay_ms = self.apply_jitter(delay_ms)

                logger.warning(
                    f"Attempt {attempt}/{self.policy.max_retries} failed "
                    f"({type(e).__name__}: {e}); retrying in {delay_ms}ms"
                )
                await self._sleep(delay_ms / 1000)


def retry_async(policy: Optional[RetryPolicy] = None, **handler_kwargs: Any):
    """Decorate a coroutine function so every call goes through a RetryHandler."""
    handler = RetryHandler(policy, **handler_kwargs)

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await handler.execute(func, *args, **kwargs)

        wrapper.retry_handler = handler  # type: ignore[attr-defined]
        return wrapper

    return decorator
