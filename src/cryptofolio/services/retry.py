"""Retry wrapper for record store calls."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from cryptofolio.core.exceptions import OfflineError, RetryExhaustedError, TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
BASE_DELAY_SECONDS = 1.0

# Built-in network failures treated like TransientError
_RETRYABLE = (TransientError, TimeoutError, ConnectionError)


def is_retryable(error: BaseException) -> bool:
    """Only transient failures are retried; classification is by type."""
    return isinstance(error, _RETRYABLE)


class RetryableLoader:
    """
    Runs async operations with bounded exponential backoff.

    Delay before retry n (0-based) is base_delay * 2**n. Non-transient
    errors propagate after a single attempt. While offline, no attempt is
    made at all.
    """

    def __init__(
        self,
        is_offline: Callable[[], bool] = lambda: False,
        max_retries: int = MAX_RETRIES,
        base_delay: float = BASE_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._is_offline = is_offline
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._sleep = sleep

    async def run(
        self,
        operation: str,
        op: Callable[[], Awaitable[T]],
        max_retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        on_retry: Optional[Callable[[int], None]] = None,
    ) -> T:
        """
        Execute op, retrying transient failures.

        Args:
            operation: Name used in logs and in the exhausted-retries error
            op: Zero-argument coroutine factory, called once per attempt
            max_retries: Override of the loader's retry budget
            base_delay: Override of the loader's base delay in seconds
            on_retry: Called with the retry number (1-based) before each retry

        Raises:
            OfflineError: client is offline; op was not called
            RetryExhaustedError: transient failure persisted past the budget
        """
        retries = self._max_retries if max_retries is None else max_retries
        delay = self._base_delay if base_delay is None else base_delay

        if self._is_offline():
            raise OfflineError(f"Cannot {operation} while offline")

        attempt = 0
        while True:
            try:
                return await op()
            except Exception as e:
                if not is_retryable(e):
                    raise
                if attempt >= retries:
                    logger.error("%s failed after %d retries: %s", operation, retries, e)
                    raise RetryExhaustedError(operation, retries, e) from e

                wait = delay * (2 ** attempt)
                attempt += 1
                logger.warning(
                    "%s failed (%s); retrying (%d/%d) in %.2fs", operation, e, attempt, retries, wait
                )
                if on_retry is not None:
                    on_retry(attempt)
                await self._sleep(wait)
                if self._is_offline():
                    raise OfflineError(f"Cannot {operation} while offline") from e
