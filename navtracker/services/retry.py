"""Retry logic for failed operations."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from navtracker.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_with_backoff(
    func: Callable[[], T],
    max_attempts: Optional[int] = None,
    delay: Optional[float] = None,
    backoff_multiplier: Optional[float] = None,
    exceptions: tuple = (Exception,),
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    label: str = "operation",
    give_up: Optional[Callable[[Exception], bool]] = None,
) -> T:
    """
    Retry a function with a fixed or exponential delay between attempts.

    No delay follows the final attempt.

    Args:
        func: Function or coroutine function to retry.
        max_attempts: Total number of attempts, including the first.
        delay: Delay in seconds before the second attempt.
        backoff_multiplier: Growth factor applied to the delay per attempt;
            1.0 keeps it fixed.
        exceptions: Tuple of exceptions to catch and retry.
        sleep: Awaitable sleep used between attempts.
        label: Name used in log messages.
        give_up: Predicate marking a caught exception as final; it is
            re-raised without further attempts.

    Returns:
        Result of the function call.

    Raises:
        Last exception if all attempts fail.
    """
    if max_attempts is None:
        max_attempts = settings.max_attempts
    if delay is None:
        delay = settings.retry_delay_seconds
    if backoff_multiplier is None:
        backoff_multiplier = settings.retry_backoff_multiplier
    if sleep is None:
        sleep = asyncio.sleep
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_exception = None

    for attempt in range(max_attempts):
        try:
            if asyncio.iscoroutinefunction(func):
                return await func()
            else:
                return func()
        except exceptions as e:
            last_exception = e
            if give_up is not None and give_up(e):
                logger.warning(f"Giving up on {label}: {str(e)}")
                raise
            if attempt < max_attempts - 1:
                wait_time = delay * (backoff_multiplier ** attempt)
                logger.warning(
                    f"Retrying {label} ({attempt + 1}/{max_attempts}): {str(e)}. "
                    f"Retrying in {wait_time:.2f}s..."
                )
                await sleep(wait_time)
            else:
                logger.error(
                    f"All {max_attempts} attempts failed for {label}. Last error: {str(e)}")

    raise last_exception
