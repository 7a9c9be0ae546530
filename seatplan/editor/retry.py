"""
Retry wrapper for store writes
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)


@dataclass
class RetryResult:
    """Outcome of a retried operation"""
    success: bool
    value: Any = None
    error: Optional[BaseException] = None
    attempts: int = 0


def linear_backoff(step: float) -> Callable[[int], float]:
    """Delay before the next try grows by ``step`` seconds per failed attempt"""
    return lambda attempt: step * attempt


async def execute_with_retry(
    operation: Callable[[], Any],
    attempts: int = 3,
    backoff: Callable[[int], float] = linear_backoff(0.5),
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    description: str = "operation",
    run_in_thread: bool = False,
) -> RetryResult:
    """Run ``operation`` up to ``attempts`` times.

    ``operation`` may be a plain callable or return an awaitable. Errors
    listed in ``retry_on`` are retried and finally reported on the result;
    anything else propagates. With ``run_in_thread`` a blocking
    ``operation`` runs in a worker thread so the event loop stays free.
    """
    last_error: Optional[BaseException] = None
    for attempt in range(1, attempts + 1):
        try:
            if run_in_thread:
                value = await asyncio.to_thread(operation)
            else:
                value = operation()
            if inspect.isawaitable(value):
                value = await value
            return RetryResult(success=True, value=value, attempts=attempt)
        except retry_on as e:
            last_error = e
            logger.warning(f"{description} failed (attempt {attempt}/{attempts}): {e}")
            if attempt < attempts:
                delay = backoff(attempt)
                if delay > 0:
                    await asyncio.sleep(delay)

    logger.error(f"{description} failed after {attempts} attempts: {last_error}")
    return RetryResult(success=False, error=last_error, attempts=attempts)
