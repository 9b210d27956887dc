"""
Retry with exponential backoff.

Used by collaborators that talk to the network. The delay before retry
``n`` is ``min_delay * factor ** n`` plus up to ``min_delay`` of jitter,
capped at ``max_delay``.
"""

import random
import time
from typing import Callable, Optional, TypeVar

from packslip.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def compute_delay(attempt: int, min_delay: float, factor: float, max_delay: float) -> float:
    """
    Backoff delay in seconds before retry number ``attempt`` (1 for the first
    retry). The first retry already waits ``min_delay * factor``.
    """
    base = min_delay * factor ** attempt
    jitter = random.random() * min_delay
    return min(base + jitter, max_delay)


def with_retry(
    fn: Callable[[], T],
    retries: int = 3,
    min_delay: float = 0.2,
    factor: float = 2.0,
    max_delay: float = 3.0,
    should_retry: Optional[Callable[[Exception], bool]] = None,
    sleep: Callable[[float], None] = time.sleep
) -> T:
    """
    Call ``fn`` until it succeeds or the retry budget is spent.
    
    Args:
        fn: Zero-argument callable to invoke.
        retries: Retries after the first attempt.
        min_delay: Base delay in seconds.
        factor: Exponential growth factor.
        max_delay: Upper bound on a single delay.
        should_retry: Predicate deciding whether an exception is transient.
            Defaults to retrying every exception.
        sleep: Sleep function (injectable for tests).
        
    Returns:
        The value returned by ``fn``.
        
    Raises:
        Exception: The last exception raised by ``fn`` once retries are
            exhausted or ``should_retry`` rejects it.
    """
    attempt = 0
    while True:
        try:
            return fn()
        except Exception as e:
            attempt += 1
            retryable = should_retry(e) if should_retry else True
            if attempt > retries or not retryable:
                raise
            delay = compute_delay(attempt, min_delay, factor, max_delay)
            logger.warning(f"Attempt {attempt} failed ({e}); retrying in {delay:.2f}s")
            sleep(delay)
