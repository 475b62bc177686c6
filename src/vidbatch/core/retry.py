"""Retry with exponential backoff and random jitter."""

import logging
import random
import time
from typing import Callable, Tuple, Type, TypeVar

from ..exceptions import MetadataFetchError, TransferError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (MetadataFetchError, TransferError)


def backoff_delay(attempt: int, base_delay: float, jitter: Callable[[], float] = None) -> float:
    """Seconds to wait after failed *attempt* (1-based): base * 2^(attempt-1) + 0..1s jitter."""
    if jitter is None:
        jitter = lambda: random.uniform(0.0, 1.0)
    return base_delay * (2 ** (max(1, attempt) - 1)) + jitter()


def retry_with_backoff(
    operation: Callable[[], T],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = RETRYABLE_ERRORS,
    sleep: Callable[[float], None] = time.sleep,
    jitter: Callable[[], float] = None,
    description: str = "operation",
) -> T:
    """Call *operation* up to *max_attempts* times, sleeping between failures.

    Only exceptions in *retry_on* are retried; anything else propagates at once.
    The last error is re-raised when every attempt failed.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 1
    while True:
        try:
            return operation()
        except retry_on as e:
            if attempt >= max_attempts:
                logger.warning("%s failed after %d attempts: %s", description, attempt, e)
                raise
            delay = backoff_delay(attempt, base_delay, jitter)
            logger.info("%s failed (attempt %d/%d): %s. Retrying in %.1fs",
                        description, attempt, max_attempts, e, delay)
            sleep(delay)
            attempt += 1
