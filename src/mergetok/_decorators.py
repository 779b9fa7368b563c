"""Reusable decorators for tokenizer operations."""

import time
import functools
import logging
from typing import Callable

from .errors import TokenizerClosedError

log = logging.getLogger(__name__)


def measure_time(func: Callable) -> Callable:
    """Log execution time for the wrapped callable."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        # log execution time even if the decorated function throws error
        finally:
            elapsed = time.perf_counter() - start
            log.info(f"{func.__name__} completed in {elapsed:.3f} s")

    return wrapper


def requires_open(method: Callable) -> Callable:
    """Reject calls on a tokenizer whose ``close()`` has already run."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if self.closed:
            raise TokenizerClosedError(
                f"{self.__class__.__name__} is closed and can no longer be used"
            )
        return method(self, *args, **kwargs)

    return wrapper
