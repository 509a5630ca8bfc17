"""
Utility functions for the student statistics service.

Logging setup, the bounded retry combinator used for page queries and a
small timing helper for the HTTP layer.
"""

import sys
import time
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Setup structured logging for the service and demo"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers
    )
    return logging.getLogger('studentstats')


# ---------- Bounded retry ----------

@dataclass
class RetryOutcome:
    """Result of a retried call: either a value or the last retryable error."""
    value: Any = None
    error: Optional[BaseException] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def retry_call(operation: Callable[[], Any], retries: int,
               retry_on: Tuple[Type[BaseException], ...] = (Exception,)) -> RetryOutcome:
    """
    Call `operation` until it succeeds, allowing `retries` extra attempts
    after the first one. Only exceptions in `retry_on` are retried; anything
    else propagates to the caller unchanged.

    Retries are immediate, there is no backoff.
    """
    if retries < 0:
        raise ValueError("retries must be >= 0")

    attempts = 0
    last_error = None
    while attempts <= retries:
        attempts += 1
        try:
            return RetryOutcome(value=operation(), attempts=attempts)
        except retry_on as e:
            last_error = e
            logger.debug(f"Attempt {attempts}/{retries + 1} failed: {e!r}")

    return RetryOutcome(error=last_error, attempts=attempts)


# ---------- Timing ----------

def measure_performance(operation_name: str, func, *args, **kwargs) -> Tuple[Any, Dict[str, Any]]:
    """Run `func` and return its result with timing information"""
    start_time = time.perf_counter()
    try:
        result = func(*args, **kwargs)
    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f"{operation_name} failed after {execution_time_ms:.2f}ms: {e}")
        raise

    execution_time_ms = (time.perf_counter() - start_time) * 1000
    logger.debug(f"{operation_name} completed in {execution_time_ms:.2f}ms")
    return result, {
        "operation": operation_name,
        "execution_time_ms": execution_time_ms,
        "timestamp": time.time()
    }
