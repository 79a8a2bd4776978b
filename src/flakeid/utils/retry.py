"""Retry utilities with exponential backoff and jitter."""

import functools
import random
import time
from typing import Callable, Iterable, ParamSpec, Tuple, Type, TypeVar

from flakeid.utils.logging import get_logger

logger = get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def retry(
    *,
    max_attempts: int = 3,
    backoff_base: float = 0.001,
    exceptions: Iterable[Type[BaseException]] = (Exception,),
    jitter: bool = True,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator to retry a blocking callable with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts before giving up.
        backoff_base: Wait before retry n is backoff_base * 2 ** (n - 1) seconds.
        exceptions: Exception types that trigger a retry; anything else propagates.
        jitter: Whether to apply random jitter to backoff waits.
    """

    exc_tuple: Tuple[Type[BaseException], ...] = tuple(exceptions)

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except exc_tuple as exc:
                    if attempt >= max_attempts:
                        raise
                    wait = backoff_base * 2 ** (attempt - 1)
                    if jitter:
                        wait *= random.uniform(0.5, 1.5)

                    logger.warning(
                        "retrying_operation",
                        function=getattr(func, "__name__", repr(func)),
                        attempt=attempt,
                        max_attempts=max_attempts,
                        wait_seconds=wait,
                        error=str(exc),
                    )

                    time.sleep(wait)
                    attempt += 1

        return wrapper

    return decorator


__all__ = ["retry"]
