import asyncio
import functools
import logging
import time

logger = logging.getLogger(__name__)


class Profiler:
    """
    Decorator for timing synchronous and asynchronous methods. Durations are
    logged at DEBUG so they only show up when debug logging is enabled.
    """

    @staticmethod
    def _report(name, started):
        if logger.isEnabledFor(logging.DEBUG):
            elapsed = time.perf_counter() - started
            logger.debug(f"[Profiler] {name} took {elapsed * 1000:.2f}ms")

    @staticmethod
    def profile(func):
        name = func.__qualname__

        if asyncio.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                started = time.perf_counter()
                try:
                    return await func(*args, **kwargs)
                finally:
                    Profiler._report(name, started)

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                Profiler._report(name, started)

        return sync_wrapper
