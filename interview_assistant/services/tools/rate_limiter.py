from __future__ import annotations
import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class RequestThrottle:
    """
    Process-wide admission gate for the shared LLM API key.

    Every caller is admitted at least `min_interval` seconds after the previous
    one. The wait happens while the lock is held and the timestamp is recorded
    before release, so concurrent callers can never both read a stale
    "last request" value. The lock only covers wait-then-record, never the LLM
    call itself.
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._min_interval = max(0.0, min_interval)
        self._clock = clock
        self._sleep = sleep
        self._last_request: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def min_interval(self) -> float:
        return self._min_interval

    @property
    def last_request(self) -> Optional[float]:
        return self._last_request

    async def acquire(self) -> None:
        """Blocks until the caller may issue its LLM request."""
        async with self._lock:
            if self._last_request is not None:
                elapsed = self._clock() - self._last_request
                wait_time = self._min_interval - elapsed
                if wait_time > 0:
                    logger.info(f"LLM request throttled. Waiting {wait_time:.2f}s")
                    await self._sleep(wait_time)
            self._last_request = self._clock()
