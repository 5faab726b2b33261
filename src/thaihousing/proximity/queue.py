"""Rate-limited task queue for outbound Overpass requests.

Tasks run with at most ``concurrency`` in flight. After each task the slot
is held for a pacing delay, which may depend on the task's result, before
the next waiting task may start. An optional sliding window caps the
number of task starts per window.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DelayPolicy = Callable[[Any], float]


class RateLimitedQueue:
    """Serializes coroutine calls with pacing between them."""

    def __init__(
        self,
        concurrency: int = 1,
        *,
        max_per_window: int = 0,
        window_seconds: float = 60.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency
        self._semaphore = asyncio.Semaphore(concurrency)
        self._max_per_window = max_per_window
        self._window = window_seconds
        self._starts: deque[float] = deque()
        self._sleep = sleep
        self._clock = clock
        self._waiting = 0
        self._active = 0
        self._completed = 0

    async def submit(
        self,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        delay_after: DelayPolicy | float = 0.0,
        **kwargs: Any,
    ) -> T:
        """Run ``fn(*args, **kwargs)`` when a slot frees up and return its result.

        *delay_after* is a number of seconds, or a callable receiving the
        task's result (``None`` if it raised) and returning seconds.
        """
        self._waiting += 1
        async with self._semaphore:
            self._waiting -= 1
            await self._throttle()
            self._active += 1
            result: Any = None
            try:
                result = await fn(*args, **kwargs)
                return result
            finally:
                self._active -= 1
                self._completed += 1
                delay = delay_after(result) if callable(delay_after) else delay_after
                if delay > 0:
                    await self._sleep(delay)

    async def _throttle(self) -> None:
        if self._max_per_window <= 0:
            return
        while True:
            now = self._clock()
            while self._starts and now - self._starts[0] >= self._window:
                self._starts.popleft()
            if len(self._starts) < self._max_per_window:
                self._starts.append(now)
                return
            wait = self._window - (now - self._starts[0])
            logger.info("Request window full, waiting %.1fs", wait)
            await self._sleep(wait)

    def stats(self) -> dict[str, int]:
        return {
            "concurrency": self.concurrency,
            "waiting": self._waiting,
            "active": self._active,
            "completed": self._completed,
        }
