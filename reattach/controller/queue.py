"""Deduplicating, rate limited work queue.

Keys are plain ``namespace/name`` strings. A key is handed to at most one
worker at a time: adding a key that is already queued is a no-op, and
adding a key that is being processed marks it dirty so it is queued again
once the worker calls ``done``.
"""

import asyncio
import logging
from collections import deque
from typing import Deque, Dict, Optional, Set

logger = logging.getLogger(__name__)


class ItemExponentialFailureRateLimiter:
    """Per key exponential backoff: ``base * 2 ** failures``, capped at ``max_delay``."""

    def __init__(self, base_delay: float = 0.005, max_delay: float = 1000.0):
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._failures: Dict[str, int] = {}

    def when(self, key: str) -> float:
        failures = self._failures.get(key, 0)
        self._failures[key] = failures + 1
        try:
            delay = self.base_delay * (2**failures)
        except OverflowError:
            return self.max_delay
        return min(delay, self.max_delay)

    def forget(self, key: str) -> None:
        self._failures.pop(key, None)

    def num_requeues(self, key: str) -> int:
        return self._failures.get(key, 0)


class RateLimitingQueue:
    """asyncio work queue with per key deduplication and delayed re-adds."""

    def __init__(
        self,
        name: str = "expansion",
        rate_limiter: ItemExponentialFailureRateLimiter = None,
    ):
        self.name = name
        self.rate_limiter = rate_limiter or ItemExponentialFailureRateLimiter()
        self._queue: Deque[str] = deque()
        self._dirty: Set[str] = set()
        self._processing: Set[str] = set()
        self._waiting: Set[asyncio.Task] = set()
        self._shutting_down = False
        self._cond: Optional[asyncio.Condition] = None

    @property
    def cond(self) -> asyncio.Condition:
        # Created lazily so the queue binds to the running loop
        if self._cond is None:
            self._cond = asyncio.Condition()
        return self._cond

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down

    def __len__(self) -> int:
        return len(self._queue)

    def is_processing(self, key: str) -> bool:
        return key in self._processing

    async def add(self, key: str) -> None:
        async with self.cond:
            if self._shutting_down:
                return
            if key in self._dirty:
                return
            self._dirty.add(key)
            if key in self._processing:
                return
            self._queue.append(key)
            self.cond.notify()

    async def get(self) -> Optional[str]:
        """Block until a key is available. Returns ``None`` once shut down."""
        async with self.cond:
            while not self._queue and not self._shutting_down:
                await self.cond.wait()
            if self._shutting_down:
                return None
            key = self._queue.popleft()
            self._processing.add(key)
            self._dirty.discard(key)
            return key

    async def done(self, key: str) -> None:
        """Mark a key as processed, re-queueing it if it was added meanwhile."""
        async with self.cond:
            self._processing.discard(key)
            if key in self._dirty and not self._shutting_down:
                self._queue.append(key)
                self.cond.notify()

    def add_after(self, key: str, delay: float) -> None:
        if self._shutting_down:
            return
        if delay <= 0:
            task = asyncio.ensure_future(self.add(key))
        else:
            task = asyncio.ensure_future(self._add_after(key, delay))
        self._waiting.add(task)
        task.add_done_callback(self._waiting.discard)

    async def _add_after(self, key: str, delay: float) -> None:
        await asyncio.sleep(delay)
        await self.add(key)

    def add_rate_limited(self, key: str) -> float:
        """Re-add a key after its backoff delay. Returns the delay used."""
        delay = self.rate_limiter.when(key)
        self.add_after(key, delay)
        return delay

    def forget(self, key: str) -> None:
        self.rate_limiter.forget(key)

    def num_requeues(self, key: str) -> int:
        return self.rate_limiter.num_requeues(key)

    async def shut_down(self) -> None:
        """Stop handing out keys and drop pending delayed re-adds."""
        async with self.cond:
            self._shutting_down = True
            self.cond.notify_all()
        for task in list(self._waiting):
            task.cancel()
        self._waiting.clear()
        logger.debug(f"Work queue {self.name} shut down")
