"""Bounded retry helpers."""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Iterator, Optional, Union

logger = logging.getLogger(__name__)

Predicate = Callable[[], Union[bool, Awaitable[bool]]]
Sleep = Callable[[float], Awaitable[None]]


class Backoff:
    """Exponential backoff policy.

    Mirrors the usual "duration, factor, steps" policy: the condition is
    checked ``steps`` times and the delay between two checks grows by
    ``factor`` each time, optionally capped at ``cap`` seconds.
    """

    def __init__(
        self,
        duration: float = 1.0,
        factor: float = 2.0,
        steps: int = 12,
        cap: Optional[float] = None,
    ):
        if steps < 1:
            raise ValueError("steps must be at least 1")
        self.duration = duration
        self.factor = factor
        self.steps = steps
        self.cap = cap

    def delays(self) -> Iterator[float]:
        """Yield the ``steps - 1`` sleeps taken between checks."""
        delay = self.duration
        for _ in range(self.steps - 1):
            yield min(delay, self.cap) if self.cap is not None else delay
            delay = delay * self.factor

    def __repr__(self) -> str:
        return (
            f"Backoff(duration={self.duration}, factor={self.factor}, "
            f"steps={self.steps}, cap={self.cap})"
        )


async def retry_until(
    predicate: Predicate,
    backoff: Backoff,
    sleep: Sleep = asyncio.sleep,
    stopped: Optional[asyncio.Event] = None,
) -> bool:
    """Poll ``predicate`` until it returns True or the backoff is exhausted.

    Args:
        predicate: Sync or async callable, checked once per step
        backoff: Policy deciding how often and how long to wait
        sleep: Coroutine used to wait between checks
        stopped: Optional event that ends the poll early

    Returns:
        True if the predicate was satisfied, False on timeout or when stopped
    """
    delays = backoff.delays()
    attempt = 0
    while True:
        attempt += 1
        result = predicate()
        if inspect.isawaitable(result):
            result = await result
        if result:
            return True
        if stopped is not None and stopped.is_set():
            logger.debug(f"Retry stopped after {attempt} attempt(s)")
            return False
        delay = next(delays, None)
        if delay is None:
            logger.debug(f"Retry exhausted after {attempt} attempt(s)")
            return False
        if stopped is None:
            await sleep(delay)
        elif await _sleep_unless_stopped(sleep, delay, stopped):
            logger.debug(f"Retry stopped while waiting after {attempt} attempt(s)")
            return False


async def _sleep_unless_stopped(sleep: Sleep, delay: float, stopped: asyncio.Event) -> bool:
    """Sleep for ``delay`` seconds. Returns True if ``stopped`` was set first."""
    sleep_task = asyncio.ensure_future(sleep(delay))
    stop_task = asyncio.ensure_future(stopped.wait())
    try:
        await asyncio.wait({sleep_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (sleep_task, stop_task):
            if not task.done():
                task.cancel()
    if stopped.is_set():
        return True
    # Surface errors raised by the sleep coroutine
    sleep_task.result()
    return False
