"""Unit tests for the rate limited work queue."""

import asyncio
import pytest
from reattach.controller.queue import (
    ItemExponentialFailureRateLimiter,
    RateLimitingQueue,
)


class TestItemExponentialFailureRateLimiter:
    def test_delay_doubles_per_failure(self):
        limiter = ItemExponentialFailureRateLimiter(base_delay=0.005, max_delay=1000)

        delays = [limiter.when("ns/a") for _ in range(4)]

        assert delays == [0.005, 0.01, 0.02, 0.04]
        assert limiter.num_requeues("ns/a") == 4

    def test_delay_is_capped(self):
        limiter = ItemExponentialFailureRateLimiter(base_delay=1, max_delay=5)
        delays = [limiter.when("ns/a") for _ in range(5)]
        assert delays == [1, 2, 4, 5, 5]

    def test_keys_are_independent(self):
        limiter = ItemExponentialFailureRateLimiter(base_delay=1, max_delay=100)
        limiter.when("ns/a")
        limiter.when("ns/a")
        assert limiter.when("ns/b") == 1

    def test_forget_resets(self):
        limiter = ItemExponentialFailureRateLimiter(base_delay=1, max_delay=100)
        limiter.when("ns/a")
        limiter.when("ns/a")

        limiter.forget("ns/a")

        assert limiter.num_requeues("ns/a") == 0
        assert limiter.when("ns/a") == 1

    def test_huge_failure_count_does_not_overflow(self):
        limiter = ItemExponentialFailureRateLimiter(base_delay=0.005, max_delay=1000)
        limiter._failures["ns/a"] = 5000
        assert limiter.when("ns/a") == 1000


class TestRateLimitingQueue:
    @pytest.mark.asyncio
    async def test_fifo(self):
        queue = RateLimitingQueue()
        await queue.add("ns/a")
        await queue.add("ns/b")

        assert await queue.get() == "ns/a"
        assert await queue.get() == "ns/b"

    @pytest.mark.asyncio
    async def test_duplicate_adds_are_collapsed(self):
        queue = RateLimitingQueue()
        await queue.add("ns/a")
        await queue.add("ns/a")
        await queue.add("ns/a")

        assert len(queue) == 1

    @pytest.mark.asyncio
    async def test_key_is_not_handed_out_twice_concurrently(self):
        queue = RateLimitingQueue()
        await queue.add("ns/a")
        key = await queue.get()
        assert queue.is_processing(key)

        # Added again while a worker holds it: parked until done()
        await queue.add("ns/a")
        assert len(queue) == 0

        await queue.done(key)
        assert len(queue) == 1
        assert not queue.is_processing(key)
        assert await queue.get() == "ns/a"

    @pytest.mark.asyncio
    async def test_done_without_readd(self):
        queue = RateLimitingQueue()
        await queue.add("ns/a")
        key = await queue.get()
        await queue.done(key)
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_get_blocks_until_add(self):
        queue = RateLimitingQueue()
        getter = asyncio.ensure_future(queue.get())
        await asyncio.sleep(0)
        assert not getter.done()

        await queue.add("ns/a")

        assert await asyncio.wait_for(getter, timeout=1) == "ns/a"

    @pytest.mark.asyncio
    async def test_shut_down_releases_waiting_getters(self):
        queue = RateLimitingQueue()
        getters = [asyncio.ensure_future(queue.get()) for _ in range(3)]
        await asyncio.sleep(0)

        await queue.shut_down()

        results = await asyncio.wait_for(asyncio.gather(*getters), timeout=1)
        assert results == [None, None, None]
        assert queue.shutting_down

    @pytest.mark.asyncio
    async def test_add_after_shut_down_is_ignored(self):
        queue = RateLimitingQueue()
        await queue.shut_down()
        await queue.add("ns/a")
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_add_rate_limited(self):
        limiter = ItemExponentialFailureRateLimiter(base_delay=0.001, max_delay=0.01)
        queue = RateLimitingQueue(rate_limiter=limiter)

        delay = queue.add_rate_limited("ns/a")

        assert delay == 0.001
        assert queue.num_requeues("ns/a") == 1
        assert await asyncio.wait_for(queue.get(), timeout=1) == "ns/a"

        queue.forget("ns/a")
        assert queue.num_requeues("ns/a") == 0

    @pytest.mark.asyncio
    async def test_shut_down_cancels_delayed_adds(self):
        queue = RateLimitingQueue()
        queue.add_after("ns/a", 60)
        assert len(queue._waiting) == 1

        await queue.shut_down()

        assert len(queue._waiting) == 0
        assert len(queue) == 0
