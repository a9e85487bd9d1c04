"""
Tests for the bounded-concurrency task pool.
"""

import asyncio

import pytest

from utilkit.config.models import EnvSettings
from utilkit.errors import InvalidArgumentError
from utilkit.utils.pool import TaskPool


def test_pool_reports_configuration():
    """Test a fresh pool exposes its limit and empty counters."""
    pool = TaskPool(3)
    assert pool.max_concurrency == 3
    assert pool.running_count == 0
    assert pool.queued_count == 0
    assert pool.is_at_capacity is False

    with pytest.raises(AttributeError):
        pool.max_concurrency = 5
    assert pool.max_concurrency == 3


@pytest.mark.parametrize("limit", [0, -2, 2.5, "4", None, False])
def test_invalid_limit_rejected(limit):
    """Test non-positive and non-integer limits raise."""
    with pytest.raises(InvalidArgumentError):
        TaskPool(limit)


def test_submit_requires_running_loop():
    """Test submit outside an event loop fails instead of queueing."""
    pool = TaskPool(1)
    with pytest.raises(RuntimeError):
        pool.submit(lambda: None)
    assert pool.running_count == 0


def test_from_settings():
    """Test pool size can come from settings."""
    pool = TaskPool.from_settings(EnvSettings(default_max_concurrency=4))
    assert pool.max_concurrency == 4


@pytest.mark.asyncio
async def test_execute_returns_result():
    """Test execute passes the function result through."""
    pool = TaskPool(2)

    async def add(a, b, *, scale=1):
        return (a + b) * scale

    assert await pool.execute(add, 1, 2, scale=10) == 30
    assert pool.running_count == 0


@pytest.mark.asyncio
async def test_plain_callable_runs_immediately():
    """Test a synchronous callable is invoked during submit."""
    pool = TaskPool(1)
    calls = []

    def record(value):
        calls.append(value)
        return value * 2

    future = pool.submit(record, 21)
    assert calls == [21]
    assert await future == 42
    assert pool.running_count == 0


@pytest.mark.asyncio
async def test_limit_plus_one_queues_one():
    """Test N+1 long-running jobs leave N running and 1 queued."""
    pool = TaskPool(2)
    gates = [asyncio.Event() for _ in range(3)]
    started = []

    async def job(i):
        started.append(i)
        await gates[i].wait()
        return i

    futures = [pool.submit(job, i) for i in range(3)]
    await asyncio.sleep(0)

    assert started == [0, 1]
    assert pool.running_count == 2
    assert pool.queued_count == 1
    assert pool.is_at_capacity is True

    gates[0].set()
    assert await futures[0] == 0
    # The freed slot was handed to the queued job before we resumed
    assert pool.running_count == 2
    assert pool.queued_count == 0

    await asyncio.sleep(0)
    assert started == [0, 1, 2]

    gates[1].set()
    gates[2].set()
    assert await asyncio.gather(*futures) == [0, 1, 2]
    assert pool.running_count == 0
    assert pool.is_at_capacity is False


@pytest.mark.asyncio
async def test_fifo_with_single_slot():
    """Test queued jobs start strictly in submission order."""
    pool = TaskPool(1)
    call_order = []

    async def ordered_func(order: int):
        call_order.append(f"start_{order}")
        await asyncio.sleep(0.01)
        call_order.append(f"end_{order}")
        return order

    results = await asyncio.gather(*(pool.execute(ordered_func, i) for i in range(3)))

    assert results == [0, 1, 2]
    assert call_order == [
        "start_0",
        "end_0",
        "start_1",
        "end_1",
        "start_2",
        "end_2",
    ]


@pytest.mark.asyncio
async def test_queued_start_order_matches_submission():
    """Test start order with many queued jobs and uneven durations."""
    pool = TaskPool(2)
    started = []

    async def job(i, duration):
        started.append(i)
        await asyncio.sleep(duration)
        return i

    durations = [0.03, 0.01, 0.02, 0.0, 0.01, 0.0]
    futures = [pool.submit(job, i, d) for i, d in enumerate(durations)]
    assert pool.queued_count == 4

    assert await asyncio.gather(*futures) == list(range(6))
    assert started == list(range(6))


@pytest.mark.asyncio
async def test_never_exceeds_limit():
    """Test observed concurrency stays within the limit."""
    pool = TaskPool(3)
    active = 0
    peak = 0

    async def job(i):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.001 * (i % 4))
        active -= 1
        return i

    results = await asyncio.gather(*(pool.execute(job, i) for i in range(20)))

    assert results == list(range(20))
    assert peak == 3
    assert pool.running_count == 0
    assert pool.queued_count == 0


@pytest.mark.asyncio
async def test_failure_propagates_unchanged():
    """Test the caller sees the exact exception raised by its job."""
    pool = TaskPool(2)
    error = ValueError("test error")

    async def failing_func():
        raise error

    with pytest.raises(ValueError, match="test error") as exc_info:
        await pool.execute(failing_func)
    assert exc_info.value is error
    assert pool.running_count == 0


@pytest.mark.asyncio
async def test_failing_job_frees_slot():
    """Test a queued job still runs after the job ahead of it fails."""
    pool = TaskPool(1)

    async def failing_func():
        await asyncio.sleep(0.01)
        raise RuntimeError("boom")

    async def success_func():
        return "success"

    first = pool.submit(failing_func)
    second = pool.submit(success_func)
    assert pool.queued_count == 1

    with pytest.raises(RuntimeError, match="boom"):
        await first
    assert await second == "success"
    assert pool.running_count == 0


@pytest.mark.asyncio
async def test_synchronous_raise_frees_slot():
    """Test a callable raising during invocation fails only its own future."""
    pool = TaskPool(1)

    def broken():
        raise KeyError("missing")

    with pytest.raises(KeyError):
        await pool.execute(broken)
    assert pool.running_count == 0
    assert await pool.execute(lambda: "ok") == "ok"


@pytest.mark.asyncio
async def test_stop_iteration_fails_job_and_frees_slot():
    """Test a StopIteration from a plain callable settles as RuntimeError."""
    pool = TaskPool(1)
    exhausted = iter(())

    first = pool.submit(lambda: next(exhausted))
    second = pool.submit(lambda: "ok")

    assert pool.running_count == 0
    assert pool.queued_count == 0
    with pytest.raises(RuntimeError) as exc_info:
        await first
    assert isinstance(exc_info.value.__cause__, StopIteration)
    assert await second == "ok"


@pytest.mark.asyncio
async def test_stop_iteration_in_queued_job_keeps_draining():
    """Test a queued StopIteration job does not stall the jobs behind it."""
    pool = TaskPool(1)
    gate = asyncio.Event()
    exhausted = iter(())

    async def blocker():
        await gate.wait()
        return "blocker"

    first = pool.submit(blocker)
    second = pool.submit(lambda: next(exhausted))
    third = pool.submit(lambda: "third")
    assert pool.queued_count == 2

    gate.set()
    assert await first == "blocker"
    with pytest.raises(RuntimeError):
        await second
    assert await third == "third"
    assert pool.running_count == 0



@pytest.mark.asyncio
async def test_failures_isolated_between_jobs():
    """Test mixed outcomes reach their own callers only."""
    pool = TaskPool(2)

    async def job(i):
        await asyncio.sleep(0)
        if i % 2:
            raise ValueError(f"odd {i}")
        return i

    results = await asyncio.gather(
        *(pool.execute(job, i) for i in range(6)), return_exceptions=True
    )

    assert results[0::2] == [0, 2, 4]
    assert [str(r) for r in results[1::2]] == ["odd 1", "odd 3", "odd 5"]
    assert pool.running_count == 0


@pytest.mark.asyncio
async def test_cancelled_queued_job_never_starts():
    """Test a caller cancelling a queued job withdraws it."""
    pool = TaskPool(1)
    gate = asyncio.Event()
    calls = []

    async def blocker():
        await gate.wait()
        return "blocker"

    async def queued():
        calls.append("queued")

    first = pool.submit(blocker)
    second = pool.submit(queued)
    second.cancel()
    await asyncio.sleep(0)
    assert pool.queued_count == 0

    gate.set()
    assert await first == "blocker"
    await asyncio.sleep(0)
    assert calls == []
    assert pool.running_count == 0


@pytest.mark.asyncio
async def test_cancelled_running_job_keeps_slot_until_done():
    """Test cancelling a running job's future does not leak its slot."""
    pool = TaskPool(1)
    gate = asyncio.Event()
    finished = []

    async def slow():
        await gate.wait()
        finished.append("slow")

    async def fast():
        return "fast"

    first = pool.submit(slow)
    second = pool.submit(fast)
    first.cancel()
    await asyncio.sleep(0)
    assert pool.running_count == 1
    assert pool.queued_count == 1

    gate.set()
    assert await second == "fast"
    assert finished == ["slow"]
    assert pool.running_count == 0


@pytest.mark.asyncio
async def test_independent_pools():
    """Test two pools keep separate bookkeeping."""
    a = TaskPool(1)
    b = TaskPool(1)
    gate = asyncio.Event()

    async def job():
        await gate.wait()

    fa = a.submit(job)
    fb = b.submit(job)
    assert a.running_count == 1
    assert b.running_count == 1
    assert a.queued_count == 0
    assert b.queued_count == 0

    gate.set()
    await asyncio.gather(fa, fb)
    assert a.max_concurrency == 1
