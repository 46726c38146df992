import asyncio
import logging

import pytest

from netmonitor.scheduler import run_periodically


async def run_until(calls_wanted: int, job_factory, interval_s: float = 0.01):
    calls = []
    done = asyncio.Event()
    job = job_factory(calls, done, calls_wanted)
    task = asyncio.create_task(run_periodically("test_job", interval_s, job))
    await asyncio.wait_for(done.wait(), timeout=2)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    return calls


def counting_job(calls, done, wanted):
    async def job():
        calls.append(asyncio.get_running_loop().time())
        if len(calls) >= wanted:
            done.set()

    return job


@pytest.mark.asyncio
async def test_job_runs_immediately_and_repeats():
    calls = await run_until(3, counting_job)
    assert len(calls) >= 3
    assert calls[1] - calls[0] >= 0.005


@pytest.mark.asyncio
async def test_failing_job_does_not_stop_the_loop(caplog):
    def flaky_job(calls, done, wanted):
        async def job():
            calls.append(1)
            if len(calls) >= wanted:
                done.set()
            if len(calls) == 1:
                raise RuntimeError("upstream exploded")

        return job

    with caplog.at_level(logging.ERROR, logger="netmonitor.scheduler"):
        calls = await run_until(2, flaky_job)

    assert len(calls) >= 2
    assert any(r.getMessage() == "periodic_job_failed" for r in caplog.records)


@pytest.mark.asyncio
async def test_overrunning_job_is_followed_immediately():
    def slow_job(calls, done, wanted):
        async def job():
            calls.append(asyncio.get_running_loop().time())
            if len(calls) >= wanted:
                done.set()
                return
            await asyncio.sleep(0.03)

        return job

    calls = await run_until(2, slow_job, interval_s=0.01)
    # second run starts once the first finishes, not a full interval later
    assert calls[1] - calls[0] < 0.03 + 0.01 + 0.02


@pytest.mark.asyncio
async def test_cancellation_during_job_propagates():
    started = asyncio.Event()

    async def job():
        started.set()
        await asyncio.sleep(10)

    task = asyncio.create_task(run_periodically("blocked", 60, job))
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
