"""Fixed-interval background tasks."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from netmonitor.core.logger import get_logger

logger = get_logger("netmonitor.scheduler")


async def run_periodically(
    name: str,
    interval_s: float,
    job: Callable[[], Awaitable[object]],
) -> None:
    """Run `job` now and then every `interval_s` seconds, forever.

    Ticks are fixed-rate: a job that overruns its interval is followed
    immediately by the next one. A failing job is logged and the loop goes
    on; cancellation stops it.
    """
    loop = asyncio.get_running_loop()
    next_tick = loop.time()
    while True:
        try:
            await job()
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            logger.exception(
                "periodic_job_failed", extra={"task": name, "error": str(e)}
            )
        next_tick += interval_s
        now = loop.time()
        if next_tick < now:
            next_tick = now
        await asyncio.sleep(next_tick - now)
