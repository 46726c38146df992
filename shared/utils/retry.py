import asyncio
import random
from typing import Awaitable, Callable, Iterable, Optional, TypeVar

T = TypeVar("T")


def backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    multiplier: float = 2.0,
) -> float:
    """Delay before retry number `attempt` (0-based), capped at max_delay."""
    return min(base_delay * (multiplier**attempt), max_delay)


async def retry_async(
    func: Callable[[], Awaitable[T]],
    retries: int = 5,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    multiplier: float = 2.0,
    jitter: float = 0.1,
    retry_on: Iterable[type[BaseException]] = (Exception,),
    on_retry: Optional[
        Callable[[int, BaseException, float], Awaitable[None] | None]
    ] = None,
) -> T:
    """Await func, retrying failures in retry_on with exponential backoff.

    `retries` is the total number of attempts; the last failure is re-raised.
    """
    retry_on = tuple(retry_on)
    for attempt in range(retries):
        try:
            return await func()
        except retry_on as exc:  # type: ignore[misc]
            if attempt == retries - 1:
                raise
            delay = backoff_delay(attempt, base_delay, max_delay, multiplier)
            sleep_for = delay + random.uniform(0, delay * jitter)
            if on_retry:
                result = on_retry(attempt + 1, exc, sleep_for)
                if result is not None:
                    await result  # support async callback
            await asyncio.sleep(sleep_for)
    raise RuntimeError("async retry exhausted")
