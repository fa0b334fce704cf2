import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


async def long_poll(
        fetch: Callable[[], Awaitable[list[T]]],
        timeout: float,
        interval: float
) -> list[T]:
    """
    Return the first non-empty result of `fetch`, re-checking every `interval`
    seconds until `timeout` has elapsed. Returns an empty list on timeout.
    """
    loop = asyncio.get_running_loop()
    start_time = loop.time()

    items = await fetch()
    while not items and (loop.time() - start_time) < timeout:
        await asyncio.sleep(min(interval, max(timeout - (loop.time() - start_time), 0)))
        items = await fetch()

    return items
