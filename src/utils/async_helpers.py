import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def gather_settled(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    limit: int,
) -> list[R | BaseException]:
    """Run ``func`` over ``items`` concurrently and wait for every call to settle.

    At most ``limit`` calls are in flight at once. Results come back in input
    order; a call that raised contributes its exception instead of a result,
    so one failure never cancels or hides the others.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)

    async def run_one(item: T) -> R:
        async with semaphore:
            return await func(item)

    return await asyncio.gather(*(run_one(item) for item in items), return_exceptions=True)
