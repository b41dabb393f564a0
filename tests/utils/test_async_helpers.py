import asyncio

import pytest

from utils.async_helpers import gather_settled


async def double(value: int) -> int:
    await asyncio.sleep(0)
    return value * 2


async def test_results_in_input_order():
    async def slow_first(value: int) -> int:
        await asyncio.sleep(0.01 * (3 - value))
        return value

    assert await gather_settled(slow_first, [0, 1, 2], limit=3) == [0, 1, 2]


async def test_exceptions_are_returned_not_raised():
    async def flaky(value: int) -> int:
        if value == 1:
            raise RuntimeError("boom")
        return value

    results = await gather_settled(flaky, [0, 1, 2], limit=2)

    assert results[0] == 0
    assert isinstance(results[1], RuntimeError)
    assert results[2] == 2


async def test_limit_bounds_concurrency():
    in_flight = 0
    peak = 0

    async def track(value: int) -> int:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001)
        in_flight -= 1
        return value

    await gather_settled(track, range(20), limit=4)

    assert peak == 4


async def test_empty_input():
    assert await gather_settled(double, [], limit=1) == []


async def test_invalid_limit():
    with pytest.raises(ValueError):
        await gather_settled(double, [1], limit=0)
