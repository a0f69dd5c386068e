"""Bounded concurrent map over asyncio tasks."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence

_SKIPPED = object()


async def bounded_map[T, R](
    items: Sequence[T],
    operation: Callable[[T], Awaitable[R]],
    *,
    concurrency: int = 10,
) -> list[R]:
    """Run *operation* over *items* with at most *concurrency* in flight.

    Results come back in input order, and only once every started
    operation has finished. After the first failure, items still waiting
    for a slot are never started; the first failure in input order is
    then raised. In-flight operations are not cancelled.
    """
    if concurrency < 1:
        msg = f"concurrency must be positive, got {concurrency}"
        raise ValueError(msg)

    semaphore = asyncio.Semaphore(concurrency)
    failed = False

    async def run(item: T) -> R | object:
        nonlocal failed
        async with semaphore:
            if failed:
                return _SKIPPED
            try:
                return await operation(item)
            except Exception:
                failed = True
                raise

    outcomes = await asyncio.gather(*(run(item) for item in items), return_exceptions=True)

    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    return list(outcomes)  # type: ignore[arg-type]
