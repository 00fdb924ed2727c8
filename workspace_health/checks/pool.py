"""Bounded worker pool for per-package tool invocations."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class PoolResult(Generic[T, R]):
    """Outcome for one input item: either ``value`` or ``error`` is set."""

    item: T
    value: R | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def bounded_map(
    items: Sequence[T],
    fn: Callable[[T], Awaitable[R]],
    limit: int,
) -> list[PoolResult[T, R]]:
    """Apply *fn* to every item with at most *limit* calls in flight.

    Items are fed through a queue to a fixed set of workers. Results come
    back in input order; an exception from one call is captured in its
    :class:`PoolResult` and never stops the other workers.
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")

    queue: asyncio.Queue[tuple[int, T]] = asyncio.Queue()
    for index, item in enumerate(items):
        queue.put_nowait((index, item))

    results: list[PoolResult[T, R] | None] = [None] * len(items)

    async def _worker() -> None:
        while True:
            try:
                index, item = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                results[index] = PoolResult(item=item, value=await fn(item))
            except Exception as e:
                results[index] = PoolResult(item=item, error=e)
            finally:
                queue.task_done()

    workers = [asyncio.create_task(_worker()) for _ in range(min(limit, len(items)))]
    await asyncio.gather(*workers)
    return [r for r in results if r is not None]
