import asyncio
from typing import Awaitable, Iterable, TypeVar

T = TypeVar("T")


async def gather_all(
    awaitables: Iterable[Awaitable[T]],
    limit: int | None = None
) -> list[T]:
    """
    Run awaitables concurrently and fail fast.

    The earliest exception to occur cancels every sibling that is still
    pending and is re-raised unchanged once the cancellations have settled.

    Parameters
    ----------
    awaitables : Iterable[Awaitable[T]]
        Coroutines or futures to run
    limit : int | None
        Maximum number of awaitables running at once

    Returns
    -------
    list[T]
        Results in input order
    """
    semaphore = asyncio.Semaphore(limit) if limit else None

    async def run(awaitable: Awaitable[T]) -> T:
        if semaphore is None:
            return await awaitable
        async with semaphore:
            return await awaitable

    tasks = [asyncio.ensure_future(run(awaitable)) for awaitable in awaitables]
    if not tasks:
        return []

    # failures in completion order; reading them marks them as retrieved
    failures: list[BaseException] = []

    def collect(task: asyncio.Future) -> None:
        if not task.cancelled() and task.exception() is not None:
            failures.append(task.exception())

    for task in tasks:
        task.add_done_callback(collect)

    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        if failures:
            raise failures[0]
        return [task.result() for task in tasks]
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
