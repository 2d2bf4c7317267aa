from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, TypeVar


log = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def run_all_or_fail(
    fn: Callable[[T], R],
    items: Iterable[T],
    max_workers: int = 8,
    thread_name_prefix: str = "tailwind-cli",
) -> list[R]:
    """Run ``fn`` over ``items`` concurrently and return results in input order.

    Returns once every task finished. The earliest task to fail, by completion time,
    cancels the tasks that have not started yet, and its exception is re-raised
    after in-flight tasks settle.
    """
    work = list(items)
    if not work:
        return []

    executor = ThreadPoolExecutor(
        max_workers=min(max(max_workers, 1), len(work)),
        thread_name_prefix=thread_name_prefix,
    )
    try:
        futures: list[Future[R]] = [executor.submit(fn, item) for item in work]
        for future in as_completed(futures):
            error = future.exception()
            if error is None:
                continue
            cancelled = sum(1 for f in futures if f.cancel())
            log.debug("Task failed, cancelled %d queued tasks: %s", cancelled, error)
            raise error
        return [f.result() for f in futures]
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
