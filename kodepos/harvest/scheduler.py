"""Bounded-concurrency batch execution of page fetches.

Tasks run in groups of ``concurrency`` on a thread pool scoped to the group.
Each group is joined before the next starts, with a fixed cooldown between
groups to stay under the source's rate limit. The first failure cancels the
group's pending work and is re-raised; later groups never start.
"""

from __future__ import annotations

import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, Iterator, Sequence, TypeVar

from kodepos.common.models import PageTask

R = TypeVar("R")


def _grouped(tasks: Sequence[PageTask], size: int) -> Iterator[Sequence[PageTask]]:
    for i in range(0, len(tasks), size):
        yield tasks[i : i + size]


def _assert_unique_keys(tasks: Sequence[PageTask]) -> None:
    seen: set[tuple[str, str | None, int]] = set()
    for task in tasks:
        if task.staging_key in seen:
            raise ValueError(f"Duplicate staging key in batch: {task.describe()}")
        seen.add(task.staging_key)


def run_in_batches(
    tasks: Sequence[PageTask],
    worker: Callable[[PageTask], R],
    *,
    concurrency: int,
    cooldown_seconds: float,
    sleep: Callable[[float], None] = time.sleep,
    on_group_done: Callable[[int, Sequence[PageTask]], None] | None = None,
) -> list[R]:
    if concurrency <= 0:
        raise ValueError("concurrency must be positive")
    _assert_unique_keys(tasks)

    results: list[R] = []
    groups = list(_grouped(tasks, concurrency))
    for group_number, group in enumerate(groups):
        if group_number > 0 and cooldown_seconds > 0:
            sleep(cooldown_seconds)

        executor = ThreadPoolExecutor(max_workers=len(group))
        try:
            futures = [executor.submit(worker, task) for task in group]
            done, _pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [future for future in futures if future in done and future.exception() is not None]
            if failed:
                executor.shutdown(wait=True, cancel_futures=True)
                raise failed[0].exception()
            results.extend(future.result() for future in futures)
        finally:
            executor.shutdown(wait=True)

        if on_group_done is not None:
            on_group_done(group_number, group)
    return results
