"""
Fork-join worker pool.

Work is split statically: worker i of N handles indices i, i+N, i+2N, ...
There is no work stealing; batch() returns once every worker has finished.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class Task:
    task_index: int
    total_tasks: int

    def indices(self, count: int) -> range:
        """Strided share of range(count) for this task."""
        return range(self.task_index, count, self.total_tasks)


class ParallelPool:
    """Fixed-size pool running one unit of work per worker."""

    def __init__(self, parallelism: Optional[int] = None):
        if not parallelism:
            parallelism = os.cpu_count() or 1
        if parallelism < 0:
            raise ValueError("parallelism must not be negative")
        self.parallelism = int(parallelism)
        self._executor = ThreadPoolExecutor(
            max_workers=self.parallelism, thread_name_prefix="ssvep-pool"
        )

    def batch(self, work: Callable[[Task], None]) -> None:
        """Run `work` once per worker and wait for all of them.

        The first worker exception is re-raised after every worker has
        stopped.
        """
        if self.parallelism == 1:
            work(Task(0, 1))
            return
        futures = [self._executor.submit(work, Task(i, self.parallelism))
                   for i in range(self.parallelism)]
        errors = [f.exception() for f in futures]
        for error in errors:
            if error is not None:
                raise error

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
