import threading

import pytest

from ssvep_classifier.pool import ParallelPool, Task


@pytest.mark.parametrize("workers", [1, 2, 3, 8])
def test_batch_covers_every_index_once(workers):
    seen = []
    lock = threading.Lock()

    def work(task: Task):
        for i in task.indices(10):
            with lock:
                seen.append((task.task_index, i))

    with ParallelPool(workers) as pool:
        pool.batch(work)

    assert sorted(i for _, i in seen) == list(range(10))
    for worker, i in seen:
        assert i % workers == worker


def test_batch_calls_work_once_per_worker():
    calls = []
    with ParallelPool(4) as pool:
        pool.batch(lambda task: calls.append(task))
    assert sorted(t.task_index for t in calls) == [0, 1, 2, 3]
    assert all(t.total_tasks == 4 for t in calls)


def test_batch_joins_before_returning():
    done = []

    def work(task):
        threading.Event().wait(0.02)
        done.append(task.task_index)

    with ParallelPool(3) as pool:
        pool.batch(work)
        assert len(done) == 3


def test_worker_failure_propagates():
    def work(task):
        if task.task_index == 1:
            raise ArithmeticError("boom")

    with ParallelPool(3) as pool:
        with pytest.raises(ArithmeticError, match="boom"):
            pool.batch(work)
        # Pool stays usable after a failed batch
        pool.batch(lambda task: None)


def test_default_parallelism_uses_cpu_count():
    with ParallelPool(0) as pool:
        assert pool.parallelism >= 1
    with pytest.raises(ValueError):
        ParallelPool(-1)
