import threading

import pytest

from mandelgrain import CONCURRENCY, get_pool
from mandelgrain._concurrency import (
    SerialPool, ThreadPool, ThreadExecutorPool, ProcessExecutorPool,
)


def square(x):
    return x * x


def test_registry():
    assert CONCURRENCY['loop'] is SerialPool
    assert CONCURRENCY['threads'] is ThreadPool
    assert CONCURRENCY['threads-shared'] is ThreadPool
    assert CONCURRENCY['threads-executor'] is ThreadExecutorPool
    assert CONCURRENCY['multiprocessing'] is ProcessExecutorPool
    for cls in CONCURRENCY.values():
        assert CONCURRENCY[cls.name] is cls


def test_get_pool_unknown():
    with pytest.raises(ValueError):
        get_pool('async')


@pytest.mark.parametrize('num_workers', [0, -3])
def test_bad_num_workers(num_workers):
    with pytest.raises(ValueError):
        ThreadPool(num_workers)


def test_default_num_workers():
    with ThreadPool() as pool:
        assert pool.num_workers >= 1


@pytest.mark.parametrize('concurrent', ['loop', 'threads', 'threads-executor', 'multiprocessing'])
def test_parallel_for_results_in_order(concurrent):
    with get_pool(concurrent, 3) as pool:
        # Builtins pickle everywhere, so the same task works for processes.
        assert pool.parallel_for(abs, range(-25, 25)) == [abs(x) for x in range(-25, 25)]
        # Reusable across batches.
        assert pool.parallel_for(abs, [-7]) == [7]
        assert pool.parallel_for(abs, []) == []


def test_shares_memory():
    assert SerialPool.shares_memory
    assert ThreadPool.shares_memory
    assert ThreadExecutorPool.shares_memory
    assert not ProcessExecutorPool.shares_memory


def test_threads_run_concurrently():
    barrier = threading.Barrier(4, timeout=10)
    names = set()

    def task(i):
        names.add(threading.current_thread().name)
        barrier.wait()

    with ThreadPool(4) as pool:
        pool.parallel_for(task, range(4))

    assert len(names) == 4


def test_join_waits_for_everything():
    done = []

    def task(i):
        threading.Event().wait(0.001 * (i % 3))
        done.append(i)

    with ThreadPool(4) as pool:
        pool.parallel_for(task, range(40))
        assert sorted(done) == list(range(40))


def test_failure_skips_the_rest():
    ran = []

    def task(i):
        if i == 0:
            raise KeyError(i)
        ran.append(i)

    with ThreadPool(1) as pool:
        with pytest.raises(KeyError):
            pool.parallel_for(task, range(10))

    assert ran == []


@pytest.mark.parametrize('cls', [SerialPool, ThreadPool, ThreadExecutorPool])
def test_closed(cls):
    pool = cls(2)
    pool.close()
    pool.close()

    assert pool.closed
    with pytest.raises(RuntimeError):
        pool.parallel_for(square, [1])


def test_thread_start_failure(monkeypatch):
    started = []
    real_start = threading.Thread.start

    def start(self):
        if len(started) == 2:
            raise RuntimeError("can't start new thread")
        started.append(self)
        real_start(self)
    monkeypatch.setattr(threading.Thread, 'start', start)

    with pytest.raises(RuntimeError, match="can't start"):
        ThreadPool(4)

    for t in started:
        t.join(timeout=5)
        assert not t.is_alive()
