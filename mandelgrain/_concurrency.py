import concurrent.futures
import os
import queue
import threading


def _default_num_workers():
    return os.cpu_count() or 1


class WorkerPool:
    """Run func(item) for a batch of items and wait for all of them.

    A pool is started once and reused for any number of batches.
    parallel_for() is the join barrier: it returns only after every item
    has been handled, with the results in item order.  The first failure
    is re-raised and any items not yet started are skipped.
    """

    # The name it is registered under in CONCURRENCY.
    name = None
    # Whether workers can write into the caller's objects.
    shares_memory = True

    def __init__(self, num_workers=None):
        if num_workers is None:
            num_workers = _default_num_workers()
        if num_workers < 1:
            raise ValueError(f'num_workers must be positive, got {num_workers!r}')
        self.num_workers = num_workers
        self._closed = False

    def __repr__(self):
        return f'{type(self).__name__}(num_workers={self.num_workers!r})'

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    @property
    def closed(self):
        return self._closed

    def parallel_for(self, func, items):
        if self._closed:
            raise RuntimeError(f'{self!r} is closed')
        items = list(items)
        if not items:
            return []
        return self._run(func, items)

    def _run(self, func, items):
        raise NotImplementedError

    def close(self):
        self._closed = True


#############################
# no concurrency

class SerialPool(WorkerPool):

    def __init__(self, num_workers=None):
        super().__init__(1)

    def _run(self, func, items):
        return [func(item) for item in items]


#############################
# threads

class ThreadPool(WorkerPool):
    """A fixed set of threads fed from one task queue.

    Each batch is queued up in full and then drained; Queue.join() is
    the completion counter.
    """

    def __init__(self, num_workers=None):
        super().__init__(num_workers)
        self._tasks = queue.Queue()
        self._threads = []
        try:
            for i in range(self.num_workers):
                t = threading.Thread(target=self._run_worker,
                                     name=f'tile-worker-{i}', daemon=True)
                t.start()
                self._threads.append(t)
        except BaseException:
            self.close()
            raise

    def _run_worker(self):
        tasks = self._tasks
        while True:
            task = tasks.get()
            if task is None:
                tasks.task_done()
                break
            batch, index, func, item = task
            try:
                if not batch.failed:
                    batch.results[index] = func(item)
            except BaseException as exc:
                batch.fail(exc)
            finally:
                tasks.task_done()

    def _run(self, func, items):
        batch = _Batch(len(items))
        for i, item in enumerate(items):
            self._tasks.put((batch, i, func, item))
        self._tasks.join()
        if batch.error is not None:
            raise batch.error
        return batch.results

    def close(self):
        if self._closed:
            return
        super().close()
        for _ in self._threads:
            self._tasks.put(None)
        for t in self._threads:
            t.join()


class _Batch:

    def __init__(self, size):
        self.results = [None] * size
        self.error = None
        self._lock = threading.Lock()

    @property
    def failed(self):
        return self.error is not None

    def fail(self, exc):
        with self._lock:
            if self.error is None:
                self.error = exc


#############################
# executors

class ExecutorPool(WorkerPool):

    def __init__(self, num_workers=None):
        super().__init__(num_workers)
        self._executor = self._new_executor()

    def _new_executor(self):
        raise NotImplementedError

    def _run(self, func, items):
        futures = [self._executor.submit(func, item) for item in items]
        done, not_done = concurrent.futures.wait(
            futures, return_when=concurrent.futures.FIRST_EXCEPTION)
        for fut in not_done:
            fut.cancel()
        concurrent.futures.wait(futures)
        for fut in futures:
            if not fut.cancelled() and fut.exception() is not None:
                raise fut.exception()
        return [fut.result() for fut in futures]

    def close(self):
        if self._closed:
            return
        super().close()
        self._executor.shutdown(wait=True)


class ThreadExecutorPool(ExecutorPool):

    def _new_executor(self):
        return concurrent.futures.ThreadPoolExecutor(
            max_workers=self.num_workers,
            thread_name_prefix='tile-worker',
        )


class ProcessExecutorPool(ExecutorPool):
    """Worker processes; func and items must be picklable.

    The processes get copies of everything, so the caller has to collect
    the results itself.
    """

    shares_memory = False

    def _new_executor(self):
        return concurrent.futures.ProcessPoolExecutor(max_workers=self.num_workers)


#############################
# the registry

CONCURRENCY = {
    'loop': SerialPool,
    # threads
    'threads': 'threads-shared-direct',
    'threads-shared': 'threads-shared-direct',
    'threads-shared-direct': ThreadPool,
    'threads-executor': 'threads-shared-executor',
    'threads-shared-executor': ThreadExecutorPool,
    # multiprocessing
    'multiprocessing': 'multiprocessing-not-shared',
    'multiprocessing-not-shared': ProcessExecutorPool,
}
for n, f in list(CONCURRENCY.items()):
    while isinstance(f, str):
        f = CONCURRENCY[n] = CONCURRENCY[f]
    f.name = n
del f, n


def get_pool(concurrent='threads', num_workers=None):
    """Start a pool for the named concurrency mode."""
    try:
        cls = CONCURRENCY[concurrent]
    except KeyError:
        raise ValueError(f'unsupported concurrency {concurrent!r}')
    return cls(num_workers)
