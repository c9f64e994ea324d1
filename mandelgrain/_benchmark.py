from collections import namedtuple
import time

from . import GRAIN_SIZES, MandelbrotSet
from ._grid import PixelBuffer
from ._tiles import render


class TimingRecord(namedtuple('TimingRecord', 'grain_size seconds')):

    def __str__(self):
        return f'{self.grain_size} {self.seconds:g}'


def _validate_grain_sizes(grain_sizes):
    grain_sizes = tuple(grain_sizes)
    if not grain_sizes:
        raise ValueError('at least one grain size is required')
    for g in grain_sizes:
        if not isinstance(g, int) or g < 1:
            raise ValueError(f'grain sizes must be positive ints, got {g!r}')
    return grain_sizes


class Benchmark:
    """Render the viewport once per grain size and time each render.

    The runs are strictly sequential: a run's tiles are all finished
    before its end time is taken and before the next run starts.
    Only the last run's buffer is kept.
    """

    IDLE = 'idle'
    RENDERING = 'rendering'
    TIMED = 'timed'
    DONE = 'done'

    def __init__(self, viewport, pool, grain_sizes=GRAIN_SIZES, mbs=None, *,
                 log=None):
        self.viewport = viewport
        self.pool = pool
        self.grain_sizes = _validate_grain_sizes(grain_sizes)
        self.mbs = mbs if mbs is not None else MandelbrotSet()
        self._log = log or (lambda *a, **k: None)

        self.state = self.IDLE
        self.series = []
        self.buffer = None

    def __repr__(self):
        return f'{type(self).__name__}(viewport={self.viewport!r}, pool={self.pool!r}, state={self.state!r})'

    def run_one(self, grain_size):
        if self.state == self.DONE:
            raise RuntimeError('benchmark already finished')
        buffer = PixelBuffer.from_viewport(self.viewport)

        self.state = self.RENDERING
        self._log(f'grain size {grain_size}: rendering', flush=True)
        t0 = time.perf_counter()
        numtiles = render(self.mbs, self.viewport, buffer, grain_size, self.pool)
        t1 = time.perf_counter()
        self.state = self.TIMED

        record = TimingRecord(grain_size, t1 - t0)
        self.series.append(record)
        self.buffer = buffer
        self._log(f'grain size {grain_size}: {numtiles} tiles in {record.seconds:.6f}s', flush=True)
        return record

    def run(self):
        """Run every grain size in order and return (series, last buffer)."""
        if self.state != self.IDLE:
            raise RuntimeError(f'cannot run from state {self.state!r}')
        for grain_size in self.grain_sizes:
            self.run_one(grain_size)
            self.state = self.IDLE
        self.state = self.DONE
        return list(self.series), self.buffer


def run_benchmark(viewport, pool, grain_sizes=GRAIN_SIZES, mbs=None, *, log=None):
    bench = Benchmark(viewport, pool, grain_sizes, mbs, log=log)
    return bench.run()
