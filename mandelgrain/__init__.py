# Grain-size benchmark for parallel, tiled Mandelbrot rendering.

MAXITERATIONS = 256
ESCAPE_RADIUS = 2.0

# The nominal tile edge lengths to try, in order.
GRAIN_SIZES = (1, 2, 4, 8, 16, 32, 64, 128, 256, 512, 1024, 2048)

BLACK = (0, 0, 0)


class MandelbrotSet:

    def __init__(self, maxiterations=MAXITERATIONS, *,
                 escape_radius=ESCAPE_RADIUS):
        if maxiterations < 1:
            raise ValueError(f'maxiterations must be positive, got {maxiterations!r}')
        self.maxiterations = maxiterations
        self.escape_radius = escape_radius

    def __repr__(self):
        return f'{type(self).__name__}({self.maxiterations!r}, escape_radius={self.escape_radius!r})'

    def __eq__(self, other):
        if not isinstance(other, MandelbrotSet):
            return NotImplemented
        return (self.maxiterations, self.escape_radius) == (other.maxiterations, other.escape_radius)

    def __contains__(self, c):
        return self.escape_count(c) == self.maxiterations

    def escape_count(self, c):
        """Return how many times z -> z**2 + c ran before z escaped.

        The iteration is seeded with z = c (not 0), and the escape test
        compares the squared magnitude, so no square root is taken.
        The result is in [0, maxiterations].
        """
        limit = self.escape_radius * self.escape_radius
        maxiterations = self.maxiterations
        z = c
        i = 0
        while i != maxiterations and z.real * z.real + z.imag * z.imag < limit:
            z = z * z + c
            i += 1
        return i


def to_color(count, maxiterations=MAXITERATIONS):
    """Map an escape count to an (R, G, B) triple of 8-bit values.

    Points that never escaped are black.  Everything else is a shade
    of red that wraps around every 25.6 iterations, like an unsigned
    8-bit multiply would.
    """
    if count < maxiterations:
        return ((10 * count) % 256, 0, 0)
    return BLACK


#############################
# aliases

from ._grid import Viewport, PixelBuffer, DEFAULT_VIEWPORT
from ._tiles import Tile, iter_ranges, iter_tiles, render_tile, compute_tile, render
from ._concurrency import CONCURRENCY, get_pool
from ._benchmark import TimingRecord, Benchmark, run_benchmark
from ._output import write_image, write_timings, format_timings
