from collections import namedtuple
import functools

from . import to_color


class Tile(namedtuple('Tile', 'row_start row_end col_start col_end')):
    """A half-open block of rows and columns: [row_start, row_end) x [col_start, col_end)."""

    @property
    def width(self):
        return self.col_end - self.col_start

    @property
    def height(self):
        return self.row_end - self.row_start

    @property
    def count(self):
        return self.width * self.height

    def iter_pixels(self):
        for row in range(self.row_start, self.row_end):
            for column in range(self.col_start, self.col_end):
                yield column, row


def _check_grain_size(grain_size):
    if not isinstance(grain_size, int) or grain_size < 1:
        raise ValueError(f'grain size must be a positive int, got {grain_size!r}')


def iter_ranges(size, grain_size):
    """Yield [0, g), [g, 2g), ... covering [0, size); the last may be short."""
    _check_grain_size(grain_size)
    for start in range(0, size, grain_size):
        yield start, min(start + grain_size, size)


def iter_tiles(height, width, grain_size):
    """Yield the tiles that exactly partition a height x width grid.

    Rows and columns are both cut every grain_size pixels and the tiles
    are the cross product, row-major.  When grain_size covers both
    dimensions there is a single tile.
    """
    rows = list(iter_ranges(height, grain_size))
    columns = list(iter_ranges(width, grain_size))
    for row_start, row_end in rows:
        for col_start, col_end in columns:
            yield Tile(row_start, row_end, col_start, col_end)


def _iter_tile_colors(mbs, viewport, tile):
    get_point = viewport.get_point
    escape_count = mbs.escape_count
    maxiterations = mbs.maxiterations
    for column, row in tile.iter_pixels():
        k = escape_count(get_point(column, row))
        yield column, row, to_color(k, maxiterations)


def render_tile(mbs, viewport, buffer, tile):
    """Compute every pixel of the tile straight into the shared buffer."""
    set_pixel = buffer.set_pixel
    for column, row, color in _iter_tile_colors(mbs, viewport, tile):
        set_pixel(column, row, color)


def compute_tile(mbs, viewport, tile):
    """Compute the tile on its own and return its row-major RGB bytes.

    This is for workers that cannot see the caller's buffer
    (e.g. other processes).
    """
    data = bytearray()
    for _, _, color in _iter_tile_colors(mbs, viewport, tile):
        data.extend(color)
    return bytes(data)


def render(mbs, viewport, buffer, grain_size, pool):
    """Render the whole viewport into buffer, one task per tile.

    This blocks until every tile is done.  If any tile fails (or the pool
    cannot run it) the error propagates and the buffer must be considered
    garbage.
    """
    if buffer.size != (viewport.width, viewport.height):
        raise ValueError(f'buffer size {buffer.size} does not match viewport {viewport}')
    tiles = list(iter_tiles(viewport.height, viewport.width, grain_size))

    if pool.shares_memory:
        task = functools.partial(render_tile, mbs, viewport, buffer)
        pool.parallel_for(task, tiles)
    else:
        task = functools.partial(compute_tile, mbs, viewport)
        results = pool.parallel_for(task, tiles)
        for tile, data in zip(tiles, results):
            buffer.write_tile(tile, data)
    return len(tiles)
