import array
from collections import namedtuple


class Viewport(namedtuple('Viewport', 'top_left bottom_right width height')):
    """A window on the complex plane, sampled at width x height pixels.

    Pixel (column, row) maps to top_left + (xstep * column, ystep * row),
    so (0, 0) is exactly top_left and the last pixel sits one step short
    of bottom_right.
    """

    @classmethod
    def parse(cls, text):
        x0, y0, x1, y1, width, height = text.strip().split(':')
        return cls(
            complex(float(x0), float(y0)),
            complex(float(x1), float(y1)),
            int(width),
            int(height),
        )

    def __new__(cls, top_left, bottom_right, width, height):
        return super().__new__(cls, complex(top_left), complex(bottom_right),
                               width, height)

    @classmethod
    def _make(cls, iterable):
        # _replace() comes through here; go through __init__ too.
        return cls(*iterable)

    def __init__(self, *args, **kwargs):
        self._validate()

        top_left, bottom_right, width, height = self
        diff = bottom_right - top_left
        self._xstep = diff.real / width
        self._ystep = diff.imag / height

    def _validate(self):
        for name in ('width', 'height'):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f'{name} must be a positive int, got {value!r}')

    def __str__(self):
        top_left, bottom_right, width, height = self
        return ':'.join(str(v) for v in (
            top_left.real, top_left.imag,
            bottom_right.real, bottom_right.imag,
            width, height,
        ))

    @property
    def xstep(self):
        return self._xstep

    @property
    def ystep(self):
        return self._ystep

    @property
    def count(self):
        return self.width * self.height

    def get_point(self, column, row):
        if not (0 <= column < self.width and 0 <= row < self.height):
            raise IndexError((column, row))
        return self.top_left + complex(self._xstep * column, self._ystep * row)


DEFAULT_VIEWPORT = Viewport(-2.2 + 1.5j, 0.8 - 1.5j, 800, 800)


class PixelBuffer:
    """An RGB image held as one flat array of bytes, row by row.

    Nothing here locks.  Concurrent writers must stick to disjoint
    (column, row) ranges, which the tiles guarantee.
    """

    CHANNELS = 3
    TYPECODE = 'B'

    @classmethod
    def from_viewport(cls, viewport):
        return cls(viewport.width, viewport.height)

    def __init__(self, width, height, data=None):
        if width <= 0 or height <= 0:
            raise ValueError(f'bad buffer size {width}x{height}')
        size = width * height * self.CHANNELS
        if data is None:
            data = self._new_data(size)
        elif len(data) != size:
            raise ValueError(f'expected {size} bytes, got {len(data)}')
        self._width = width
        self._height = height
        self._data = data

    @classmethod
    def _new_data(cls, size):
        return array.array(cls.TYPECODE, bytes(size))

    def __repr__(self):
        return f'{type(self).__name__}(width={self._width!r}, height={self._height!r})'

    def __len__(self):
        return self._width * self._height

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (self.size == other.size and self._data == other._data)

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    @property
    def size(self):
        return self._width, self._height

    def _offset(self, column, row):
        if not (0 <= column < self._width and 0 <= row < self._height):
            raise IndexError((column, row))
        return (row * self._width + column) * self.CHANNELS

    def get_pixel(self, column, row):
        i = self._offset(column, row)
        return tuple(self._data[i:i+self.CHANNELS])

    def set_pixel(self, column, row, color):
        i = self._offset(column, row)
        data = self._data
        data[i], data[i+1], data[i+2] = color

    def write_tile(self, tile, data):
        """Copy a tile's row-major RGB bytes into place."""
        rowbytes = (tile.col_end - tile.col_start) * self.CHANNELS
        if len(data) != rowbytes * (tile.row_end - tile.row_start):
            raise ValueError(f'wrong amount of data for {tile}')
        src = 0
        for row in range(tile.row_start, tile.row_end):
            dst = self._offset(tile.col_start, row)
            self._data[dst:dst+rowbytes] = array.array(self.TYPECODE, data[src:src+rowbytes])
            src += rowbytes

    def tobytes(self):
        return self._data.tobytes()
