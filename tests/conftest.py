import pytest

from mandelgrain import MandelbrotSet, PixelBuffer, Viewport, to_color


@pytest.fixture
def viewport():
    # Same window as the default, just far fewer (and non-square) pixels.
    return Viewport(-2.2 + 1.5j, 0.8 - 1.5j, 24, 18)


@pytest.fixture
def mbs():
    return MandelbrotSet()


@pytest.fixture
def expected(mbs, viewport):
    buffer = PixelBuffer.from_viewport(viewport)
    for row in range(viewport.height):
        for column in range(viewport.width):
            k = mbs.escape_count(viewport.get_point(column, row))
            buffer.set_pixel(column, row, to_color(k))
    return buffer
