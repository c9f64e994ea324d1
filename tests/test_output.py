import os
import stat

from PIL import Image
import pytest

from mandelgrain import (
    PixelBuffer, TimingRecord, format_timings, write_image, write_timings,
)


SERIES = [TimingRecord(1, 0.5), TimingRecord(2, 0.125), TimingRecord(4, 2e-05)]


def test_format_timings():
    assert format_timings(SERIES) == (
        'grain_size seconds\n'
        '1 0.5\n'
        '2 0.125\n'
        '4 2e-05\n'
    )
    assert format_timings([]) == 'grain_size seconds\n'


def test_write_timings(tmp_path):
    filename = tmp_path / 'grain_time.txt'

    write_timings(SERIES, str(filename))

    assert filename.read_text() == format_timings(SERIES)
    assert os.listdir(tmp_path) == ['grain_time.txt']


def test_write_timings_replaces(tmp_path):
    filename = tmp_path / 'grain_time.txt'
    filename.write_text('old')

    write_timings(SERIES[:1], str(filename))

    assert filename.read_text() == 'grain_size seconds\n1 0.5\n'


def test_write_image(tmp_path):
    buffer = PixelBuffer(5, 3)
    buffer.set_pixel(4, 2, (250, 0, 0))
    buffer.set_pixel(0, 1, (10, 0, 0))
    filename = tmp_path / 'mandelbrot.png'

    write_image(buffer, str(filename))

    with Image.open(filename) as image:
        assert image.format == 'PNG'
        assert image.mode == 'RGB'
        assert image.size == (5, 3)
        assert image.getpixel((4, 2)) == (250, 0, 0)
        assert image.getpixel((0, 1)) == (10, 0, 0)
        assert image.getpixel((0, 0)) == (0, 0, 0)
    assert os.listdir(tmp_path) == ['mandelbrot.png']


PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


@pytest.mark.parametrize('name', ['mandelbrot', 'out.jpg', 'out.bmp', 'out.not-an-image-format'])
def test_write_image_always_png(tmp_path, name):
    filename = tmp_path / name

    write_image(PixelBuffer(2, 2), str(filename))

    assert filename.read_bytes().startswith(PNG_SIGNATURE)
    with Image.open(filename) as image:
        assert image.format == 'PNG'
        assert image.size == (2, 2)
    assert os.listdir(tmp_path) == [name]


def test_write_image_failure_leaves_nothing(tmp_path, monkeypatch):
    def save(self, fp, format=None, **params):
        with open(fp, 'wb') as outfile:
            outfile.write(b'\x89PN')
        raise OSError('disk full')
    monkeypatch.setattr(Image.Image, 'save', save)
    filename = tmp_path / 'mandelbrot.png'

    with pytest.raises(OSError, match='disk full'):
        write_image(PixelBuffer(2, 2), str(filename))

    assert os.listdir(tmp_path) == []


def _current_umask():
    umask = os.umask(0)
    os.umask(umask)
    return umask


@pytest.mark.parametrize('write, name', [
    (lambda filename: write_timings(SERIES, filename), 'grain_time.txt'),
    (lambda filename: write_image(PixelBuffer(2, 2), filename), 'mandelbrot.png'),
])
def test_written_files_follow_umask(tmp_path, write, name):
    filename = tmp_path / name
    plain = tmp_path / 'plain'
    plain.write_text('')

    write(str(filename))

    mode = stat.S_IMODE(os.stat(filename).st_mode)
    assert mode == 0o666 & ~_current_umask()
    assert mode == stat.S_IMODE(os.stat(plain).st_mode)


def test_write_to_missing_directory(tmp_path):
    filename = tmp_path / 'missing' / 'grain_time.txt'

    with pytest.raises(OSError):
        write_timings(SERIES, str(filename))
    with pytest.raises(OSError):
        write_image(PixelBuffer(2, 2), str(tmp_path / 'missing' / 'x.png'))
