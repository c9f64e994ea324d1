import contextlib
import os
import os.path
import tempfile


TIMINGS_HEADER = 'grain_size seconds'
IMAGE_FORMAT = 'PNG'


def _get_umask():
    umask = os.umask(0)
    os.umask(umask)
    return umask


_UMASK = _get_umask()


@contextlib.contextmanager
def _replacing(filename):
    # Write to a temp file next to the target and move it into place
    # only once it is complete.  mkstemp() makes it 0600, so give it the
    # mode a plain open() would have.
    dirname, basename = os.path.split(os.path.abspath(filename))
    fd, tmpname = tempfile.mkstemp(prefix=f'.{basename}.', suffix='.tmp', dir=dirname)
    os.close(fd)
    try:
        yield tmpname
        os.chmod(tmpname, 0o666 & ~_UMASK)
        os.replace(tmpname, filename)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmpname)
        raise


def to_image(buffer):
    from PIL import Image

    return Image.frombytes('RGB', buffer.size, buffer.tobytes())


def write_image(buffer, filename='mandelbrot.png'):
    """Save the buffer as a PNG, whatever the file name says."""
    image = to_image(buffer)
    with _replacing(filename) as tmpname:
        image.save(tmpname, format=IMAGE_FORMAT)


def format_timings(series):
    lines = [TIMINGS_HEADER]
    lines.extend(str(record) for record in series)
    return ''.join(line + '\n' for line in lines)


def write_timings(series, filename='grain_time.txt'):
    text = format_timings(series)
    with _replacing(filename) as tmpname:
        with open(tmpname, 'w', encoding='utf-8') as outfile:
            outfile.write(text)
