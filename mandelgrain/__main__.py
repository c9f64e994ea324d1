import argparse
import sys

from . import GRAIN_SIZES, MAXITERATIONS, MandelbrotSet
from ._grid import Viewport, DEFAULT_VIEWPORT
from ._concurrency import CONCURRENCY, get_pool
from ._benchmark import run_benchmark
from ._output import write_image, write_timings, format_timings


def parse_grain_sizes(text):
    try:
        grain_sizes = tuple(int(v) for v in text.split(',') if v.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(f'bad grain sizes {text!r}')
    if not grain_sizes or any(g < 1 for g in grain_sizes):
        raise argparse.ArgumentTypeError(f'bad grain sizes {text!r}')
    return grain_sizes


def parse_viewport(text):
    try:
        return Viewport.parse(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f'bad viewport {text!r} (expected X0:Y0:X1:Y1:WIDTH:HEIGHT)')


#######################################
# the script

'''
 grain sizes 1..2048, 800x800, 256 iterations

 loop                      baseline
 threads                   one thread pool, shared buffer
 threads-executor          ThreadPoolExecutor, shared buffer
 multiprocessing           ProcessPoolExecutor, tiles copied back
'''

def parse_args(argv=sys.argv[1:], prog=sys.argv[0]):
    parser = argparse.ArgumentParser(
        prog=prog,
        description='Time a tiled Mandelbrot render across a range of grain sizes.',
    )

    parser.add_argument('--maxiterations', type=int)
    parser.add_argument('--viewport', type=parse_viewport,
                        help='X0:Y0:X1:Y1:WIDTH:HEIGHT (top-left, bottom-right, pixels)')
    parser.add_argument('--grain-sizes', dest='grain_sizes', type=parse_grain_sizes,
                        help='comma-separated tile edge lengths, in test order')
    parser.add_argument('--concurrent', choices=list(CONCURRENCY))
    parser.add_argument('--workers', type=int)
    parser.add_argument('--image', help='where to save the last rendering')
    parser.add_argument('--timings', help='where to save the timing table')
    parser.add_argument('-v', '--verbose', action='store_true', default=None)

    args = parser.parse_args(argv)
    ns = vars(args)

    for key, value in list(ns.items()):
        if value is None:
            del ns[key]

    return ns


def main(maxiterations=MAXITERATIONS, viewport=DEFAULT_VIEWPORT,
         grain_sizes=GRAIN_SIZES, concurrent='threads', workers=None,
         image='mandelbrot.png', timings='grain_time.txt', verbose=False):
    if verbose:
        log = (lambda *a, **k: print(*a, file=sys.stderr, **k))
    else:
        log = (lambda *a, **k: None)

    mbs = MandelbrotSet(maxiterations)
    log(f'{viewport.width}x{viewport.height} pixels, {mbs.maxiterations} iterations, '
        f'concurrency {concurrent!r}', flush=True)

    with get_pool(concurrent, workers) as pool:
        log(f'started {pool!r}', flush=True)
        series, buffer = run_benchmark(viewport, pool, grain_sizes, mbs, log=log)

    write_image(buffer, image)
    log(f'wrote {image}', flush=True)
    write_timings(series, timings)
    log(f'wrote {timings}', flush=True)

    print(format_timings(series), end='')
    return series


if __name__ == '__main__':
    kwargs = parse_args()
    main(**kwargs)
