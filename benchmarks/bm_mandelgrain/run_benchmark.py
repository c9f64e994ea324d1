"""Test the performance of rendering the mandelbrot set in tiles.

This workload represents splitting one image into tiles of a given
grain size and running one task per tile.  Small grains mean many
tiny tasks; large grains mean few tasks and poor load balance.
"""

import time

import pyperf

import mandelgrain


# Kept well below the default 800x800 so a pyperf run stays short.
VIEWPORT = mandelgrain.Viewport(-2.2 + 1.5j, 0.8 - 1.5j, 200, 200)

NUM_WORKERS = None


def bench_mandelgrain(loops, name, grain_size):
    mbs = mandelgrain.MandelbrotSet()
    expected = None

    total = 0.0
    with mandelgrain.get_pool(name, NUM_WORKERS) as pool:
        for _ in range(loops):
            buffer = mandelgrain.PixelBuffer.from_viewport(VIEWPORT)

            t0 = time.perf_counter()
            mandelgrain.render(mbs, VIEWPORT, buffer, grain_size, pool)
            t1 = time.perf_counter()
            total += t1 - t0

            # The grain size must never change the picture.
            if expected is None:
                expected = buffer.tobytes()
            elif buffer.tobytes() != expected:
                raise RuntimeError(f'{name}: output changed between loops')

    return total


BENCHMARKS = [
    'loop',
    'threads',
    'threads-executor',
    'multiprocessing',
]


if __name__ == "__main__":
    inner_loops = None

    def add_cmdline_args(cmd, args):
        cmd.append(args.benchmark)
        cmd.extend(('--grain-size', str(args.grain_size)))
    runner = pyperf.Runner(add_cmdline_args=add_cmdline_args)
    runner.metadata['description'] = "Test the performance of rendering the mandelbrot set in tiles."

    parser = runner.argparser
    benchmarks = sorted(BENCHMARKS)
    parser.add_argument("benchmark", choices=benchmarks)
    parser.add_argument("--grain-size", type=int, default=16)

    options = runner.parse_args()
    name = options.benchmark

    runner.bench_time_func(f'{name}-{options.grain_size}', bench_mandelgrain,
                           name, options.grain_size, inner_loops=inner_loops)
