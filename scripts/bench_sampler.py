#!/usr/bin/env python3
"""Benchmark the placement sampler.

Usage (from the repo root):
    python scripts/bench_sampler.py              # default: 3 iterations, small box
    python scripts/bench_sampler.py -n 5         # 5 iterations
    python scripts/bench_sampler.py -c poisson3d/configs/two_camera_rig.json -m 2000
"""

import argparse
import statistics
import sys
import time
from pathlib import Path

# Add the repo root to path
SCRIPT_DIR = Path(__file__).resolve().parent
ROOT_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(ROOT_DIR))

from poisson3d.config_io import example_config_path, load_params  # noqa: E402
from poisson3d.sampler import generate  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Benchmark the sampler")
    parser.add_argument(
        "-n",
        "--iterations",
        type=int,
        default=3,
        help="Number of iterations (default: 3)",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=example_config_path("small_box"),
        help="Parameter file (default: poisson3d/configs/small_box.json)",
    )
    parser.add_argument(
        "-m",
        "--max-points",
        type=int,
        default=None,
        help="Cap on accepted points per run",
    )
    args = parser.parse_args()

    params = load_params(args.config)
    if args.max_points is not None:
        params.max_points = args.max_points

    print(f"Benchmark: {args.config.name}, seed={params.seed}")
    print(f"Iterations: {args.iterations}")
    print()

    # Warmup
    print("Warmup...", end=" ", flush=True)
    generate(params)
    print("done")

    times_ms = []
    counts = []
    for i in range(args.iterations):
        start = time.perf_counter()
        result = generate(params)
        elapsed_ms = (time.perf_counter() - start) * 1000
        times_ms.append(elapsed_ms)
        counts.append(len(result.points))
        print(
            f"  Run {i + 1}: {elapsed_ms:.1f} ms, {len(result.points)} points,"
            f" {result.stats.candidates} candidates"
        )

    median = statistics.median(times_ms)
    mean = statistics.mean(times_ms)
    print()
    print(f"Median: {median:.1f} ms")
    print(f"Mean:   {mean:.1f} ms")
    if len(times_ms) > 1:
        stdev = statistics.stdev(times_ms)
        print(f"Stdev:  {stdev:.1f} ms")
    if counts and counts[0]:
        print(f"Per point: {median / counts[0]:.3f} ms")


if __name__ == "__main__":
    main()
