#!/usr/bin/env python3
"""Run one placement generation from a JSON config.

Usage (from the repo root):
    python scripts/generate_points.py                         # bundled two-camera rig
    python scripts/generate_points.py -c poisson3d/configs/small_box.json
    python scripts/generate_points.py --seed 3 --max-points 500 -o points.json
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

# Add the repo root to path
SCRIPT_DIR = Path(__file__).resolve().parent
ROOT_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(ROOT_DIR))

from poisson3d.config_io import example_config_path, load_params  # noqa: E402
from poisson3d.sampler import generate  # noqa: E402
from poisson3d.visibility import VisibilityOracle, select_active  # noqa: E402


def main():
    parser = argparse.ArgumentParser(
        description="Generate well-separated, camera-visible placements"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=example_config_path("two_camera_rig"),
        help="Parameter file (default: poisson3d/configs/two_camera_rig.json)",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Override the config seed"
    )
    parser.add_argument(
        "--max-points",
        type=int,
        default=None,
        help="Stop once this many points are accepted",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=None, help="Write result JSON here"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging and the first point's per-camera footprint"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    params = load_params(args.config)
    if args.seed is not None:
        params.seed = args.seed
    if args.max_points is not None:
        params.max_points = args.max_points

    print(f"Config: {args.config}")
    print(
        f"seed={params.seed}, min_distance={params.min_distance},"
        f" bounds={params.bounds.extents},"
        f" cameras={[c.name for c in params.cameras]}"
    )

    start = time.perf_counter()
    result = generate(params)
    elapsed_ms = (time.perf_counter() - start) * 1000

    print(f"Points: {len(result.points)} in {elapsed_ms:.1f} ms")
    print(f"Stats:  {result.stats.to_dict()}")

    if args.verbose and result.points:
        oracle = VisibilityOracle(
            select_active(params.cameras),
            params.object_radius,
            params.viewport_padding,
        )
        first = result.points[0]
        print(f"First point {first}, sample footprint per camera:")
        for name, uv in oracle.viewport_samples(first).items():
            lo = uv.min(axis=0)
            hi = uv.max(axis=0)
            print(
                f"  {name}: u [{lo[0]:.4f}, {hi[0]:.4f}],"
                f" v [{lo[1]:.4f}, {hi[1]:.4f}]"
            )

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
            f.write("\n")
        print(f"Wrote {args.output}")


if __name__ == "__main__":
    main()
