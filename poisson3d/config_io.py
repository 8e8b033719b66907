"""Load and save sampler parameter files.

Provides helpers for reading JSON parameter files into typed
``SamplerParams`` objects (via ``sampler.py``) or raw dicts, and a path
helper for the example configs shipped under ``poisson3d/configs/``.

Used by:
  - ``scripts/generate_points.py``: runs a generation from a config file.
  - ``scripts/bench_sampler.py``: times repeated generations.
"""

from __future__ import annotations

import json
from pathlib import Path

from .sampler import SamplerParams

# Shipped as package data beside this module.
_CONFIGS_DIR = Path(__file__).parent / "configs"


def example_config_path(name: str) -> Path:
    """Return the path to a bundled example config (name without ``.json``)."""
    return _CONFIGS_DIR / f"{name}.json"


def load_params(path: Path) -> SamplerParams:
    with open(path) as f:
        data = json.load(f)
    return SamplerParams.from_dict(data)


def load_params_dict(path: Path) -> dict:
    with open(path) as f:
        return json.load(f)


def save_params(params: SamplerParams, path: Path) -> None:
    """Write params as JSON, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(params.to_dict(), f, indent=2)
        f.write("\n")
