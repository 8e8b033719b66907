"""Fisheye-aware 3D Poisson-disk placement generator."""

from .camera import CameraModel
from .prng import PCG32
from .sampler import (
    DartThrowingSampler,
    SampleResult,
    SamplerParams,
    generate,
    generate_json,
    generate_points,
)
from .types import (
    CameraPose,
    ConfigurationError,
    DegenerateIntrinsicsError,
    FisheyeIntrinsics,
    GenerationBounds,
)
from .visibility import VisibilityOracle, is_fully_visible, select_active

__all__ = [
    "PCG32",
    "CameraModel",
    "CameraPose",
    "ConfigurationError",
    "DartThrowingSampler",
    "DegenerateIntrinsicsError",
    "FisheyeIntrinsics",
    "GenerationBounds",
    "SampleResult",
    "SamplerParams",
    "VisibilityOracle",
    "generate",
    "generate_json",
    "generate_points",
    "is_fully_visible",
    "select_active",
]
