"""Scene module for shape storage and ray-march queries.

This module handles scene representation and ray-scene queries:

Components:
    manager: Caller-owned Scene holding an ordered table of shapes
    intersection: Fixed-step ray marcher with bisection refinement

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for shape parameters
    - Insertion order preserved; it decides ties between equally near hits
"""

from .intersection import (
    DEFAULT_MAX_LEN,
    CastResult,
    Intersect,
    MarchConfig,
    RayMarcher,
)
from .manager import (
    MAX_OBJECTS,
    Scene,
    SceneConfig,
    ShapeInfo,
)

__all__ = [
    # Manager module
    "Scene",
    "SceneConfig",
    "ShapeInfo",
    "MAX_OBJECTS",
    # Intersection module
    "RayMarcher",
    "MarchConfig",
    "Intersect",
    "CastResult",
    "DEFAULT_MAX_LEN",
]
