"""Core geometry module.

This module contains the arithmetic the camera and the marcher consume:

Components:
    vector: Value types (vec3, AnglePair, ScreenCoord) and vector utilities
    angles: Conversions between direction vectors and spherical angles

All functions are Taichi functions (@ti.func) meant to be inlined into
kernels; none of them keep state.
"""

from .angles import (
    angles_of,
    phi_of,
    theta_of,
    unit_vec_from_angles,
    unit_vec_from_pair,
)
from .vector import (
    TWO_PI,
    AnglePair,
    ScreenCoord,
    angle_sep,
    cross,
    distance,
    dot,
    magnitude,
    point3,
    rot_vec,
    unit_vec,
    vec3,
    wrap,
)

__all__ = [
    "vec3",
    "point3",
    "AnglePair",
    "ScreenCoord",
    "TWO_PI",
    "dot",
    "cross",
    "magnitude",
    "unit_vec",
    "distance",
    "angle_sep",
    "rot_vec",
    "wrap",
    "unit_vec_from_angles",
    "unit_vec_from_pair",
    "theta_of",
    "phi_of",
    "angles_of",
]
