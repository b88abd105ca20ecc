"""Geometry primitives for GPU-side ray marching.

This module provides the value types and vector arithmetic the marcher and
the camera build on. All operations are Taichi functions so they can be
inlined into kernels.

Points and vectors share one representation (``vec3``); ``point3`` is an
alias kept for readability where a value is a position rather than a
displacement.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raymarch.core.vector import rot_vec, unit_vec, vec3
    >>> @ti.kernel
    ... def spin() -> ti.f32:
    ...     v = rot_vec(vec3(1.0, 0.0, 0.0), vec3(0.0, 0.0, 1.0), 1.5707964)
    ...     return unit_vec(v).y
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3
point3 = tm.vec3

TWO_PI = 2.0 * tm.pi


@ti.dataclass
class AnglePair:
    """Spherical orientation.

    Attributes:
        theta: Azimuth in the horizontal (x, y) plane, in radians.
            Kept in [0, 2*pi) by the conversion functions.
        phi: Elevation above the horizontal plane, in radians. Not
            constrained here; callers keep it within [-pi/2, pi/2].
    """

    theta: ti.f32
    phi: ti.f32


@ti.dataclass
class ScreenCoord:
    """A pixel remapped to a width-normalized, center-origin system.

    Attributes:
        x: Horizontal coordinate in [-1, 1], right is positive.
        y: Vertical coordinate scaled by the screen width, up is positive.
    """

    x: ti.f32
    y: ti.f32


# =============================================================================
# Vector Arithmetic
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def magnitude(v: vec3) -> ti.f32:
    """Compute the Euclidean norm of a vector."""
    return ti.sqrt(v.x * v.x + v.y * v.y + v.z * v.z)


@ti.func
def unit_vec(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Unlike ``tm.normalize``, a zero-length input is not an error: the
    result is the zero vector.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the direction of v, or (0, 0, 0) if |v| == 0.
    """
    mag = magnitude(v)
    result = vec3(0.0, 0.0, 0.0)
    if mag != 0.0:
        result = v / mag
    return result


@ti.func
def distance(p1: vec3, p2: vec3) -> ti.f32:
    """Euclidean distance between two points."""
    return magnitude(p2 - p1)


@ti.func
def angle_sep(a: vec3, b: vec3) -> ti.f32:
    """Angle between two vectors, in radians.

    Computed as acos(a . b / (|a| |b|)). Zero-magnitude operands are not
    guarded and produce NaN.
    """
    return ti.acos(tm.dot(a, b) / (magnitude(a) * magnitude(b)))


@ti.func
def rot_vec(v: vec3, axis: vec3, theta: ti.f32) -> vec3:
    """Rotate a vector about an axis by an angle (Rodrigues' formula).

    Computes v*cos(theta) + (k x v)*sin(theta) + k*(k . v)*(1 - cos(theta))
    where k is the normalized axis.

    Args:
        v: The vector to rotate.
        axis: The rotation axis. Need not be unit length.
        theta: The rotation angle in radians, counter-clockwise when
            looking down the axis toward the origin.

    Returns:
        The rotated vector.
    """
    k = unit_vec(axis)
    cos_t = ti.cos(theta)
    sin_t = ti.sin(theta)
    return v * cos_t + tm.cross(k, v) * sin_t + k * tm.dot(k, v) * (1.0 - cos_t)


# =============================================================================
# Scalar Utilities
# =============================================================================


@ti.func
def wrap(a: ti.f32, period: ti.f32) -> ti.f32:
    """Wrap a value into [0, period).

    Uses a single floor-division remainder, so the cost does not depend on
    how far out of range the input is. The correction steps keep the
    half-open range when f32 rounding lands exactly on either boundary.

    Args:
        a: The value to wrap.
        period: The (positive) period.

    Returns:
        A value r with 0 <= r < period and r == a modulo period.
    """
    result = a - period * ti.floor(a / period)
    if result < 0.0:
        result += period
    if result >= period:
        result -= period
    return result
