"""Implicit-surface shapes for ray marching.

Every shape exposes the same capability: an occupancy function over 3D
space (negative inside, non-negative outside) and its three partial
derivatives. The marcher only ever asks for the sign of the occupancy;
the derivatives are used to build surface normals at hit points.

Shapes are stored as a single tagged struct so a scene can hold a mix of
kinds in one ordered table:

    kind    center                size
    SPHERE  center                (radius, 0, 0)
    BOX     center                half extents
    PLANE   a point on the plane  unit normal (occupied side is below)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raymarch.geometry.shapes import Shape, ShapeKind, occupancy, vec3
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     s = Shape(kind=int(ShapeKind.SPHERE), center=vec3(0.0, 0.0, 0.0), size=vec3(1.0, 0.0, 0.0))
    ...     return occupancy(s, vec3(0.5, 0.0, 0.0))  # -0.5, inside
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from raymarch.core.vector import magnitude, vec3

# Step used for central-difference derivatives of shapes without a
# closed-form gradient.
DERIVATIVE_EPS = 1e-3


class ShapeKind(IntEnum):
    """Enumeration of supported shape kinds.

    Used for occupancy dispatch inside kernels.
    """

    SPHERE = 0
    BOX = 1
    PLANE = 2


@ti.dataclass
class Shape:
    """A tagged implicit-surface shape.

    Attributes:
        kind: The ShapeKind as an integer.
        center: Sphere/box center, or a point on the plane.
        size: Sphere radius in x, box half extents, or the plane's unit normal.
    """

    kind: ti.i32
    center: vec3
    size: vec3


# =============================================================================
# Per-kind Occupancy Functions
# =============================================================================


@ti.func
def sphere_occupancy(p: vec3, center: vec3, radius: ti.f32) -> ti.f32:
    """Signed distance from p to a sphere surface."""
    return magnitude(p - center) - radius


@ti.func
def box_occupancy(p: vec3, center: vec3, half_extents: vec3) -> ti.f32:
    """Signed distance from p to an axis-aligned box surface.

    Outside the box this is the exact Euclidean distance; inside it is the
    negated distance to the nearest face.
    """
    q = ti.abs(p - center) - half_extents
    outside = magnitude(ti.max(q, 0.0))
    inside = ti.min(ti.max(q.x, ti.max(q.y, q.z)), 0.0)
    return outside + inside


@ti.func
def plane_occupancy(p: vec3, point: vec3, normal: vec3) -> ti.f32:
    """Signed height of p above a plane; the half-space below is occupied."""
    return tm.dot(p - point, normal)


# =============================================================================
# Dispatch
# =============================================================================


@ti.func
def occupancy(shape: Shape, p: vec3) -> ti.f32:
    """Evaluate a shape's occupancy function at p.

    Args:
        shape: The shape to evaluate.
        p: The query position.

    Returns:
        A negative value if p is inside the shape, non-negative otherwise.
    """
    result = 0.0
    if shape.kind == int(ShapeKind.SPHERE):
        result = sphere_occupancy(p, shape.center, shape.size.x)
    elif shape.kind == int(ShapeKind.BOX):
        result = box_occupancy(p, shape.center, shape.size)
    else:
        result = plane_occupancy(p, shape.center, shape.size)
    return result


@ti.func
def _partial(shape: Shape, p: vec3, axis: vec3) -> ti.f32:
    """Partial derivative of the occupancy function along a unit axis."""
    result = 0.0
    if shape.kind == int(ShapeKind.SPHERE):
        offset = p - shape.center
        mag = magnitude(offset)
        if mag > 0.0:
            result = tm.dot(offset, axis) / mag
    elif shape.kind == int(ShapeKind.PLANE):
        result = tm.dot(shape.size, axis)
    else:
        ahead = occupancy(shape, p + DERIVATIVE_EPS * axis)
        behind = occupancy(shape, p - DERIVATIVE_EPS * axis)
        result = (ahead - behind) / (2.0 * DERIVATIVE_EPS)
    return result


@ti.func
def occupancy_dx(shape: Shape, p: vec3) -> ti.f32:
    """Partial derivative of the occupancy function along x."""
    return _partial(shape, p, vec3(1.0, 0.0, 0.0))


@ti.func
def occupancy_dy(shape: Shape, p: vec3) -> ti.f32:
    """Partial derivative of the occupancy function along y."""
    return _partial(shape, p, vec3(0.0, 1.0, 0.0))


@ti.func
def occupancy_dz(shape: Shape, p: vec3) -> ti.f32:
    """Partial derivative of the occupancy function along z."""
    return _partial(shape, p, vec3(0.0, 0.0, 1.0))


@ti.func
def surface_normal(shape: Shape, p: vec3) -> vec3:
    """Build the derivative vector of a shape at p.

    The vector is the occupancy gradient and points out of the shape. It
    is unit length for spheres and planes; box values are finite
    differences and callers that need a unit normal should normalize.
    """
    return vec3(occupancy_dx(shape, p), occupancy_dy(shape, p), occupancy_dz(shape, p))
