"""Conversions between direction vectors and spherical angles.

Theta is the azimuth measured in the x-y plane from +x toward +y; phi is
the elevation toward +z. For unit vectors the two directions of the
conversion are inverses:

    unit_vec_from_angles(theta_of(v), phi_of(v)) == v
"""

import taichi as ti

from raymarch.core.vector import TWO_PI, AnglePair, vec3, wrap


@ti.func
def unit_vec_from_angles(theta: ti.f32, phi: ti.f32) -> vec3:
    """Build the unit vector pointing along (theta, phi).

    Returns:
        (cos(theta) cos(phi), sin(theta) cos(phi), sin(phi)).
    """
    cos_phi = ti.cos(phi)
    return vec3(ti.cos(theta) * cos_phi, ti.sin(theta) * cos_phi, ti.sin(phi))


@ti.func
def unit_vec_from_pair(angles: AnglePair) -> vec3:
    """Build the unit vector pointing along an AnglePair."""
    return unit_vec_from_angles(angles.theta, angles.phi)


@ti.func
def theta_of(v: vec3) -> ti.f32:
    """Azimuth of a vector, wrapped into [0, 2*pi)."""
    return wrap(ti.atan2(v.y, v.x), TWO_PI)


@ti.func
def phi_of(v: vec3) -> ti.f32:
    """Elevation of a vector above the x-y plane, in (-pi/2, pi/2]."""
    base_len = ti.sqrt(v.x * v.x + v.y * v.y)
    return ti.atan2(v.z, base_len)


@ti.func
def angles_of(v: vec3) -> AnglePair:
    """Spherical angles of a vector as an AnglePair."""
    return AnglePair(theta=theta_of(v), phi=phi_of(v))
