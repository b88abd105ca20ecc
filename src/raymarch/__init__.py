"""Taichi-based ray marching against implicit surfaces.

This package finds where a ray first enters a scene of implicit-surface
shapes, with configurable precision, and maps screen pixels to ray
directions for a camera described by spherical angles.

Subpackages:
    core: Vector utilities, value types and angle conversions
    geometry: Implicit-surface shapes (occupancy and derivatives)
    scene: Scene storage and the ray-march intersection engine
    camera: Pixel-to-ray mapping for a spherical-angle camera

Submodules are not imported here. Call ti.init() before constructing a
Scene, RayMarcher or SphericalCamera; they allocate Taichi fields.
"""

__version__ = "0.1.0"
