"""Camera module for pixel-to-ray mapping.

This module provides the camera model that turns screen pixels into ray
directions:

Components:
    projection: Spherical-angle camera with an aperture (half field of view)

Camera responsibilities:
    - Remap pixel coordinates to a width-normalized, center-origin system
    - Spread rays across the aperture around the base view direction
    - Tilt the spread by the camera pitch

Pixel coordinates have x = 0 at the left edge and y = 0 at the top edge.
"""

from .projection import (
    CameraConfig,
    SphericalCamera,
    normalized_to_ray_angles,
    pixel_to_normalized,
    pixel_to_ray_direction,
)

__all__ = [
    "CameraConfig",
    "SphericalCamera",
    "pixel_to_normalized",
    "normalized_to_ray_angles",
    "pixel_to_ray_direction",
]
