"""Spherical-angle camera mapping screen pixels to world-space ray directions.

The camera is described by a base orientation (theta, phi) and an aperture
angle, half of its horizontal field of view. A pixel is first remapped to a
normalized screen coordinate:

- origin at the screen center, right and up positive
- horizontal extent [-1, 1]
- vertical coordinate scaled by the width, so non-square screens have a
  vertical extent other than [-1, 1]

The coordinate is then turned into a direction in two stages. The
horizontal and vertical spread are applied around a level camera facing
the base azimuth, and the resulting vector is rotated about the camera's
horizontal axis by the camera pitch.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raymarch.camera.projection import CameraConfig, SphericalCamera
    >>> camera = SphericalCamera(CameraConfig(width=640, height=480, theta=0.0, phi=0.2))
    >>> theta, phi = camera.get_ray_angles(320, 240)  # center pixel: the camera direction
"""

import logging
import math
from dataclasses import dataclass, replace

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raymarch.core.angles import angles_of, unit_vec_from_angles, unit_vec_from_pair
from raymarch.core.vector import AnglePair, ScreenCoord, rot_vec, vec3

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class CameraConfig:
    """Configuration for a spherical-angle camera.

    Attributes:
        width: Screen width in pixels.
        height: Screen height in pixels.
        aperture_angle: Half of the horizontal field of view, in radians.
        theta: Base azimuth of the view direction, in radians.
        phi: Base elevation (pitch) of the view direction, in radians.
    """

    width: int = 640
    height: int = 480
    aperture_angle: float = math.pi / 4.0
    theta: float = 0.0
    phi: float = 0.0

    def validate(self) -> None:
        """Check the configuration.

        Raises:
            ValueError: If the screen size is not positive or the aperture
                is outside (0, pi/2).
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Screen size {self.width}x{self.height} must be positive.")
        if not 0.0 < self.aperture_angle < math.pi / 2.0:
            raise ValueError(f"aperture_angle = {self.aperture_angle} must be in (0, pi/2).")


# =============================================================================
# Projection (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def pixel_to_normalized(x: ti.f32, y: ti.f32, width: ti.f32, height: ti.f32) -> ScreenCoord:
    """Remap a pixel to width-normalized, center-origin coordinates.

    Args:
        x: Pixel column, 0 at the left edge.
        y: Pixel row, 0 at the top edge.
        width: Screen width in pixels.
        height: Screen height in pixels.

    Returns:
        The normalized coordinate; the center pixel maps to (0, 0).
    """
    return ScreenCoord(
        x=(2.0 * x) / width - 1.0,
        y=(2.0 * (height - y) - height) / width,
    )


@ti.func
def normalized_to_ray_angles(coord: ScreenCoord, aperture_angle: ti.f32, cam_dir: AnglePair) -> AnglePair:
    """Compute the direction of the ray through a normalized coordinate.

    Args:
        coord: The normalized screen coordinate.
        aperture_angle: Half the horizontal field of view, in radians.
        cam_dir: The camera's base orientation.

    Returns:
        The ray direction as spherical angles.
    """
    tan_aperture = ti.tan(aperture_angle)
    theta = -ti.atan2(coord.x * tan_aperture, 1.0)
    phi = ti.atan2(coord.y * tan_aperture, ti.abs(1.0 / ti.cos(theta)))

    # Spread around a level camera, then tilt the whole frame by the pitch
    level = unit_vec_from_angles(theta + cam_dir.theta, phi)
    axis = unit_vec_from_angles(cam_dir.theta - tm.pi / 2.0, 0.0)
    tilted = rot_vec(level, axis, cam_dir.phi)

    return angles_of(tilted)


@ti.func
def pixel_to_ray_direction(
    x: ti.f32,
    y: ti.f32,
    width: ti.f32,
    height: ti.f32,
    aperture_angle: ti.f32,
    cam_dir: AnglePair,
) -> vec3:
    """Compute the unit direction of the ray through a pixel."""
    coord = pixel_to_normalized(x, y, width, height)
    return unit_vec_from_pair(normalized_to_ray_angles(coord, aperture_angle, cam_dir))


# =============================================================================
# Camera Object
# =============================================================================


@ti.data_oriented
class SphericalCamera:
    """A camera bound to one configuration.

    The configuration is copied into Taichi fields so that kernels can read
    it and so the orientation can change without recompiling.

    Attributes:
        config: A copy of the camera configuration, tracking the current
            orientation.
    """

    def __init__(self, config: CameraConfig) -> None:
        """Set up a camera.

        Args:
            config: Camera configuration.

        Raises:
            ValueError: If the configuration is invalid.
        """
        config.validate()
        self.config = replace(config)

        self._screen = ti.field(dtype=ti.f32, shape=2)
        self._aperture = ti.field(dtype=ti.f32, shape=())
        self._theta = ti.field(dtype=ti.f32, shape=())
        self._phi = ti.field(dtype=ti.f32, shape=())

        self._out_angles = ti.field(dtype=ti.f32, shape=2)
        self._out_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._directions = ti.Vector.field(3, dtype=ti.f32, shape=(config.width, config.height))

        self._screen[0] = float(config.width)
        self._screen[1] = float(config.height)
        self._aperture[None] = config.aperture_angle
        self.set_orientation(config.theta, config.phi)

    def set_orientation(self, theta: float, phi: float) -> None:
        """Point the camera in a new direction.

        Args:
            theta: Base azimuth in radians.
            phi: Base elevation in radians.
        """
        self.config.theta = theta
        self.config.phi = phi
        self._theta[None] = theta
        self._phi[None] = phi
        logger.debug("Camera orientation set to theta=%g, phi=%g", theta, phi)

    @ti.func
    def orientation(self) -> AnglePair:
        """Get the camera's base orientation."""
        return AnglePair(theta=self._theta[None], phi=self._phi[None])

    @ti.func
    def ray_angles(self, x: ti.f32, y: ti.f32) -> AnglePair:
        """Spherical angles of the ray through pixel (x, y)."""
        coord = pixel_to_normalized(x, y, self._screen[0], self._screen[1])
        return normalized_to_ray_angles(coord, self._aperture[None], self.orientation())

    @ti.func
    def ray_direction(self, x: ti.f32, y: ti.f32) -> vec3:
        """Unit direction of the ray through pixel (x, y)."""
        return unit_vec_from_pair(self.ray_angles(x, y))

    @ti.kernel
    def _ray_kernel(self, x: ti.f32, y: ti.f32):
        angles = self.ray_angles(x, y)
        self._out_angles[0] = angles.theta
        self._out_angles[1] = angles.phi
        self._out_direction[None] = unit_vec_from_pair(angles)

    @ti.kernel
    def _fill_directions(self):
        for i, j in self._directions:
            self._directions[i, j] = self.ray_direction(ti.cast(i, ti.f32), ti.cast(j, ti.f32))

    def get_ray_angles(self, x: float, y: float) -> tuple[float, float]:
        """Get the (theta, phi) of the ray through a pixel."""
        self._ray_kernel(float(x), float(y))
        return (float(self._out_angles[0]), float(self._out_angles[1]))

    def get_ray_direction(self, x: float, y: float) -> tuple[float, float, float]:
        """Get the unit direction of the ray through a pixel."""
        self._ray_kernel(float(x), float(y))
        d = self._out_direction[None]
        return (float(d[0]), float(d[1]), float(d[2]))

    def get_ray_directions(self) -> npt.NDArray[np.float32]:
        """Get the ray direction of every pixel.

        Returns:
            Array of shape (width, height, 3), indexed [x, y] with y = 0 at
            the top row.
        """
        self._fill_directions()
        return self._directions.to_numpy()
