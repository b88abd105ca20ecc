"""Unit tests for the spherical-angle camera.

Tests cover:
- Pixel normalization
- Ray angles at the center and edges of the screen
- Camera pitch
- Direction lookups, single and full-screen
- Configuration validation
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestCameraConfig:
    """Tests for CameraConfig validation."""

    def test_default_config_is_valid(self):
        """Test that the default configuration validates."""
        from raymarch.camera.projection import CameraConfig

        CameraConfig().validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"height": -10},
            {"aperture_angle": 0.0},
            {"aperture_angle": math.pi / 2.0},
            {"aperture_angle": 2.0},
        ],
    )
    def test_invalid_config(self, kwargs):
        """Test that invalid configurations are rejected by the camera."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        with pytest.raises(ValueError):
            SphericalCamera(CameraConfig(**kwargs))


class TestPixelToNormalized:
    """Tests for the screen coordinate remap."""

    @pytest.mark.parametrize(
        "pixel, expected",
        [
            ((320.0, 240.0), (0.0, 0.0)),
            ((0.0, 240.0), (-1.0, 0.0)),
            ((640.0, 240.0), (1.0, 0.0)),
            ((320.0, 0.0), (0.0, 0.75)),
            ((320.0, 480.0), (0.0, -0.75)),
        ],
    )
    def test_remap(self, pixel, expected):
        """Test normalization on a 640x480 screen."""
        from raymarch.camera.projection import pixel_to_normalized

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel(x: ti.f32, y: ti.f32):
            coord = pixel_to_normalized(x, y, 640.0, 480.0)
            result[0] = coord.x
            result[1] = coord.y

        test_kernel(*pixel)
        assert abs(result[0] - expected[0]) < 1e-6
        assert abs(result[1] - expected[1]) < 1e-6


class TestRayAngles:
    """Tests for ray angles through pixels."""

    def test_center_pixel_is_camera_direction(self):
        """Test that the center pixel looks along the camera orientation."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        camera = SphericalCamera(CameraConfig(width=640, height=480, theta=1.0, phi=0.3))
        theta, phi = camera.get_ray_angles(320, 240)

        assert abs(theta - 1.0) < 1e-5
        assert abs(phi - 0.3) < 1e-5

    def test_right_edge_is_aperture_from_center(self):
        """Test that the right edge is one aperture clockwise of the center."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        camera = SphericalCamera(CameraConfig(width=640, height=480, aperture_angle=0.5, theta=1.0))
        theta, phi = camera.get_ray_angles(640, 240)

        assert abs(theta - 0.5) < 1e-5
        assert abs(phi) < 1e-5

    def test_left_edge_is_aperture_from_center(self):
        """Test that the left edge is one aperture counterclockwise of the center."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        camera = SphericalCamera(CameraConfig(width=640, height=480, aperture_angle=0.5, theta=1.0))
        theta, _ = camera.get_ray_angles(0, 240)

        assert abs(theta - 1.5) < 1e-5

    def test_top_edge_of_square_screen(self):
        """Test that the top edge of a square screen is one aperture up."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        camera = SphericalCamera(CameraConfig(width=100, height=100, aperture_angle=0.5))
        theta, phi = camera.get_ray_angles(50, 0)

        assert abs(theta) < 1e-5
        assert abs(phi - 0.5) < 1e-5

    def test_pitch_tilts_the_view(self):
        """Test that camera pitch adds to the elevation above center."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        camera = SphericalCamera(CameraConfig(width=100, height=100, aperture_angle=0.5, phi=0.4))
        theta, phi = camera.get_ray_angles(50, 0)

        assert abs(theta) < 1e-5
        assert abs(phi - 0.9) < 1e-5

    def test_azimuth_is_wrapped(self):
        """Test that theta is reported in [0, 2*pi)."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        camera = SphericalCamera(CameraConfig(width=640, height=480, aperture_angle=0.5, theta=0.0))
        theta, _ = camera.get_ray_angles(640, 240)

        assert abs(theta - (2.0 * math.pi - 0.5)) < 1e-5

    def test_set_orientation(self):
        """Test that the orientation can change after construction."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        camera = SphericalCamera(CameraConfig(width=64, height=48))
        camera.set_orientation(2.0, -0.2)
        theta, phi = camera.get_ray_angles(32, 24)

        assert camera.config.theta == 2.0
        assert abs(theta - 2.0) < 1e-5
        assert abs(phi + 0.2) < 1e-5

    def test_set_orientation_leaves_caller_config_alone(self):
        """Test that cameras sharing a config do not affect each other."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        config = CameraConfig(width=64, height=48, theta=0.5, phi=0.1)
        moved = SphericalCamera(config)
        still = SphericalCamera(config)
        moved.set_orientation(2.0, -0.2)

        assert config.theta == 0.5
        assert config.phi == 0.1
        assert still.config.theta == 0.5
        theta, phi = still.get_ray_angles(32, 24)
        assert abs(theta - 0.5) < 1e-5
        assert abs(phi - 0.1) < 1e-5


class TestRayDirections:
    """Tests for direction lookups."""

    def test_center_direction(self):
        """Test the direction through the center of a level camera."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        camera = SphericalCamera(CameraConfig(width=64, height=48, theta=math.pi / 2.0))
        d = camera.get_ray_direction(32, 24)

        assert abs(d[0]) < 1e-5
        assert abs(d[1] - 1.0) < 1e-5
        assert abs(d[2]) < 1e-5

    def test_direction_matches_angles(self):
        """Test that the direction is the unit vector of the angles."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        camera = SphericalCamera(CameraConfig(width=64, height=48, theta=0.4, phi=-0.3))
        theta, phi = camera.get_ray_angles(10, 5)
        d = camera.get_ray_direction(10, 5)

        expected = (
            math.cos(phi) * math.cos(theta),
            math.cos(phi) * math.sin(theta),
            math.sin(phi),
        )
        for i in range(3):
            assert abs(d[i] - expected[i]) < 1e-5

    def test_full_screen_directions(self):
        """Test the per-pixel direction array."""
        from raymarch.camera.projection import CameraConfig, SphericalCamera

        camera = SphericalCamera(CameraConfig(width=16, height=12, theta=0.7, phi=0.1))
        directions = camera.get_ray_directions()

        assert directions.shape == (16, 12, 3)
        lengths = np.linalg.norm(directions, axis=-1)
        assert np.allclose(lengths, 1.0, atol=1e-5)

        d = camera.get_ray_direction(3, 9)
        assert np.allclose(directions[3, 9], d, atol=1e-6)

    def test_pixel_to_ray_direction_function(self):
        """Test the free function used inside user kernels."""
        from raymarch.camera.projection import pixel_to_ray_direction
        from raymarch.core.vector import AnglePair

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = pixel_to_ray_direction(50.0, 50.0, 100.0, 100.0, 0.5, AnglePair(theta=0.0, phi=0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2]) < 1e-6
