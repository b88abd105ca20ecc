"""Unit tests for the Scene container.

Tests cover:
- Adding spheres, boxes and planes
- Argument validation and capacity limits
- Object lookup, including the "no object" ID
- Host-side occupancy and normal queries
- Scene serialization (to_config, from_config, to_dict, from_dict)
- Scene clearing
"""

import math

import pytest


class TestShapeStorage:
    """Tests for adding shapes to the scene."""

    def test_ids_follow_insertion_order(self, scene):
        """Test that object IDs are assigned in order across kinds."""
        assert scene.add_sphere((0.0, 0.0, 0.0), 1.0) == 0
        assert scene.add_box((3.0, 0.0, 0.0), (0.5, 0.5, 0.5)) == 1
        assert scene.add_plane((0.0, 0.0, -2.0), (0.0, 0.0, 1.0)) == 2
        assert scene.get_object_count() == 3
        assert len(scene) == 3

    def test_shape_info_records_parameters(self, scene):
        """Test that ShapeInfo keeps the creation parameters."""
        from raymarch.geometry.shapes import ShapeKind

        idx = scene.add_sphere((1.0, 2.0, 3.0), 0.5)
        info = scene.get_object(idx)

        assert info.object_id == idx
        assert info.kind == ShapeKind.SPHERE
        assert info.params == {"center": (1.0, 2.0, 3.0), "radius": 0.5}

    def test_plane_normal_is_normalized(self, scene):
        """Test that plane normals are stored at unit length."""
        idx = scene.add_plane((0.0, 0.0, 0.0), (0.0, 3.0, 4.0))
        normal = scene.get_object(idx).params["normal"]
        assert abs(normal[1] - 0.6) < 1e-12
        assert abs(normal[2] - 0.8) < 1e-12

    def test_clear(self, scene):
        """Test clearing all shapes from the scene."""
        scene.add_sphere((0.0, 0.0, 0.0), 1.0)
        scene.add_box((1.0, 0.0, 0.0), (1.0, 1.0, 1.0))
        scene.clear()

        assert scene.get_object_count() == 0
        assert scene.objects == []
        assert scene.add_sphere((0.0, 0.0, 0.0), 1.0) == 0


class TestValidation:
    """Tests for argument validation."""

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_non_positive_radius(self, scene, radius):
        """Test that spheres need a positive radius."""
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0, 0.0), radius)

    def test_non_positive_half_extent(self, scene):
        """Test that boxes need positive half extents."""
        with pytest.raises(ValueError):
            scene.add_box((0.0, 0.0, 0.0), (1.0, 0.0, 1.0))

    def test_zero_plane_normal(self, scene):
        """Test that planes need a non-zero normal."""
        with pytest.raises(ValueError):
            scene.add_plane((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def test_wrong_component_count(self, scene):
        """Test that positions need three components."""
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0), 1.0)

    def test_failed_add_leaves_scene_unchanged(self, scene):
        """Test that validation happens before storage."""
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0, 0.0), -1.0)
        assert scene.get_object_count() == 0

    def test_capacity_exceeded(self):
        """Test that adding past capacity raises RuntimeError."""
        from raymarch.scene.manager import Scene

        small = Scene(capacity=2)
        small.add_sphere((0.0, 0.0, 0.0), 1.0)
        small.add_sphere((2.0, 0.0, 0.0), 1.0)
        with pytest.raises(RuntimeError):
            small.add_sphere((4.0, 0.0, 0.0), 1.0)
        assert small.get_object_count() == 2

    def test_invalid_capacity(self):
        """Test that a scene needs positive capacity."""
        from raymarch.scene.manager import Scene

        with pytest.raises(ValueError):
            Scene(capacity=0)


class TestLookup:
    """Tests for object lookup and host-side queries."""

    @pytest.mark.parametrize("object_id", [-1, 1, 100])
    def test_get_object_out_of_range(self, scene, object_id):
        """Test that unknown IDs, including -1, give None."""
        scene.add_sphere((0.0, 0.0, 0.0), 1.0)
        assert scene.get_object(object_id) is None

    def test_get_occupancy(self, scene):
        """Test evaluating a stored shape from the host."""
        scene.add_plane((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        idx = scene.add_sphere((0.0, 0.0, 5.0), 2.0)

        assert abs(scene.get_occupancy(idx, (0.0, 0.0, 5.0)) + 2.0) < 1e-6
        assert abs(scene.get_occupancy(idx, (0.0, 4.0, 5.0)) - 2.0) < 1e-6
        assert abs(scene.get_occupancy(0, (3.0, 3.0, -1.5)) + 1.5) < 1e-6

    def test_get_surface_normal(self, scene):
        """Test the derivative vector at a point on a sphere."""
        idx = scene.add_sphere((1.0, 0.0, 0.0), 1.0)
        n = scene.get_surface_normal(idx, (1.0, 0.0, 1.0))
        assert abs(n[0]) < 1e-6
        assert abs(n[1]) < 1e-6
        assert abs(n[2] - 1.0) < 1e-6

    def test_query_invalid_object(self, scene):
        """Test that host queries reject unknown IDs."""
        with pytest.raises(ValueError):
            scene.get_occupancy(0, (0.0, 0.0, 0.0))
        with pytest.raises(ValueError):
            scene.get_surface_normal(-1, (0.0, 0.0, 0.0))


class TestSerialization:
    """Tests for scene export and import."""

    def _populate(self, scene):
        scene.add_sphere((0.0, 0.0, 5.0), 1.0)
        scene.add_box((2.0, -1.0, 3.0), (0.5, 1.0, 1.5))
        scene.add_plane((0.0, 0.0, -1.0), (0.0, 0.0, 2.0))

    def test_to_config(self, scene):
        """Test exporting shapes in scene order."""
        self._populate(scene)
        config = scene.to_config()

        assert [obj["type"] for obj in config.objects] == ["sphere", "box", "plane"]
        assert config.objects[0] == {"type": "sphere", "center": [0.0, 0.0, 5.0], "radius": 1.0}
        assert config.objects[1]["half_extents"] == [0.5, 1.0, 1.5]
        assert config.objects[2]["normal"] == [0.0, 0.0, 1.0]

    def test_dict_reload_reproduces_scene(self, scene):
        """Test that from_dict(to_dict()) rebuilds the same shapes."""
        from raymarch.scene.manager import Scene

        self._populate(scene)
        data = scene.to_dict()

        other = Scene(capacity=8)
        other.from_dict(data)

        assert other.get_object_count() == 3
        for a, b in zip(scene.objects, other.objects):
            assert a.kind == b.kind
            assert a.params == b.params
        assert abs(other.get_occupancy(1, (2.0, -1.0, 3.0)) + 0.5) < 1e-6

    def test_from_config_replaces_contents(self, scene):
        """Test that loading clears existing shapes first."""
        from raymarch.scene.manager import SceneConfig

        self._populate(scene)
        scene.from_config(SceneConfig(objects=[{"type": "sphere", "center": [1, 1, 1], "radius": 2}]))

        assert scene.get_object_count() == 1
        assert scene.get_object(0).params["radius"] == 2.0

    def test_unknown_type(self, scene):
        """Test that unknown shape types are rejected."""
        with pytest.raises(ValueError):
            scene.from_dict({"objects": [{"type": "torus"}]})

    def test_empty_dict(self, scene):
        """Test loading a dictionary without objects."""
        self._populate(scene)
        scene.from_dict({})
        assert scene.get_object_count() == 0

    def test_box_config_defaults(self, scene):
        """Test that missing parameters fall back to defaults."""
        scene.from_dict({"objects": [{"type": "box"}]})
        params = scene.get_object(0).params
        assert params["center"] == (0.0, 0.0, 0.0)
        assert all(math.isclose(e, 0.5) for e in params["half_extents"])
