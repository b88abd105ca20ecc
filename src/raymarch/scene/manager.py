"""Scene container holding the ordered list of shapes a ray is marched against.

A Scene is owned by the caller and passed to the marcher explicitly; there
is no module-level registry. Shapes live in Taichi fields (Structure of
Arrays layout) so kernels can evaluate them, while a Python-side list of
ShapeInfo records mirrors them for lookups and serialization.

Insertion order matters: the marcher walks the shapes from first to last,
and among equally near candidates the first one wins.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raymarch.scene.manager import Scene
    >>> scene = Scene()
    >>> ball = scene.add_sphere(center=(0.0, 0.0, 5.0), radius=1.0)
    >>> floor = scene.add_plane(point=(0.0, 0.0, -1.0), normal=(0.0, 0.0, 1.0))
    >>> scene.get_object(ball).kind
    <ShapeKind.SPHERE: 0>
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import taichi as ti

from raymarch.core.vector import vec3
from raymarch.geometry import shapes
from raymarch.geometry.shapes import Shape, ShapeKind

logger = logging.getLogger(__name__)

# Default maximum number of shapes in one scene
MAX_OBJECTS = 1024

Vec3Tuple = tuple[float, float, float]


@dataclass
class ShapeInfo:
    """Information about a shape in the scene.

    Cast results refer back to shapes through these records; they are
    non-owning views of the scene's contents.

    Attributes:
        object_id: The index in the scene's shape storage.
        kind: The kind of shape.
        params: The shape parameters as provided during creation.
    """

    object_id: int
    kind: ShapeKind
    params: dict[str, Any]


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        objects: List of shape configurations, in scene order.
    """

    objects: list[dict[str, Any]] = field(default_factory=list)


def _as_vec3(value: Any, name: str) -> Vec3Tuple:
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    return (float(value[0]), float(value[1]), float(value[2]))


@ti.data_oriented
class Scene:
    """An ordered, caller-owned collection of shapes.

    Attributes:
        capacity: Maximum number of shapes this scene can hold.
        objects: List of ShapeInfo for all shapes, in insertion order.
    """

    def __init__(self, capacity: int = MAX_OBJECTS) -> None:
        """Initialize an empty scene.

        Args:
            capacity: Maximum number of shapes. Storage is allocated up front.

        Raises:
            ValueError: If capacity is not positive.
        """
        if capacity <= 0:
            raise ValueError(f"Scene capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.objects: list[ShapeInfo] = []

        # Shape storage: Structure of Arrays layout for GPU efficiency
        self.kinds = ti.field(dtype=ti.i32, shape=capacity)
        self.centers = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.sizes = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.num_objects = ti.field(dtype=ti.i32, shape=())

        # Scratch fields for host-side queries
        self._query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_value = ti.field(dtype=ti.f32, shape=())
        self._query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())

        self.num_objects[None] = 0

    def clear(self) -> None:
        """Remove all shapes from the scene.

        Resets the shape count to zero. The field data is not cleared but
        will be overwritten when new shapes are added.
        """
        self.num_objects[None] = 0
        self.objects.clear()
        logger.debug("Scene cleared")

    # =========================================================================
    # Shape Management
    # =========================================================================

    def _add_shape(
        self,
        kind: ShapeKind,
        center: Vec3Tuple,
        size: Vec3Tuple,
        params: dict[str, Any],
    ) -> int:
        idx = self.num_objects[None]
        if idx >= self.capacity:
            raise RuntimeError(f"Maximum number of objects ({self.capacity}) exceeded")
        self.kinds[idx] = int(kind)
        self.centers[idx] = list(center)
        self.sizes[idx] = list(size)
        self.num_objects[None] = idx + 1

        self.objects.append(ShapeInfo(object_id=idx, kind=kind, params=params))
        logger.debug("Added %s as object %d: %s", kind.name.lower(), idx, params)
        return idx

    def add_sphere(self, center: Vec3Tuple, radius: float) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.

        Returns:
            The object ID of the added sphere.

        Raises:
            RuntimeError: If the scene capacity is exceeded.
            ValueError: If the radius is not positive.
        """
        center = _as_vec3(center, "center")
        if radius <= 0.0:
            raise ValueError(f"Sphere radius = {radius} must be positive.")
        return self._add_shape(
            ShapeKind.SPHERE,
            center,
            (float(radius), 0.0, 0.0),
            {"center": center, "radius": float(radius)},
        )

    def add_box(self, center: Vec3Tuple, half_extents: Vec3Tuple) -> int:
        """Add an axis-aligned box to the scene.

        Args:
            center: The center point of the box as (x, y, z).
            half_extents: Half the box size along each axis.

        Returns:
            The object ID of the added box.

        Raises:
            RuntimeError: If the scene capacity is exceeded.
            ValueError: If any half extent is not positive.
        """
        center = _as_vec3(center, "center")
        half_extents = _as_vec3(half_extents, "half_extents")
        for i, extent in enumerate(half_extents):
            if extent <= 0.0:
                raise ValueError(f"Box half extent {i} = {extent} must be positive.")
        return self._add_shape(
            ShapeKind.BOX,
            center,
            half_extents,
            {"center": center, "half_extents": half_extents},
        )

    def add_plane(self, point: Vec3Tuple, normal: Vec3Tuple) -> int:
        """Add a plane to the scene.

        The half-space on the opposite side of the normal is occupied.

        Args:
            point: Any point on the plane as (x, y, z).
            normal: The plane normal; normalized before storage.

        Returns:
            The object ID of the added plane.

        Raises:
            RuntimeError: If the scene capacity is exceeded.
            ValueError: If the normal has zero length.
        """
        point = _as_vec3(point, "point")
        normal = _as_vec3(normal, "normal")
        norm = math.sqrt(normal[0] ** 2 + normal[1] ** 2 + normal[2] ** 2)
        if norm == 0.0:
            raise ValueError("Plane normal must be non-zero.")
        unit_normal = (normal[0] / norm, normal[1] / norm, normal[2] / norm)
        return self._add_shape(
            ShapeKind.PLANE,
            point,
            unit_normal,
            {"point": point, "normal": unit_normal},
        )

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_object_count(self) -> int:
        """Get the number of shapes in the scene."""
        return int(self.num_objects[None])

    def __len__(self) -> int:
        return self.get_object_count()

    def get_object(self, object_id: int) -> ShapeInfo | None:
        """Look up a shape by ID.

        Args:
            object_id: The object ID, as returned by add_* or a cast.

        Returns:
            The ShapeInfo, or None if the ID does not name a shape
            (including the -1 "no object" ID).
        """
        if 0 <= object_id < len(self.objects):
            return self.objects[object_id]
        return None

    def get_occupancy(self, object_id: int, point: Vec3Tuple) -> float:
        """Evaluate one shape's occupancy function at a point.

        Raises:
            ValueError: If object_id does not name a shape.
        """
        self._check_object_id(object_id)
        self._query_point[None] = list(_as_vec3(point, "point"))
        self._occupancy_kernel(object_id)
        return float(self._query_value[None])

    def get_surface_normal(self, object_id: int, point: Vec3Tuple) -> Vec3Tuple:
        """Evaluate one shape's derivative vector at a point.

        Typically called with the point of a cast result to shade or
        orient something at the hit.

        Raises:
            ValueError: If object_id does not name a shape.
        """
        self._check_object_id(object_id)
        self._query_point[None] = list(_as_vec3(point, "point"))
        self._surface_normal_kernel(object_id)
        n = self._query_normal[None]
        return (float(n[0]), float(n[1]), float(n[2]))

    def _check_object_id(self, object_id: int) -> None:
        if self.get_object(object_id) is None:
            raise ValueError(f"Invalid object_id: {object_id}")

    # =========================================================================
    # Device-side Access
    # =========================================================================

    @ti.func
    def shape_at(self, i: ti.i32) -> Shape:
        """Assemble the Shape struct stored at index i."""
        return Shape(kind=self.kinds[i], center=self.centers[i], size=self.sizes[i])

    @ti.func
    def occupancy(self, i: ti.i32, p: vec3) -> ti.f32:
        """Evaluate shape i's occupancy function at p."""
        return shapes.occupancy(self.shape_at(i), p)

    @ti.func
    def surface_normal(self, i: ti.i32, p: vec3) -> vec3:
        """Evaluate shape i's derivative vector at p."""
        return shapes.surface_normal(self.shape_at(i), p)

    @ti.kernel
    def _occupancy_kernel(self, object_id: ti.i32):
        self._query_value[None] = self.occupancy(object_id, self._query_point[None])

    @ti.kernel
    def _surface_normal_kernel(self, object_id: ti.i32):
        self._query_normal[None] = self.surface_normal(object_id, self._query_point[None])

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all shapes in scene order.
        """
        config = SceneConfig()
        for info in self.objects:
            obj_config: dict[str, Any] = {"type": info.kind.name.lower()}
            for key, value in info.params.items():
                obj_config[key] = list(value) if isinstance(value, tuple) else value
            config.objects.append(obj_config)
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for obj_config in config.objects:
            obj_type = obj_config.get("type", "").lower()
            if obj_type == "sphere":
                self.add_sphere(
                    obj_config.get("center", [0.0, 0.0, 0.0]),
                    obj_config.get("radius", 1.0),
                )
            elif obj_type == "box":
                self.add_box(
                    obj_config.get("center", [0.0, 0.0, 0.0]),
                    obj_config.get("half_extents", [0.5, 0.5, 0.5]),
                )
            elif obj_type == "plane":
                self.add_plane(
                    obj_config.get("point", [0.0, 0.0, 0.0]),
                    obj_config.get("normal", [0.0, 0.0, 1.0]),
                )
            else:
                raise ValueError(f"Unknown object type: {obj_type}")

        logger.debug("Loaded %d objects from config", len(self.objects))

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        return {"objects": self.to_config().objects}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with an 'objects' key.
        """
        self.from_config(SceneConfig(objects=data.get("objects", [])))
