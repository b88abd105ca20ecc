"""Ray-march intersection against a scene of implicit surfaces.

The marcher advances a ray in fixed steps, evaluating every shape's
occupancy function at each new sample point. The first step at which any
shape reports occupancy (a negative value) ends the march; among the
shapes occupied at that step, the one whose entry estimate is nearest to
the pre-step point is returned. Optionally the entry estimate is refined
by a fixed number of bisection iterations between the pre-step and
post-step points.

The march always terminates: it takes at most ceil(max_len / cast_inc_len)
steps, the last one shortened to land exactly on max_len.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raymarch.scene.manager import Scene
    >>> from raymarch.scene.intersection import MarchConfig, RayMarcher
    >>> scene = Scene()
    >>> scene.add_sphere(center=(5.0, 0.0, 0.0), radius=1.0)
    0
    >>> marcher = RayMarcher(scene, MarchConfig(cast_inc_len=0.05, bin_search_iters=12))
    >>> result = marcher.cast_ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), max_len=10.0)
    >>> result.hit, result.obj.object_id
    (True, 0)
"""

import logging
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

from raymarch.core.vector import distance, unit_vec, vec3
from raymarch.scene.manager import Scene, ShapeInfo

logger = logging.getLogger(__name__)

# Default maximum travel distance for a cast
DEFAULT_MAX_LEN = 100.0

# Largest f32 step count that fits in an i32
MAX_STEPS = 2147483520.0


@dataclass(frozen=True)
class MarchConfig:
    """Precision settings for the marcher.

    Both values are fixed for the lifetime of a RayMarcher; they are
    compiled into its kernels.

    Attributes:
        cast_inc_len: Length of one march step. Features thinner than this
            can be stepped over.
        bin_search_iters: Number of bisection iterations used to refine a
            hit. Each iteration halves the error bound.
    """

    cast_inc_len: float = 0.05
    bin_search_iters: int = 12

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If the step length is not positive or fewer than
                one bisection iteration is requested.
        """
        if self.cast_inc_len <= 0.0:
            raise ValueError(f"cast_inc_len = {self.cast_inc_len} must be positive.")
        if self.bin_search_iters < 1:
            raise ValueError(f"bin_search_iters = {self.bin_search_iters} must be at least 1.")


@ti.dataclass
class Intersect:
    """Device-side result of a cast.

    Attributes:
        hit: Whether the ray entered any shape (1 if hit, 0 if miss).
        point: The estimated entry point. Only valid if hit == 1;
            (0, 0, 0) on a miss.
        object_id: Index of the hit shape in the scene, or -1 on a miss.
    """

    hit: ti.i32
    point: vec3
    object_id: ti.i32


@ti.func
def _make_miss() -> Intersect:
    """Create an Intersect indicating no hit."""
    return Intersect(hit=0, point=vec3(0.0, 0.0, 0.0), object_id=-1)


@dataclass
class CastResult:
    """Host-side result of a cast.

    Attributes:
        hit: Whether the ray entered any shape.
        point: The estimated entry point, (0, 0, 0) on a miss.
        obj: The hit shape, or None on a miss. This is a reference into the
            scene, valid as long as the scene is not cleared.
    """

    hit: bool
    point: tuple[float, float, float]
    obj: ShapeInfo | None


@ti.data_oriented
class RayMarcher:
    """Fixed-step ray marcher bound to one scene.

    The marcher never modifies the scene. Casts are independent of each
    other; the scene must not be edited while a cast or batch is running.

    Attributes:
        scene: The scene rays are marched against.
        config: The precision settings.
    """

    def __init__(self, scene: Scene, config: MarchConfig | None = None) -> None:
        """Bind a marcher to a scene.

        Args:
            scene: The scene to march against.
            config: Precision settings. Defaults to MarchConfig().

        Raises:
            ValueError: If the configuration is invalid.
        """
        if config is None:
            config = MarchConfig()
        config.validate()
        self.scene = scene
        self.config = config
        self.cast_inc_len = float(config.cast_inc_len)
        self.bin_search_iters = int(config.bin_search_iters)

        # Single-ray input and output, GPU-accessible
        self._ray_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._ray_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._result_hit = ti.field(dtype=ti.i32, shape=())
        self._result_point = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._result_object = ti.field(dtype=ti.i32, shape=())

        logger.info(
            "RayMarcher configured: cast_inc_len=%g, bin_search_iters=%d",
            self.cast_inc_len,
            self.bin_search_iters,
        )

    # =========================================================================
    # Marching (Taichi-compatible, GPU-callable)
    # =========================================================================

    @ti.func
    def bin_search(self, object_id: ti.i32, point: vec3, inc_vec: vec3) -> vec3:
        """Refine a surface crossing by bisection.

        The bracket starts as [point, point + inc_vec]. Each iteration
        evaluates the shape at the midpoint: if it is outside, the midpoint
        becomes the new start, otherwise the new end. Exactly
        bin_search_iters iterations run; the bracket is not re-validated.

        Args:
            object_id: The shape whose surface is being refined.
            point: The pre-step point (outside the shape).
            inc_vec: The step that ended inside the shape.

        Returns:
            The final midpoint.
        """
        p1 = point
        p2 = point + inc_vec
        mid = p1
        for _ in range(self.bin_search_iters):
            mid = (p1 + p2) / 2.0
            if self.scene.occupancy(object_id, mid) > 0.0:
                p1 = mid
            else:
                p2 = mid
        return mid

    @ti.func
    def cast(self, point: vec3, direction: vec3, do_bin_search: ti.i32, max_len: ti.f32) -> Intersect:
        """March a ray through the scene.

        Args:
            point: The ray origin.
            direction: The ray direction; any non-zero magnitude.
            do_bin_search: Non-zero to refine the hit point by bisection.
            max_len: Maximum distance to travel.

        Returns:
            An Intersect for the nearest shape entered at the first occupied
            step, or a miss if nothing is entered within max_len.
        """
        unit_dir = unit_vec(direction)

        trace = point
        result = _make_miss()
        found = 0

        # Integer step counter bounds the march for any max_len; clamped to the i32 range
        n_steps = ti.cast(ti.min(ti.ceil(max_len / self.cast_inc_len), MAX_STEPS), ti.i32)
        step = 0
        while step < n_steps:
            step += 1
            # Final step lands exactly on max_len
            travelled = ti.min(ti.cast(step, ti.f32) * self.cast_inc_len, max_len)
            start = trace
            trace = point + travelled * unit_dir
            inc_vec = trace - start

            min_distance = max_len
            for i in range(self.scene.num_objects[None]):
                if self.scene.occupancy(i, trace) < 0.0:
                    hit_point = trace
                    if do_bin_search != 0:
                        hit_point = self.bin_search(i, start, inc_vec)

                    # Nearest to the pre-step point wins; ties keep scene order
                    dist = distance(start, hit_point)
                    if found == 0 or dist < min_distance:
                        min_distance = dist
                        result = Intersect(hit=1, point=hit_point, object_id=i)
                        found = 1

            if found == 1:
                break

        return result

    # =========================================================================
    # Host Interface
    # =========================================================================

    @ti.kernel
    def _cast_kernel(self, do_bin_search: ti.i32, max_len: ti.f32):
        rec = self.cast(self._ray_origin[None], self._ray_direction[None], do_bin_search, max_len)
        self._result_hit[None] = rec.hit
        self._result_point[None] = rec.point
        self._result_object[None] = rec.object_id

    @ti.kernel
    def _cast_batch_kernel(
        self,
        origins: ti.types.ndarray(dtype=ti.f32, ndim=2),
        directions: ti.types.ndarray(dtype=ti.f32, ndim=2),
        hits: ti.types.ndarray(dtype=ti.i32, ndim=1),
        points: ti.types.ndarray(dtype=ti.f32, ndim=2),
        object_ids: ti.types.ndarray(dtype=ti.i32, ndim=1),
        do_bin_search: ti.i32,
        max_len: ti.f32,
    ):
        for k in range(origins.shape[0]):
            origin = vec3(origins[k, 0], origins[k, 1], origins[k, 2])
            direction = vec3(directions[k, 0], directions[k, 1], directions[k, 2])
            rec = self.cast(origin, direction, do_bin_search, max_len)
            hits[k] = rec.hit
            points[k, 0] = rec.point.x
            points[k, 1] = rec.point.y
            points[k, 2] = rec.point.z
            object_ids[k] = rec.object_id

    def cast_ray(
        self,
        point: tuple[float, float, float],
        direction: tuple[float, float, float],
        do_bin_search: bool = True,
        max_len: float = DEFAULT_MAX_LEN,
    ) -> CastResult:
        """Cast a single ray.

        Args:
            point: The ray origin as (x, y, z).
            direction: The ray direction as (x, y, z); re-normalized internally.
            do_bin_search: Whether to refine the hit point by bisection.
            max_len: Maximum distance to travel.

        Returns:
            A CastResult. On a miss, hit is False, point is (0, 0, 0) and
            obj is None.
        """
        self._ray_origin[None] = [float(c) for c in point]
        self._ray_direction[None] = [float(c) for c in direction]
        self._cast_kernel(int(do_bin_search), float(max_len))

        hit = bool(self._result_hit[None])
        p = self._result_point[None]
        obj = self.scene.get_object(int(self._result_object[None])) if hit else None
        logger.debug("Cast from %s along %s: hit=%s", tuple(point), tuple(direction), hit)
        return CastResult(hit=hit, point=(float(p[0]), float(p[1]), float(p[2])), obj=obj)

    def cast_rays(
        self,
        points: npt.ArrayLike,
        directions: npt.ArrayLike,
        do_bin_search: bool = True,
        max_len: float = DEFAULT_MAX_LEN,
    ) -> tuple[npt.NDArray[np.int32], npt.NDArray[np.float32], npt.NDArray[np.int32]]:
        """Cast a batch of independent rays in parallel.

        Args:
            points: Ray origins, shape (N, 3). A single (3,) origin is
                broadcast to every direction.
            directions: Ray directions, shape (N, 3).
            do_bin_search: Whether to refine hit points by bisection.
            max_len: Maximum distance to travel for every ray.

        Returns:
            A tuple (hits, points, object_ids) of arrays with shapes (N,),
            (N, 3) and (N,). Misses have hit 0, point (0, 0, 0) and
            object_id -1.

        Raises:
            ValueError: If the input arrays do not have compatible shapes.
        """
        dirs = np.ascontiguousarray(directions, dtype=np.float32)
        if dirs.ndim != 2 or dirs.shape[1] != 3:
            raise ValueError(f"directions must have shape (N, 3), got {dirs.shape}")
        origins = np.asarray(points, dtype=np.float32)
        if origins.shape == (3,):
            origins = np.broadcast_to(origins, dirs.shape)
        origins = np.ascontiguousarray(origins)
        if origins.shape != dirs.shape:
            raise ValueError(
                f"points shape {origins.shape} does not match directions shape {dirs.shape}"
            )

        n = dirs.shape[0]
        hits = np.zeros(n, dtype=np.int32)
        hit_points = np.zeros((n, 3), dtype=np.float32)
        object_ids = np.full(n, -1, dtype=np.int32)
        if n > 0:
            self._cast_batch_kernel(
                origins, dirs, hits, hit_points, object_ids, int(do_bin_search), float(max_len)
            )
        logger.debug("Cast batch of %d rays: %d hits", n, int(hits.sum()))
        return hits, hit_points, object_ids
