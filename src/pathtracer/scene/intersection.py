"""Scene-level closest-hit queries over every primitive.

Primitives live in Taichi fields (Structure of Arrays layout) and are scanned
linearly: spheres first, then ground planes. Each successful hit narrows the
upper bound of the search interval, so the returned record is the one with
the smallest ``t`` in ``[t_min, t_max]``. On ties the primitive scanned first
wins.

Spheres carry a unified material ID. Planes carry two: one for the light
checker tiles and one for the dark tiles, chosen per hit from the checker
parity of the hit point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.intersection import (
    ...     add_plane, add_sphere, clear_scene, intersect_scene
    ... )
    >>> clear_scene()
    >>> add_sphere(vec3(0, 1, 0), 1.0, material_id=0)
    >>> add_plane(0.0, light_material_id=1, dark_material_id=2)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.geometry.hit_record import HitRecord
from src.pathtracer.geometry.plane import Plane, checker_parity, hit_plane
from src.pathtracer.geometry.sphere import Sphere, hit_sphere

vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Closest hit against the whole scene, with the material to shade with.

    Attributes:
        hit: 1 if any primitive was hit, 0 on a miss.
        t: Ray parameter of the intersection. Only valid if hit == 1.
        point: World-space intersection point.
        normal: Unit normal facing against the incoming ray.
        front_face: 1 if the ray arrived from outside the surface.
        material_id: Unified material ID, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


MAX_SPHERES = 1024
MAX_PLANES = 16

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Ground plane storage
plane_heights = ti.field(dtype=ti.f32, shape=MAX_PLANES)
plane_light_material_ids = ti.field(dtype=ti.i32, shape=MAX_PLANES)
plane_dark_material_ids = ti.field(dtype=ti.i32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove every primitive from the scene."""
    num_spheres[None] = 0
    num_planes[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: Center of the sphere.
        radius: Radius of the sphere, must be positive.
        material_id: Unified material ID used to shade the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_plane(height: float, light_material_id: int, dark_material_id: int) -> int:
    """Add a checkerboard ground plane ``y == height``.

    Args:
        height: The y coordinate of the plane.
        light_material_id: Material for tiles with even parity.
        dark_material_id: Material for tiles with odd parity.

    Returns:
        The index of the added plane.

    Raises:
        RuntimeError: If the maximum number of planes is exceeded.
    """
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_heights[idx] = height
    plane_light_material_ids[idx] = light_material_id
    plane_dark_material_ids[idx] = dark_material_id
    num_planes[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    return int(num_spheres[None])


def get_plane_count() -> int:
    return int(num_planes[None])


@ti.func
def _to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the closest primitive hit by a ray.

    Args:
        ray_origin: Starting point of the ray.
        ray_direction: Direction of the ray.
        t_min: Smallest acceptable ray parameter.
        t_max: Largest acceptable ray parameter.

    Returns:
        The closest SceneHitRecord, or a miss record (hit == 0).
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_hit_record(rec, sphere_material_ids[i])

    for i in range(num_planes[None]):
        plane = Plane(height=plane_heights[i])
        rec = hit_plane(ray_origin, ray_direction, plane, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            material_id = plane_light_material_ids[i]
            if checker_parity(rec.point) == 1:
                material_id = plane_dark_material_ids[i]
            result = _to_scene_hit_record(rec, material_id)

    return result
