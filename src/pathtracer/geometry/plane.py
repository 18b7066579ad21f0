"""Horizontal checkerboard ground plane.

The plane is the set of points with ``y == height``. It is one-sided: it is
only visible from above, for rays travelling downward. Its material is not
stored on the primitive; the scene picks one of two metal materials per hit
from the checker parity of the hit point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.plane import Plane, hit_plane, checker_parity
    >>> ground = Plane(height=0.0)
    >>> # Inside a kernel:
    >>> # rec = hit_plane(origin, direction, ground, t_min, t_max)
    >>> # tile = checker_parity(rec.point)  # 0 = light tile, 1 = dark tile
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.geometry.hit_record import HitRecord, miss_record

vec3 = tm.vec3

# Checkerboard tile materials (metal albedo and fuzz)
CHECKER_LIGHT_ALBEDO = (0.8, 0.8, 0.8)
CHECKER_DARK_ALBEDO = (0.2, 0.2, 0.2)
CHECKER_FUZZ = 0.3


@ti.dataclass
class Plane:
    """Infinite horizontal plane ``y == height``.

    Attributes:
        height: The y coordinate of the plane.
    """

    height: ti.f32


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with the plane.

    Misses when the ray starts below the plane or does not travel downward.
    The normal is always +y and the hit always counts as a front-face hit.

    Args:
        ray_origin: Starting point of the ray.
        ray_direction: Direction of the ray.
        plane: The plane to test.
        t_min: Smallest acceptable ray parameter.
        t_max: Largest acceptable ray parameter.

    Returns:
        A HitRecord. Check ``hit`` first.
    """
    result = miss_record()

    if ray_origin.y >= plane.height and ray_direction.y < 0.0:
        t = (plane.height - ray_origin.y) / ray_direction.y
        if t >= t_min and t <= t_max:
            result = HitRecord(
                hit=1,
                t=t,
                point=ray_origin + t * ray_direction,
                normal=vec3(0.0, 1.0, 0.0),
                front_face=1,
            )

    return result


@ti.func
def checker_parity(point: vec3) -> ti.i32:
    """Return 0 for a light tile and 1 for a dark tile.

    Tiles are unit squares in x and z: the parity is
    ``(floor(x) + floor(z)) mod 2``.
    """
    ix = ti.cast(ti.floor(point.x), ti.i32)
    iz = ti.cast(ti.floor(point.z), ti.i32)
    return (ix + iz) % 2
