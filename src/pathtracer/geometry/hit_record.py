"""Hit record shared by every primitive, plus the front-face rule.

A hit record is built exactly once per successful intersection test and is
never modified afterwards. Its stored normal always opposes the incoming ray,
and ``front_face`` remembers whether the ray arrived from the outside. Both
are derived here so every primitive applies the same convention.

Example:
    >>> # Inside a Taichi function, after solving for t:
    >>> # rec = make_hit_record(ray_direction, point, t, outward_normal)
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class HitRecord:
    """Record of a single ray-primitive intersection.

    Attributes:
        hit: 1 if the ray hit the primitive, 0 on a miss.
        t: Ray parameter of the intersection. Only valid if hit == 1.
        point: World-space intersection point. Only valid if hit == 1.
        normal: Unit normal facing against the incoming ray.
        front_face: 1 if the ray arrived from outside the surface, else 0.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient an outward normal against the ray.

    Args:
        ray_direction: Direction of the incoming ray.
        outward_normal: Unit normal pointing out of the surface.

    Returns:
        Tuple of (front_face, normal). ``front_face`` is 1 when
        ``dot(ray_direction, outward_normal) < 0``; the normal is negated
        otherwise.
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray_direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def make_hit_record(
    ray_direction: vec3,
    point: vec3,
    t: ti.f32,
    outward_normal: vec3,
) -> HitRecord:
    """Build a hit record, applying the front-face rule to ``outward_normal``."""
    front_face, normal = face_normal(ray_direction, outward_normal)
    return HitRecord(hit=1, t=t, point=point, normal=normal, front_face=front_face)


@ti.func
def miss_record() -> HitRecord:
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
    )
