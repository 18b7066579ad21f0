"""Geometric primitives and intersection routines.

Components:
    hit_record: HitRecord and the front-face rule shared by all primitives
    sphere: Sphere with robust ray-sphere intersection
    plane: One-sided checkerboard ground plane
    aabb: Axis-aligned bounding boxes (query helper)

All intersection routines are Taichi functions returning a HitRecord:
    rec = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)
"""

from .aabb import AABB, hit_aabb, sphere_bounds, surrounding_box
from .hit_record import HitRecord, face_normal, make_hit_record, miss_record
from .plane import Plane, checker_parity, hit_plane
from .sphere import Sphere, hit_sphere, make_sphere

__all__ = [
    "HitRecord",
    "face_normal",
    "make_hit_record",
    "miss_record",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "Plane",
    "hit_plane",
    "checker_parity",
    "AABB",
    "hit_aabb",
    "sphere_bounds",
    "surrounding_box",
]
