"""Axis-aligned bounding boxes.

The slab test here is a query helper: the renderer scans primitives linearly
and does not consult bounding boxes, so using them can never change an image.
Host-side helpers compute bounds of scene primitives with NumPy.

Example:
    >>> import numpy as np
    >>> lo, hi = sphere_bounds((0.0, 1.0, 0.0), 1.0)
    >>> lo, hi = surrounding_box((lo, hi), sphere_bounds((4.0, 1.0, 0.0), 1.0))
    >>> hi
    array([5., 2., 1.], dtype=float32)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class AABB:
    """Axis-aligned box given by its minimum and maximum corners."""

    minimum: vec3
    maximum: vec3


@ti.func
def hit_aabb(
    ray_origin: vec3,
    ray_direction: vec3,
    box: AABB,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Slab test of a ray against a box.

    For each axis the entry and exit parameters are ordered and intersected
    with the running ``[t_min, t_max]`` interval. The box is missed once the
    interval becomes empty (``t_max <= t_min``).

    Returns:
        1 if the ray overlaps the box inside the interval, 0 otherwise.
    """
    lo = t_min
    hi = t_max
    hit = 1
    for axis in ti.static(range(3)):
        inv_d = 1.0 / ray_direction[axis]
        t0 = (box.minimum[axis] - ray_origin[axis]) * inv_d
        t1 = (box.maximum[axis] - ray_origin[axis]) * inv_d
        if inv_d < 0.0:
            tmp = t0
            t0 = t1
            t1 = tmp
        if t0 > lo:
            lo = t0
        if t1 < hi:
            hi = t1
        if hi <= lo:
            hit = 0
    return hit


def sphere_bounds(center, radius: float) -> tuple[np.ndarray, np.ndarray]:
    """Return the (minimum, maximum) corners of a sphere's bounding box."""
    center = np.asarray(center, dtype=np.float32)
    r = np.float32(abs(radius))
    return center - r, center + r


def surrounding_box(
    box0: tuple[np.ndarray, np.ndarray],
    box1: tuple[np.ndarray, np.ndarray],
) -> tuple[np.ndarray, np.ndarray]:
    """Return the smallest box containing both ``box0`` and ``box1``."""
    small = np.minimum(np.asarray(box0[0]), np.asarray(box1[0])).astype(np.float32)
    big = np.maximum(np.asarray(box0[1]), np.asarray(box1[1])).astype(np.float32)
    return small, big
