"""Sphere primitive with robust ray-sphere intersection.

The ray-sphere test solves

    |origin + t * direction - center|^2 = radius^2

in the half-b form ``a*t^2 + 2*h*t + c = 0`` and computes the roots with the
cancellation-free formula ``q = -(h + sign(h) * sqrt(disc))``,
``t0 = q / a``, ``t1 = c / q``. The smaller root is tried first; the larger
one is used when the smaller lies outside ``[t_min, t_max]`` (for example when
the ray starts inside the sphere).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.geometry.hit_record import HitRecord, make_hit_record, miss_record

vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: Center of the sphere.
        radius: Radius of the sphere (positive).
    """

    center: vec3
    radius: ti.f32


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve ``a*t^2 + 2*h*t + c = 0`` without catastrophic cancellation.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of the discriminant ``h^2 - a*c``.

    Returns:
        Tuple of (t0, t1) with t0 <= t1.
    """
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # Tangent ray through the origin of the equation; both forms degenerate
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a sphere.

    A root is accepted when ``t_min <= t <= t_max``. A negative discriminant
    is a miss.

    Args:
        ray_origin: Starting point of the ray.
        ray_direction: Direction of the ray (need not be normalized).
        sphere: The sphere to test.
        t_min: Smallest acceptable ray parameter.
        t_max: Largest acceptable ray parameter.

    Returns:
        A HitRecord whose normal opposes the ray. Check ``hit`` first.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    result = miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = (t >= t_min) and (t <= t_max)
        if not valid:
            t = t1
            valid = (t >= t_min) and (t <= t_max)

        if valid:
            hit_point = ray_origin + t * ray_direction
            outward_normal = (hit_point - sphere.center) / sphere.radius
            result = make_hit_record(ray_direction, hit_point, t, outward_normal)

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    return Sphere(center=center, radius=radius)
