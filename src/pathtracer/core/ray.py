"""Ray data structure, vector algebra and random sampling for path tracing.

Everything in this module is a Taichi function meant to be called from inside
kernels. Directions are never required to be unit length; callers normalize
where a routine needs it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # (0, 0, -5)
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Threshold below which every component counts as zero
NEAR_ZERO_EPS = 1e-8

# Upper bound on rejection-sampling attempts inside kernels
MAX_REJECTION_TRIES = 100


@ti.dataclass
class Ray:
    """A half-line with an origin and a (not necessarily unit) direction.

    Attributes:
        origin: Starting point of the ray.
        direction: Direction of travel.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Return the point ``origin + t * direction``."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Build a Ray inside a kernel.

    Args:
        origin: Start point.
        direction: Direction of travel; it does not have to be unit length.

    Returns:
        The new Ray.
    """
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Algebra
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Euclidean norm of ``v``.

    Args:
        v: Any vector.

    Returns:
        ``|v|``.
    """
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared norm of ``v``, without the square root.

    Args:
        v: Any vector.

    Returns:
        ``v . v``.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The input must be non-zero. The precondition is checked with a kernel
    assertion, which Taichi only evaluates when initialized with ``debug=True``.

    Args:
        v: A non-zero vector.

    Returns:
        ``v / |v|``.
    """
    assert tm.dot(v, v) > 0.0, "cannot normalize a zero-length vector"
    return v / tm.length(v)


unit_vector = normalize


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Inner product of two vectors.

    Args:
        a: Left operand.
        b: Right operand.

    Returns:
        ``a . b``.
    """
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Right-handed cross product.

    Args:
        a: Left operand.
        b: Right operand.

    Returns:
        ``a x b``, perpendicular to both inputs.
    """
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 when every component of ``v`` is smaller than 1e-8 in magnitude."""
    s = NEAR_ZERO_EPS
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror ``incident`` about ``normal``.

    Args:
        incident: Incoming direction (pointing toward the surface).
        normal: Unit surface normal.

    Returns:
        ``incident - 2 * dot(incident, normal) * normal``.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(uv: vec3, normal: vec3, etai_over_etat: ti.f32) -> vec3:
    """Bend a unit direction through an interface using Snell's law.

    The result is split into the component perpendicular to the normal and
    the component parallel to it. The cosine of the incident angle is clamped
    to 1 so rounding never produces a negative radicand in the perpendicular
    term. Total internal reflection is the caller's concern; this function
    assumes refraction is possible.

    Args:
        uv: Unit incident direction.
        normal: Unit normal on the incident side.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = ti.min(tm.dot(-uv, normal), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - tm.dot(r_out_perp, r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Schlick's approximation of Fresnel reflectance.

    Args:
        cosine: Cosine of the incident angle.
        ref_idx: Refraction ratio at the interface.

    Returns:
        Probability of reflection in [0, 1].
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Uniform random point strictly inside the unit sphere (rejection sampled)."""
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
            )
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Random unit vector, uniform on the sphere."""
    p = vec3(0.0, 0.0, 1.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            q = random_in_unit_sphere()
            len_sq = length_squared(q)
            if len_sq > 1e-12:
                p = q / ti.sqrt(len_sq)
                found = True
    return p


@ti.func
def random_in_hemisphere(normal: vec3) -> vec3:
    """Random point in the unit sphere, flipped onto the side of ``normal``.

    Args:
        normal: Normal defining the hemisphere.

    Returns:
        A vector ``p`` with ``|p| < 1`` and ``dot(p, normal) >= 0``.
    """
    in_unit_sphere = random_in_unit_sphere()
    result = in_unit_sphere
    if tm.dot(in_unit_sphere, normal) < 0.0:
        result = -in_unit_sphere
    return result


@ti.func
def random_in_unit_disk() -> vec3:
    """Random point ``(x, y, 0)`` with ``x*x + y*y < 1``, used for lens sampling."""
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                0.0,
            )
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    return p
