"""Dielectric (glass/water) material.

A dielectric either reflects or refracts each incoming ray:

    - Snell's law gives the refracted direction: n1 sin(theta1) = n2 sin(theta2)
    - Total internal reflection happens when ratio * sin(theta) > 1
    - Otherwise the ray reflects with probability given by Schlick's
      approximation and refracts the rest of the time

The surface absorbs nothing, so the attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.dielectric import add_dielectric_material
    >>> glass = add_dielectric_material(1.5)
    >>> # Inside a kernel:
    >>> # direction, attenuation, outcome = scatter_dielectric_by_id(
    >>> #     glass, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import normalize, reflect, refract, schlick_reflectance
from src.pathtracer.materials.scatter import SCATTERED

vec3 = tm.vec3


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Return ``1 / ior`` when entering the material and ``ior`` when leaving."""
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Reflect or refract a ray at a dielectric boundary.

    Args:
        ior: Index of refraction of the material.
        incident_direction: Incoming ray direction (any non-zero length).
        normal: Unit normal facing the incoming ray.
        front_face: 1 if the ray enters the material, 0 if it leaves.

    Returns:
        Tuple of (scattered_direction, attenuation, outcome). Attenuation is
        white and the outcome is always SCATTERED.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ratio = refraction_ratio_for(ior, front_face)

    unit_direction = normalize(incident_direction)
    cos_theta = ti.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(ti.max(1.0 - cos_theta * cos_theta, 0.0))

    cannot_refract = ratio * sin_theta > 1.0

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or schlick_reflectance(cos_theta, ratio) > ti.random(ti.f32):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, attenuation, SCATTERED


@ti.func
def will_reflect(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Return 1 if the ray is totally internally reflected."""
    ratio = refraction_ratio_for(ior, front_face)
    cos_theta = ti.min(-tm.dot(normalize(incident_direction), normal), 1.0)
    sin_theta = ti.sqrt(ti.max(1.0 - cos_theta * cos_theta, 0.0))
    return 1 if ratio * sin_theta > 1.0 else 0


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Schlick reflectance for the given incidence."""
    ratio = refraction_ratio_for(ior, front_face)
    cos_theta = ti.min(-tm.dot(normalize(incident_direction), normal), 1.0)
    return schlick_reflectance(cos_theta, ratio)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

MAX_DIELECTRIC_MATERIALS = 512

dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Forget every registered dielectric material."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Register a dielectric material.

    Args:
        ior: Index of refraction, must be positive. Default is 1.5 (glass).

    Returns:
        The type-local index of the new material.

    Raises:
        ValueError: If ior is not positive.
        RuntimeError: If the registry is full.
    """
    if ior <= 0.0:
        raise ValueError(
            f"Index of refraction = {ior} is not positive. IOR must be > 0."
        )

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Number of dielectric materials currently registered."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    """Look up the index of refraction of a registered dielectric."""
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Look up a registered IOR and call :func:`scatter_dielectric`."""
    ior = get_dielectric_ior(material_idx)
    return scatter_dielectric(ior, incident_direction, normal, front_face)
