"""Lambertian (ideal diffuse) material.

A diffuse surface sends the continuation ray in a random direction drawn
from the unit ball and flipped into the hemisphere of the surface normal.
The attenuation is the albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.lambertian import add_lambertian_material
    >>> red = add_lambertian_material((0.7, 0.3, 0.3))
    >>> # Inside a kernel:
    >>> # direction, attenuation, outcome = scatter_lambertian_by_id(red, normal)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import near_zero, random_in_hemisphere
from src.pathtracer.materials.scatter import SCATTERED

vec3 = tm.vec3


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Sample a diffuse bounce.

    A degenerate (near-zero) sample is replaced by the normal itself.

    Args:
        albedo: Diffuse reflectance.
        normal: Unit normal facing the incoming ray.

    Returns:
        Tuple of (scattered_direction, attenuation, outcome). The outcome is
        always SCATTERED.
    """
    scattered_direction = random_in_hemisphere(normal)
    if near_zero(scattered_direction):
        scattered_direction = normal
    return scattered_direction, albedo, SCATTERED


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

MAX_LAMBERTIAN_MATERIALS = 512

lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Forget every registered Lambertian material."""
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Register a Lambertian material.

    Args:
        albedo: Diffuse color as (R, G, B), each component in [0, 1].

    Returns:
        The type-local index of the new material.

    Raises:
        ValueError: If any albedo component is outside [0, 1].
        RuntimeError: If the registry is full.
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Number of lambertian materials currently registered."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Look up the albedo of a registered diffuse material.

    Args:
        material_idx: Index in the Lambertian registry.

    Returns:
        The RGB albedo.
    """
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3):
    """Look up a registered albedo and call :func:`scatter_lambertian`."""
    albedo = get_lambertian_albedo(material_idx)
    return scatter_lambertian(albedo, normal)
