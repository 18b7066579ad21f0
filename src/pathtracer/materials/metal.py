"""Metal (specular reflective) material.

The incoming direction is mirrored about the normal:

    R = unit(I) - 2 (unit(I) . N) N

and then perturbed by ``fuzz`` times a random point in the unit ball. A
perturbed direction that ends up at or below the surface is absorbed.
The attenuation is the albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.metal import add_metal_material
    >>> gold = add_metal_material((0.8, 0.6, 0.2), fuzz=0.01)
    >>> # Inside a kernel:
    >>> # direction, attenuation, outcome = scatter_metal_by_id(
    >>> #     gold, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import normalize, random_in_unit_sphere, reflect
from src.pathtracer.materials.scatter import ABSORBED, SCATTERED

vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Reflect a ray off a metal surface.

    Args:
        albedo: Reflective tint.
        fuzz: Perturbation radius (>= 0).
        incident_direction: Incoming ray direction (any non-zero length).
        normal: Unit normal facing the incoming ray.

    Returns:
        Tuple of (scattered_direction, attenuation, outcome). The outcome is
        ABSORBED when ``dot(scattered_direction, normal) <= 0``.
    """
    reflected = reflect(normalize(incident_direction), normal)
    scattered_direction = reflected + fuzz * random_in_unit_sphere()

    outcome = SCATTERED
    if tm.dot(scattered_direction, normal) <= 0.0:
        outcome = ABSORBED

    return scattered_direction, albedo, outcome


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

MAX_METAL_MATERIALS = 512

metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Forget every registered metal material."""
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Register a metal material.

    Args:
        albedo: Reflective color as (R, G, B), each component in [0, 1].
        fuzz: Perturbation radius. Default is 0 (perfect mirror).

    Returns:
        The type-local index of the new material.

    Raises:
        ValueError: If any albedo component is outside [0, 1] or fuzz < 0.
        RuntimeError: If the registry is full.
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    if fuzz < 0.0:
        raise ValueError(f"Fuzz = {fuzz} is negative. Fuzz must be >= 0.")

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Number of metal materials currently registered."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Look up the tint of a registered metal.

    Args:
        material_idx: Index in the metal registry.

    Returns:
        The RGB albedo.
    """
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    """Look up the fuzz radius of a registered metal."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
):
    """Look up a registered metal and call :func:`scatter_metal`."""
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, incident_direction, normal)
