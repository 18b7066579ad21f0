"""Light (emissive) material.

A light ends the path: it emits its color toward the viewer and scatters
nothing. Emission is not limited to [0, 1], so bright lights are allowed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.light import add_light_material
    >>> lamp = add_light_material((4.0, 4.0, 4.0))
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.materials.scatter import EMITTED

vec3 = tm.vec3


@ti.func
def scatter_light(emission: vec3):
    """Return (zero direction, emission, EMITTED)."""
    return vec3(0.0, 0.0, 0.0), emission, EMITTED


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

MAX_LIGHT_MATERIALS = 512

light_emissions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHT_MATERIALS)
num_light_materials = ti.field(dtype=ti.i32, shape=())


def clear_light_materials() -> None:
    """Forget every registered light material."""
    num_light_materials[None] = 0


def add_light_material(emission: tuple[float, float, float]) -> int:
    """Register a light material.

    Args:
        emission: Emitted radiance as (R, G, B), each component >= 0.

    Returns:
        The type-local index of the new material.

    Raises:
        ValueError: If any emission component is negative.
        RuntimeError: If the registry is full.
    """
    for i, component in enumerate(emission):
        if component < 0.0:
            raise ValueError(f"Emission component {i} = {component} is negative.")

    idx = num_light_materials[None]
    if idx >= MAX_LIGHT_MATERIALS:
        raise RuntimeError(
            f"Maximum number of light materials ({MAX_LIGHT_MATERIALS}) exceeded"
        )

    light_emissions[idx] = vec3(emission[0], emission[1], emission[2])
    num_light_materials[None] = idx + 1
    return idx


def get_light_material_count() -> int:
    """Number of light materials currently registered."""
    return int(num_light_materials[None])


@ti.func
def get_light_emission(material_idx: ti.i32) -> vec3:
    """Look up the emitted radiance of a registered light.

    Args:
        material_idx: Index in the light registry.

    Returns:
        The RGB emission.
    """
    return light_emissions[material_idx]


@ti.func
def scatter_light_by_id(material_idx: ti.i32):
    return scatter_light(get_light_emission(material_idx))
