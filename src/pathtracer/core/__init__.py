"""Core rendering module.

Components:
    ray: Ray data structure, vector algebra and random sampling
    color: Averaging, gamma encoding and 8-bit conversion of colors
    integrator: Ray color estimator and per-pixel accumulation buffer
    progressive: ProgressiveRenderer wrapping the accumulation buffer
    snapshot: Lock-guarded display frame shared with viewers
    worker: Background thread running the render-publish loop
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_hemisphere,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    unit_vector,
    vec3,
)

# integrator, progressive and worker import the scene and camera modules, so
# they are not imported here. Use e.g.:
#   from src.pathtracer.core.progressive import ProgressiveRenderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "unit_vector",
    "dot",
    "cross",
    "near_zero",
    "reflect",
    "refract",
    "schlick_reflectance",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_hemisphere",
    "random_in_unit_disk",
]
