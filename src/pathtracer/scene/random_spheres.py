"""Random spheres demo scene.

A checkerboard metal ground plane with three large spheres (glass, diffuse
and polished gold) surrounded by a grid of small spheres whose materials are
drawn at random: diffuse, metal, glowing lights and glass.

The scene is built through a SceneManager and returned together with the
matching thin-lens camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> from src.pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=42)
    >>> setup_camera(camera)
"""

import logging
from dataclasses import dataclass

import numpy as np

from src.pathtracer.camera.thin_lens import ThinLensCamera
from src.pathtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)


@dataclass
class RandomSpheresParams:
    """Parameters of the random spheres scene.

    Attributes:
        grid_extent: Small spheres are placed for a, b in
            [-grid_extent, grid_extent].
        small_radius: Radius of the small spheres.
        jitter: Random offset of each small sphere within its grid cell.
        clearance_center: Small spheres too close to this point are skipped.
        clearance: Minimum distance from ``clearance_center``.
        diffuse_probability: Cumulative probability of a diffuse sphere.
        metal_probability: Cumulative probability of diffuse or metal.
        light_probability: Cumulative probability of diffuse, metal or light.
            The remainder is glass.
        max_fuzz: Upper bound (exclusive) of random metal fuzz.
        glass_ior: Index of refraction of every glass sphere.
    """

    grid_extent: int = 11
    small_radius: float = 0.15
    jitter: float = 0.9
    clearance_center: tuple[float, float, float] = (4.0, 0.2, 0.0)
    clearance: float = 0.9
    diffuse_probability: float = 0.3
    metal_probability: float = 0.6
    light_probability: float = 0.8
    max_fuzz: float = 0.5
    glass_ior: float = 1.5


def default_camera(aspect_ratio: float = 1.0) -> ThinLensCamera:
    """Camera framing the scene from (15, 2, 3), focused on the origin."""
    return ThinLensCamera(
        lookfrom=(15.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=15.0,
    )


def _random_color(rng: np.random.Generator) -> tuple[float, float, float]:
    r, g, b = rng.random(3)
    return (float(r), float(g), float(b))


def create_random_spheres_scene(
    seed: int | None = None,
    aspect_ratio: float = 1.0,
    params: RandomSpheresParams | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Build the random spheres scene.

    Args:
        seed: Seed for the material and placement draws; None is
            nondeterministic.
        aspect_ratio: Aspect ratio of the returned camera.
        params: Scene parameters, defaults to RandomSpheresParams().

    Returns:
        Tuple of (scene, camera). The camera still has to be passed to
        ``setup_camera``.
    """
    if params is None:
        params = RandomSpheresParams()
    rng = np.random.default_rng(seed)

    scene = SceneManager()
    scene.add_plane(0.0)

    glass = scene.add_dielectric_material(params.glass_ior)
    scene.add_sphere((0.0, 1.0, 0.0), 1.0, glass)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), 1.0, (0.7, 0.3, 0.3))
    scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, (0.8, 0.6, 0.2), fuzz=0.01)

    clearance_center = np.array(params.clearance_center)
    for a in range(-params.grid_extent, params.grid_extent + 1):
        for b in range(-params.grid_extent, params.grid_extent + 1):
            choose_mat = rng.random()
            center = (
                a + params.jitter * float(rng.random()),
                params.small_radius,
                b + params.jitter * float(rng.random()),
            )

            if np.linalg.norm(np.array(center) - clearance_center) <= params.clearance:
                continue

            if choose_mat < params.diffuse_probability:
                albedo = tuple(
                    a_i * b_i for a_i, b_i in zip(_random_color(rng), _random_color(rng))
                )
                scene.add_lambertian_sphere(center, params.small_radius, albedo)
            elif choose_mat < params.metal_probability:
                albedo = _random_color(rng)
                fuzz = float(rng.uniform(0.0, params.max_fuzz))
                scene.add_metal_sphere(center, params.small_radius, albedo, fuzz)
            elif choose_mat < params.light_probability:
                scene.add_light_sphere(center, params.small_radius, _random_color(rng))
            else:
                scene.add_sphere(center, params.small_radius, glass)

    logger.debug(
        "Built random spheres scene: %d spheres, %d materials",
        scene.get_sphere_count(),
        scene.get_material_count(),
    )
    return scene, default_camera(aspect_ratio)
