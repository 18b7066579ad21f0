"""Scene representation and ray-scene queries.

Components:
    intersection: Primitive storage and the closest-hit scan
    manager: SceneManager with the unified material ID space
    random_spheres: Demo scene with a checkerboard floor and random spheres

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for geometric data
    - Unified material IDs mapped to per-type registries
"""

from .intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    SceneHitRecord,
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    PlaneInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .random_spheres import (
    RandomSpheresParams,
    create_random_spheres_scene,
    default_camera,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_sphere_count",
    "get_plane_count",
    "intersect_scene",
    "MAX_SPHERES",
    "MAX_PLANES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "PlaneInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Demo scene
    "RandomSpheresParams",
    "create_random_spheres_scene",
    "default_camera",
]
