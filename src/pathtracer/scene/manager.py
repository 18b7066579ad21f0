"""Unified scene manager for coordinating primitives and materials.

Materials of every kind share one ID space. Each unified material ID maps to
a (material type, type-local index) pair stored in Taichi fields, which the
integrator uses to dispatch to the right scatter function. Many primitives
may share a material ID.

The SceneManager maintains:
- The unified material ID space and its GPU-side lookup tables
- Host-side records of every material, sphere and plane
- The two checkerboard metal materials used by ground planes
- Scene serialization to and from plain dictionaries

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_plane(0.0)
    >>> glass = scene.add_dielectric_material(ior=1.5)
    >>> scene.add_sphere((0, 1, 0), 1.0, glass)
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import numpy as np
import taichi as ti
import taichi.math as tm

from src.pathtracer.geometry.aabb import sphere_bounds, surrounding_box
from src.pathtracer.geometry.plane import (
    CHECKER_DARK_ALBEDO,
    CHECKER_FUZZ,
    CHECKER_LIGHT_ALBEDO,
)
from src.pathtracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from src.pathtracer.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from src.pathtracer.materials.light import add_light_material, clear_light_materials
from src.pathtracer.materials.metal import add_metal_material, clear_metal_materials
from src.pathtracer.scene.intersection import (
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_sphere_count,
)

logger = logging.getLogger(__name__)

vec3 = tm.vec3


class MaterialType(IntEnum):
    """Material kinds, used by the integrator to pick a scatter function."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2
    LIGHT = 3


MAX_MATERIALS = 2048

# material_types[i] is the MaterialType of unified material i and
# material_type_indices[i] its index in that type's registry
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Return the MaterialType of a unified material ID, or -1 if invalid."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Return the type-local registry index of a material ID, or -1 if invalid."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Host-side record of a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The kind of material.
        type_index: The index within the type-specific registry.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Host-side record of a sphere.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: Sphere center.
        radius: Sphere radius (> 0).
        material_id: Unified material ID used for shading.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class PlaneInfo:
    """Host-side record of a checkerboard ground plane.

    Attributes:
        plane_index: The index in the plane storage arrays.
        height: The y coordinate of the plane.
        light_material_id: Material of the even-parity tiles.
        dark_material_id: Material of the odd-parity tiles.
    """

    plane_index: int
    height: float
    light_material_id: int
    dark_material_id: int


@dataclass
class SceneConfig:
    """Serializable description of a scene.

    Attributes:
        materials: Material configurations, in material ID order.
        spheres: Sphere configurations.
        planes: Plane configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    planes: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values, default) -> tuple[float, float, float]:
    values = default if values is None else values
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Builds a scene and keeps material dispatch tables in sync.

    Creating a manager clears every Taichi-side scene field, so only one
    scene is live at a time.

    Attributes:
        materials: MaterialInfo for every registered material.
        spheres: SphereInfo for every sphere in the scene.
        planes: PlaneInfo for every ground plane in the scene.

    Example:
        >>> scene = SceneManager()
        >>> red = scene.add_lambertian_material(albedo=(0.7, 0.3, 0.3))
        >>> gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.01)
        >>> scene.add_sphere((-4, 1, 0), 1.0, red)
        >>> scene.add_sphere((4, 1, 0), 1.0, gold)
        >>> scene.add_plane(0.0)
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []
        self._checker_materials: tuple[int, int] | None = None
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_light_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()
        self.planes.clear()
        self._checker_materials = None

    def clear(self) -> None:
        """Remove every primitive and material from the scene."""
        self._clear_all()
        logger.debug("Scene cleared")

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        """Assign the next unified ID to a material already in its registry."""
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a diffuse material.

        Args:
            albedo: Diffuse color as (R, G, B), each component in [0, 1].

        Returns:
            The unified material ID.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
            RuntimeError: If a capacity limit is exceeded.
        """
        type_index = add_lambertian_material(albedo)
        return self._register_material(
            MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)}
        )

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal material.

        Args:
            albedo: Reflective color as (R, G, B), each component in [0, 1].
            fuzz: Perturbation radius, >= 0. Default is 0 (perfect mirror).

        Returns:
            The unified material ID.

        Raises:
            ValueError: If any albedo component is outside [0, 1] or fuzz < 0.
            RuntimeError: If a capacity limit is exceeded.
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Add a dielectric material.

        Args:
            ior: Index of refraction, > 0. Default is 1.5 (glass).

        Returns:
            The unified material ID.

        Raises:
            ValueError: If ior is not positive.
            RuntimeError: If a capacity limit is exceeded.
        """
        type_index = add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def add_light_material(self, emission: tuple[float, float, float]) -> int:
        """Add an emissive material.

        Args:
            emission: Emitted radiance as (R, G, B), each component >= 0.

        Returns:
            The unified material ID.

        Raises:
            ValueError: If any emission component is negative.
            RuntimeError: If a capacity limit is exceeded.
        """
        type_index = add_light_material(emission)
        return self._register_material(
            MaterialType.LIGHT, type_index, {"emission": tuple(emission)}
        )

    def get_checker_materials(self) -> tuple[int, int]:
        """Return the (light, dark) checkerboard material IDs.

        The two metal materials are registered the first time they are
        needed and shared by every plane of this scene.
        """
        if self._checker_materials is None:
            light_id = self.add_metal_material(CHECKER_LIGHT_ALBEDO, CHECKER_FUZZ)
            dark_id = self.add_metal_material(CHECKER_DARK_ALBEDO, CHECKER_FUZZ)
            self._checker_materials = (light_id, dark_id)
        return self._checker_materials

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Host-side counterpart of the ``get_material_type`` Taichi function.

        Returns:
            The MaterialType, or None for invalid material IDs.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere that shades with an existing material.

        Args:
            center: Center of the sphere as (x, y, z).
            radius: Radius of the sphere, must be positive.
            material_id: A unified material ID from ``add_*_material``.

        Returns:
            The index of the added sphere.

        Raises:
            ValueError: If the radius or material_id is invalid.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        self._check_material_id(material_id)

        center_vec = vec3(center[0], center[1], center[2])
        sphere_index = add_sphere(center_vec, radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=tuple(center),
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_plane(
        self,
        height: float = 0.0,
        light_material_id: int | None = None,
        dark_material_id: int | None = None,
    ) -> int:
        """Add a checkerboard ground plane ``y == height``.

        Without explicit material IDs the plane uses the scene's shared
        checkerboard metals (see :meth:`get_checker_materials`).

        Returns:
            The index of the added plane.

        Raises:
            ValueError: If a material ID is invalid.
            RuntimeError: If the maximum number of planes is exceeded.
        """
        if light_material_id is None or dark_material_id is None:
            default_light, default_dark = self.get_checker_materials()
            if light_material_id is None:
                light_material_id = default_light
            if dark_material_id is None:
                dark_material_id = default_dark
        self._check_material_id(light_material_id)
        self._check_material_id(dark_material_id)

        plane_index = add_plane(height, light_material_id, dark_material_id)
        self.planes.append(
            PlaneInfo(
                plane_index=plane_index,
                height=height,
                light_material_id=light_material_id,
                dark_material_id=dark_material_id,
            )
        )
        return plane_index

    # =========================================================================
    # Convenience Methods (add object with material in one call)
    # =========================================================================

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new diffuse material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        material_id = self.add_dielectric_material(ior)
        return self.add_sphere(center, radius, material_id), material_id

    def add_light_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        emission: tuple[float, float, float],
    ) -> tuple[int, int]:
        material_id = self.add_light_material(emission)
        return self.add_sphere(center, radius, material_id), material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    def get_plane_count(self) -> int:
        return get_plane_count()

    def get_primitive_count(self) -> int:
        return self.get_sphere_count() + self.get_plane_count()

    def get_bounds(self) -> tuple[np.ndarray, np.ndarray] | None:
        """Bounding box of every sphere in the scene.

        Planes are unbounded and are left out.

        Returns:
            (minimum, maximum) corners, or None if the scene has no spheres.
        """
        bounds = None
        for sphere in self.spheres:
            box = sphere_bounds(sphere.center, sphere.radius)
            bounds = box if bounds is None else surrounding_box(bounds, box)
        return bounds

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a SceneConfig."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        for plane in self.planes:
            config.planes.append(
                {
                    "height": plane.height,
                    "light_material_id": plane.light_material_id,
                    "dark_material_id": plane.dark_material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the one described by ``config``.

        Materials are loaded first so primitives can refer to them by ID.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for mat_config in config.materials:
            mat_type = mat_config.get("type", "").lower()
            if mat_type == "lambertian":
                self.add_lambertian_material(
                    _as_triple(mat_config.get("albedo"), (0.5, 0.5, 0.5))
                )
            elif mat_type == "metal":
                self.add_metal_material(
                    _as_triple(mat_config.get("albedo"), (0.8, 0.8, 0.8)),
                    mat_config.get("fuzz", 0.0),
                )
            elif mat_type == "dielectric":
                self.add_dielectric_material(mat_config.get("ior", 1.5))
            elif mat_type == "light":
                self.add_light_material(
                    _as_triple(mat_config.get("emission"), (1.0, 1.0, 1.0))
                )
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in config.spheres:
            self.add_sphere(
                _as_triple(sphere_config.get("center"), (0.0, 0.0, 0.0)),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )

        for plane_config in config.planes:
            self.add_plane(
                plane_config.get("height", 0.0),
                plane_config.get("light_material_id"),
                plane_config.get("dark_material_id"),
            )

        logger.debug(
            "Loaded scene: %d materials, %d spheres, %d planes",
            len(self.materials),
            len(self.spheres),
            len(self.planes),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a JSON-compatible dictionary."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "planes": config.planes,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials', 'spheres', 'planes'."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            planes=data.get("planes", []),
        )
        self.from_config(config)
