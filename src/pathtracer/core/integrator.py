"""Path tracing integrator and per-pixel accumulation buffer.

The radiance estimate for a ray is defined recursively:

    color(ray, 0)     = black
    color(ray, depth) = sky(ray)                              on a miss
                      = attenuation * color(scattered, depth - 1)
                                                              if scattered
                      = emission                              if emitted
                      = black                                 if absorbed

Taichi functions cannot recurse, so :func:`ray_color` evaluates the same
expression as a loop that carries the running product of attenuations
(the path throughput).

The accumulation buffer stores, per pixel, the sum of every sample and the
number of samples taken. Each render pass adds exactly one sample to every
pixel, so all counts stay equal.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.integrator import render_image, setup_render_target
    >>> from src.pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> from src.pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=1)
    >>> setup_camera(camera)
    >>> setup_render_target(200, 200)
    >>> render_image(num_samples=16)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.thin_lens import get_ray_jittered
from src.pathtracer.core.color import average_samples
from src.pathtracer.core.ray import normalize
from src.pathtracer.materials.dielectric import scatter_dielectric_by_id
from src.pathtracer.materials.lambertian import scatter_lambertian_by_id
from src.pathtracer.materials.light import scatter_light_by_id
from src.pathtracer.materials.metal import scatter_metal_by_id
from src.pathtracer.materials.scatter import ABSORBED, EMITTED, SCATTERED
from src.pathtracer.scene.intersection import intersect_scene
from src.pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces (path length)
MAX_DEPTH = 50

# Intersection interval; T_MIN keeps bounced rays from re-hitting their origin
T_MIN = 1e-4
T_MAX = 1e10

# Two-band sky: rays close to the sun direction see white, the rest dim gray
SUN_DIRECTION = vec3(0.0, 0.70710678, -0.70710678)
SUN_COS_THRESHOLD = 0.9
SKY_SUN_RADIANCE = vec3(1.0, 1.0, 1.0)
SKY_AMBIENT_RADIANCE = vec3(0.1, 0.1, 0.1)

# =============================================================================
# Render Target (Accumulation Buffer)
# =============================================================================

# Preallocated to the maximum size so resizing never recompiles kernels
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048
MIN_IMAGE_SIZE = 2

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Indexed [i, j] with i = column from the left and j = row from the bottom
_color_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the accumulation buffer.

    Args:
        width: Image width in pixels, in [2, MAX_IMAGE_WIDTH].
        height: Image height in pixels, in [2, MAX_IMAGE_HEIGHT].

    Raises:
        ValueError: If a dimension is out of range.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if width < MIN_IMAGE_SIZE or height < MIN_IMAGE_SIZE:
        raise ValueError(
            f"Image dimensions ({width}x{height}) must be at least "
            f"{MIN_IMAGE_SIZE}x{MIN_IMAGE_SIZE}"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Zero every color sum and sample count."""
    _color_sum.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Return the active (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Sky and Material Dispatch
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Radiance seen by a ray that escapes the scene."""
    color = SKY_AMBIENT_RADIANCE
    if tm.dot(normalize(direction), SUN_DIRECTION) > SUN_COS_THRESHOLD:
        color = SKY_SUN_RADIANCE
    return color


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Call the scatter function matching a material's type.

    Unknown material IDs absorb the ray.

    Returns:
        Tuple of (direction, color, outcome); see ``materials.scatter``.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    direction = vec3(0.0, 0.0, 0.0)
    color = vec3(0.0, 0.0, 0.0)
    outcome = ABSORBED

    if mat_type == int(MaterialType.LAMBERTIAN):
        direction, color, outcome = scatter_lambertian_by_id(type_index, normal)
    elif mat_type == int(MaterialType.METAL):
        direction, color, outcome = scatter_metal_by_id(
            type_index, incident_direction, normal
        )
    elif mat_type == int(MaterialType.DIELECTRIC):
        direction, color, outcome = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )
    elif mat_type == int(MaterialType.LIGHT):
        direction, color, outcome = scatter_light_by_id(type_index)

    return direction, color, outcome


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        max_depth: Number of surface interactions allowed. 0 returns black.

    Returns:
        One stochastic radiance sample.
    """
    ray_origin = origin
    ray_direction = direction
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                radiance = throughput * sky_color(ray_direction)
                active = 0
            else:
                scattered, color, outcome = _scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face
                )
                if outcome == SCATTERED:
                    throughput *= color
                    ray_origin = rec.point
                    ray_direction = scattered
                elif outcome == EMITTED:
                    radiance = throughput * color
                    active = 0
                else:
                    active = 0

    return radiance


@ti.func
def _sanitize(color: vec3) -> vec3:
    """Replace NaN, infinite and negative channels with zero."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]) or result[c] < 0.0:
            result[c] = 0.0
    return result


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_pass(width: ti.i32, height: ti.i32, max_depth: ti.i32, jitter: ti.i32):
    """Add one sample to every pixel of the active image."""
    for i, j in ti.ndrange(width, height):
        ray = get_ray_jittered(i, j, width, height, jitter)
        color = _sanitize(ray_color(ray.origin, ray.direction, max_depth))
        _color_sum[i, j] += color
        _sample_count[i, j] += 1


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    jitter: ti.i32,
) -> vec3:
    ray = get_ray_jittered(pixel_i, pixel_j, width, height, jitter)
    return ray_color(ray.origin, ray.direction, max_depth)


@ti.kernel
def _trace_ray(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    return ray_color(origin, direction, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_depth(max_depth: int) -> None:
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Estimate the radiance along an arbitrary ray against the current scene.

    Args:
        origin: Ray origin.
        direction: Ray direction (non-zero).
        depth: Bounce budget.

    Returns:
        Tuple of (R, G, B) for a single sample.

    Raises:
        ValueError: If depth is negative.
    """
    _check_depth(depth)
    color = _trace_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        depth,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(
    pixel_i: int,
    pixel_j: int,
    max_depth: int = MAX_DEPTH,
    jitter: bool = True,
) -> tuple[float, float, float]:
    """Render one sample of one pixel without touching the accumulation buffer.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        max_depth: Bounce budget.
        jitter: Whether to randomize the sub-pixel position.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    _check_depth(max_depth)

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, max_depth, int(jitter))
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(
    num_samples: int = 1,
    max_depth: int = MAX_DEPTH,
    jitter: bool = True,
) -> None:
    """Accumulate ``num_samples`` more samples into every pixel.

    Can be called repeatedly; samples keep accumulating until the render
    target is cleared.

    Args:
        num_samples: Number of full passes to render.
        max_depth: Bounce budget per sample.
        jitter: Whether to randomize the sub-pixel position of each sample.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If max_depth is negative.
    """
    _check_render_target_initialized()
    _check_depth(max_depth)

    width, height = get_image_dimensions()
    for _ in range(num_samples):
        _render_pass(width, height, max_depth, int(jitter))


def get_total_samples() -> int:
    """Samples per pixel accumulated so far (identical for every pixel).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_sample_count[0, 0])


@ti.kernel
def _copy_active_region(
    color_out: ti.types.ndarray(dtype=ti.f32, ndim=3),
    counts_out: ti.types.ndarray(dtype=ti.i32, ndim=2),
    width: ti.i32,
    height: ti.i32,
):
    # (width, height) with j up -> (height, width) with row 0 at the top
    for i, j in ti.ndrange(width, height):
        row = height - 1 - j
        c = _color_sum[i, j]
        for k in ti.static(range(3)):
            color_out[row, i, k] = c[k]
        counts_out[row, i] = _sample_count[i, j]


def get_accumulation_numpy() -> tuple[np.ndarray, np.ndarray]:
    """Copy the active region of the accumulation buffer to NumPy in image order.

    Only the width x height pixels in use are transferred, not the
    preallocated maximum-size fields.

    Returns:
        Tuple of (color_sum, counts) with shapes (height, width, 3) and
        (height, width). Row 0 is the top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()

    color_sum = np.empty((height, width, 3), dtype=np.float32)
    counts = np.empty((height, width), dtype=np.int32)
    _copy_active_region(color_sum, counts, width, height)

    return color_sum, counts


def get_average_image_numpy() -> np.ndarray:
    """Per-pixel mean radiance, shape (height, width, 3), not clamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    color_sum, counts = get_accumulation_numpy()
    return average_samples(color_sum, counts)
