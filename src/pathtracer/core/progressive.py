"""Progressive renderer for iterative sample accumulation.

This module wraps the integrator's accumulation buffer with:
- Single-pass and batched rendering
- Progress callbacks and a generator interface
- Publishing into a FrameSnapshot for display
- Reset and resize for re-rendering

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>> from src.pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> from src.pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=7)
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(300, 300)
    >>> renderer.render(32)
    >>> renderer.save_image("spheres.png")
"""

from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.pathtracer.core.color import resolve_display_image
from src.pathtracer.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_accumulation_numpy,
    get_average_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from src.pathtracer.core.snapshot import FrameSnapshot

# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """Accumulates samples for the current scene and camera over time.

    The renderer owns the image size and the sampling settings; the
    accumulation buffer itself lives in the integrator's Taichi fields.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Bounce budget per sample.
        jitter: Whether samples are jittered within their pixel.
    """

    def __init__(
        self,
        width: int,
        height: int,
        max_depth: int = MAX_DEPTH,
        jitter: bool = True,
    ) -> None:
        """Set up and clear the render target.

        Raises:
            ValueError: If dimensions are out of range or max_depth < 0.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self._width = width
        self._height = height
        self.max_depth = max_depth
        self.jitter = jitter
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def sample_count(self) -> int:
        """Samples accumulated per pixel so far."""
        return get_total_samples()

    def reset(self) -> None:
        """Discard every accumulated sample, keeping the image size."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Change the image size and discard accumulated samples.

        Raises:
            ValueError: If dimensions are out of range.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render_pass(self) -> int:
        """Add exactly one sample to every pixel.

        Returns:
            The sample count after the pass.
        """
        render_image(1, self.max_depth, self.jitter)
        return self.sample_count

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Accumulate ``num_samples`` more samples per pixel.

        Args:
            num_samples: Number of samples to add.
            batch_size: Passes rendered between callbacks.
            callback: Optional; receives (current_total, target_total) after
                each batch.

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render in batches, yielding progress after each one.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self.max_depth, self.jitter)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def publish(self, snapshot: FrameSnapshot) -> int:
        """Publish the current estimate into ``snapshot``.

        Returns:
            The version number of the published frame.
        """
        color_sum, counts = get_accumulation_numpy()
        return snapshot.publish(color_sum, counts)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Linear per-pixel mean, shape (height, width, 3), row 0 at the top."""
        return get_average_image_numpy()

    def get_display_pixels(self) -> npt.NDArray[np.uint8]:
        """Gamma-encoded 8-bit image, shape (height, width, 3)."""
        color_sum, counts = get_accumulation_numpy()
        return resolve_display_image(color_sum, counts)

    def save_image(self, filepath: str | Path) -> None:
        """Write the gamma-encoded image to ``filepath`` (format from suffix)."""
        from src.pathtracer.preview.export import save_png_from_array

        save_png_from_array(self.get_display_pixels(), filepath)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
