"""Image export utilities for rendered frames.

Frames are already gamma encoded and quantized by the time they reach this
module, so exporting is a straight write through Pillow.

Example:
    >>> from src.pathtracer.preview.export import save_png
    >>> save_png(snapshot, "spheres.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from src.pathtracer.core.snapshot import FrameSnapshot


def save_png_from_array(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> Path:
    """Write an 8-bit RGB array of shape (H, W, 3) to ``filepath``.

    Returns:
        The path written.

    Raises:
        ValueError: If the array is not uint8 RGB.
    """
    if pixels.dtype != np.uint8 or pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(
            f"Expected a uint8 array of shape (H, W, 3), got {pixels.dtype} {pixels.shape}"
        )
    path = Path(filepath)
    PILImage.fromarray(np.ascontiguousarray(pixels)).save(path)
    return path


def save_png(snapshot: FrameSnapshot, filepath: str | Path) -> Path:
    """Write the latest published frame of ``snapshot`` as a PNG.

    Returns:
        The path written.
    """
    pixels, _ = snapshot.read()
    return save_png_from_array(pixels, filepath)


def load_png(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Read an image back as a uint8 RGB array of shape (H, W, 3)."""
    with PILImage.open(filepath) as image:
        return np.asarray(image.convert("RGB"), dtype=np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Root mean squared error between two images of the same shape.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
