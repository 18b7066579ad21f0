"""Color model for converting accumulated radiance into display pixels.

Inside kernels a color is just a ``vec3`` and is combined with ordinary
vector arithmetic. This module holds the host-side half of the color
pipeline: averaging accumulated sums, gamma 2.0 encoding and quantizing to
8-bit channels. All functions operate on NumPy arrays whose last axis holds
the RGB channels.

Example:
    >>> import numpy as np
    >>> sums = np.full((2, 2, 3), 2.0, dtype=np.float32)
    >>> counts = np.full((2, 2), 8, dtype=np.int32)
    >>> to_display_pixels(gamma_encode(average_samples(sums, counts)))[0, 0]
    array([128, 128, 128], dtype=uint8)
"""

import numpy as np

# Display encoding uses gamma 2.0 (a per-channel square root)
DISPLAY_GAMMA = 2.0


def average_samples(color_sum: np.ndarray, counts: np.ndarray) -> np.ndarray:
    """Divide accumulated color sums by their sample counts.

    Pixels that have not received a sample yet are reported as black.

    Args:
        color_sum: Array of shape (..., 3) holding per-pixel radiance sums.
        counts: Array of shape (...) holding per-pixel sample counts.

    Returns:
        Float32 array of shape (..., 3) with the per-pixel mean.
    """
    color_sum = np.asarray(color_sum, dtype=np.float32)
    counts = np.asarray(counts)
    if color_sum.shape[:-1] != counts.shape:
        raise ValueError(
            f"Shape mismatch: color sum {color_sum.shape} vs counts {counts.shape}"
        )
    safe_counts = np.maximum(counts, 1).astype(np.float32)[..., np.newaxis]
    average = color_sum / safe_counts
    average[counts <= 0] = 0.0
    return average


def gamma_encode(linear: np.ndarray) -> np.ndarray:
    """Apply gamma 2.0 encoding (square root) per channel.

    Negative values are clamped to zero first so the square root is defined.
    """
    linear = np.asarray(linear, dtype=np.float32)
    return np.sqrt(np.maximum(linear, 0.0))


def clamp_unit(color: np.ndarray) -> np.ndarray:
    return np.clip(np.asarray(color, dtype=np.float32), 0.0, 1.0)


def to_display_pixels(color: np.ndarray) -> np.ndarray:
    """Quantize [0, 1] colors to 8-bit channels.

    Values are clamped to [0, 1], scaled by 255 and rounded half up.

    Args:
        color: Float array of shape (..., 3).

    Returns:
        uint8 array of the same shape.
    """
    scaled = clamp_unit(color) * 255.0
    return np.floor(scaled + 0.5).astype(np.uint8)


def pack_pixels(pixels: np.ndarray) -> np.ndarray:
    """Pack 8-bit RGB pixels into 0xRRGGBB integers.

    Args:
        pixels: uint8 array of shape (..., 3).

    Returns:
        uint32 array of shape (...).
    """
    pixels = np.asarray(pixels).astype(np.uint32)
    return (pixels[..., 0] << 16) | (pixels[..., 1] << 8) | pixels[..., 2]


def resolve_display_image(color_sum: np.ndarray, counts: np.ndarray) -> np.ndarray:
    """Average, gamma encode and quantize an accumulation buffer.

    This is the full conversion applied when publishing a frame.

    Args:
        color_sum: Per-pixel radiance sums, shape (H, W, 3).
        counts: Per-pixel sample counts, shape (H, W).

    Returns:
        uint8 display image of shape (H, W, 3).
    """
    return to_display_pixels(gamma_encode(average_samples(color_sum, counts)))
