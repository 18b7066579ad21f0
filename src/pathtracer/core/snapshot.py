"""Lock-guarded display image shared between the render worker and viewers.

The render worker publishes a new frame after every pass; any number of
readers may copy the latest frame at any time. One lock guards the image:
publishing holds it for the whole average, gamma and quantize step, and
reading holds it only while copying, so a reader never sees a frame that is
partly from one pass and partly from the next.

Example:
    >>> snapshot = FrameSnapshot(320, 240)
    >>> snapshot.publish(color_sum, counts)     # render thread
    >>> pixels, version = snapshot.read()       # display thread
"""

import threading

import numpy as np

from src.pathtracer.core.color import pack_pixels, resolve_display_image


class FrameSnapshot:
    """Latest published display frame.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Snapshot dimensions must be positive, got {width}x{height}")
        self._width = width
        self._height = height
        self._lock = threading.Lock()
        self._pixels = np.zeros((height, width, 3), dtype=np.uint8)
        self._sample_count = 0
        self._version = 0

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def sample_count(self) -> int:
        """Samples per pixel behind the latest published frame."""
        with self._lock:
            return self._sample_count

    @property
    def version(self) -> int:
        """Number of frames published so far."""
        with self._lock:
            return self._version

    def publish(self, color_sum: np.ndarray, counts: np.ndarray) -> int:
        """Convert an accumulation buffer and make it the current frame.

        Args:
            color_sum: Per-pixel radiance sums, shape (height, width, 3),
                row 0 at the top.
            counts: Per-pixel sample counts, shape (height, width).

        Returns:
            The version number of the published frame.

        Raises:
            ValueError: If the buffer shape does not match the snapshot.
        """
        expected = (self._height, self._width)
        if tuple(color_sum.shape[:2]) != expected or tuple(counts.shape) != expected:
            raise ValueError(
                f"Buffer shape {color_sum.shape[:2]} does not match snapshot {expected}"
            )

        with self._lock:
            np.copyto(self._pixels, resolve_display_image(color_sum, counts))
            self._sample_count = int(counts.max()) if counts.size else 0
            self._version += 1
            return self._version

    def read(self) -> tuple[np.ndarray, int]:
        """Copy the current frame.

        Returns:
            Tuple of (pixels, version) where pixels is a uint8 array of
            shape (height, width, 3) owned by the caller.
        """
        with self._lock:
            return self._pixels.copy(), self._version

    def read_packed(self) -> np.ndarray:
        """Copy the current frame as 0xRRGGBB integers, shape (height, width)."""
        pixels, _ = self.read()
        return pack_pixels(pixels)

    def __repr__(self) -> str:
        return (
            f"FrameSnapshot(width={self._width}, height={self._height}, "
            f"version={self.version}, samples={self.sample_count})"
        )
