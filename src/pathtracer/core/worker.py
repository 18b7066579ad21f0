"""Background thread that keeps refining the image.

The worker loops until stopped: render one pass, then publish the refined
estimate into a FrameSnapshot. It is the only thread that launches Taichi
kernels while it runs; display code only reads the snapshot.

Example:
    >>> renderer = ProgressiveRenderer(300, 300)
    >>> snapshot = FrameSnapshot(300, 300)
    >>> worker = RenderWorker(renderer, snapshot)
    >>> worker.start()
    >>> ...                      # display snapshot.read() periodically
    >>> worker.stop()
"""

import logging
import threading
from collections.abc import Callable

from src.pathtracer.core.progressive import ProgressiveRenderer
from src.pathtracer.core.snapshot import FrameSnapshot

logger = logging.getLogger(__name__)

# Called with (version, sample_count) after every publish
PublishCallback = Callable[[int, int], None]

# Pass counts at which progress is logged at INFO level
_LOG_MILESTONES = frozenset(2**k for k in range(4, 20))


class RenderWorker(threading.Thread):
    """Daemon thread running the render-publish loop.

    Args:
        renderer: Renderer whose scene and camera are already set up.
        snapshot: Snapshot that receives each refined frame.
        max_passes: Stop by itself after this many passes; None runs until
            :meth:`stop` is called.
        on_publish: Optional callback invoked on the worker thread after
            each publish.
    """

    def __init__(
        self,
        renderer: ProgressiveRenderer,
        snapshot: FrameSnapshot,
        max_passes: int | None = None,
        on_publish: PublishCallback | None = None,
    ) -> None:
        super().__init__(name="render-worker", daemon=True)
        if (snapshot.width, snapshot.height) != (renderer.width, renderer.height):
            raise ValueError(
                f"Snapshot size {snapshot.width}x{snapshot.height} does not match "
                f"renderer size {renderer.width}x{renderer.height}"
            )
        if max_passes is not None and max_passes < 0:
            raise ValueError(f"max_passes must be non-negative, got {max_passes}")
        self._renderer = renderer
        self._snapshot = snapshot
        self._max_passes = max_passes
        self._on_publish = on_publish
        self._stop_event = threading.Event()
        self.passes_completed = 0
        self.error: Exception | None = None

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def _finished(self) -> bool:
        if self._stop_event.is_set():
            return True
        return self._max_passes is not None and self.passes_completed >= self._max_passes

    def run(self) -> None:
        logger.info(
            "Render worker started (%dx%d, max_depth=%d)",
            self._renderer.width,
            self._renderer.height,
            self._renderer.max_depth,
        )
        try:
            while not self._finished():
                samples = self._renderer.render_pass()
                version = self._renderer.publish(self._snapshot)
                self.passes_completed += 1
                if self.passes_completed in _LOG_MILESTONES:
                    logger.info("Reached %d samples per pixel", samples)
                else:
                    logger.debug("Published frame %d (%d spp)", version, samples)
                if self._on_publish is not None:
                    self._on_publish(version, samples)
        except Exception as exc:
            self.error = exc
            logger.exception("Render worker failed after %d passes", self.passes_completed)
            raise
        finally:
            logger.info("Render worker stopped after %d passes", self.passes_completed)

    def stop(self, timeout: float | None = None) -> None:
        """Ask the loop to exit after the current pass and wait for it.

        Args:
            timeout: Seconds to wait for the thread; None waits indefinitely.
        """
        self._stop_event.set()
        if self.is_alive() and self is not threading.current_thread():
            self.join(timeout)
