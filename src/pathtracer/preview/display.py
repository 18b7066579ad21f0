"""Matplotlib-based display of published frames.

The display never touches the renderer. It only reads the FrameSnapshot,
so it can run on the main thread while a RenderWorker refines the image in
the background.

Example:
    >>> from src.pathtracer.preview.display import run_live_preview
    >>> worker = RenderWorker(renderer, snapshot)
    >>> worker.start()
    >>> run_live_preview(snapshot, worker=worker)   # blocks until closed
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.pathtracer.core.snapshot import FrameSnapshot
    from src.pathtracer.core.worker import RenderWorker


def is_display_available() -> bool:
    """Return False in headless environments where no window can open."""
    display = os.environ.get("DISPLAY")
    wayland = os.environ.get("WAYLAND_DISPLAY")

    if sys.platform == "darwin":
        # SSH sessions without X forwarding have no window server
        return not (os.environ.get("SSH_CONNECTION") and not display)

    if display or wayland:
        return True

    return os.name == "nt"


def format_title(sample_count: int, version: int) -> str:
    return f"Path tracer - {sample_count} SPP (frame {version})"


def show_snapshot(
    snapshot: FrameSnapshot,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Show the latest published frame in a static figure."""
    import matplotlib.pyplot as plt

    pixels, version = snapshot.read()

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(pixels)
    ax.axis("off")
    ax.set_title(title if title is not None else format_title(snapshot.sample_count, version))

    plt.tight_layout()
    plt.show(block=block)


def run_live_preview(
    snapshot: FrameSnapshot,
    *,
    worker: RenderWorker | None = None,
    interval_ms: int = 100,
    figsize: tuple[float, float] = (8, 8),
) -> None:
    """Redraw the snapshot periodically until the window is closed.

    The image is only re-uploaded when a newer frame has been published.
    Closing the window stops ``worker`` if one is given.

    Args:
        snapshot: Snapshot to display.
        worker: Optional worker to stop when the window closes.
        interval_ms: Redraw period in milliseconds.
        figsize: Figure size in inches.
    """
    import matplotlib.pyplot as plt
    from matplotlib.animation import FuncAnimation

    pixels, version = snapshot.read()
    shown = {"version": version}

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    image = ax.imshow(pixels)
    ax.axis("off")
    ax.set_title(format_title(snapshot.sample_count, version))

    def _update(_frame):
        latest, latest_version = snapshot.read()
        if latest_version != shown["version"]:
            shown["version"] = latest_version
            image.set_data(latest)
            ax.set_title(format_title(snapshot.sample_count, latest_version))
        return (image,)

    def _on_close(_event) -> None:
        if worker is not None:
            worker.stop()

    fig.canvas.mpl_connect("close_event", _on_close)
    animation = FuncAnimation(fig, _update, interval=interval_ms, cache_frame_data=False)

    plt.tight_layout()
    plt.show(block=True)
    del animation
