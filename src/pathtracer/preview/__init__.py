"""Display and export of published frames.

Components:
    display: Matplotlib static and live views of a FrameSnapshot
    export: PNG export through Pillow

Example:
    >>> from src.pathtracer.preview import run_live_preview, save_png
    >>> run_live_preview(snapshot, worker=worker)
    >>> save_png(snapshot, "output.png")
"""

from src.pathtracer.preview.display import (
    format_title,
    is_display_available,
    run_live_preview,
    show_snapshot,
)
from src.pathtracer.preview.export import (
    compute_rmse,
    load_png,
    save_png,
    save_png_from_array,
)

__all__ = [
    "show_snapshot",
    "run_live_preview",
    "is_display_available",
    "format_title",
    "save_png",
    "save_png_from_array",
    "load_png",
    "compute_rmse",
]
