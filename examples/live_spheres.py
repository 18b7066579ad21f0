#!/usr/bin/env python3
"""Live progressive rendering of the random spheres scene.

A background RenderWorker refines the image forever while a Matplotlib
window redraws the latest published frame. Closing the window stops the
worker; the final frame can optionally be saved.

Usage:
    python -m examples.live_spheres [--width 600] [--height 600] [--save out.png]
"""

from __future__ import annotations

import argparse
import logging
import sys

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Live render of the random spheres scene.")
    parser.add_argument("--width", type=int, default=600, help="Image width in pixels (default: 600)")
    parser.add_argument("--height", type=int, default=600, help="Image height in pixels (default: 600)")
    parser.add_argument("--depth", type=int, default=50, help="Maximum bounces per path (default: 50)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the scene layout")
    parser.add_argument(
        "--interval",
        type=int,
        default=100,
        help="Display refresh period in milliseconds (default: 100)",
    )
    parser.add_argument("--save", type=str, default=None, help="Save the last frame to this PNG")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def initialize_taichi() -> str:
    """Initialize Taichi with GPU, falling back to CPU.

    Returns:
        Name of the backend being used.
    """
    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        ti.init(arch=ti.cpu)
        return "CPU"


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(threadName)s %(levelname)s: %(message)s",
    )

    print(f"Taichi backend: {initialize_taichi()}")

    from src.pathtracer.camera.thin_lens import setup_camera
    from src.pathtracer.core.progressive import ProgressiveRenderer
    from src.pathtracer.core.snapshot import FrameSnapshot
    from src.pathtracer.core.worker import RenderWorker
    from src.pathtracer.preview.display import is_display_available, run_live_preview
    from src.pathtracer.preview.export import save_png
    from src.pathtracer.scene.random_spheres import create_random_spheres_scene

    if not is_display_available():
        print("Error: no display available; use examples.render_spheres instead", file=sys.stderr)
        return 1

    try:
        _, camera = create_random_spheres_scene(
            seed=args.seed, aspect_ratio=args.width / args.height
        )
        setup_camera(camera)

        renderer = ProgressiveRenderer(args.width, args.height, max_depth=args.depth)
        snapshot = FrameSnapshot(args.width, args.height)
        worker = RenderWorker(renderer, snapshot)
        worker.start()

        try:
            run_live_preview(snapshot, worker=worker, interval_ms=args.interval)
        finally:
            worker.stop()

        if args.save:
            path = save_png(snapshot, args.save)
            print(f"Saved {snapshot.sample_count} SPP frame to: {path.absolute()}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
