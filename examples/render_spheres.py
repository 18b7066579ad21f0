#!/usr/bin/env python3
"""Render the random spheres scene to a PNG file.

Builds the demo scene, renders a fixed number of progressive passes and
saves the gamma-encoded result.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH       Image width in pixels (default: 600)
    --height HEIGHT     Image height in pixels (default: 600)
    --samples SAMPLES   Number of samples per pixel (default: 64)
    --depth DEPTH       Maximum bounces per path (default: 50)
    --seed SEED         Seed for the scene layout (default: random)
    --output OUTPUT     Output file path (default: spheres.png)
    --batch-size SIZE   Samples per progress update (default: 8)
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    python -m examples.render_spheres --width 300 --height 300 --samples 32
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=600, help="Image width in pixels (default: 600)")
    parser.add_argument("--height", type=int, default=600, help="Image height in pixels (default: 600)")
    parser.add_argument(
        "--samples",
        type=int,
        default=64,
        help="Number of samples per pixel (default: 64)",
    )
    parser.add_argument("--depth", type=int, default=50, help="Maximum bounces per path (default: 50)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the scene layout")
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path (default: spheres.png)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=8,
        help="Samples per progress update (default: 8)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def render_spheres(
    width: int = 600,
    height: int = 600,
    num_samples: int = 64,
    max_depth: int = 50,
    seed: int | None = None,
    output_path: str = "spheres.png",
    batch_size: int = 8,
    quiet: bool = False,
) -> Path:
    """Render the random spheres scene and save it.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports: modules allocate Taichi fields on import
    from src.pathtracer.camera.thin_lens import setup_camera
    from src.pathtracer.core.progressive import ProgressiveRenderer
    from src.pathtracer.core.snapshot import FrameSnapshot
    from src.pathtracer.preview.export import save_png
    from src.pathtracer.scene.random_spheres import create_random_spheres_scene

    if not quiet:
        print(f"Creating random spheres scene ({width}x{height})...")

    scene, camera = create_random_spheres_scene(seed=seed, aspect_ratio=width / height)
    setup_camera(camera)

    if not quiet:
        print(f"  {scene.get_sphere_count()} spheres, {scene.get_material_count()} materials")

    renderer = ProgressiveRenderer(width, height, max_depth=max_depth)
    snapshot = FrameSnapshot(width, height)

    if not quiet:
        print(f"Rendering {num_samples} samples per pixel...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(num_samples=num_samples, batch_size=batch_size, callback=progress_callback)

    if not quiet:
        print()

    renderer.publish(snapshot)
    output_file = save_png(snapshot, output_path)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_depth=args.depth,
            seed=args.seed,
            output_path=args.output,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
