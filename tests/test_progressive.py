"""Tests for progressive rendering functionality.

Tests cover:
- ProgressiveRenderer initialization, reset and resize
- Sample accumulation with batches, callbacks and the generator interface
- Image output (linear mean and display pixels)
- Publishing into a FrameSnapshot and saving to disk
"""

import numpy as np
import pytest


class TestProgressiveRendererInit:
    """Test ProgressiveRenderer initialization."""

    def test_init_sets_up_render_target(self):
        from src.pathtracer.core.integrator import get_image_dimensions
        from src.pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(32, 24)

        assert renderer.width == 32
        assert renderer.height == 24
        assert renderer.sample_count == 0
        assert get_image_dimensions() == (32, 24)

    def test_init_rejects_oversized_dimensions(self):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError, match="exceed maximum"):
            ProgressiveRenderer(5000, 5000)

    def test_init_rejects_negative_depth(self):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError, match="max_depth"):
            ProgressiveRenderer(16, 16, max_depth=-1)


class TestProgressiveRendering:
    """Test render, render_pass and render_progressive."""

    def test_render_pass_adds_one_sample(self, lambertian_sphere_view):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(16, 16)
        assert renderer.render_pass() == 1
        assert renderer.render_pass() == 2

    def test_render_accumulates_samples(self, lambertian_sphere_view):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(16, 16)
        renderer.render(5)
        renderer.render(10, batch_size=3)

        assert renderer.sample_count == 15

    @pytest.mark.parametrize("num_samples", [0, -10])
    def test_render_non_positive_does_nothing(self, lambertian_sphere_view, num_samples):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(16, 16)
        renderer.render(2)
        renderer.render(num_samples)

        assert renderer.sample_count == 2

    def test_callback_receives_progress(self, lambertian_sphere_view):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        renderer.render(4)
        calls = []

        renderer.render(10, batch_size=4, callback=lambda c, t: calls.append((c, t)))

        assert calls == [(8, 14), (12, 14), (14, 14)]

    def test_render_progressive_is_interruptible(self, lambertian_sphere_view):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        for current, _ in renderer.render_progressive(100, batch_size=5):
            if current >= 10:
                break

        assert renderer.sample_count == 10

    def test_render_progressive_rejects_bad_batch(self, lambertian_sphere_view):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        with pytest.raises(ValueError, match="batch_size"):
            list(renderer.render_progressive(4, batch_size=0))

    def test_reset_and_resize(self, lambertian_sphere_view):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        renderer.render(3)
        renderer.reset()
        assert renderer.sample_count == 0
        assert not renderer.get_image_numpy().any()

        renderer.render(2)
        renderer.resize(12, 6)
        assert (renderer.width, renderer.height) == (12, 6)
        assert renderer.sample_count == 0
        assert renderer.get_image_numpy().shape == (6, 12, 3)

    def test_repr(self):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(10, 20)
        text = repr(renderer)
        assert "width=10" in text
        assert "height=20" in text
        assert "samples=0" in text


class TestProgressiveOutput:
    """Test image output and publishing."""

    def test_display_pixels(self, lambertian_sphere_view):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(16, 12)
        renderer.render(4)

        pixels = renderer.get_display_pixels()
        assert pixels.shape == (12, 16, 3)
        assert pixels.dtype == np.uint8
        # The grey sphere fills the middle of the frame, the sky is never black
        assert pixels.min() > 0

    def test_no_nan_after_many_samples(self, lambertian_sphere_view):
        from src.pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        renderer.render(64, batch_size=16)

        image = renderer.get_image_numpy()
        assert np.all(np.isfinite(image))
        assert image.min() >= 0.0

    def test_publish_into_snapshot(self, lambertian_sphere_view):
        from src.pathtracer.core.progressive import ProgressiveRenderer
        from src.pathtracer.core.snapshot import FrameSnapshot

        renderer = ProgressiveRenderer(16, 12)
        snapshot = FrameSnapshot(16, 12)
        renderer.render(3)

        version = renderer.publish(snapshot)
        pixels, read_version = snapshot.read()

        assert version == 1
        assert read_version == 1
        assert snapshot.sample_count == 3
        np.testing.assert_array_equal(pixels, renderer.get_display_pixels())

    def test_save_image(self, lambertian_sphere_view, tmp_path):
        from src.pathtracer.core.progressive import ProgressiveRenderer
        from src.pathtracer.preview.export import load_png

        renderer = ProgressiveRenderer(16, 12)
        renderer.render(2)
        path = tmp_path / "render.png"

        renderer.save_image(path)

        np.testing.assert_array_equal(load_png(path), renderer.get_display_pixels())
