"""Tests for the lock-guarded FrameSnapshot.

These tests do not need a scene: they publish hand-made accumulation
buffers.
"""

import threading

import numpy as np
import pytest


def _buffers(height, width, value, count):
    color_sum = np.full((height, width, 3), value * count, dtype=np.float32)
    counts = np.full((height, width), count, dtype=np.int32)
    return color_sum, counts


class TestFrameSnapshot:
    """Tests for publish and read."""

    def test_initial_frame_is_black(self):
        from src.pathtracer.core.snapshot import FrameSnapshot

        snapshot = FrameSnapshot(4, 3)
        pixels, version = snapshot.read()

        assert pixels.shape == (3, 4, 3)
        assert pixels.dtype == np.uint8
        assert not pixels.any()
        assert version == 0
        assert snapshot.sample_count == 0

    @pytest.mark.parametrize("width, height", [(0, 4), (4, -1)])
    def test_rejects_bad_dimensions(self, width, height):
        from src.pathtracer.core.snapshot import FrameSnapshot

        with pytest.raises(ValueError, match="positive"):
            FrameSnapshot(width, height)

    def test_publish_converts_and_versions(self):
        from src.pathtracer.core.snapshot import FrameSnapshot

        snapshot = FrameSnapshot(4, 3)
        version = snapshot.publish(*_buffers(3, 4, 0.25, 8))
        pixels, read_version = snapshot.read()

        assert version == 1
        assert read_version == 1
        assert snapshot.sample_count == 8
        assert np.all(pixels == 128)

        assert snapshot.publish(*_buffers(3, 4, 1.0, 9)) == 2
        assert snapshot.version == 2
        assert np.all(snapshot.read()[0] == 255)

    def test_read_returns_a_copy(self):
        from src.pathtracer.core.snapshot import FrameSnapshot

        snapshot = FrameSnapshot(2, 2)
        snapshot.publish(*_buffers(2, 2, 1.0, 1))
        pixels, _ = snapshot.read()
        pixels[:] = 0

        assert np.all(snapshot.read()[0] == 255)

    def test_publish_rejects_wrong_shape(self):
        from src.pathtracer.core.snapshot import FrameSnapshot

        snapshot = FrameSnapshot(4, 3)
        with pytest.raises(ValueError, match="does not match"):
            snapshot.publish(*_buffers(4, 3, 0.5, 1))
        assert snapshot.version == 0

    def test_read_packed(self):
        from src.pathtracer.core.snapshot import FrameSnapshot

        snapshot = FrameSnapshot(2, 1)
        color_sum = np.array([[[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]]], dtype=np.float32)
        snapshot.publish(color_sum, np.ones((1, 2), dtype=np.int32))

        packed = snapshot.read_packed()
        assert packed.tolist() == [[0xFF0000, 0x0000FF]]

    def test_repr(self):
        from src.pathtracer.core.snapshot import FrameSnapshot

        text = repr(FrameSnapshot(5, 6))
        assert "width=5" in text
        assert "version=0" in text


class TestSnapshotConcurrency:
    """Readers never observe a partially published frame."""

    def test_concurrent_reads_see_whole_frames(self):
        from src.pathtracer.core.snapshot import FrameSnapshot

        snapshot = FrameSnapshot(64, 64)
        stop = threading.Event()
        torn = []

        def writer():
            level = 0.0
            while not stop.is_set():
                level = 1.0 if level == 0.0 else 0.0
                snapshot.publish(*_buffers(64, 64, level, 1))

        def reader():
            for _ in range(500):
                pixels, _ = snapshot.read()
                if pixels.min() != pixels.max():
                    torn.append(pixels)

        writer_thread = threading.Thread(target=writer)
        reader_threads = [threading.Thread(target=reader) for _ in range(3)]
        writer_thread.start()
        for thread in reader_threads:
            thread.start()
        for thread in reader_threads:
            thread.join()
        stop.set()
        writer_thread.join()

        assert torn == []
        assert snapshot.version > 0
