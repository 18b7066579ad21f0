"""Tests for the checkerboard ground plane and the AABB helper."""

import numpy as np
import taichi as ti


class TestPlaneIntersection:
    """Tests for hit_plane."""

    def test_hit_from_above(self):
        from src.pathtracer.geometry.plane import Plane, hit_plane, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())
        point = ti.Vector.field(3, dtype=ti.f32, shape=())
        normal = ti.Vector.field(3, dtype=ti.f32, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = hit_plane(
                vec3(1.0, 2.0, 0.0), vec3(0.0, -1.0, -1.0), Plane(height=0.0), 1e-4, 1e10
            )
            hit[None] = rec.hit
            t_val[None] = rec.t
            point[None] = rec.point
            normal[None] = rec.normal
            front_face[None] = rec.front_face

        test_kernel()
        assert hit[None] == 1
        assert abs(t_val[None] - 2.0) < 1e-6
        p = point[None]
        assert abs(p[0] - 1.0) < 1e-6
        assert abs(p[1]) < 1e-6
        assert abs(p[2] + 2.0) < 1e-6
        n = normal[None]
        assert abs(n[1] - 1.0) < 1e-6
        assert front_face[None] == 1

    def test_upward_ray_misses(self):
        from src.pathtracer.geometry.plane import Plane, hit_plane, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = hit_plane(
                vec3(0.0, 1.0, 0.0), vec3(0.0, 1.0, 0.0), Plane(height=0.0), 1e-4, 1e10
            )
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_horizontal_ray_misses(self):
        from src.pathtracer.geometry.plane import Plane, hit_plane, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = hit_plane(
                vec3(0.0, 1.0, 0.0), vec3(1.0, 0.0, 0.0), Plane(height=0.0), 1e-4, 1e10
            )
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_origin_below_plane_misses(self):
        """The plane is one-sided; rays from underneath never hit it."""
        from src.pathtracer.geometry.plane import Plane, hit_plane, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = hit_plane(
                vec3(0.0, -1.0, 0.0), vec3(0.0, -1.0, 0.0), Plane(height=0.0), 1e-4, 1e10
            )
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_raised_plane_respects_t_max(self):
        from src.pathtracer.geometry.plane import Plane, hit_plane, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = hit_plane(
                vec3(0.0, 5.0, 0.0), vec3(0.0, -1.0, 0.0), Plane(height=1.0), 1e-4, 3.0
            )
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0


class TestCheckerParity:
    """Tests for the checkerboard tile parity."""

    def test_parity_of_tiles(self):
        from src.pathtracer.geometry.plane import checker_parity, vec3

        results = ti.field(dtype=ti.i32, shape=4)

        @ti.kernel
        def test_kernel():
            results[0] = checker_parity(vec3(0.5, 0.0, 0.5))
            results[1] = checker_parity(vec3(1.5, 0.0, 0.5))
            results[2] = checker_parity(vec3(1.5, 0.0, 1.5))
            results[3] = checker_parity(vec3(0.5, 0.0, 2.5))

        test_kernel()
        assert results.to_numpy().tolist() == [0, 1, 0, 0]

    def test_parity_uses_floor_for_negative_coordinates(self):
        """(-0.5, 0.5) lies in tile (-1, 0), which is odd."""
        from src.pathtracer.geometry.plane import checker_parity, vec3

        results = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            results[0] = checker_parity(vec3(-0.5, 0.0, 0.5))
            results[1] = checker_parity(vec3(-0.5, 0.0, -0.5))

        test_kernel()
        assert results.to_numpy().tolist() == [1, 0]


class TestAABB:
    """Tests for bounding boxes."""

    def test_ray_through_box_hits(self):
        from src.pathtracer.geometry.aabb import AABB, hit_aabb, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            box = AABB(minimum=vec3(-1.0, -1.0, -4.0), maximum=vec3(1.0, 1.0, -2.0))
            hit[None] = hit_aabb(vec3(0.1, 0.2, 0.0), vec3(0.05, 0.05, -1.0), box, 1e-4, 1e10)

        test_kernel()
        assert hit[None] == 1

    def test_ray_beside_box_misses(self):
        from src.pathtracer.geometry.aabb import AABB, hit_aabb, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            box = AABB(minimum=vec3(-1.0, -1.0, -4.0), maximum=vec3(1.0, 1.0, -2.0))
            hit[None] = hit_aabb(vec3(3.0, 0.1, 0.0), vec3(0.01, 0.02, -1.0), box, 1e-4, 1e10)

        test_kernel()
        assert hit[None] == 0

    def test_interval_ending_before_box_misses(self):
        from src.pathtracer.geometry.aabb import AABB, hit_aabb, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            box = AABB(minimum=vec3(-1.0, -1.0, -4.0), maximum=vec3(1.0, 1.0, -2.0))
            hit[None] = hit_aabb(vec3(0.1, 0.1, 0.0), vec3(0.01, 0.01, -1.0), box, 1e-4, 1.0)

        test_kernel()
        assert hit[None] == 0

    def test_sphere_bounds_and_union(self):
        from src.pathtracer.geometry.aabb import sphere_bounds, surrounding_box

        box_a = sphere_bounds((0.0, 1.0, 0.0), 1.0)
        box_b = sphere_bounds((4.0, 0.5, -2.0), 0.5)

        np.testing.assert_allclose(box_a[0], [-1.0, 0.0, -1.0])
        np.testing.assert_allclose(box_a[1], [1.0, 2.0, 1.0])

        lo, hi = surrounding_box(box_a, box_b)
        np.testing.assert_allclose(lo, [-1.0, 0.0, -2.5])
        np.testing.assert_allclose(hi, [4.5, 2.0, 1.0])
