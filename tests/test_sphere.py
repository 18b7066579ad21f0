"""Unit tests for sphere intersection and hit records.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Interval bounds and root selection
"""

import taichi as ti


def _sphere_hit_fields():
    return (
        ti.field(dtype=ti.i32, shape=()),
        ti.field(dtype=ti.f32, shape=()),
        ti.Vector.field(3, dtype=ti.f32, shape=()),
        ti.Vector.field(3, dtype=ti.f32, shape=()),
        ti.field(dtype=ti.i32, shape=()),
    )


class TestFaceNormal:
    """Tests for the front-face rule."""

    def test_ray_against_normal_is_front_face(self):
        from src.pathtracer.geometry.hit_record import face_normal, vec3

        front = ti.field(dtype=ti.i32, shape=())
        normal = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            f, n = face_normal(vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0))
            front[None] = f
            normal[None] = n

        test_kernel()
        assert front[None] == 1
        assert abs(normal[None][2] - 1.0) < 1e-6

    def test_ray_along_normal_flips_it(self):
        from src.pathtracer.geometry.hit_record import face_normal, vec3

        front = ti.field(dtype=ti.i32, shape=())
        normal = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            f, n = face_normal(vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, 1.0))
            front[None] = f
            normal[None] = n

        test_kernel()
        assert front[None] == 0
        assert abs(normal[None][2] + 1.0) < 1e-6


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_make_sphere(self):
        from src.pathtracer.geometry.sphere import make_sphere, vec3

        center = ti.Vector.field(3, dtype=ti.f32, shape=())
        radius = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5)
            center[None] = sphere.center
            radius[None] = sphere.radius

        test_kernel()
        assert abs(center[None][1] - 2.0) < 1e-6
        assert abs(radius[None] - 0.5) < 1e-6

    def test_hit_from_outside(self):
        """Origin at 0, sphere at z = -3 with r = 0.5 is hit at t = 2.5."""
        from src.pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit, t_val, point, normal, front_face = _sphere_hit_fields()

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, -3.0), radius=0.5)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 1e-4, 1e10)
            hit[None] = rec.hit
            t_val[None] = rec.t
            point[None] = rec.point
            normal[None] = rec.normal
            front_face[None] = rec.front_face

        test_kernel()
        assert hit[None] == 1
        assert abs(t_val[None] - 2.5) < 1e-5
        assert abs(point[None][2] + 2.5) < 1e-5
        n = normal[None]
        assert abs(n[0]) < 1e-5
        assert abs(n[1]) < 1e-5
        assert abs(n[2] - 1.0) < 1e-5
        assert front_face[None] == 1

    def test_miss(self):
        from src.pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, -3.0), radius=0.5)
            rec = hit_sphere(vec3(0.0, 2.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 1e-4, 1e10)
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_sphere_behind_ray_is_missed(self):
        from src.pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 3.0), radius=0.5)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 1e-4, 1e10)
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_hit_from_inside_is_back_face(self):
        """From the center the far root is taken and the normal faces inward."""
        from src.pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit, t_val, point, normal, front_face = _sphere_hit_fields()

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 0.0), radius=2.0)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0), sphere, 1e-4, 1e10)
            hit[None] = rec.hit
            t_val[None] = rec.t
            point[None] = rec.point
            normal[None] = rec.normal
            front_face[None] = rec.front_face

        test_kernel()
        assert hit[None] == 1
        assert abs(t_val[None] - 2.0) < 1e-5
        assert front_face[None] == 0
        n = normal[None]
        assert abs(n[0] + 1.0) < 1e-5
        assert abs(n[1]) < 1e-5

    def test_t_max_excludes_far_hit(self):
        from src.pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, -3.0), radius=0.5)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 1e-4, 2.0)
            hit[None] = rec.hit

        test_kernel()
        assert hit[None] == 0

    def test_t_min_skips_near_root(self):
        """With t_min past the near root the far root is returned."""
        from src.pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

        t_val = ti.field(dtype=ti.f32, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, -3.0), radius=0.5)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 3.0, 1e10)
            t_val[None] = rec.t
            front_face[None] = rec.front_face

        test_kernel()
        assert abs(t_val[None] - 3.5) < 1e-5
        assert front_face[None] == 0

    def test_unnormalized_direction(self):
        """t is measured in units of the direction's length."""
        from src.pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

        t_val = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, -3.0), radius=0.5)
            rec = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -2.0), sphere, 1e-4, 1e10)
            t_val[None] = rec.t

        test_kernel()
        assert abs(t_val[None] - 1.25) < 1e-5
