"""Tests for the emissive light material."""

import pytest
import taichi as ti


class TestLightMaterial:
    """Tests for scatter_light and the light registry."""

    def test_scatter_light_emits(self):
        from src.pathtracer.materials.light import scatter_light, vec3
        from src.pathtracer.materials.scatter import EMITTED

        direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        color = ti.Vector.field(3, dtype=ti.f32, shape=())
        outcome = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            d, c, o = scatter_light(vec3(4.0, 2.0, 1.0))
            direction[None] = d
            color[None] = c
            outcome[None] = o

        test_kernel()
        assert outcome[None] == EMITTED
        c = color[None]
        assert abs(c[0] - 4.0) < 1e-6
        assert abs(c[1] - 2.0) < 1e-6
        assert abs(c[2] - 1.0) < 1e-6
        d = direction[None]
        assert d[0] == 0.0 and d[1] == 0.0 and d[2] == 0.0

    def test_emission_above_one_is_allowed(self):
        from src.pathtracer.materials.light import add_light_material, get_light_material_count

        add_light_material((15.0, 15.0, 15.0))
        assert get_light_material_count() == 1

    def test_rejects_negative_emission(self):
        from src.pathtracer.materials.light import add_light_material

        with pytest.raises(ValueError, match="negative"):
            add_light_material((1.0, -0.5, 1.0))

    def test_scatter_by_id(self):
        from src.pathtracer.materials.light import add_light_material, scatter_light_by_id

        add_light_material((1.0, 1.0, 1.0))
        idx = add_light_material((0.25, 0.5, 0.75))
        color = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(material_idx: ti.i32):
            d, c, o = scatter_light_by_id(material_idx)
            color[None] = c

        test_kernel(idx)
        c = color[None]
        assert abs(c[0] - 0.25) < 1e-6
        assert abs(c[2] - 0.75) < 1e-6

    def test_outcome_codes(self):
        from src.pathtracer.materials.scatter import (
            ABSORBED,
            EMITTED,
            SCATTERED,
            ScatterOutcome,
        )

        assert len({ABSORBED, SCATTERED, EMITTED}) == 3
        assert ScatterOutcome(EMITTED) is ScatterOutcome.EMITTED
