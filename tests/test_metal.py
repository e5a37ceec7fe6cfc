"""Unit tests for the metal (specular reflective) material.

Tests cover:
- Perfect mirror reflection (fuzz = 0)
- Fuzzy reflection bounded by the fuzz radius
- Absorption when the fuzzed direction points below the surface
- Attenuation equals albedo
- Material registry, including fuzz clamping
"""

import math

import pytest
import taichi as ti


class TestPerfectReflection:
    """Tests for mirror reflection with fuzz = 0."""

    def test_perfect_reflection_normal_incidence(self):
        """Test a ray straight down reflects straight up."""
        from weekend_tracer.materials.metal import scatter_metal

        result = ti.Vector.field(3, dtype=ti.f32, shape=())
        scattered = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(0.8, 0.8, 0.8)
            incident = ti.math.vec3(0.0, -1.0, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            direction, _, did_scatter = scatter_metal(albedo, 0.0, incident, normal)
            result[None] = direction
            scattered[None] = did_scatter

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6
        assert scattered[None] == 1

    def test_perfect_reflection_45_degrees(self):
        """Test the incident direction is normalized before reflecting."""
        from weekend_tracer.materials.metal import scatter_metal

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(0.8, 0.8, 0.8)
            incident = ti.math.vec3(3.0, -3.0, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            direction, _, _ = scatter_metal(albedo, 0.0, incident, normal)
            result[None] = direction

        test_kernel()
        r = result[None]
        expected = 1.0 / math.sqrt(2.0)
        assert abs(r[0] - expected) < 1e-5
        assert abs(r[1] - expected) < 1e-5
        assert abs(r[2]) < 1e-6


class TestFuzzyReflection:
    """Tests for reflection with fuzz > 0."""

    def test_fuzzy_reflection_bounded_by_fuzz(self):
        """Test the fuzzed direction stays within fuzz of the mirror direction."""
        from weekend_tracer.materials.metal import scatter_metal

        max_offset = ti.field(dtype=ti.f32, shape=())
        max_offset[None] = 0.0

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(0.8, 0.8, 0.8)
            incident = ti.math.vec3(0.0, -1.0, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            mirror = ti.math.vec3(0.0, 1.0, 0.0)
            for i in range(1000):
                direction, _, _ = scatter_metal(albedo, 0.3, incident, normal)
                ti.atomic_max(max_offset[None], ti.math.length(direction - mirror))

        test_kernel()
        assert 0.0 < max_offset[None] < 0.3

    def test_fuzzy_grazing_angle_may_absorb(self):
        """Test a fuzzy metal absorbs some rays near grazing incidence."""
        from weekend_tracer.materials.metal import scatter_metal

        n = 2000
        scattered = ti.field(dtype=ti.i32, shape=n)
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(0.8, 0.8, 0.8)
            incident = ti.math.vec3(1.0, -0.05, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            for i in range(n):
                direction, _, did_scatter = scatter_metal(albedo, 1.0, incident, normal)
                scattered[i] = did_scatter
                directions[i] = direction

        test_kernel()
        flags = scattered.to_numpy()
        ys = directions.to_numpy()[:, 1]
        assert 0 < flags.sum() < n
        # Absorbed exactly when the direction does not leave the surface
        assert ((ys > 0.0) == (flags == 1)).all()

    def test_attenuation_equals_albedo(self):
        """Test that attenuation equals the albedo."""
        from weekend_tracer.materials.metal import scatter_metal

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(0.9, 0.6, 0.2)
            _, attenuation, _ = scatter_metal(
                albedo, 0.5, ti.math.vec3(0.0, -1.0, 0.0), ti.math.vec3(0.0, 1.0, 0.0)
            )
            result[None] = attenuation

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.9) < 1e-6
        assert abs(r[1] - 0.6) < 1e-6
        assert abs(r[2] - 0.2) < 1e-6


class TestMetalMaterialStorage:
    """Tests for the metal material registry."""

    def test_add_and_get_material(self):
        """Test adding a material and reading it back in a kernel."""
        from weekend_tracer.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
        )

        idx = add_metal_material((0.8, 0.6, 0.2), fuzz=0.3)
        albedo = ti.Vector.field(3, dtype=ti.f32, shape=())
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            albedo[None] = get_metal_albedo(mat_idx)
            fuzz[None] = get_metal_fuzz(mat_idx)

        test_kernel(idx)
        assert abs(albedo[None][1] - 0.6) < 1e-6
        assert abs(fuzz[None] - 0.3) < 1e-6

    def test_material_count(self):
        """Test material count and clearing."""
        from weekend_tracer.materials.metal import (
            add_metal_material,
            clear_metal_materials,
            get_metal_material_count,
        )

        add_metal_material((0.5, 0.5, 0.5))
        add_metal_material((0.5, 0.5, 0.5), fuzz=0.1)
        assert get_metal_material_count() == 2

        clear_metal_materials()
        assert get_metal_material_count() == 0

    @pytest.mark.parametrize(
        "fuzz, expected",
        [(1.5, 1.0), (-0.2, 0.0), (0.0, 0.0), (1.0, 1.0), (0.4, 0.4)],
    )
    def test_fuzz_clamped(self, fuzz, expected):
        """Test fuzz values are clamped into [0, 1]."""
        from weekend_tracer.materials.metal import add_metal_material, clamp_fuzz, get_metal_fuzz

        assert clamp_fuzz(fuzz) == expected

        idx = add_metal_material((0.5, 0.5, 0.5), fuzz=fuzz)
        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            result[None] = get_metal_fuzz(mat_idx)

        test_kernel(idx)
        assert abs(result[None] - expected) < 1e-6

    def test_scatter_by_id(self):
        """Test scattering with registered parameters."""
        from weekend_tracer.materials.metal import add_metal_material, scatter_metal_by_id

        idx = add_metal_material((0.7, 0.6, 0.5))
        direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            d, a, _ = scatter_metal_by_id(
                mat_idx, ti.math.vec3(0.0, -1.0, 0.0), ti.math.vec3(0.0, 1.0, 0.0)
            )
            direction[None] = d
            attenuation[None] = a

        test_kernel(idx)
        assert abs(direction[None][1] - 1.0) < 1e-6
        assert abs(attenuation[None][0] - 0.7) < 1e-6

    def test_albedo_validation(self):
        """Test albedo components outside [0, 1] are rejected."""
        from weekend_tracer.materials.metal import add_metal_material

        with pytest.raises(ValueError):
            add_metal_material((-0.1, 0.5, 0.5))
        with pytest.raises(ValueError):
            add_metal_material((0.5, 1.1, 0.5))
