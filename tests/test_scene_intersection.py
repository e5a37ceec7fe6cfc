"""Unit tests for scene-level intersection.

Tests cover:
- Sphere storage, counts and clearing
- Single sphere hit and miss
- Closest hit selection among overlapping spheres, in either insertion order
- Empty scene
- t bounds
"""

import pytest
import taichi as ti


def _make_query_kernel(hit, t_val, material_id):
    """Build a kernel that queries the scene along -z from the origin."""
    from weekend_tracer.scene.intersection import intersect_scene, vec3

    @ti.kernel
    def query(t_min: ti.f32, t_max: ti.f32):
        # Single-iteration outer loop keeps the scene loop serial
        for _ in range(1):
            rec = intersect_scene(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), t_min, t_max)
            hit[None] = rec.hit
            t_val[None] = rec.t
            material_id[None] = rec.material_id

    return query


@pytest.fixture
def query_fields():
    """Result fields for scene queries."""
    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())
    return hit, t_val, material_id


class TestSceneSphereStorage:
    """Tests for scene sphere storage and management."""

    def test_add_sphere(self):
        """Test adding spheres returns sequential indices."""
        from weekend_tracer.scene.intersection import add_sphere, get_sphere_count, vec3

        assert add_sphere(vec3(0.0, 0.0, -1.0), 0.5, material_id=0) == 0
        assert add_sphere(vec3(1.0, 0.0, -1.0), 0.5, material_id=1) == 1
        assert get_sphere_count() == 2

    def test_clear_scene(self):
        """Test clearing the scene resets the count."""
        from weekend_tracer.scene.intersection import (
            add_sphere,
            clear_scene,
            get_sphere_count,
            vec3,
        )

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5)
        clear_scene()
        assert get_sphere_count() == 0

    def test_capacity_overflow(self):
        """Test exceeding MAX_SPHERES raises RuntimeError."""
        from weekend_tracer.scene.intersection import MAX_SPHERES, add_sphere, vec3

        for i in range(MAX_SPHERES):
            add_sphere(vec3(float(i), 0.0, 0.0), 0.1)

        with pytest.raises(RuntimeError):
            add_sphere(vec3(0.0, 0.0, 0.0), 0.1)

    def test_get_sphere_reads_back_storage(self):
        """Test get_sphere loads the stored sphere."""
        from weekend_tracer.scene.intersection import add_sphere, get_sphere, vec3

        add_sphere(vec3(1.0, 2.0, 3.0), 0.25, material_id=9)

        center = ti.field(dtype=ti.math.vec3, shape=())
        radius = ti.field(dtype=ti.f32, shape=())
        material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = get_sphere(0)
            center[None] = sphere.center
            radius[None] = sphere.radius
            material_id[None] = sphere.material_id

        test_kernel()
        assert abs(center[None][1] - 2.0) < 1e-6
        assert abs(radius[None] - 0.25) < 1e-6
        assert material_id[None] == 9


class TestSingleSphereIntersection:
    """Tests for intersection with one sphere."""

    def test_hit_single_sphere(self, query_fields):
        """Test ray hitting a single sphere."""
        from weekend_tracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -3.0), 1.0, material_id=4)
        hit, t_val, material_id = query_fields
        _make_query_kernel(hit, t_val, material_id)(0.001, 1e10)

        assert hit[None] == 1
        assert abs(t_val[None] - 2.0) < 1e-5
        assert material_id[None] == 4

    def test_miss_single_sphere(self, query_fields):
        """Test ray missing a single sphere."""
        from weekend_tracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(5.0, 0.0, -3.0), 1.0, material_id=4)
        hit, t_val, material_id = query_fields
        _make_query_kernel(hit, t_val, material_id)(0.001, 1e10)

        assert hit[None] == 0
        assert material_id[None] == -1


class TestClosestHit:
    """Tests for closest hit selection with multiple spheres."""

    def test_closest_of_two_spheres(self, query_fields):
        """Test spheres at distances 5 and 10 along the ray report distance 5."""
        from weekend_tracer.scene.intersection import add_sphere, vec3

        # Front surfaces at t=5 and t=10
        add_sphere(vec3(0.0, 0.0, -6.0), 1.0, material_id=1)
        add_sphere(vec3(0.0, 0.0, -11.0), 1.0, material_id=2)

        hit, t_val, material_id = query_fields
        _make_query_kernel(hit, t_val, material_id)(0.001, 1e10)

        assert hit[None] == 1
        assert abs(t_val[None] - 5.0) < 1e-5
        assert material_id[None] == 1

    def test_closest_of_two_spheres_reversed_order(self, query_fields):
        """Test closest hit when the farther sphere is added first."""
        from weekend_tracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -11.0), 1.0, material_id=2)
        add_sphere(vec3(0.0, 0.0, -6.0), 1.0, material_id=1)

        hit, t_val, material_id = query_fields
        _make_query_kernel(hit, t_val, material_id)(0.001, 1e10)

        assert hit[None] == 1
        assert abs(t_val[None] - 5.0) < 1e-5
        assert material_id[None] == 1

    def test_nested_spheres(self, query_fields):
        """Test the outer surface of nested spheres is hit first."""
        from weekend_tracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -5.0), 0.45, material_id=2)
        add_sphere(vec3(0.0, 0.0, -5.0), 0.5, material_id=1)

        hit, t_val, material_id = query_fields
        _make_query_kernel(hit, t_val, material_id)(0.001, 1e10)

        assert abs(t_val[None] - 4.5) < 1e-5
        assert material_id[None] == 1

    def test_many_spheres(self, query_fields):
        """Test closest hit among many spheres along the ray."""
        from weekend_tracer.scene.intersection import add_sphere, vec3

        for k in (9, 3, 7, 12, 5):
            add_sphere(vec3(0.0, 0.0, -float(k)), 0.5, material_id=k)
        # Off-axis spheres that the ray misses
        for k in range(10):
            add_sphere(vec3(3.0, float(k), -2.0), 0.5, material_id=100 + k)

        hit, t_val, material_id = query_fields
        _make_query_kernel(hit, t_val, material_id)(0.001, 1e10)

        assert abs(t_val[None] - 2.5) < 1e-5
        assert material_id[None] == 3


class TestEmptyScene:
    """Tests for queries against an empty scene."""

    def test_intersect_empty_scene(self, query_fields):
        """Test that an empty scene reports a miss."""
        hit, t_val, material_id = query_fields
        _make_query_kernel(hit, t_val, material_id)(0.001, 1e10)

        assert hit[None] == 0
        assert material_id[None] == -1


class TestTBounds:
    """Tests for the open (t_min, t_max) interval."""

    def test_hit_rejected_by_t_max(self, query_fields):
        """Test hits beyond t_max are ignored."""
        from weekend_tracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -6.0), 1.0, material_id=1)
        hit, t_val, material_id = query_fields
        _make_query_kernel(hit, t_val, material_id)(0.001, 4.0)

        assert hit[None] == 0

    def test_t_min_skips_nearer_sphere(self, query_fields):
        """Test a t_min past the first sphere finds the next surface."""
        from weekend_tracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -2.0), 0.5, material_id=1)
        add_sphere(vec3(0.0, 0.0, -6.0), 0.5, material_id=2)
        hit, t_val, material_id = query_fields
        _make_query_kernel(hit, t_val, material_id)(3.0, 1e10)

        assert hit[None] == 1
        assert abs(t_val[None] - 5.5) < 1e-5
        assert material_id[None] == 2
