"""Pytest configuration for tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate the fields declared by already imported modules.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so that Taichi is initialized before fields are declared
    from weekend_tracer.camera.thin_lens import reset_camera
    from weekend_tracer.core.integrator import reset_render_target
    from weekend_tracer.materials.dielectric import clear_dielectric_materials
    from weekend_tracer.materials.lambertian import clear_lambertian_materials
    from weekend_tracer.materials.metal import clear_metal_materials
    from weekend_tracer.scene.intersection import clear_scene
    from weekend_tracer.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        reset_render_target()
        reset_camera()

    _clear_all()

    yield

    _clear_all()
