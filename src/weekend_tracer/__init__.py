"""Taichi-based CPU path tracer for sphere scenes.

This package renders still images of sphere-only scenes with:
- Diffuse, metal and dielectric materials
- A thin-lens camera with depth of field
- Jittered multi-sample anti-aliasing and gamma 2 output
- Plain PPM or PNG output

Subpackages:
    core: Ray and vector utilities, configuration, integrator and render loop
    geometry: Sphere intersection and hit records
    materials: Scattering models and their parameter registries
    scene: Scene storage, scene manager and ready-made scenes
    camera: Thin-lens camera with ray generation
    preview: Image conversion and export
"""

__version__ = "0.1.0"
