"""Ready-made demo scenes.

Each factory builds a complete scene into the Taichi scene fields and returns
the SceneManager together with a matching camera.

Scenes:
    random: A large ground sphere covered in a grid of small randomly placed
        spheres with random materials, plus three large feature spheres
        (glass, diffuse, metal). Viewed from far away with a narrow field of
        view and slight defocus blur.
    three-spheres: A diffuse sphere between a hollow glass sphere and a
        metal sphere, on a large yellowish ground sphere, with a wide
        aperture focused on the middle sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.scene.scenes import create_random_scene
    >>> from weekend_tracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene(aspect_ratio=3 / 2)
    >>> setup_camera(camera)
"""

import math

import numpy as np

from weekend_tracer.camera.thin_lens import ThinLensCamera
from weekend_tracer.materials import Dielectric, Lambertian, Metal
from weekend_tracer.scene.manager import SceneManager, SpherePrimitive

# =============================================================================
# Random Scene Parameters
# =============================================================================

# Small spheres are placed on the grid a, b in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_SPHERE_RADIUS = 0.2

# Material probabilities for the small spheres
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.15  # Remainder is glass

# Small spheres closer than this to the metal feature sphere's footprint are skipped
CLEARANCE_POINT = (4.0, 0.2, 0.0)
CLEARANCE_DISTANCE = 0.9

GLASS_IOR = 1.5


def create_random_scene(
    aspect_ratio: float = 3.0 / 2.0,
    rng: np.random.Generator | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random "final" scene.

    All glass spheres share a single dielectric material.

    Args:
        aspect_ratio: Image width divided by height, used for the camera.
        rng: Random generator for sphere placement and materials. A fresh
            unseeded generator is used if None.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    if rng is None:
        rng = np.random.default_rng()

    scene = SceneManager()

    scene.add(
        SpherePrimitive(
            center=(0.0, -1000.0, 0.0),
            radius=1000.0,
            material=Lambertian(albedo=(0.5, 0.5, 0.5)),
        )
    )

    glass = Dielectric(ior=GLASS_IOR)

    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = rng.random()
            center = (
                a + 0.9 * rng.random(),
                SMALL_SPHERE_RADIUS,
                b + 0.9 * rng.random(),
            )

            if math.dist(center, CLEARANCE_POINT) <= CLEARANCE_DISTANCE:
                continue

            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = rng.random(3) * rng.random(3)
                material = Lambertian(albedo=tuple(float(c) for c in albedo))
            elif choose_mat < DIFFUSE_PROBABILITY + METAL_PROBABILITY:
                albedo = rng.uniform(0.5, 1.0, size=3)
                fuzz = float(rng.uniform(0.0, 0.5))
                material = Metal(albedo=tuple(float(c) for c in albedo), fuzz=fuzz)
            else:
                material = glass

            scene.add(SpherePrimitive(center=center, radius=SMALL_SPHERE_RADIUS, material=material))

    # Feature spheres
    scene.add(SpherePrimitive(center=(0.0, 1.0, 0.0), radius=1.0, material=glass))
    scene.add(
        SpherePrimitive(
            center=(-4.0, 1.0, 0.0),
            radius=1.0,
            material=Lambertian(albedo=(0.4, 0.2, 0.1)),
        )
    )
    scene.add(
        SpherePrimitive(
            center=(4.0, 1.0, 0.0),
            radius=1.0,
            material=Metal(albedo=(0.7, 0.6, 0.5), fuzz=0.0),
        )
    )

    camera = ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )

    return scene, camera


def create_three_sphere_scene(
    aspect_ratio: float = 16.0 / 9.0,
    rng: np.random.Generator | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the three-sphere depth of field scene.

    The left sphere is a hollow glass shell: an outer sphere of radius 0.5
    and an inner sphere of radius -0.45 sharing one dielectric material.

    Args:
        aspect_ratio: Image width divided by height, used for the camera.
        rng: Ignored, the layout is fixed. Accepted so that every entry of
            SCENES is called the same way.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    scene = SceneManager()

    ground = Lambertian(albedo=(0.8, 0.8, 0.0))
    center = Lambertian(albedo=(0.1, 0.2, 0.5))
    left = Dielectric(ior=GLASS_IOR)
    right = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.0)

    scene.add(SpherePrimitive(center=(0.0, -100.5, -1.0), radius=100.0, material=ground))
    scene.add(SpherePrimitive(center=(0.0, 0.0, -1.0), radius=0.5, material=center))
    scene.add(SpherePrimitive(center=(-1.0, 0.0, -1.0), radius=0.5, material=left))
    scene.add(SpherePrimitive(center=(-1.0, 0.0, -1.0), radius=-0.45, material=left))
    scene.add(SpherePrimitive(center=(1.0, 0.0, -1.0), radius=0.5, material=right))

    lookfrom = (3.0, 3.0, 2.0)
    lookat = (0.0, 0.0, -1.0)
    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=2.0,
        focus_dist=math.dist(lookfrom, lookat),
    )

    return scene, camera


# Scene names accepted by the command line
SCENES = {
    "random": create_random_scene,
    "three-spheres": create_three_sphere_scene,
}
