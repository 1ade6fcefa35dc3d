"""
Built-in scenes.

Each factory returns a (world, camera) pair ready for `Renderer.render`.
"""

from __future__ import annotations
from typing import Callable, Dict, Tuple

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Sphere, HittableList
from .materials import Lambertian, Metal, Dielectric


def create_demo_scene(aspect_ratio: float = 2.0) -> Tuple[HittableList, Camera]:
    """Three spheres on a large ground sphere, the middle one a glass bubble.

    The bubble is two concentric spheres sharing one dielectric material;
    the inner one has a negative radius so its normals point inward.
    """
    glass = Dielectric(1.5)

    world = HittableList([
        Sphere(Point3(-1.0, 0.0, -1.0), 0.5, Lambertian(Color(0.8, 0.3, 0.3))),
        Sphere(Point3(0.0, -100.5, -1.0), 100.0, Lambertian(Color(0.6, 0.6, 0.6))),
        Sphere(Point3(1.0, 0.0, -1.0), 0.5, Metal(Color(0.8, 0.6, 0.2), 0.1)),
        Sphere(Point3(0.0, 0.0, -1.0), 0.5, glass),
        Sphere(Point3(0.0, 0.0, -1.0), -0.47, glass),
    ])

    look_from = Point3(-1.5, 1.5, 0.75)
    look_at = Point3(0.0, 0.0, -1.0)
    camera = Camera(
        look_from=look_from,
        look_at=look_at,
        vup=Vec3(0, 1, 0),
        vfov=60.0,
        aspect_ratio=aspect_ratio,
        aperture=0.2,
        focus_dist=(look_at - look_from).length()
    )
    return world, camera


def create_ground_scene(aspect_ratio: float = 1.0, albedo: Color = Color(0.5, 0.5, 0.5)) -> Tuple[HittableList, Camera]:
    """A single huge diffuse ground sphere seen from straight above."""
    world = HittableList([
        Sphere(Point3(0.0, -1000.0, 0.0), 1000.0, Lambertian(albedo)),
    ])

    camera = Camera(
        look_from=Point3(0.0, 2.0, 0.0),
        look_at=Point3(0.0, 0.0, 0.0),
        vup=Vec3(0, 0, -1),  # (0, 1, 0) would be parallel to the view direction
        vfov=40.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=2.0
    )
    return world, camera


SCENES: Dict[str, Callable[..., Tuple[HittableList, Camera]]] = {
    'demo': create_demo_scene,
    'ground': create_ground_scene,
}
