"""
prismtrace - A Python Ray Tracing Renderer

Renders scenes of spheres with stochastic recursive ray tracing:
- Thin-lens camera with depth of field
- Diffuse, metal and glass materials
- Multi-threaded rendering with seedable per-row random streams
"""

__version__ = "0.1.0"

from .vec3 import Vec3, Point3, Color, DegenerateVectorError
from .ray import Ray
from .shapes import Sphere, HittableList, HitRecord, Hittable
from .materials import (
    Material, Lambertian, Metal, Dielectric, NullMaterial, ScatterResult,
    reflect, refract, schlick
)
from .camera import Camera
from .renderer import (
    Renderer, RenderSettings, RenderStats, RayCounter,
    ray_color, trace, sky_color, to_ldr, MAX_DEPTH, T_MIN
)
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
from .scenes import create_demo_scene, create_ground_scene, SCENES
