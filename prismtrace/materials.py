"""
Materials system.

Implements:
- Lambertian diffuse
- Metal (specular reflection with roughness)
- Dielectric (glass, water - with refraction)
- Null material (absorbs everything, used as a placeholder)

Materials hold only their physical parameters and are never mutated, so one
instance can be shared by any number of shapes and render threads.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING
import math
import numpy as np

from .vec3 import Vec3, Color
from .ray import Ray

if TYPE_CHECKING:
    from .shapes import HitRecord


GLASS_TRANSMITTANCE = Color(0.95, 0.95, 0.95)


def reflect(v: Vec3, n: Vec3) -> Vec3:
    """Mirror v around the normal n."""
    return v - n * (2 * v.dot(n))


def refract(v: Vec3, n: Vec3, ni_over_nt: float) -> Optional[Vec3]:
    """Bend v through a surface with normal n using Snell's law.

    Args:
        v: Incoming direction (any length)
        n: Unit normal on the incoming side of the surface
        ni_over_nt: Ratio of refractive indices (incident / transmitted)

    Returns:
        Refracted direction, or None on total internal reflection
    """
    uv = v.normalize()
    dt = uv.dot(n)
    discriminant = 1.0 - ni_over_nt * ni_over_nt * (1.0 - dt * dt)
    if discriminant < 0:
        return None
    return (uv - n * dt) * ni_over_nt - n * math.sqrt(discriminant)


def schlick(cosine: float, ior: float) -> float:
    """Schlick's approximation for reflectance."""
    r0 = (1 - ior) / (1 + ior)
    r0 = r0 * r0
    return r0 + (1 - r0) * pow(1 - cosine, 5)


@dataclass
class ScatterResult:
    """Result of a material scatter operation."""
    attenuation: Color
    scattered_ray: Ray


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            hit: The intersection being shaded
            rng: Random stream owned by the calling render task

        Returns:
            ScatterResult if ray scatters, None if absorbed
        """
        pass


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Color):
        """Create a Lambertian material.

        Args:
            albedo: The base color (RGB, each component 0-1)
        """
        self.albedo = albedo

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        scatter_direction = hit.normal + Vec3.random_in_unit_sphere(rng)

        # Catch degenerate scatter direction
        if scatter_direction.near_zero():
            scatter_direction = hit.normal

        return ScatterResult(
            attenuation=self.albedo,
            scattered_ray=Ray(hit.point, scatter_direction)
        )

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo})"


class Metal(Material):
    """Metallic material with specular reflection."""

    def __init__(self, albedo: Color, roughness: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color
            roughness: Radius of the random perturbation added to the
                mirror direction (0 = perfect mirror)
        """
        self.albedo = albedo
        self.roughness = roughness

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        reflected = reflect(ray_in.direction.normalize(), hit.normal)
        if self.roughness > 0:
            reflected = reflected + Vec3.random_in_unit_sphere(rng) * self.roughness

        # Perturbed rays that dip below the surface are absorbed
        if reflected.dot(hit.normal) <= 0:
            return None

        return ScatterResult(
            attenuation=self.albedo,
            scattered_ray=Ray(hit.point, reflected)
        )

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo}, roughness={self.roughness})"


class Dielectric(Material):
    """Dielectric (glass-like) material that reflects or refracts."""

    def __init__(self, ior: float = 1.5):
        """Create a dielectric material.

        Args:
            ior: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        self.ior = ior

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        direction = ray_in.direction
        incidence = direction.dot(hit.normal)

        if incidence > 0:
            # Leaving the medium
            outward_normal = -hit.normal
            ni_over_nt = self.ior
            cosine = self.ior * incidence / direction.length()
        else:
            outward_normal = hit.normal
            ni_over_nt = 1.0 / self.ior
            cosine = -incidence / direction.length()

        refracted = refract(direction, outward_normal, ni_over_nt)
        reflect_prob = schlick(cosine, self.ior) if refracted is not None else 1.0

        if rng.random() < reflect_prob:
            scattered = Ray(hit.point, reflect(direction, hit.normal))
        else:
            scattered = Ray(hit.point, refracted)

        return ScatterResult(attenuation=GLASS_TRANSMITTANCE, scattered_ray=scattered)

    def __repr__(self) -> str:
        return f"Dielectric(ior={self.ior})"


class NullMaterial(Material):
    """Material that never scatters. Placeholder for 'no surface'."""

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        return None

    def __repr__(self) -> str:
        return "NullMaterial()"
