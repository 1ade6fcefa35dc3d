"""
Geometric shapes for the ray tracer.

Each shape must implement the Hittable protocol with a `hit` method.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .materials import Material, NullMaterial


@dataclass
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        t: The ray parameter at intersection
        point: The intersection point in world space
        normal: Unit surface normal as computed by the shape. It is not
            flipped to face the ray; materials that care about facing
            derive it themselves.
        material: The material at the hit point, shared with the shape
    """
    t: float
    point: Point3
    normal: Vec3
    material: Material


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test
            t_min: Minimum t value to consider (exclusive)
            t_max: Maximum t value to consider (exclusive)

        Returns:
            HitRecord for the nearest intersection in range, None otherwise
        """
        pass


class Sphere(Hittable):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Material):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Radius of the sphere. A negative radius flips the
                normal inward, which turns the sphere into the inner wall
                of a hollow shell.
            material: Material for shading (may be shared between shapes)
        """
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0.
        With b the half coefficient the discriminant is b² - ac.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant <= 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Near root first, then far root
        for root in ((-half_b - sqrtd) / a, (-half_b + sqrtd) / a):
            if t_min < root < t_max:
                point = ray.at(root)
                return HitRecord(
                    t=root,
                    point=point,
                    normal=(point - self.center) / self.radius,
                    material=self.material
                )

        return None

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class HittableList(Hittable):
    """An ordered collection of hittable objects searched exhaustively.

    Used as the scene aggregate. The background material is never attached
    to a surface; it is what a miss would carry if one were materialized.
    """

    def __init__(self, objects: Optional[Iterable[Hittable]] = None, background: Optional[Material] = None):
        self.objects: list[Hittable] = list(objects) if objects is not None else []
        self.background: Material = background if background is not None else NullMaterial()

    def add(self, obj: Hittable) -> None:
        """Add an object to the list."""
        self.objects.append(obj)

    def clear(self) -> None:
        """Remove all objects."""
        self.objects.clear()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Find the closest intersection among all objects."""
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, closest_t)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)
