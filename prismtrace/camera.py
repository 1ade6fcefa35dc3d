"""
Thin-lens camera.

Rays leave a disk-shaped lens around the eye point and pass through a
viewport placed on the focus plane, so objects at the focus distance are
sharp and everything else is blurred in proportion to the aperture.
"""

from __future__ import annotations
import math
import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """Look-at camera with a vertical field of view and depth of field.

    All fields are fixed at construction, so one camera can be shared by
    every render thread.

    Attributes:
        origin: Eye point, the center of the lens
        u: Unit vector pointing right in image space
        v: Unit vector pointing up in image space
        w: Unit vector pointing from the scene back towards the eye
        horizontal: Full viewport width vector on the focus plane
        vertical: Full viewport height vector on the focus plane
        lower_left_corner: Bottom-left viewport corner on the focus plane
        lens_radius: Half the aperture; zero makes a pinhole camera
    """

    def __init__(
        self,
        look_from: Point3,
        look_at: Point3,
        vup: Vec3 = Vec3(0, 1, 0),
        vfov: float = 90.0,
        aspect_ratio: float = 16.0 / 9.0,
        aperture: float = 0.0,
        focus_dist: float = 1.0
    ):
        """
        Args:
            look_from: Eye position
            look_at: Point the view direction aims at
            vup: World up hint, must not be parallel to the view direction
            vfov: Vertical field of view in degrees
            aspect_ratio: Image width over image height
            aperture: Lens diameter (0 for a pinhole)
            focus_dist: Distance from the eye to the plane in focus

        Raises:
            DegenerateVectorError: If look_from equals look_at or vup is
                parallel to the view direction
        """
        self.origin = look_from
        self.w = (look_from - look_at).normalize()
        self.u = vup.cross(self.w).normalize()
        self.v = self.w.cross(self.u)

        half_height = math.tan(math.radians(vfov) / 2) * focus_dist
        half_width = aspect_ratio * half_height

        self.horizontal = self.u * (2.0 * half_width)
        self.vertical = self.v * (2.0 * half_height)
        focus_center = look_from - self.w * focus_dist
        self.lower_left_corner = focus_center - self.u * half_width - self.v * half_height

        self.lens_radius = aperture / 2

    @property
    def right(self) -> Vec3:
        return self.u

    @property
    def up(self) -> Vec3:
        return self.v

    def get_ray(self, s: float, t: float, rng: np.random.Generator) -> Ray:
        """Ray through viewport coordinates (s, t).

        Args:
            s: Fraction of the viewport width, 0 at the left edge
            t: Fraction of the viewport height, 0 at the bottom edge
            rng: Random stream for the lens sample

        Returns:
            A ray from a point on the lens towards the matching point on the
            focus plane. The direction is not normalized.
        """
        target = self.lower_left_corner + self.horizontal * s + self.vertical * t

        if self.lens_radius <= 0:
            return Ray(self.origin, target - self.origin)

        lens_x, lens_y, _ = Vec3.random_in_unit_disk(rng) * self.lens_radius
        eye = self.origin + self.u * lens_x + self.v * lens_y
        return Ray(eye, target - eye)

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, w={self.w}, lens_radius={self.lens_radius})"
