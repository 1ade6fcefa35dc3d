"""Tests for material system."""

import pytest
import math
import numpy as np

from prismtrace.vec3 import Vec3, Point3, Color
from prismtrace.ray import Ray
from prismtrace.shapes import HitRecord
from prismtrace.materials import (
    Lambertian, Metal, Dielectric, NullMaterial, ScatterResult,
    reflect, refract, schlick, GLASS_TRANSMITTANCE
)


@pytest.fixture
def rng():
    return np.random.default_rng(2024)


def make_hit(material, point=Point3(0, 0, 0), normal=Vec3(0, 1, 0), t=1.0):
    return HitRecord(t=t, point=point, normal=normal, material=material)


class TestReflectRefract:
    """Test the free-standing optics helpers."""

    def test_reflect(self):
        reflected = reflect(Vec3(1, -1, 0), Vec3(0, 1, 0))
        assert reflected == Vec3(1, 1, 0)

    def test_reflect_ignores_normal_sign(self):
        v = Vec3(0.3, -0.8, 0.2)
        assert reflect(v, Vec3(0, 1, 0)) == reflect(v, Vec3(0, -1, 0))

    def test_refract_straight_through(self):
        refracted = refract(Vec3(0, -2, 0), Vec3(0, 1, 0), 1.0 / 1.5)
        assert refracted == Vec3(0, -1, 0)

    def test_refract_bends_towards_normal(self):
        incoming = Vec3(1, -1, 0).normalize()
        refracted = refract(incoming, Vec3(0, 1, 0), 1.0 / 1.5)
        # sin(theta_t) = sin(45°) / 1.5
        assert abs(refracted.x - math.sin(math.radians(45)) / 1.5) < 1e-12
        assert refracted.y < 0

    def test_total_internal_reflection(self):
        incoming = Vec3(0.9, -0.1, 0)
        assert refract(incoming, Vec3(0, 1, 0), 1.5) is None

    def test_schlick_at_normal_incidence(self):
        for ior in (1.0, 1.33, 1.5, 2.4):
            r0 = (1 - ior) / (1 + ior)
            r0 = r0 * r0
            assert schlick(1.0, ior) == r0

    def test_schlick_at_grazing_angle(self):
        assert abs(schlick(0.0, 1.5) - 1.0) < 1e-12


class TestLambertian:
    """Test Lambertian diffuse material."""

    def test_scatter_always_succeeds(self, rng):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        hit = make_hit(mat)

        for _ in range(100):
            assert mat.scatter(ray_in, hit, rng) is not None

    def test_scatter_target_inside_unit_sphere_above_hit(self, rng):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        hit = make_hit(mat, point=Point3(2, 0, 0))

        for _ in range(100):
            result = mat.scatter(ray_in, hit, rng)
            assert result.scattered_ray.origin == hit.point
            # direction = normal + point in unit sphere
            assert (result.scattered_ray.direction - hit.normal).length() < 1.0
            assert result.scattered_ray.direction.dot(hit.normal) > 0

    def test_attenuation_matches_albedo(self, rng):
        albedo = Color(0.8, 0.2, 0.3)
        mat = Lambertian(albedo)
        result = mat.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit(mat), rng)
        assert isinstance(result, ScatterResult)
        assert result.attenuation == albedo


class TestMetal:
    """Test Metal material."""

    def test_perfect_reflection(self, rng):
        mat = Metal(Color(1, 1, 1), roughness=0.0)
        ray_in = Ray(Point3(0, 0, 0), Vec3(1, -1, 0))
        result = mat.scatter(ray_in, make_hit(mat, point=Point3(1, -1, 0)), rng)

        assert result is not None
        assert result.scattered_ray.origin == Point3(1, -1, 0)
        assert result.scattered_ray.direction == Vec3(1, 1, 0).normalize()

    def test_attenuation_matches_albedo(self, rng):
        albedo = Color(0.8, 0.6, 0.2)
        mat = Metal(albedo, 0.0)
        result = mat.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit(mat), rng)
        assert result.attenuation == albedo

    def test_rough_metal_adds_fuzz(self, rng):
        mat = Metal(Color(1, 1, 1), roughness=0.5)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        hit = make_hit(mat)

        directions = []
        for _ in range(50):
            result = mat.scatter(ray_in, hit, rng)
            if result:
                directions.append(result.scattered_ray.direction)
                # Perturbation is bounded by the roughness
                assert (result.scattered_ray.direction - Vec3(0, 1, 0)).length() < 0.5

        assert len(directions) > 1
        assert any(d != directions[0] for d in directions[1:])

    def test_rejects_scatter_below_surface(self, rng):
        mat = Metal(Color(1, 1, 1), roughness=1.0)
        ray_in = Ray(Point3(0, 0, 0), Vec3(1, -0.05, 0))
        hit = make_hit(mat)

        successes = failures = 0
        for _ in range(300):
            result = mat.scatter(ray_in, hit, rng)
            if result is None:
                failures += 1
            else:
                successes += 1
                assert result.scattered_ray.direction.dot(hit.normal) > 0

        assert successes > 0
        assert failures > 0

    def test_grazing_mirror_is_absorbed(self, rng):
        # Reflection of a ray parallel to the surface has zero normal component
        mat = Metal(Color(1, 1, 1), roughness=0.0)
        result = mat.scatter(Ray(Point3(-1, 0, 0), Vec3(1, 0, 0)), make_hit(mat), rng)
        assert result is None


class TestDielectric:
    """Test Dielectric (glass) material."""

    def test_always_scatters(self, rng):
        mat = Dielectric(1.5)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0.3, -1, 0))
        hit = make_hit(mat)
        for _ in range(100):
            assert mat.scatter(ray_in, hit, rng) is not None

    def test_attenuation_is_near_white(self, rng):
        mat = Dielectric(1.5)
        result = mat.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit(mat), rng)
        assert result.attenuation == GLASS_TRANSMITTANCE
        assert result.attenuation == Color(0.95, 0.95, 0.95)

    def test_mostly_refracts_at_normal_incidence(self, rng):
        mat = Dielectric(1.5)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        hit = make_hit(mat)

        refracted = 0
        trials = 400
        for _ in range(trials):
            result = mat.scatter(ray_in, hit, rng)
            if result.scattered_ray.direction.y < 0:
                refracted += 1

        # Schlick gives 4% reflectance head-on
        assert refracted / trials > 0.85

    def test_entering_refracts_towards_normal(self, rng):
        mat = Dielectric(1.5)
        incoming = Vec3(1, -1, 0).normalize()
        hit = make_hit(mat)

        for _ in range(100):
            d = mat.scatter(Ray(Point3(-1, 1, 0), incoming), hit, rng).scattered_ray.direction
            if d.y < 0:
                sin_t = d.x / d.length()
                assert abs(sin_t - math.sin(math.radians(45)) / 1.5) < 1e-9

    def test_total_internal_reflection_always_reflects(self, rng):
        mat = Dielectric(1.5)
        # Leaving the glass: the ray travels along the stored normal direction
        incoming = Vec3(0.9, 0.1, 0)
        hit = make_hit(mat)

        for _ in range(100):
            result = mat.scatter(Ray(Point3(-0.9, -0.1, 0), incoming), hit, rng)
            assert result.scattered_ray.direction == reflect(incoming, hit.normal)

    def test_exit_refraction_bends_away_from_normal(self, rng):
        mat = Dielectric(1.5)
        incoming = Vec3(0.2, 1, 0).normalize()
        hit = make_hit(mat)

        refracted = [
            d for d in (
                mat.scatter(Ray(Point3(0, -1, 0), incoming), hit, rng).scattered_ray.direction
                for _ in range(100)
            )
            if d.y > 0
        ]
        assert refracted
        for d in refracted:
            assert d.x / d.length() > incoming.x


class TestNullMaterial:
    """Test the absorbing placeholder material."""

    def test_never_scatters(self, rng):
        mat = NullMaterial()
        for direction in (Vec3(0, -1, 0), Vec3(1, 1, 1), Vec3(0, 1, 0)):
            assert mat.scatter(Ray(Point3(0, 1, 0), direction), make_hit(mat), rng) is None
