"""Unit tests for spheres, hit records and hittable lists."""

import math

import pytest

from core.interval import Interval
from core.ray import Ray
from core.vector import Color, Vector3
from geometry.hittable import HitRecord, Hittable
from geometry.sphere import Sphere
from geometry.world import HittableList
from materials.lambertian import Lambertian

FULL = Interval(0.001, math.inf)


class TestSphere:
    """Tests for ray/sphere intersection."""

    def test_hit_front(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        s = Sphere(Vector3(0, 0, -5), 1.0, mat)
        rec = s.hit(Ray(Vector3(0, 0, 0), Vector3(0, 0, -1)), FULL)
        assert rec is not None
        assert rec.t == pytest.approx(4.0)
        assert rec.p.z == pytest.approx(-4.0)
        assert rec.normal == Vector3(0, 0, 1)
        assert rec.front_face
        assert rec.material is mat

    def test_miss(self):
        s = Sphere(Vector3(0, 0, -5), 1.0, None)
        assert s.hit(Ray(Vector3(0, 0, 0), Vector3(0, 1, 0)), FULL) is None

    def test_hit_from_inside_flips_normal(self):
        s = Sphere(Vector3(0, 0, 0), 2.0, None)
        rec = s.hit(Ray(Vector3(0, 0, 0), Vector3(1, 0, 0)), FULL)
        assert rec.t == pytest.approx(2.0)
        assert not rec.front_face
        assert rec.normal == Vector3(-1, 0, 0)

    def test_respects_interval_upper_bound(self):
        s = Sphere(Vector3(0, 0, -5), 1.0, None)
        assert s.hit(Ray(Vector3(0, 0, 0), Vector3(0, 0, -1)), Interval(0.001, 3.0)) is None

    def test_negative_radius_clamped(self):
        assert Sphere(Vector3(0, 0, 0), -1.0, None).radius == 0.0


class TestHittableList:
    """Tests for the composite scene."""

    def test_empty_list_never_hits(self):
        world = HittableList()
        assert len(world) == 0
        assert world.hit(Ray(Vector3(0, 0, 0), Vector3(0, 0, -1)), FULL) is None

    def test_returns_nearest_hit(self):
        near = Sphere(Vector3(0, 0, -3), 0.5, "near")
        far = Sphere(Vector3(0, 0, -10), 0.5, "far")
        world = HittableList([far, near])
        rec = world.hit(Ray(Vector3(0, 0, 0), Vector3(0, 0, -1)), FULL)
        assert rec.material == "near"
        assert rec.t == pytest.approx(2.5)

    def test_clear(self):
        world = HittableList()
        world.add(Sphere(Vector3(0, 0, -1), 0.5, None))
        world.clear()
        assert len(world) == 0


class TestHittableInterface:
    """Tests for the abstract capability."""

    def test_base_hit_not_implemented(self):
        with pytest.raises(NotImplementedError):
            Hittable().hit(Ray(Vector3(0, 0, 0), Vector3(0, 0, 1)), FULL)

    def test_set_face_normal(self):
        rec = HitRecord()
        rec.set_face_normal(Ray(Vector3(0, 0, 0), Vector3(0, 0, -1)), Vector3(0, 0, -1))
        assert not rec.front_face
        assert rec.normal == Vector3(0, 0, 1)
