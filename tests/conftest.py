"""Shared fixtures for the path tracer tests."""

import random

import pytest

from camera.camera import Camera
from core.vector import Color, Vector3
from geometry.sphere import Sphere
from geometry.world import HittableList
from materials.lambertian import Lambertian


@pytest.fixture
def rng():
    """A seeded generator so sampling-based tests are repeatable."""
    return random.Random(1234)


@pytest.fixture
def empty_world():
    return HittableList()


@pytest.fixture
def simple_world():
    """A diffuse sphere resting on a large diffuse ground sphere."""
    world = HittableList()
    world.add(Sphere(Vector3(0, -100.5, -1), 100, Lambertian(Color(0.5, 0.5, 0.5))))
    world.add(Sphere(Vector3(0, 0, -1), 0.5, Lambertian(Color(0.1, 0.2, 0.5))))
    return world


@pytest.fixture
def small_camera():
    """An 8x4 camera with cheap sampling settings."""
    return Camera(aspect_ratio=2.0, image_width=8, samples_per_pixel=2, max_depth=4)
