# camera/camera.py
import logging
import math
import random
from dataclasses import dataclass
from typing import Optional

import numpy as np

from core.vector import Vector3, Color
from core.ray import Ray
from core.interval import Interval
from core.utils import degrees_to_radians, random_in_unit_disk

logger = logging.getLogger(__name__)

# Lower bound of valid hit distances; keeps scattered rays off their own surface.
SHADOW_EPSILON = 0.001

WHITE = Color(1.0, 1.0, 1.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)
BLACK = Color(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class CameraState:
    """Values derived from the camera configuration by Camera.initialize().

    The state is read-only once built; every render worker reads the same
    instance without locking.
    """

    image_width: int
    image_height: int
    samples_per_pixel: int
    max_depth: int
    pixel_samples_scale: float
    center: Vector3
    pixel00_loc: Vector3
    pixel_delta_u: Vector3
    pixel_delta_v: Vector3
    u: Vector3
    v: Vector3
    w: Vector3
    defocus_angle: float
    defocus_disk_u: Vector3
    defocus_disk_v: Vector3


class Camera:
    """
    A positionable thin-lens camera.

    Set the configuration attributes, then call initialize() (render() does
    this for you) before generating rays.
    """
    def __init__(self, aspect_ratio: float = 1.0, image_width: int = 100,
                 samples_per_pixel: int = 10, max_depth: int = 10,
                 vfov: float = 90.0,
                 lookfrom: Vector3 = None, lookat: Vector3 = None, vup: Vector3 = None,
                 defocus_angle: float = 0.0, focus_dist: float = 10.0):
        self.aspect_ratio = aspect_ratio
        self.image_width = image_width
        self.samples_per_pixel = samples_per_pixel
        self.max_depth = max_depth

        self.vfov = vfov  # Vertical view angle in degrees
        self.lookfrom = lookfrom if lookfrom is not None else Vector3(0, 0, 0)
        self.lookat = lookat if lookat is not None else Vector3(0, 0, -1)
        self.vup = vup if vup is not None else Vector3(0, 1, 0)

        self.defocus_angle = defocus_angle  # Variation angle of rays through each pixel
        self.focus_dist = focus_dist  # Distance from lookfrom to the plane of perfect focus

        self.state: Optional[CameraState] = None

    def initialize(self) -> CameraState:
        """Compute the derived state from the current configuration.

        Degenerate values are clamped rather than rejected: image width and
        samples per pixel are floored to 1, max depth to 0.
        """
        image_width = int(self.image_width)
        if image_width < 1:
            logger.warning("image_width %s clamped to 1", self.image_width)
            image_width = 1
        samples_per_pixel = int(self.samples_per_pixel)
        if samples_per_pixel < 1:
            logger.warning("samples_per_pixel %s clamped to 1", self.samples_per_pixel)
            samples_per_pixel = 1
        max_depth = int(self.max_depth)
        if max_depth < 0:
            logger.warning("max_depth %s clamped to 0", self.max_depth)
            max_depth = 0

        image_height = max(1, int(image_width / self.aspect_ratio))
        center = self.lookfrom

        # Viewport dimensions
        theta = degrees_to_radians(self.vfov)
        h = math.tan(theta / 2)
        viewport_height = 2 * h * self.focus_dist
        viewport_width = viewport_height * (image_width / image_height)

        # Unit basis vectors for the camera coordinate frame
        w = (self.lookfrom - self.lookat).normalize()
        u = self.vup.cross(w).normalize()
        v = w.cross(u)

        # Vectors across the horizontal and down the vertical viewport edges
        viewport_u = u * viewport_width
        viewport_v = -v * viewport_height

        pixel_delta_u = viewport_u / image_width
        pixel_delta_v = viewport_v / image_height

        viewport_upper_left = center - w * self.focus_dist - viewport_u / 2 - viewport_v / 2
        pixel00_loc = viewport_upper_left + (pixel_delta_u + pixel_delta_v) * 0.5

        defocus_radius = self.focus_dist * math.tan(degrees_to_radians(self.defocus_angle / 2))

        self.state = CameraState(
            image_width=image_width,
            image_height=image_height,
            samples_per_pixel=samples_per_pixel,
            max_depth=max_depth,
            pixel_samples_scale=1.0 / samples_per_pixel,
            center=center,
            pixel00_loc=pixel00_loc,
            pixel_delta_u=pixel_delta_u,
            pixel_delta_v=pixel_delta_v,
            u=u,
            v=v,
            w=w,
            defocus_angle=self.defocus_angle,
            defocus_disk_u=u * defocus_radius,
            defocus_disk_v=v * defocus_radius,
        )
        return self.state

    def _require_state(self) -> CameraState:
        if self.state is None:
            raise RuntimeError("Camera.initialize() must be called before rendering.")
        return self.state

    def get_ray(self, i: int, j: int, rng=random) -> Ray:
        """
        Constructs a camera ray originating from the defocus disk and directed
        at a randomly sampled point around pixel (i, j).
        """
        state = self._require_state()
        offset_x = rng.random() - 0.5
        offset_y = rng.random() - 0.5
        pixel_sample = (state.pixel00_loc
                        + state.pixel_delta_u * (i + offset_x)
                        + state.pixel_delta_v * (j + offset_y))

        if state.defocus_angle <= 0:
            ray_origin = state.center
        else:
            ray_origin = self.defocus_disk_sample(rng)
        return Ray(ray_origin, pixel_sample - ray_origin)

    def defocus_disk_sample(self, rng=random) -> Vector3:
        """Returns a random point on the camera defocus disk."""
        state = self._require_state()
        p = random_in_unit_disk(rng)
        return state.center + state.defocus_disk_u * p.x + state.defocus_disk_v * p.y

    def ray_color(self, ray: Ray, depth: int, world, rng=random) -> Color:
        # Path truncated: no more light is gathered.
        if depth <= 0:
            return BLACK

        rec = world.hit(ray, Interval(SHADOW_EPSILON, math.inf))
        if rec is not None:
            result = rec.material.scatter(ray, rec, rng)
            if result is None:
                return BLACK
            scattered, attenuation = result
            return attenuation * self.ray_color(scattered, depth - 1, world, rng)

        return background(ray)

    def render_chunk(self, world, start_row: int, end_row: int, rng=random) -> np.ndarray:
        """
        Renders rows [start_row, end_row) and returns the unscaled per-pixel
        sums as an array of shape (end_row - start_row, image_width, 3).
        """
        state = self._require_state()
        width = state.image_width
        output = np.zeros((max(0, end_row - start_row), width, 3), dtype=np.float64)
        for j in range(start_row, end_row):
            logger.debug("Remaining scanlines: %d", end_row - j)
            row = output[j - start_row]
            for i in range(width):
                pixel_color = Color(0, 0, 0)
                for _ in range(state.samples_per_pixel):
                    r = self.get_ray(i, j, rng)
                    pixel_color = pixel_color + self.ray_color(r, state.max_depth, world, rng)
                row[i] = (pixel_color.x, pixel_color.y, pixel_color.z)
        return output

    def render(self, world, num_threads: int = 1, backend: str = "process",
               seed: Optional[int] = None) -> np.ndarray:
        """Render the whole image with the tiled scheduler.

        Returns the averaged linear image, shape (image_height, image_width, 3).
        """
        from renderer.scheduler import TiledRenderer

        return TiledRenderer(self, worker_count=num_threads, backend=backend, seed=seed).render(world)


def background(ray: Ray) -> Color:
    """Vertical white-to-sky-blue gradient seen by rays that escape the scene."""
    unit_direction = ray.direction.normalize()
    a = 0.5 * (unit_direction.y + 1.0)
    return WHITE * (1.0 - a) + SKY_BLUE * a
