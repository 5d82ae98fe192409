# materials/diffuse_light.py
import random
from typing import Optional, Tuple
from core.ray import Ray
from core.vector import Color
from geometry.hittable import HitRecord
from materials.material import Material

class DiffuseLight(Material):
    """
    Emissive material with constant radiance.

    The integrator has no emission term, so a light surface behaves as a
    perfect absorber when rendered.
    """
    def __init__(self, emit: Color):
        self.emit = emit

    def scatter(self, ray_in: Ray, rec: HitRecord, rng=random) -> Optional[Tuple[Ray, Color]]:
        """
        Emissive materials do not scatter rays.
        """
        return None

    def emitted(self) -> Color:
        """
        Emitted radiance, for scene authors. The integrator does not use it.
        """
        return self.emit
