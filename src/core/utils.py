# core/utils.py
import math
import random
from typing import Optional
from core.vector import Vector3

# Every sampling helper draws from the generator it is handed, so that each
# render worker can own an independently seeded random.Random.

def degrees_to_radians(degrees: float) -> float:
    return degrees * math.pi / 180.0

def random_double(rng=random, lo: float = 0.0, hi: float = 1.0) -> float:
    """
    Returns a random real in [lo, hi).
    """
    return lo + (hi - lo) * rng.random()

def random_in_unit_sphere(rng=random) -> Vector3:
    """
    Returns a random point inside a unit sphere.
    """
    while True:
        p = Vector3(rng.uniform(-1, 1),
                    rng.uniform(-1, 1),
                    rng.uniform(-1, 1))
        if p.length_squared() < 1.0:
            return p

def random_unit_vector(rng=random) -> Vector3:
    """
    Returns a random unit vector (uniformly distributed over the sphere).
    """
    while True:
        p = random_in_unit_sphere(rng)
        if p.length_squared() > 1e-160:
            return p.normalize()

def random_in_unit_disk(rng=random) -> Vector3:
    """
    Returns a random point strictly inside the unit disk on the z = 0 plane.
    """
    while True:
        p = Vector3(rng.uniform(-1, 1), rng.uniform(-1, 1), 0)
        if p.length_squared() < 1.0:
            return p

def reflect(v: Vector3, n: Vector3) -> Vector3:
    """
    Reflects vector v about the normal n.
    """
    return v - n * 2 * v.dot(n)

def refract(uv: Vector3, n: Vector3, etai_over_etat: float) -> Vector3:
    """
    Refracts the unit vector uv through a surface with unit normal n.
    """
    cos_theta = min(-uv.dot(n), 1.0)
    r_out_perp = (uv + n * cos_theta) * etai_over_etat
    r_out_parallel = n * (-math.sqrt(abs(1.0 - r_out_perp.length_squared())))
    return r_out_perp + r_out_parallel

def schlick(cosine: float, ref_idx: float) -> float:
    """
    Schlick's approximation for reflectance.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * math.pow((1.0 - cosine), 5)

def make_rng(seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)
