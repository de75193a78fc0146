"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Spheres are the only supported shape. Intersection routines are Taichi
functions (@ti.func) so they can run inside the parallel render kernels.

Ray-object intersection follows the pattern:
    record = hit_sphere(ray, sphere, t_min)
"""

from .sphere import T_MIN, HitRecord, Sphere, hit_sphere, make_sphere

__all__ = [
    "T_MIN",
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
]
