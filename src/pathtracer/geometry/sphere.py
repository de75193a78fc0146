"""Sphere primitive with ray-sphere intersection.

The intersection solves ``|O + t d - C|^2 = r^2`` for a ray with unit
direction ``d``. With ``v = O - C`` the quadratic reduces to

    t^2 + 2 b_half t + c = 0,   b_half = v . d,   c = |v|^2 - r^2

whose quarter discriminant is ``b_half^2 - c``. The near root is preferred;
the far root is used when the near one lies behind ``t_min`` (the ray starts
inside the sphere, or on its surface after a scatter).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere, T_MIN
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from pathtracer.core.ray import Ray, inner_product, length_squared, ray_at, unit_vector, vec3

# Minimum accepted hit distance. Scattered rays start exactly on a surface;
# anything closer than this is treated as self-intersection (shadow acne).
T_MIN = 0.01


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
    """

    center: vec3
    radius: ti.f64


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 otherwise.
        t: Distance along the ray to the intersection. Only valid if hit == 1.
        normal: Outward unit normal at the intersection (from the center
            toward the hit point). It is not flipped for rays travelling
            inside the sphere; materials that care (dielectrics) handle the
            orientation themselves. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f64
    normal: vec3


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f64) -> HitRecord:
    """Test a ray against a sphere.

    Accepts the smallest root that is ``>= t_min``. A zero quarter
    discriminant (the ray is exactly tangent to the sphere) is treated as a
    miss.

    Args:
        ray: The ray to test (unit direction).
        sphere: The sphere to test against.
        t_min: Minimum accepted distance.

    Returns:
        A HitRecord. Check ``hit`` before reading ``t`` and ``normal``.
    """
    v = ray.origin - sphere.center
    b_half = inner_product(v, ray.direction)
    c = length_squared(v) - sphere.radius * sphere.radius
    discriminant_quarter = b_half * b_half - c

    # Taichi requires outer-scope declaration of branch results
    did_hit = 0
    hit_t = 0.0
    hit_normal = vec3(0.0, 0.0, 0.0)

    if discriminant_quarter > 0.0:
        sqrt_dq = ti.sqrt(discriminant_quarter)
        t_near = -b_half - sqrt_dq
        t_far = -b_half + sqrt_dq

        if t_near >= t_min:
            did_hit = 1
            hit_t = t_near
        elif t_far >= t_min:
            did_hit = 1
            hit_t = t_far

        if did_hit == 1:
            hit_normal = unit_vector(ray_at(ray, hit_t) - sphere.center)

    return HitRecord(hit=did_hit, t=hit_t, normal=hit_normal)


@ti.func
def make_sphere(center: vec3, radius: ti.f64) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
