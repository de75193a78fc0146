"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass and the vector algebra used by every
other stage of the renderer. All functions are Taichi functions and can only
be called from within Taichi kernels (or other Taichi functions).

Points and free vectors share the ``vec3`` value type inside kernels. Adding,
subtracting and negating use the ``+``/``-`` operators directly; the helpers
below cover the remaining operations (scaling, division, norms, products,
normalization, reflection).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def example() -> ti.f64:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0).z
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors and points (follows the runtime's default_fp)
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. Every ray built by the renderer
            carries a unit direction; ``t`` values are therefore distances.
    """

    origin: vec3
    direction: vec3


@ti.dataclass
class ScatterRecord:
    """Result of scattering a ray off a material.

    Attributes:
        attenuation: Per-channel fraction of light carried by the scattered
            ray, each component in [0, 1].
        ray: The outgoing ray, starting at the hit point.
    """

    attenuation: vec3
    ray: Ray


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point ``origin + t * direction``.

    Args:
        ray: The ray to evaluate.
        t: The ray parameter. Only ``t >= T_MIN`` is meaningful for hits.

    Returns:
        The point at parameter t.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from an origin and an (already normalized) direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def scale(v: vec3, ratio: ti.f64) -> vec3:
    """Multiply every component of v by ratio."""
    return v * ratio


@ti.func
def divide(v: vec3, d: ti.f64) -> vec3:
    """Divide every component of v by d (d == 0 yields non-finite values)."""
    return v / d


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared Euclidean length of a vector.

    Args:
        v: The input vector.

    Returns:
        ``x*x + y*y + z*z``.
    """
    return v.x * v.x + v.y * v.y + v.z * v.z


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def inner_product(a: vec3, b: vec3) -> ti.f64:
    """Compute the inner (dot) product of two vectors."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross_product(a: vec3, b: vec3) -> vec3:
    """Compute the cross product ``a x b``.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        A vector perpendicular to both inputs (right-handed).
    """
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The input must be non-zero. Normalizing the zero vector divides by zero
    and yields NaN components; callers are responsible for avoiding it.

    Args:
        v: The input vector.

    Returns:
        ``v / length(v)``.
    """
    return v / length(v)


@ti.func
def reflect(direction: vec3, normal: vec3) -> vec3:
    """Reflect a direction about a surface normal.

    Computes ``d - 2 (d . n) n``. For unit inputs the result is a unit
    vector, and reflecting twice about the same normal returns the input.

    Args:
        direction: The incoming direction (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The mirrored direction.
    """
    return direction - 2.0 * inner_product(direction, normal) * normal


@ti.func
def schlick_reflectance(cosine: ti.f64, eta_ratio: ti.f64) -> ti.f64:
    """Approximate Fresnel reflectance with Schlick's polynomial.

    ``R(cos) = R0 + (1 - R0) (1 - cos)^5`` with
    ``R0 = ((1 - eta_ratio) / (1 + eta_ratio))^2``.

    Args:
        cosine: Cosine of the angle between the incoming ray and the normal.
        eta_ratio: Ratio of refractive indices ``eta_in / eta_out``.

    Returns:
        The probability that the ray reflects instead of refracting.
    """
    r0 = (1.0 - eta_ratio) / (1.0 + eta_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_uniform() -> ti.f64:
    """Draw a uniform random value in [0, 1) from the Taichi RNG."""
    return ti.random(ti.f64)


@ti.func
def random_offset() -> ti.f64:
    """Draw a uniform random value in [-0.5, 0.5).

    Used for sub-pixel jitter and as the per-component draw of
    random_unit_vector().
    """
    return ti.random(ti.f64) - 0.5


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector.

    Each component is drawn uniformly from [-0.5, 0.5) and the result is
    normalized. This approximates a uniform direction on the sphere (the
    distribution is biased toward the cube's diagonals).

    Returns:
        A random unit vector.
    """
    v = vec3(random_offset(), random_offset(), random_offset())
    return unit_vector(v)
