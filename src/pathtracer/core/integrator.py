"""Path tracing integrator for Monte Carlo light transport.

This module implements the main rendering kernel. Each camera ray is followed
through the scene: at every hit the material scatters it, the path's
throughput is multiplied by the attenuation, and the remaining depth drops by
one. A ray that escapes picks up the sky gradient; a path that runs out of
depth contributes black.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Depth-bounded paths with an explicit remaining-depth counter
    - Sky gradient background (white looking straight down to light blue straight up)
    - Progressive per-pixel running mean for antialiasing

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.integrator import render_image, setup_render_target
    >>> from pathtracer.scene.presets import create_diffuse_spheres_scene
    >>> from pathtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_diffuse_spheres_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=10, max_depth=50)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

from pathtracer.camera.pinhole import get_ray_jittered
from pathtracer.core.ray import Ray, ScatterRecord, make_ray, unit_vector, vec3
from pathtracer.materials.dielectric import scatter_dielectric_by_id
from pathtracer.materials.lambertian import scatter_lambertian_by_id
from pathtracer.materials.metal import scatter_metal_by_id
from pathtracer.scene.intersection import intersect_scene
from pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum number of scatter events per path
MAX_DEPTH = 50

# Sky gradient endpoints
BOTTOM_COLOR = vec3(1.0, 1.0, 1.0)
TOP_COLOR = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Smallest supported dimension: pixel coordinates are divided by (size - 1)
MIN_IMAGE_SIZE = 2

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running mean of the samples per pixel, indexed (i, j) with j = 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT to avoid Taichi kernel
    recompilation issues.

    Args:
        width: Image width in pixels, in [2, MAX_IMAGE_WIDTH].
        height: Image height in pixels, in [2, MAX_IMAGE_HEIGHT].

    Raises:
        ValueError: If a dimension is below 2 or exceeds the maximum size.
    """
    if width < MIN_IMAGE_SIZE or height < MIN_IMAGE_SIZE:
        raise ValueError(
            f"Image dimensions ({width}x{height}) must be at least "
            f"{MIN_IMAGE_SIZE}x{MIN_IMAGE_SIZE}"
        )
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_sample_count() -> "ti.ScalarField":
    """Get the per-pixel sample count field.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _sample_count


# =============================================================================
# Background and Material Dispatch
# =============================================================================


@ti.func
def background(direction: vec3) -> vec3:
    """Sky color seen along a unit direction.

    Blends linearly from white (looking straight down) to light blue
    (looking straight up) on the y component of the direction.
    """
    t = 0.5 * (direction.y + 1.0)
    return (1.0 - t) * BOTTOM_COLOR + t * TOP_COLOR


@ti.func
def _scatter_material(
    material_id: ti.i32,
    ray_in: Ray,
    hit_t: ti.f64,
    normal: vec3,
) -> ScatterRecord:
    """Dispatch to the scatter function of the material's variant.

    Args:
        material_id: The unified material ID of the hit sphere.
        ray_in: The incoming ray.
        hit_t: Distance along ray_in to the hit point.
        normal: Outward unit normal at the hit point.

    Returns:
        The ScatterRecord produced by the material. Unknown ids scatter to a
        black attenuation.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    record = ScatterRecord(
        attenuation=vec3(0.0, 0.0, 0.0),
        ray=make_ray(ray_in.origin, ray_in.direction),
    )

    if mat_type == int(MaterialType.LAMBERTIAN):
        record = scatter_lambertian_by_id(type_index, ray_in, hit_t, normal)
    elif mat_type == int(MaterialType.METAL):
        record = scatter_metal_by_id(type_index, ray_in, hit_t, normal)
    elif mat_type == int(MaterialType.DIELECTRIC):
        record = scatter_dielectric_by_id(type_index, ray_in, hit_t, normal)

    return record


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the color carried back along a ray.

    Equivalent to the recursion

        color(ray, depth) = black                                if depth <= 0
                          = background(ray.direction)            if ray misses
                          = attenuation * color(scattered, depth - 1)

    unrolled into a loop that carries the product of attenuations.

    Args:
        ray: The ray to follow (unit direction).
        depth: Remaining number of scatter events allowed.

    Returns:
        The estimated color. Never negative; NaN if a degenerate scatter
        direction was produced along the path.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray.origin
    direction = ray.direction
    remaining = depth
    active = 1

    while active == 1:
        if remaining <= 0:
            # Out of depth: the path contributes black
            active = 0
        else:
            current = make_ray(origin, direction)
            hit_record = intersect_scene(current)

            if hit_record.hit == 0:
                color = throughput * background(direction)
                active = 0
            else:
                scattered = _scatter_material(
                    hit_record.material_id, current, hit_record.t, hit_record.normal
                )
                throughput *= scattered.attenuation
                origin = scattered.ray.origin
                direction = scattered.ray.direction
                remaining -= 1

    return color


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    return ray_color(make_ray(origin, unit_vector(direction)), depth)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Trace a single ray through the current scene.

    Python-callable wrapper around ray_color() for testing and debugging.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (normalized before tracing).
        depth: Maximum number of scatter events.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _trace_ray_kernel(vec3(*origin), vec3(*direction), depth)
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def _accumulate(i: ti.i32, j: ti.i32, color: vec3):
    """Fold one sample into the running mean of pixel (i, j)."""
    _sample_count[i, j] += 1
    n = _sample_count[i, j]
    # avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
    _color_buffer[i, j] += (color - _color_buffer[i, j]) / ti.cast(n, ti.f64)


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Render one jittered sample per pixel and accumulate it."""
    for i, j in ti.ndrange(width, height):
        ray = get_ray_jittered(i, j, width, height)
        _accumulate(i, j, ray_color(ray, max_depth))


@ti.kernel
def _accumulate_constant(width: ti.i32, height: ti.i32, color: vec3):
    for i, j in ti.ndrange(width, height):
        _accumulate(i, j, color)


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32
) -> vec3:
    ray = get_ray_jittered(pixel_i, pixel_j, width, height)
    return ray_color(ray, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_sample(
    pixel_i: int, pixel_j: int, max_depth: int = MAX_DEPTH
) -> tuple[float, float, float]:
    """Render a single jittered sample for a specific pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel. The sample is
    not accumulated.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        max_depth: Maximum number of scatter events.

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, max_depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, max_depth: int = MAX_DEPTH) -> None:
    """Render the image with the specified number of samples per pixel.

    Progressively accumulates samples into the color buffer. Can be called
    multiple times to add more samples.

    Args:
        num_samples: Number of samples to render per pixel.
        max_depth: Maximum number of scatter events per path.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth)


def accumulate_color(color: tuple[float, float, float], num_samples: int = 1) -> None:
    """Fold a fixed color into every active pixel ``num_samples`` times.

    Uses the same running-mean update as render_image(). Handy for checking
    the accumulator and for seeding a buffer with a known image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    for _ in range(num_samples):
        _accumulate_constant(width, height, vec3(*color))


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Returns the sample count from pixel (0, 0), which is the same for all
    pixels after calling render_image().

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_sample_count[0, 0])


def get_normalized_image_numpy() -> npt.NDArray[np.float64]:
    """Get the averaged linear image as a NumPy array.

    The array shape is (height, width, 3), rows ordered top to bottom and
    columns left to right. Values are the running mean of the samples, with
    no gamma applied. Non-finite samples are not scrubbed.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # Buffer row 0 is the bottom of the image
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float64)
