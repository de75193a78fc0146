"""Preview module for image output.

Components:
    display: Gamma encoding of linear images
    export: PPM and PNG writers, 8-bit quantization, image comparison

Example:
    >>> from pathtracer.preview import save_png, write_ppm
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(10)
    >>> save_png(renderer, "output.png")
    >>> write_ppm(renderer.get_image_numpy(), "output.ppm")
"""

from pathtracer.preview.display import (
    DISPLAY_GAMMA,
    apply_gamma,
    clamp_image,
    gamma_correct,
)
from pathtracer.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
    write_ppm,
)

__all__ = [
    # Display transforms
    "DISPLAY_GAMMA",
    "apply_gamma",
    "clamp_image",
    "gamma_correct",
    # Export functions
    "save_png",
    "save_png_from_array",
    "write_ppm",
    "image_to_uint8",
    "compute_rmse",
]
