"""Image export utilities for rendered images.

Supported formats:
    - PPM (plain-text ``P3``), written to a path or any text stream
    - PNG (8-bit via Pillow)

Both writers take gamma-corrected images with rows ordered top to bottom.
Channels are quantized as ``int(255.999 * c)`` after clamping to [0, 1];
NaN channels are written as 0.

Example:
    >>> import sys
    >>> from pathtracer.preview.export import write_ppm
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(10)
    >>> write_ppm(renderer.get_image_numpy(), sys.stdout)
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtracer.preview.display import clamp_image

if TYPE_CHECKING:
    from pathtracer.core.progressive import ProgressiveRenderer

logger = logging.getLogger(__name__)

# Largest channel value in the output formats
MAX_CHANNEL_VALUE = 255

# Scale that maps [0, 1) onto 0..255 with 1.0 landing on 255
QUANTIZE_SCALE = 255.999


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Quantize a display-ready image to 8 bits per channel.

    Args:
        image: Gamma-corrected image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    clamped = np.nan_to_num(clamp_image(image), nan=0.0)
    # Truncation toward zero matches int() on non-negative values
    return (clamped * QUANTIZE_SCALE).astype(np.uint8)


def _write_ppm_stream(pixels: npt.NDArray[np.uint8], stream: TextIO) -> None:
    height, width, _ = pixels.shape
    stream.write("P3\n")
    stream.write(f"{width} {height}\n")
    stream.write(f"{MAX_CHANNEL_VALUE}\n")
    for row in pixels:
        for r, g, b in row:
            stream.write(f"{r} {g} {b}\n")


def write_ppm(image: npt.NDArray[np.floating], output: str | os.PathLike | TextIO) -> None:
    """Write an image as plain-text PPM (P3).

    The output is the header ``P3``, ``<width> <height>`` and ``255``, each on
    its own line, followed by one ``r g b`` line per pixel, rows top to
    bottom and left to right within a row.

    Args:
        image: Gamma-corrected image array of shape (H, W, 3).
        output: A file path, or an open text stream such as sys.stdout.
    """
    pixels = image_to_uint8(image)
    if hasattr(output, "write"):
        _write_ppm_stream(pixels, output)
    else:
        with open(output, "w", encoding="ascii") as stream:
            _write_ppm_stream(pixels, stream)
        logger.info("Wrote %dx%d PPM to %s", pixels.shape[1], pixels.shape[0], output)


def save_png_from_array(image: npt.NDArray[np.floating], filepath: str | os.PathLike) -> None:
    """Save a gamma-corrected image array as an 8-bit PNG file.

    Args:
        image: Gamma-corrected image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
    """
    image_uint8 = image_to_uint8(image)
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)
    logger.info("Wrote %dx%d PNG to %s", image_uint8.shape[1], image_uint8.shape[0], filepath)


def save_png(renderer: ProgressiveRenderer, filepath: str | os.PathLike) -> None:
    """Save the renderer's gamma-corrected image as a PNG file.

    Example:
        >>> renderer = ProgressiveRenderer(400, 225)
        >>> renderer.render(10)
        >>> save_png(renderer, "output.png")
    """
    save_png_from_array(renderer.get_image_numpy(gamma_correct=True), filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
