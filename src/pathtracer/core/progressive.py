"""Sample-by-sample rendering on top of the integrator buffers.

ProgressiveRenderer adds, on top of the integrator functions:
- Images that keep improving as more samples are added
- Batch rendering (multiple samples per pixel in one call)
- Progress callbacks and logging
- Gamma-corrected output in top-to-bottom row order

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>> from pathtracer.scene.presets import create_material_spheres_scene
    >>> from pathtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_material_spheres_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 225, max_depth=50)
    >>> renderer.render(10)
    >>> image = renderer.get_image_numpy()
"""

import logging
from collections.abc import Callable, Generator, Iterator

import numpy as np
import numpy.typing as npt

from pathtracer.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_normalized_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from pathtracer.preview.display import gamma_correct as apply_display_gamma

logger = logging.getLogger(__name__)

# Called after every batch with (samples so far, samples targeted)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """Renders an image a few samples per pixel at a time.

    The renderer keeps the image size and path depth, and delegates to the
    global integrator buffers (which are Taichi fields). Only one renderer
    is live at a time.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum number of scatter events per path.
    """

    def __init__(self, width: int, height: int, max_depth: int = MAX_DEPTH) -> None:
        """Allocate the render target for the given size.

        Args:
            width: Image width in pixels (2 to 2048).
            height: Image height in pixels (2 to 2048).
            max_depth: Maximum number of scatter events per path.

        Raises:
            ValueError: If dimensions are out of range or max_depth is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self._width = width
        self._height = height
        self._max_depth = max_depth
        setup_render_target(width, height)
        logger.debug("Render target %dx%d, max depth %d", width, height, max_depth)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def sample_count(self) -> int:
        """Samples averaged into each pixel so far."""
        return get_total_samples()

    def reset(self) -> None:
        """Reset the accumulator without changing the image dimensions."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Switch to a new image size, dropping all samples.

        Raises:
            ValueError: If dimensions are out of range.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Add samples to every pixel, reporting progress through a callback.

        New samples are averaged into whatever the buffer already holds, so
        repeated calls keep refining the same image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Add samples to every pixel, yielding after each batch.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self._max_depth)
            remaining -= batch
            logger.info(
                "Samples per pixel: %d/%d (%d remaining)",
                self.sample_count,
                target_samples,
                remaining,
            )
            yield (self.sample_count, target_samples)

        logger.info("Done.")

    def get_image_numpy(self, gamma_correct: bool = True) -> npt.NDArray[np.float64]:
        """Copy the averaged image out as a NumPy array.

        Args:
            gamma_correct: Apply gamma 2 (per-channel square root, clamped
                to [0, 1]). When False the averaged linear colors are
                returned unchanged.

        Returns:
            Array of shape (height, width, 3), rows top to bottom.
        """
        image = get_normalized_image_numpy()
        if gamma_correct:
            image = apply_display_gamma(image)
        return image

    def iter_pixels(self) -> Iterator[tuple[float, float, float]]:
        """Yield gamma-corrected pixel colors, rows top to bottom, left to right."""
        image = self.get_image_numpy(gamma_correct=True)
        for row in image:
            for pixel in row:
                yield (float(pixel[0]), float(pixel[1]), float(pixel[2]))

    def save_image(self, filepath: str) -> None:
        """Save the rendered image as an 8-bit PNG."""
        from pathtracer.preview.export import save_png

        save_png(self, filepath)

    def __repr__(self) -> str:
        """Show size, depth and sample count."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, samples={self.sample_count})"
        )
