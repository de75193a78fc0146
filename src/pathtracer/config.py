"""Render settings and Taichi runtime initialization.

Modules that declare Taichi fields allocate them at import time, so
init_taichi() has to run before anything under ``pathtracer.core``,
``pathtracer.scene``, ``pathtracer.materials`` or ``pathtracer.camera`` is
imported.

Example:
    >>> from pathtracer.config import RenderConfig, init_taichi
    >>> config = RenderConfig(image_width=400, samples_per_pixel=10, seed=7)
    >>> init_taichi(config)
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>> renderer = ProgressiveRenderer(config.image_width, config.image_height)
"""

import logging
from dataclasses import dataclass

import taichi as ti

logger = logging.getLogger(__name__)

# Taichi backends selectable by name
ARCHS = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}


@dataclass
class RenderConfig:
    """Settings for a single render.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of scatter events per path.
        seed: Seed for the Taichi random number generator.
        arch: Taichi backend name (see ARCHS).
    """

    image_width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 10
    max_depth: int = 50
    seed: int = 0
    arch: str = "cpu"

    @property
    def image_height(self) -> int:
        """Output height in pixels, ``int(image_width / aspect_ratio)``."""
        return int(self.image_width / self.aspect_ratio)

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If any setting is out of range.
        """
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.image_width < 2 or self.image_height < 2:
            raise ValueError(
                f"Image must be at least 2x2 pixels, got {self.image_width}x{self.image_height}"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.arch not in ARCHS:
            raise ValueError(f"Unknown arch {self.arch!r}, expected one of {sorted(ARCHS)}")


def init_taichi(config: RenderConfig | None = None) -> None:
    """Initialize the Taichi runtime in double precision.

    Args:
        config: Render settings supplying the backend and RNG seed. Defaults
            to RenderConfig().

    Raises:
        ValueError: If the config is invalid.
    """
    if config is None:
        config = RenderConfig()
    config.validate()

    ti.init(arch=ARCHS[config.arch], default_fp=ti.f64, random_seed=config.seed)
    logger.debug("Taichi initialized: arch=%s seed=%d", config.arch, config.seed)
