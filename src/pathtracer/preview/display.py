"""Display transforms for rendered images.

The renderer accumulates linear colors. Before an image is shown or written
it is gamma encoded; this renderer uses gamma 2, i.e. a per-channel square
root, which maps 0 to 0 and 1 to 1 and brightens everything in between.

Example:
    >>> from pathtracer.preview.display import gamma_correct
    >>> import numpy as np
    >>> gamma_correct(np.array([[[0.25, 1.0, 0.0]]]))
    array([[[0.5, 1. , 0. ]]])
"""

import numpy as np
import numpy.typing as npt

# Gamma used for all output
DISPLAY_GAMMA = 2.0


def clamp_image(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Clamp every channel to [0, 1]. NaN values are left in place."""
    return np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = DISPLAY_GAMMA,
) -> npt.NDArray[np.float64]:
    """Apply gamma correction for display.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value. The output is ``clamp(image) ** (1 / gamma)``.

    Returns:
        Gamma corrected image in [0, 1].

    Raises:
        ValueError: If gamma is not positive.
    """
    if not gamma > 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    # Clamp before the power so negative values cannot produce NaN
    image = clamp_image(image)
    if gamma == 1.0:
        return image
    return np.power(image, 1.0 / gamma)


def gamma_correct(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Gamma-2 encode a linear image (square root of each clamped channel)."""
    return np.sqrt(clamp_image(image))
