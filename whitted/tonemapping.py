"""
Tone mapping for HDR to LDR conversion.

The renderer accumulates linear floating-point radiance. Before encoding
it is scaled by the scene exposure, gamma corrected and clamped:

    channel = clamp((channel * exposure) ** (1 / gamma), 0, 1)
"""

from __future__ import annotations

import numpy as np


class ExposureToneMapper:
    """Exposure scaling followed by gamma correction."""

    def __init__(self, exposure: float = 1.0, gamma: float = 2.2):
        """Initialize exposure tone mapper.

        Args:
            exposure: Linear multiplier applied to radiance
            gamma: Gamma value for correction (2.2 for sRGB)
        """
        self.exposure = exposure
        self.gamma = gamma

    def apply(self, hdr_image: np.ndarray) -> np.ndarray:
        """Apply exposure and gamma correction.

        Args:
            hdr_image: HDR image (H, W, 3), linear float values

        Returns:
            LDR image (H, W, 3), values in [0, 1]
        """
        exposed = hdr_image * self.exposure

        # Negative radiance has no meaningful gamma curve
        result = np.power(np.maximum(exposed, 0.0), 1.0 / self.gamma)

        return np.clip(result, 0.0, 1.0)


def to_8bit(ldr_image: np.ndarray) -> np.ndarray:
    """Quantize an LDR image in [0, 1] to 8 bits per channel (rounding)."""
    return np.clip(np.rint(ldr_image * 255.0), 0, 255).astype(np.uint8)


def flip_vertical(image: np.ndarray) -> np.ndarray:
    """Swap a bottom-up row order for a top-down one (or back)."""
    return np.ascontiguousarray(image[::-1])


def tone_map(hdr_image: np.ndarray, exposure: float = 1.0, gamma: float = 2.2) -> np.ndarray:
    """Convenience function: exposure + gamma + clamp, returning floats in [0, 1]."""
    return ExposureToneMapper(exposure, gamma).apply(hdr_image)
