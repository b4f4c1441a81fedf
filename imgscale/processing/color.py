"""
Color adjustment utilities.

Saturation scales each pixel's chroma around its luminance; brightness and
contrast are a linear per-channel remap applied through a lookup table.
Both leave the alpha channel untouched.
"""

from dataclasses import dataclass
from typing import ClassVar

import cv2
import numpy as np

from imgscale.core.buffer import PixelBuffer, clamp_to_uint8


# Luminance weights for red, green and blue
LUM_R = 0.3086
LUM_G = 0.6094
LUM_B = 0.0820


def luminance(color: np.ndarray) -> np.ndarray:
    """
    Weighted luminance of BGR values.

    Args:
        color: (..., 3) array in blue, green, red order

    Returns:
        (...) array in the same scale as the input
    """
    return color[..., 2] * LUM_R + color[..., 1] * LUM_G + color[..., 0] * LUM_B


def adjust_saturation(buffer: PixelBuffer, saturation: float) -> PixelBuffer:
    """
    Scale chroma around luminance.

    Args:
        buffer: Source buffer
        saturation: 1.0 = unchanged, 0.0 = greyscale, >1 = boosted

    Returns:
        New buffer; out-of-range results are clipped
    """
    color = buffer.color.astype(np.float64) / 255.0
    lum = luminance(color)[..., np.newaxis]
    adjusted = np.clip(lum + (color - lum) * saturation, 0.0, 1.0)
    return buffer.with_color(clamp_to_uint8(adjusted * 255.0))


def create_brightness_contrast_lut(brightness: float, contrast: float) -> np.ndarray:
    """
    Create a brightness/contrast lookup table.

    Each value v maps to round(v * (1 + contrast) + brightness * 255),
    clamped to [0, 255].

    Args:
        brightness: Offset in [-1, 1] (0 = no change)
        contrast: Offset in [-1, 1] (0 = no change)

    Returns:
        256-entry uint8 LUT for use with cv2.LUT()
    """
    identity = np.arange(256, dtype=np.float64)
    return clamp_to_uint8(identity * (1.0 + contrast) + brightness * 255.0)


def apply_lut(buffer: PixelBuffer, lut: np.ndarray) -> PixelBuffer:
    """Apply a LUT to the colour channels of a buffer."""
    color = np.ascontiguousarray(buffer.color)
    return buffer.with_color(cv2.LUT(color, lut))


def adjust_brightness_contrast(
    buffer: PixelBuffer,
    brightness: float = 0.0,
    contrast: float = 0.0,
) -> PixelBuffer:
    """Linear brightness/contrast remap of each colour channel."""
    return apply_lut(buffer, create_brightness_contrast_lut(brightness, contrast))


@dataclass
class SaturationFilter:
    """Buffer filter that adjusts saturation."""
    saturation: float = 1.0

    name: ClassVar[str] = "saturation"

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return adjust_saturation(buffer, self.saturation)


@dataclass
class BrightnessContrastFilter:
    """Buffer filter that applies brightness and contrast."""
    brightness: float = 0.0
    contrast: float = 0.0

    name: ClassVar[str] = "brightness_contrast"

    def __post_init__(self):
        self._lut = create_brightness_contrast_lut(self.brightness, self.contrast)

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return apply_lut(buffer, self._lut)
