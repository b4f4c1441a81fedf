"""
Processing module - Pixel transforms.

This module provides:
- Convolution and sharpening (Kernel, convolve, sharpen)
- Saturation and brightness/contrast adjustment
- Horizontal and vertical mirroring
- Filter wrappers for use in a FilterChain
"""

from imgscale.processing.convolution import (
    Kernel,
    SHARPEN_BASE,
    convolve,
    sharpen,
    SharpenFilter,
    ConvolutionFilter,
)
from imgscale.processing.color import (
    luminance,
    adjust_saturation,
    adjust_brightness_contrast,
    create_brightness_contrast_lut,
    apply_lut,
    SaturationFilter,
    BrightnessContrastFilter,
)
from imgscale.processing.orientation import flip, FlipFilter

__all__ = [
    # Convolution
    "Kernel",
    "SHARPEN_BASE",
    "convolve",
    "sharpen",
    "SharpenFilter",
    "ConvolutionFilter",
    # Color
    "luminance",
    "adjust_saturation",
    "adjust_brightness_contrast",
    "create_brightness_contrast_lut",
    "apply_lut",
    "SaturationFilter",
    "BrightnessContrastFilter",
    # Orientation
    "flip",
    "FlipFilter",
]
