"""
imgscale - Image Scaling and Post-processing
============================================

Applies optional pixel transforms to a single image, resamples it with a
high-quality kernel and encodes it to JPEG, PNG, BMP or GIF.

Main modules:
- imgscale.core: Pixel buffer, configuration, errors and file I/O
- imgscale.processing: Sharpen, saturation, brightness/contrast, mirroring
- imgscale.pipeline: Stage ordering and end-to-end processing
- imgscale.outputs: Resampling and codecs

Quick start:
    >>> from imgscale import build_request, scale_image
    >>> request, warnings = build_request(scale=1.5, saturation=1.2, sharpen=0.5)
    >>> scale_image("photo.png", "photo_large.jpg", request)
"""

__version__ = "0.1.0"

# Convenience imports
from imgscale.core.buffer import PixelBuffer
from imgscale.core.config import TransformRequest, build_request
from imgscale.core.errors import (
    ImgScaleError,
    UnsupportedFormatError,
    DecodeError,
    EncodeError,
    InvalidParameterError,
)
from imgscale.pipeline import apply_transforms, scale_image

__all__ = [
    "__version__",
    "PixelBuffer",
    "TransformRequest",
    "build_request",
    "ImgScaleError",
    "UnsupportedFormatError",
    "DecodeError",
    "EncodeError",
    "InvalidParameterError",
    "apply_transforms",
    "scale_image",
]
