"""
Geometric resampling.

Enlarging uses bicubic interpolation, reducing uses OpenCV's area filter,
which averages source pixels and so avoids aliasing. Buffers with alpha are
resampled premultiplied so fully transparent pixels do not leak their colour
into visible edges.
"""

import math

import cv2
import numpy as np

from imgscale.core.buffer import PixelBuffer, clamp_to_uint8
from imgscale.core.errors import InvalidParameterError


def target_size(width: int, height: int, scale: float) -> tuple[int, int]:
    """
    Output dimensions for a scale factor.

    Each axis is rounded to the nearest pixel (halves up) and is at least 1.

    Raises:
        InvalidParameterError: If scale is not a positive number
    """
    if not scale > 0 or not math.isfinite(scale):
        raise InvalidParameterError(f"Scale factor must be positive, got {scale}")
    new_width = max(1, int(math.floor(width * scale + 0.5)))
    new_height = max(1, int(math.floor(height * scale + 0.5)))
    return (new_width, new_height)


def choose_interpolation(src_size: tuple[int, int], dst_size: tuple[int, int]) -> int:
    """INTER_AREA when no axis grows and at least one shrinks, INTER_CUBIC otherwise."""
    if dst_size[0] > src_size[0] or dst_size[1] > src_size[1]:
        return cv2.INTER_CUBIC
    if dst_size[0] < src_size[0] or dst_size[1] < src_size[1]:
        return cv2.INTER_AREA
    return cv2.INTER_CUBIC


def resample(buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
    """
    Resize a buffer to exactly ``width`` x ``height``.

    Returns:
        New buffer with the same channel layout
    """
    if width <= 0 or height <= 0:
        raise InvalidParameterError(f"Invalid target size: {width}x{height}")
    if (width, height) == buffer.size:
        return buffer.copy()

    interpolation = choose_interpolation(buffer.size, (width, height))

    if not buffer.has_alpha:
        resized = cv2.resize(buffer.pixels, (width, height), interpolation=interpolation)
        return PixelBuffer(resized)

    # Premultiply, resize, unpremultiply
    pixels = buffer.pixels.astype(np.float32)
    alpha = pixels[:, :, 3:4] / 255.0
    premult = np.concatenate([pixels[:, :, :3] * alpha, pixels[:, :, 3:4]], axis=2)

    resized = cv2.resize(premult, (width, height), interpolation=interpolation)
    out_alpha = np.clip(resized[:, :, 3:4], 0.0, 255.0)
    coverage = out_alpha / 255.0
    color = np.where(
        coverage > 1e-6,
        resized[:, :, :3] / np.maximum(coverage, 1e-6),
        0.0,
    )
    return PixelBuffer(clamp_to_uint8(np.concatenate([color, out_alpha], axis=2)))


def scale_buffer(buffer: PixelBuffer, scale: float) -> PixelBuffer:
    """Resize a buffer by a scale factor."""
    width, height = target_size(buffer.width, buffer.height, scale)
    return resample(buffer, width, height)
