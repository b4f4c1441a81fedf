"""
Core module - Pixel buffer, filter protocols, configuration, errors and I/O.
"""

from imgscale.core.base import BufferFilter, FilterChain, ProcessingContext
from imgscale.core.buffer import PixelBuffer, clamp_to_uint8
from imgscale.core.config import (
    TransformRequest,
    build_request,
    load_config,
    save_config,
    get_env_config,
)
from imgscale.core.errors import (
    ImgScaleError,
    UnsupportedFormatError,
    DecodeError,
    EncodeError,
    InvalidParameterError,
)
from imgscale.core.image_io import read_image, write_bytes_atomic

__all__ = [
    "BufferFilter",
    "FilterChain",
    "ProcessingContext",
    "PixelBuffer",
    "clamp_to_uint8",
    "TransformRequest",
    "build_request",
    "load_config",
    "save_config",
    "get_env_config",
    "ImgScaleError",
    "UnsupportedFormatError",
    "DecodeError",
    "EncodeError",
    "InvalidParameterError",
    "read_image",
    "write_bytes_atomic",
]
