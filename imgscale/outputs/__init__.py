"""
Output module - Resampling and encoding.

Example:
    >>> from imgscale.outputs import resample_and_encode
    >>> resample_and_encode(buffer, "out.jpg", scale=2.0, quality=90)
"""

from imgscale.outputs.codecs import (
    Codec,
    EXTENSIONS,
    register_codec,
    get_codecs,
    get_encoder,
    codec_for_path,
    encode,
    write_image,
)
from imgscale.outputs.resample import target_size, resample, scale_buffer
from imgscale.outputs.dispatch import resample_and_encode

__all__ = [
    "Codec",
    "EXTENSIONS",
    "register_codec",
    "get_codecs",
    "get_encoder",
    "codec_for_path",
    "encode",
    "write_image",
    "target_size",
    "resample",
    "scale_buffer",
    "resample_and_encode",
]
