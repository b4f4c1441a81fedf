"""
Output codecs for imgscale.

This module provides a registry of encoders keyed by Codec. The codec for
an output file is chosen from its extension; unknown extensions are an
error, never a silent fallback.

To add a new codec:
1. Add a member to Codec and its extensions to EXTENSIONS
2. Write a function with signature: func(buffer: PixelBuffer, **params) -> bytes
3. Register it with the @register_codec decorator
"""

import io
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Any

import cv2
import numpy as np
from PIL import Image

from imgscale.core.buffer import PixelBuffer
from imgscale.core.config import DEFAULT_QUALITY, validate_quality
from imgscale.core.errors import EncodeError, UnsupportedFormatError
from imgscale.core.image_io import write_bytes_atomic


class Codec(Enum):
    """Supported output formats."""
    JPEG = "jpeg"
    PNG = "png"
    BMP = "bmp"
    GIF = "gif"

    @property
    def lossy(self) -> bool:
        """Whether the encoder takes a quality parameter."""
        return self is Codec.JPEG


EXTENSIONS: Dict[str, Codec] = {
    ".jpg": Codec.JPEG,
    ".jpeg": Codec.JPEG,
    ".png": Codec.PNG,
    ".bmp": Codec.BMP,
    ".gif": Codec.GIF,
}

# Registry of available encoders
_ENCODERS: Dict[Codec, Dict[str, Any]] = {}


def register_codec(codec: Codec, description: str = ""):
    """Decorator to register an encoder for a codec."""
    def decorator(func: Callable):
        _ENCODERS[codec] = {
            'func': func,
            'description': description,
        }
        return func
    return decorator


def get_codecs() -> list:
    """Return the list of supported output extensions."""
    return [ext for ext, codec in EXTENSIONS.items() if codec in _ENCODERS]


def get_encoder(codec: Codec) -> Callable:
    """Get the encoder function for a codec."""
    if codec not in _ENCODERS:
        raise EncodeError(f"No encoder registered for {codec.value}")
    return _ENCODERS[codec]['func']


def codec_for_path(path: str | Path) -> Codec:
    """
    Select the codec from a file name's extension (case-insensitive).

    Raises:
        UnsupportedFormatError: If the extension is missing or unknown
    """
    ext = Path(path).suffix.lower()
    if ext not in EXTENSIONS:
        raise UnsupportedFormatError(
            f"Unsupported output file format: '{ext or Path(path).name}'. "
            f"Available: {get_codecs()}"
        )
    return EXTENSIONS[ext]


def encode(buffer: PixelBuffer, codec: Codec, quality: int | None = None) -> bytes:
    """
    Encode a buffer to bytes.

    Args:
        buffer: BGR or BGRA buffer
        codec: Output codec
        quality: Quality 1-100, used only by lossy codecs (default 85)

    Returns:
        Encoded file contents

    Raises:
        InvalidParameterError: If a lossy codec gets an out-of-range quality
        EncodeError: If the encoder fails
    """
    func = get_encoder(codec)
    if codec.lossy:
        quality = DEFAULT_QUALITY if quality is None else validate_quality(quality)
        return func(buffer, quality=quality)
    return func(buffer)


def write_image(
    buffer: PixelBuffer,
    path: str | Path,
    codec: Codec | None = None,
    quality: int | None = None,
) -> Path:
    """
    Encode a buffer and write it atomically to ``path``.

    The codec defaults to the one implied by the path's extension.
    """
    if codec is None:
        codec = codec_for_path(path)
    return write_bytes_atomic(encode(buffer, codec, quality), path)


# =============================================================================
# Built-in Encoders
# =============================================================================

def _imencode(ext: str, pixels: np.ndarray, params: list[int] | None = None) -> bytes:
    try:
        ok, data = cv2.imencode(ext, pixels, params or [])
    except cv2.error as e:
        raise EncodeError(f"OpenCV failed to encode {ext}: {e}") from e
    if not ok:
        raise EncodeError(f"OpenCV failed to encode {ext}")
    return data.tobytes()


@register_codec(Codec.JPEG, "Lossy JPEG with quality setting; alpha is dropped")
def encode_jpeg(buffer: PixelBuffer, quality: int = DEFAULT_QUALITY, **params) -> bytes:
    color = np.ascontiguousarray(buffer.color)
    return _imencode(".jpg", color, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])


@register_codec(Codec.PNG, "Lossless PNG, keeps alpha")
def encode_png(buffer: PixelBuffer, **params) -> bytes:
    return _imencode(".png", buffer.pixels)


@register_codec(Codec.BMP, "Uncompressed BMP")
def encode_bmp(buffer: PixelBuffer, **params) -> bytes:
    return _imencode(".bmp", buffer.pixels)


@register_codec(Codec.GIF, "Palette GIF via Pillow")
def encode_gif(buffer: PixelBuffer, **params) -> bytes:
    if buffer.has_alpha:
        img = Image.fromarray(cv2.cvtColor(buffer.pixels, cv2.COLOR_BGRA2RGBA))
    else:
        img = Image.fromarray(cv2.cvtColor(buffer.pixels, cv2.COLOR_BGR2RGB))
    stream = io.BytesIO()
    try:
        img.save(stream, format="GIF")
    except (OSError, ValueError) as e:
        raise EncodeError(f"Pillow failed to encode GIF: {e}") from e
    return stream.getvalue()
