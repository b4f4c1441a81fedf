"""
Final resample and encode step of the pipeline.
"""

from pathlib import Path

from imgscale.core.buffer import PixelBuffer
from imgscale.outputs.codecs import Codec, codec_for_path, write_image
from imgscale.outputs.resample import resample, target_size


def resample_and_encode(
    buffer: PixelBuffer,
    output_path: str | Path,
    scale: float,
    quality: int | None = None,
    codec: Codec | None = None,
) -> Path:
    """
    Resize a buffer by ``scale`` and write it in the format implied by
    ``output_path``.

    Args:
        buffer: Final pre-resample buffer
        output_path: Destination file; its extension selects the codec
        scale: Scale factor (> 0)
        quality: JPEG quality; ignored by lossless codecs
        codec: Already resolved codec, skips the extension lookup

    Returns:
        Path of the written file

    Raises:
        UnsupportedFormatError: If the extension is not supported
        EncodeError: If encoding or writing fails
    """
    if codec is None:
        codec = codec_for_path(output_path)
    width, height = target_size(buffer.width, buffer.height, scale)
    resized = resample(buffer, width, height)
    return write_image(resized, output_path, codec, quality if codec.lossy else None)
