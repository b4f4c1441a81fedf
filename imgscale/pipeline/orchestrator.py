"""
Pipeline orchestration.

Stages always run in the same order:

    sharpen -> saturation -> brightness/contrast -> mirror H -> mirror V

and only when their parameters are outside the no-op threshold. The final
buffer is then resampled and encoded.
"""

from pathlib import Path

from imgscale.core.base import FilterChain, ProcessingContext
from imgscale.core.buffer import PixelBuffer
from imgscale.core.config import TransformRequest
from imgscale.core.image_io import read_image
from imgscale.outputs.codecs import codec_for_path
from imgscale.outputs.dispatch import resample_and_encode
from imgscale.outputs.resample import target_size
from imgscale.processing.color import BrightnessContrastFilter, SaturationFilter
from imgscale.processing.convolution import SharpenFilter
from imgscale.processing.orientation import FlipFilter


def build_filter_chain(request: TransformRequest, workers: int = 1) -> FilterChain:
    """
    Build the chain of active stages for a request.

    Args:
        request: Transform parameters
        workers: Threads used by the sharpen stage

    Returns:
        FilterChain containing only the stages that change pixels
    """
    chain = FilterChain()
    if request.sharpen_active:
        chain.add(SharpenFilter(request.sharpen_strength, workers=workers))
    if request.saturation_active:
        chain.add(SaturationFilter(request.saturation))
    if request.brightness_contrast_active:
        chain.add(BrightnessContrastFilter(request.brightness, request.contrast))
    if request.mirror_horizontal:
        chain.add(FlipFilter(horizontal=True))
    if request.mirror_vertical:
        chain.add(FlipFilter(vertical=True))
    return chain


def apply_transforms(
    buffer: PixelBuffer,
    request: TransformRequest,
    workers: int = 1,
) -> PixelBuffer:
    """
    Run the pixel stages of a request.

    Returns the input buffer itself when no stage is active.
    """
    return build_filter_chain(request, workers=workers).apply(buffer)


def scale_image(
    input_path: str | Path,
    output_path: str | Path,
    request: TransformRequest,
    context: ProcessingContext | None = None,
) -> Path:
    """
    Decode, transform, resample and encode one image.

    The output codec is resolved before anything is decoded, so an
    unsupported extension fails without doing any work.

    Args:
        input_path: Source image
        output_path: Destination file (extension selects the codec)
        request: Transform parameters
        context: Run-level options (verbosity, worker threads)

    Returns:
        Path of the written file

    Raises:
        UnsupportedFormatError: Unknown output extension
        FileNotFoundError: Missing input file
        DecodeError: Unreadable input
        EncodeError: Encoder or write failure
    """
    context = context or ProcessingContext()
    codec = codec_for_path(output_path)

    buffer = read_image(input_path)
    chain = build_filter_chain(request, workers=context.workers)

    if context.verbose:
        width, height = target_size(buffer.width, buffer.height, request.scale)
        stages = ", ".join(chain.stage_names()) or "none"
        print(f"Source: {buffer.width}x{buffer.height}, {buffer.channels} channels")
        print(f"Stages: {stages}")
        print(f"Output: {width}x{height} {codec.value}")

    buffer = chain.apply(buffer)
    written = resample_and_encode(
        buffer, output_path, request.scale, request.quality, codec=codec
    )
    print(f"Processed image saved to: {written}")
    return written
