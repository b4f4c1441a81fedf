"""
Mirroring of pixel buffers.
"""

from dataclasses import dataclass

from imgscale.core.buffer import PixelBuffer


def flip(buffer: PixelBuffer, horizontal: bool = False, vertical: bool = False) -> PixelBuffer:
    """
    Mirror a buffer left-right and/or top-bottom.

    Pixel (x, y) moves to (width-1-x, y) for a horizontal flip and to
    (x, height-1-y) for a vertical one. Channel values, alpha included,
    move with their pixel.

    Returns:
        New contiguous buffer
    """
    pixels = buffer.pixels
    if horizontal:
        pixels = pixels[:, ::-1]
    if vertical:
        pixels = pixels[::-1, :]
    return PixelBuffer(pixels.copy())


@dataclass
class FlipFilter:
    """Buffer filter that mirrors along one or both axes."""
    horizontal: bool = False
    vertical: bool = False

    @property
    def name(self) -> str:
        if self.horizontal and self.vertical:
            return "mirror_both"
        return "mirror_vertical" if self.vertical else "mirror_horizontal"

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return flip(buffer, self.horizontal, self.vertical)
