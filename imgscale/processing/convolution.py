"""
Convolution filtering and sharpening.

Kernels are applied as a correlation (the kernel is not flipped) over the
three colour channels; reads outside the image use the clamped coordinate,
so border pixels are replicated. Alpha is copied through untouched.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import ClassVar

import numpy as np
from scipy import ndimage

from imgscale.core.buffer import PixelBuffer, clamp_to_uint8


@dataclass
class Kernel:
    """
    Odd-sized square matrix of weights.

    Example:
        >>> k = Kernel([[0, 0, 0], [0, 1, 0], [0, 0, 0]])
        >>> k.size, k.center
        (3, 1)
    """
    weights: np.ndarray

    def __post_init__(self):
        self.weights = np.asarray(self.weights, dtype=np.float64)
        if self.weights.ndim != 2 or self.weights.shape[0] != self.weights.shape[1]:
            raise ValueError(f"Kernel must be square, got shape {self.weights.shape}")
        if self.weights.shape[0] % 2 == 0:
            raise ValueError(f"Kernel size must be odd, got {self.weights.shape[0]}")

    @property
    def size(self) -> int:
        return self.weights.shape[0]

    @property
    def center(self) -> int:
        return self.size // 2

    @property
    def total(self) -> float:
        """Sum of all weights."""
        return float(self.weights.sum())

    def scaled(self, factor: float) -> "Kernel":
        """Return a copy with every weight multiplied by ``factor``."""
        return Kernel(self.weights * factor)


SHARPEN_BASE = Kernel([
    [-1, -1, -1],
    [-1,  9, -1],
    [-1, -1, -1],
])


def _correlate_rows(
    color: np.ndarray,
    weights: np.ndarray,
    start: int,
    stop: int,
) -> np.ndarray:
    """Correlate rows [start, stop) reading up to ``center`` halo rows either side."""
    center = weights.shape[0] // 2
    lo = max(0, start - center)
    hi = min(color.shape[0], stop + center)
    # size-1 kernel along the channel axis keeps channels independent
    block = ndimage.correlate(color[lo:hi], weights[:, :, np.newaxis], mode="nearest")
    return block[start - lo:stop - lo]


def _row_bands(height: int, count: int) -> list[tuple[int, int]]:
    edges = np.linspace(0, height, count + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]


def convolve(buffer: PixelBuffer, kernel: Kernel, workers: int = 1) -> PixelBuffer:
    """
    Apply a kernel to every pixel of a buffer.

    Args:
        buffer: Source buffer (BGR or BGRA)
        kernel: Odd-sized square kernel
        workers: Number of threads; rows are split into that many bands

    Returns:
        New buffer of the same size and layout
    """
    color = buffer.color.astype(np.float64)
    height = buffer.height

    if workers <= 1 or height < 2 * workers:
        result = _correlate_rows(color, kernel.weights, 0, height)
    else:
        result = np.empty_like(color)
        bands = _row_bands(height, workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(_correlate_rows, color, kernel.weights, start, stop): (start, stop)
                for start, stop in bands
            }
            for future, (start, stop) in futures.items():
                result[start:stop] = future.result()

    return buffer.with_color(clamp_to_uint8(result))


def sharpen(buffer: PixelBuffer, strength: float = 1.0, workers: int = 1) -> PixelBuffer:
    """
    Sharpen with the 3x3 unsharp pattern scaled by ``strength``.

    A strength of 0 yields an all-zero kernel and a black image; callers
    skip the stage instead.
    """
    return convolve(buffer, SHARPEN_BASE.scaled(strength), workers=workers)


@dataclass
class SharpenFilter:
    """Buffer filter that applies the sharpen kernel."""
    strength: float = 1.0
    workers: int = 1

    name: ClassVar[str] = "sharpen"

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return sharpen(buffer, self.strength, workers=self.workers)


@dataclass
class ConvolutionFilter:
    """Buffer filter that applies an arbitrary kernel."""
    kernel: Kernel
    workers: int = 1

    name: ClassVar[str] = "convolve"

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return convolve(buffer, self.kernel, workers=self.workers)
