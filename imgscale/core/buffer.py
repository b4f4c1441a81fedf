"""
Pixel buffer used by every processing stage.

A PixelBuffer wraps a ``uint8`` numpy array of shape (height, width, channels)
in OpenCV's native channel order: blue, green, red and an optional alpha at
index 3.
"""

from dataclasses import dataclass

import numpy as np


ALPHA_CHANNEL = 3
COLOR_CHANNELS = 3


def clamp_to_uint8(values: np.ndarray) -> np.ndarray:
    """Round to the nearest integer (halves up) and clamp to [0, 255]."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


@dataclass
class PixelBuffer:
    """
    Rectangular grid of 8-bit BGR or BGRA pixels.

    Example:
        >>> buf = PixelBuffer.blank(4, 2, channels=4)
        >>> buf.width, buf.height, buf.channels
        (4, 2, 4)
        >>> buf.clamp(-3, 7)
        (0, 1)
    """
    pixels: np.ndarray  # (H, W, C), dtype uint8, BGR(A) order

    def __post_init__(self):
        if not isinstance(self.pixels, np.ndarray):
            raise ValueError("Pixel data must be a numpy array")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Pixel data must be uint8, got {self.pixels.dtype}")
        if self.pixels.ndim != 3:
            raise ValueError(
                f"Pixel data must have shape (height, width, channels), got {self.pixels.shape}"
            )
        height, width, channels = self.pixels.shape
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid buffer size: {width}x{height}")
        if channels not in (3, 4):
            raise ValueError(f"Buffer must have 3 or 4 channels, got {channels}")

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        channels: int = 3,
        color: tuple[int, ...] | None = None,
    ) -> "PixelBuffer":
        """Create a buffer filled with zeros or a single BGR(A) color."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid buffer size: {width}x{height}")
        pixels = np.zeros((height, width, channels), dtype=np.uint8)
        if color is not None:
            pixels[:, :] = color
        return cls(pixels)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        width: int,
        height: int,
        channels: int,
        stride: int | None = None,
    ) -> "PixelBuffer":
        """
        Build a buffer from raw row-major bytes.

        Args:
            data: Raw pixel bytes, ``stride * height`` long
            width: Width in pixels
            height: Height in pixels
            channels: Bytes per pixel (3 or 4)
            stride: Bytes per row including padding (defaults to width * channels)

        Raises:
            ValueError: If the layout is inconsistent with the data
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid buffer size: {width}x{height}")
        if channels not in (3, 4):
            raise ValueError(f"Buffer must have 3 or 4 channels, got {channels}")
        row_bytes = width * channels
        if stride is None:
            stride = row_bytes
        if stride < row_bytes:
            raise ValueError(f"Stride {stride} is smaller than row size {row_bytes}")
        if len(data) < stride * height:
            raise ValueError(
                f"Expected {stride * height} bytes for {width}x{height}, got {len(data)}"
            )

        rows = np.frombuffer(data, dtype=np.uint8, count=stride * height)
        rows = rows.reshape(height, stride)[:, :row_bytes]
        return cls(rows.reshape(height, width, channels).copy())

    def to_bytes(self, stride: int | None = None) -> bytes:
        """Serialise rows, zero-padding each one to ``stride`` bytes."""
        row_bytes = self.width * self.channels
        if stride is None or stride == row_bytes:
            return np.ascontiguousarray(self.pixels).tobytes()
        if stride < row_bytes:
            raise ValueError(f"Stride {stride} is smaller than row size {row_bytes}")
        padded = np.zeros((self.height, stride), dtype=np.uint8)
        padded[:, :row_bytes] = self.pixels.reshape(self.height, row_bytes)
        return padded.tobytes()

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    @property
    def stride(self) -> int:
        """Bytes per row of the backing array."""
        return self.pixels.strides[0]

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) tuple."""
        return (self.width, self.height)

    @property
    def color(self) -> np.ndarray:
        """View of the blue, green and red planes."""
        return self.pixels[:, :, :COLOR_CHANNELS]

    @property
    def alpha(self) -> np.ndarray | None:
        """View of the alpha plane, or None for 3-channel buffers."""
        if not self.has_alpha:
            return None
        return self.pixels[:, :, ALPHA_CHANNEL]

    def offset(self, x: int, y: int) -> int:
        """Byte offset of pixel (x, y) in a row-major buffer with this stride."""
        return y * self.stride + x * self.channels

    def clamp(self, x: int, y: int) -> tuple[int, int]:
        """Clamp a coordinate onto the buffer so border pixels are replicated."""
        cx = min(self.width - 1, max(0, x))
        cy = min(self.height - 1, max(0, y))
        return (cx, cy)

    def pixel(self, x: int, y: int) -> tuple[int, ...]:
        """Channel values at the clamped coordinate (x, y)."""
        cx, cy = self.clamp(x, y)
        return tuple(int(v) for v in self.pixels[cy, cx])

    def with_color(self, color: np.ndarray) -> "PixelBuffer":
        """
        New buffer with the given BGR planes and this buffer's alpha.

        ``color`` must already be uint8 and match this buffer's size.
        """
        if self.has_alpha:
            out = np.empty_like(self.pixels)
            out[:, :, :COLOR_CHANNELS] = color
            out[:, :, ALPHA_CHANNEL] = self.pixels[:, :, ALPHA_CHANNEL]
        else:
            out = np.ascontiguousarray(color, dtype=np.uint8)
        return PixelBuffer(out)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(
            np.array_equal(self.pixels, other.pixels)
        )

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height}, channels={self.channels})"
