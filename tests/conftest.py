"""
Shared fixtures for imgscale tests.
"""

import cv2
import numpy as np
import pytest

from imgscale.core.buffer import PixelBuffer


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def noise_bgr(rng):
    """40x30 3-channel buffer of random pixels."""
    return PixelBuffer(rng.integers(0, 256, size=(30, 40, 3), dtype=np.uint8))


@pytest.fixture
def noise_bgra(rng):
    """40x30 4-channel buffer with random colour and alpha."""
    return PixelBuffer(rng.integers(0, 256, size=(30, 40, 4), dtype=np.uint8))


@pytest.fixture
def write_png(tmp_path):
    """Write an array to a PNG file under tmp_path and return its path."""
    def _write(pixels: np.ndarray, name: str = "input.png"):
        path = tmp_path / name
        ok, data = cv2.imencode(".png", pixels)
        assert ok
        path.write_bytes(data.tobytes())
        return path
    return _write
