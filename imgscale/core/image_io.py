"""
Image file I/O for imgscale.

Decoding goes through OpenCV with Pillow as a second decoder for formats
OpenCV cannot read. Every decoded image is normalised to an 8-bit BGR or
BGRA PixelBuffer. Writing is atomic: bytes land in a temporary file next to
the destination and are renamed into place, so a failed run never leaves a
half-written output.
"""

import os
import stat
import tempfile
from pathlib import Path

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from imgscale.core.buffer import PixelBuffer
from imgscale.core.errors import DecodeError, EncodeError


def _to_uint8(image: np.ndarray) -> np.ndarray:
    """Reduce 16-bit or float images to 8 bits per channel."""
    if image.dtype == np.uint8:
        return image
    if image.dtype == np.uint16:
        return (image.astype(np.float32) / 257.0 + 0.5).astype(np.uint8)
    if image.dtype in (np.float32, np.float64):
        return (np.clip(image, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)
    raise DecodeError(f"Unsupported pixel type: {image.dtype}")


def _to_bgr_layout(image: np.ndarray) -> np.ndarray:
    """Expand greyscale and grey+alpha images to BGR / BGRA."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2BGR)
    if channels == 2:
        gray = image[:, :, 0]
        return np.dstack([gray, gray, gray, image[:, :, 1]])
    if channels in (3, 4):
        return image
    raise DecodeError(f"Unsupported channel count: {channels}")


def _decode_with_pillow(path: Path) -> np.ndarray | None:
    try:
        with Image.open(path) as img:
            has_alpha = img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info
            img = img.convert("RGBA" if has_alpha else "RGB")
            rgb = np.asarray(img)
    except (UnidentifiedImageError, OSError, ValueError):
        return None
    code = cv2.COLOR_RGBA2BGRA if has_alpha else cv2.COLOR_RGB2BGR
    return cv2.cvtColor(rgb, code)


def read_image(path: str | Path) -> PixelBuffer:
    """
    Decode an image file into a PixelBuffer.

    Args:
        path: Path to the image file

    Returns:
        8-bit BGR or BGRA buffer

    Raises:
        FileNotFoundError: If the file doesn't exist
        DecodeError: If the file is not a readable image
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Image file not found: {path}")

    try:
        data = np.fromfile(str(path), dtype=np.uint8)
    except OSError as e:
        raise DecodeError(f"Failed to read image: {path}: {e}") from e

    image = None
    if data.size > 0:
        # imdecode handles non-ASCII paths that cv2.imread cannot open
        image = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
    if image is None:
        image = _decode_with_pillow(path)
    if image is None:
        raise DecodeError(f"Failed to decode image: {path}")

    image = _to_bgr_layout(_to_uint8(image))
    return PixelBuffer(np.ascontiguousarray(image))


def _output_mode(path: Path) -> int:
    """Permission bits for a written file: the existing file's, else 0666 & ~umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        pass
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_bytes_atomic(data: bytes, path: str | Path) -> Path:
    """
    Write bytes to ``path`` via a temporary file and a rename.

    Raises:
        EncodeError: If the file cannot be written
    """
    path = Path(path)
    directory = path.parent if str(path.parent) else Path(".")
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}-", suffix=path.suffix, dir=directory
        )
    except OSError as e:
        raise EncodeError(f"Failed to create output file in {directory}: {e}") from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp_name, _output_mode(path))
        os.replace(tmp_name, path)
    except OSError as e:
        raise EncodeError(f"Failed to write {path}: {e}") from e
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
    return path
