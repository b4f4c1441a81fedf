"""
Tests for the core package: buffer, configuration, I/O and file helpers.
"""

import json
import os
import stat

import cv2
import numpy as np
import pytest


class TestPixelBuffer:
    """Tests for PixelBuffer."""

    def test_blank(self):
        """Test creating a filled buffer."""
        from imgscale.core.buffer import PixelBuffer

        buf = PixelBuffer.blank(5, 3, channels=4, color=(1, 2, 3, 4))
        assert buf.size == (5, 3)
        assert buf.channels == 4
        assert buf.has_alpha is True
        assert buf.pixel(4, 2) == (1, 2, 3, 4)

    def test_invalid_channels(self):
        """Test that 1 or 2 channel data is rejected."""
        from imgscale.core.buffer import PixelBuffer

        with pytest.raises(ValueError):
            PixelBuffer(np.zeros((2, 2, 2), dtype=np.uint8))

    def test_invalid_dtype(self):
        """Test that non-uint8 data is rejected."""
        from imgscale.core.buffer import PixelBuffer

        with pytest.raises(ValueError):
            PixelBuffer(np.zeros((2, 2, 3), dtype=np.float32))

    def test_clamp(self):
        """Test coordinate clamping on each axis."""
        from imgscale.core.buffer import PixelBuffer

        buf = PixelBuffer.blank(4, 3)
        assert buf.clamp(-1, -5) == (0, 0)
        assert buf.clamp(10, 1) == (3, 1)
        assert buf.clamp(2, 99) == (2, 2)
        assert buf.clamp(1, 1) == (1, 1)

    def test_pixel_reads_border(self):
        """Test that out-of-range reads replicate the border pixel."""
        from imgscale.core.buffer import PixelBuffer

        pixels = np.zeros((2, 2, 3), dtype=np.uint8)
        pixels[0, 1] = (10, 20, 30)
        buf = PixelBuffer(pixels)
        assert buf.pixel(5, -3) == (10, 20, 30)

    def test_offset(self):
        """Test byte offsets follow y * stride + x * channels."""
        from imgscale.core.buffer import PixelBuffer

        buf = PixelBuffer.blank(7, 4, channels=3)
        assert buf.stride == 21
        assert buf.offset(0, 0) == 0
        assert buf.offset(2, 3) == 3 * 21 + 2 * 3

    def test_from_bytes_with_padding(self):
        """Test reading rows padded to a larger stride."""
        from imgscale.core.buffer import PixelBuffer

        # 2x2 BGR, stride 8 (2 bytes padding per row)
        data = bytes([1, 2, 3, 4, 5, 6, 0, 0,
                      7, 8, 9, 10, 11, 12, 0, 0])
        buf = PixelBuffer.from_bytes(data, 2, 2, 3, stride=8)
        assert buf.pixel(1, 0) == (4, 5, 6)
        assert buf.pixel(0, 1) == (7, 8, 9)
        assert buf.to_bytes(stride=8) == data

    def test_from_bytes_short_data(self):
        """Test that truncated data is rejected."""
        from imgscale.core.buffer import PixelBuffer

        with pytest.raises(ValueError):
            PixelBuffer.from_bytes(b"\x00" * 10, 2, 2, 3)

    def test_from_bytes_small_stride(self):
        """Test that a stride below the row size is rejected."""
        from imgscale.core.buffer import PixelBuffer

        with pytest.raises(ValueError):
            PixelBuffer.from_bytes(b"\x00" * 12, 2, 2, 3, stride=4)

    def test_equality(self):
        """Test buffers compare by pixel content."""
        from imgscale.core.buffer import PixelBuffer

        a = PixelBuffer.blank(3, 3, color=(1, 2, 3))
        b = PixelBuffer.blank(3, 3, color=(1, 2, 3))
        assert a == b
        b.pixels[0, 0, 0] = 9
        assert a != b

    def test_clamp_to_uint8(self):
        """Test rounding halves up and clamping."""
        from imgscale.core.buffer import clamp_to_uint8

        values = np.array([-20.0, 0.49, 0.5, 254.5, 300.0])
        assert clamp_to_uint8(values).tolist() == [0, 0, 1, 255, 255]


class TestTransformRequest:
    """Tests for TransformRequest and build_request."""

    def test_defaults(self):
        """Test that no values gives the documented defaults."""
        from imgscale.core.config import build_request

        request, warnings = build_request()
        assert warnings == []
        assert request.scale == 2.0
        assert request.quality == 85
        assert request.saturation == 1.0
        assert request.sharpen is False
        assert request.brightness == 0.0
        assert request.contrast == 0.0
        assert request.mirror_horizontal is False
        assert request.mirror_vertical is False

    def test_string_values(self):
        """Test parsing command line strings."""
        from imgscale.core.config import build_request

        request, warnings = build_request(
            scale="1.5", quality="92", saturation="1.3", sharpen="0.7",
            brightness="-0.2", contrast="0.4",
        )
        assert warnings == []
        assert request.scale == 1.5
        assert request.quality == 92
        assert request.saturation == 1.3
        assert request.sharpen is True
        assert request.sharpen_strength == 0.7
        assert request.brightness == -0.2
        assert request.contrast == 0.4

    @pytest.mark.parametrize("scale", ["abc", "0", "-1", "10", "25", "nan"])
    def test_invalid_scale_falls_back(self, scale):
        """Test that bad scale values fall back to 2.0 with a warning."""
        from imgscale.core.config import build_request

        request, warnings = build_request(scale=scale)
        assert request.scale == 2.0
        assert len(warnings) == 1
        assert "Scaling factor" in warnings[0]

    @pytest.mark.parametrize("quality", ["0", "101", "high", "85.5"])
    def test_invalid_quality_falls_back(self, quality):
        """Test that bad quality values fall back to 85."""
        from imgscale.core.config import build_request

        request, warnings = build_request(quality=quality)
        assert request.quality == 85
        assert len(warnings) == 1

    def test_invalid_saturation(self):
        """Test that unparsable or negative saturation falls back to 1.0."""
        from imgscale.core.config import build_request

        for value in ("lots", "-0.5"):
            request, warnings = build_request(saturation=value)
            assert request.saturation == 1.0
            assert len(warnings) == 1

    def test_invalid_sharpen_disables(self):
        """Test that an unparsable sharpen strength disables sharpening."""
        from imgscale.core.config import build_request

        request, warnings = build_request(sharpen="crisp")
        assert request.sharpen is False
        assert request.sharpen_strength == 0.0
        assert len(warnings) == 1

    def test_brightness_contrast_range(self):
        """Test that values outside [-1, 1] fall back to 0."""
        from imgscale.core.config import build_request

        request, warnings = build_request(brightness="1.5", contrast="-2")
        assert request.brightness == 0.0
        assert request.contrast == 0.0
        assert len(warnings) == 2

    def test_mirror_flags(self):
        """Test boolean parsing of mirror flags."""
        from imgscale.core.config import build_request

        request, _ = build_request(mirror_horizontal="true", mirror_vertical="no")
        assert request.mirror_horizontal is True
        assert request.mirror_vertical is False

    def test_frozen(self):
        """Test that a request cannot be modified."""
        import dataclasses
        from imgscale.core.config import TransformRequest

        request = TransformRequest()
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.scale = 3.0

    def test_enable_thresholds(self):
        """Test the no-op thresholds of each stage."""
        from imgscale.core.config import TransformRequest

        assert TransformRequest(sharpen=True, sharpen_strength=0.0).sharpen_active is False
        assert TransformRequest(sharpen=True, sharpen_strength=0.01).sharpen_active is False
        assert TransformRequest(sharpen=True, sharpen_strength=0.02).sharpen_active is True
        assert TransformRequest(sharpen=True, sharpen_strength=-0.5).sharpen_active is True
        assert TransformRequest(sharpen=False, sharpen_strength=1.0).sharpen_active is False
        assert TransformRequest(saturation=1.005).saturation_active is False
        assert TransformRequest(saturation=0.98).saturation_active is True
        assert TransformRequest(brightness=0.005, contrast=-0.005).brightness_contrast_active is False
        assert TransformRequest(contrast=0.02).brightness_contrast_active is True


class TestConfigFiles:
    """Tests for JSON presets and environment overrides."""

    def test_save_load_roundtrip(self, tmp_path):
        """Test that a saved request rebuilds to the same request."""
        from imgscale.core.config import (
            TransformRequest, build_request, load_config, save_config,
        )

        original = TransformRequest(
            sharpen=True, sharpen_strength=0.5, saturation=1.2,
            brightness=0.1, contrast=-0.1, mirror_vertical=True,
            scale=1.5, quality=70,
        )
        path = tmp_path / "preset.json"
        save_config(original, path)

        rebuilt, warnings = build_request(**load_config(path))
        assert warnings == []
        assert rebuilt == original

    def test_load_ignores_unknown_keys(self, tmp_path):
        """Test that unknown preset keys are dropped."""
        from imgscale.core.config import load_config

        path = tmp_path / "preset.json"
        path.write_text(json.dumps({"scale": 3, "colour": "blue"}))
        assert load_config(path) == {"scale": 3}

    def test_load_missing(self, tmp_path):
        """Test that a missing preset raises FileNotFoundError."""
        from imgscale.core.config import load_config

        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.json")

    def test_load_not_an_object(self, tmp_path):
        """Test that a non-object preset is rejected."""
        from imgscale.core.config import load_config

        path = tmp_path / "preset.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError):
            load_config(path)

    def test_create_example_config(self, tmp_path, capsys):
        """Test writing the example preset."""
        from imgscale.core.config import create_example_config, load_config

        path = tmp_path / "example.json"
        request = create_example_config(path)
        assert path.exists()
        assert load_config(path)["quality"] == request.quality
        assert "Created example configuration" in capsys.readouterr().out

    def test_env_config(self, monkeypatch):
        """Test reading IMGSCALE_* variables."""
        from imgscale.core.config import get_env_config

        monkeypatch.setenv("IMGSCALE_QUALITY", "92")
        monkeypatch.setenv("IMGSCALE_UNRELATED", "x")
        config = get_env_config()
        assert config["quality"] == "92"
        assert "unrelated" not in config


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_builtin_bases(self):
        """Test that errors can be caught as builtin exceptions."""
        from imgscale.core.errors import (
            ImgScaleError, UnsupportedFormatError, DecodeError,
            EncodeError, InvalidParameterError,
        )

        assert issubclass(UnsupportedFormatError, ValueError)
        assert issubclass(InvalidParameterError, ValueError)
        assert issubclass(DecodeError, RuntimeError)
        assert issubclass(EncodeError, RuntimeError)
        for cls in (UnsupportedFormatError, DecodeError, EncodeError, InvalidParameterError):
            assert issubclass(cls, ImgScaleError)


class TestImageIO:
    """Tests for decoding and atomic writing."""

    def test_read_bgr(self, write_png):
        """Test decoding a colour PNG."""
        from imgscale.core.image_io import read_image

        pixels = np.zeros((4, 6, 3), dtype=np.uint8)
        pixels[:, :, 2] = 200
        buf = read_image(write_png(pixels))
        assert buf.size == (6, 4)
        assert buf.channels == 3
        assert buf.pixel(0, 0) == (0, 0, 200)

    def test_read_bgra(self, write_png):
        """Test that alpha survives decoding."""
        from imgscale.core.image_io import read_image

        pixels = np.full((3, 3, 4), 50, dtype=np.uint8)
        pixels[:, :, 3] = 128
        buf = read_image(write_png(pixels))
        assert buf.channels == 4
        assert buf.pixel(1, 1) == (50, 50, 50, 128)

    def test_read_grayscale_expands(self, write_png):
        """Test that greyscale images become BGR."""
        from imgscale.core.image_io import read_image

        buf = read_image(write_png(np.full((5, 5), 77, dtype=np.uint8)))
        assert buf.channels == 3
        assert buf.pixel(2, 2) == (77, 77, 77)

    def test_read_16bit_reduces(self, write_png):
        """Test that 16-bit images are reduced to 8 bits."""
        from imgscale.core.image_io import read_image

        pixels = np.full((2, 2, 3), 65535, dtype=np.uint16)
        buf = read_image(write_png(pixels))
        assert buf.pixels.dtype == np.uint8
        assert buf.pixel(0, 0) == (255, 255, 255)

    def test_read_missing(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        from imgscale.core.image_io import read_image

        with pytest.raises(FileNotFoundError):
            read_image(tmp_path / "nope.png")

    def test_read_corrupt(self, tmp_path):
        """Test that garbage data raises DecodeError."""
        from imgscale.core.errors import DecodeError
        from imgscale.core.image_io import read_image

        path = tmp_path / "broken.png"
        path.write_bytes(b"definitely not an image")
        with pytest.raises(DecodeError):
            read_image(path)

    def test_read_empty(self, tmp_path):
        """Test that an empty file raises DecodeError."""
        from imgscale.core.errors import DecodeError
        from imgscale.core.image_io import read_image

        path = tmp_path / "empty.jpg"
        path.write_bytes(b"")
        with pytest.raises(DecodeError):
            read_image(path)

    def test_atomic_write(self, tmp_path):
        """Test that only the final file remains after writing."""
        from imgscale.core.image_io import write_bytes_atomic

        path = tmp_path / "out.bin"
        assert write_bytes_atomic(b"hello", path) == path
        assert path.read_bytes() == b"hello"
        assert [p.name for p in tmp_path.iterdir()] == ["out.bin"]

    def test_atomic_write_replaces(self, tmp_path):
        """Test overwriting an existing file."""
        from imgscale.core.image_io import write_bytes_atomic

        path = tmp_path / "out.bin"
        path.write_bytes(b"old")
        write_bytes_atomic(b"new", path)
        assert path.read_bytes() == b"new"

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
    def test_atomic_write_honours_umask(self, tmp_path):
        """Test that a new file gets 0666 minus the umask, not 0600."""
        from imgscale.core.image_io import write_bytes_atomic

        path = tmp_path / "out.png"
        previous = os.umask(0o022)
        try:
            write_bytes_atomic(b"x", path)
        finally:
            os.umask(previous)
        assert stat.S_IMODE(path.stat().st_mode) == 0o644

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
    def test_atomic_write_keeps_existing_mode(self, tmp_path):
        """Test that overwriting keeps the destination's permissions."""
        from imgscale.core.image_io import write_bytes_atomic

        path = tmp_path / "out.png"
        path.write_bytes(b"old")
        path.chmod(0o640)
        write_bytes_atomic(b"new", path)
        assert path.read_bytes() == b"new"
        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_atomic_write_missing_directory(self, tmp_path):
        """Test that an unwritable destination raises EncodeError."""
        from imgscale.core.errors import EncodeError
        from imgscale.core.image_io import write_bytes_atomic

        with pytest.raises(EncodeError):
            write_bytes_atomic(b"data", tmp_path / "missing" / "out.png")
        assert list(tmp_path.iterdir()) == []


class TestFileUtils:
    """Tests for file helpers."""

    def test_verify_file_exists(self, tmp_path, capsys):
        """Test existence check with verbose error output."""
        from imgscale.utils.files import verify_file_exists

        existing = tmp_path / "a.png"
        existing.write_bytes(b"x")
        assert verify_file_exists(existing) is True
        assert verify_file_exists(tmp_path / "b.png", verbose=True) is False
        assert "does not exist" in capsys.readouterr().out

    def test_unique_filename_free(self, tmp_path):
        """Test that a free path is returned unchanged."""
        from imgscale.utils.files import get_unique_filename

        path = tmp_path / "out.jpg"
        assert get_unique_filename(path) == path

    def test_unique_filename_counter(self, tmp_path):
        """Test that taken names get the next free counter."""
        from imgscale.utils.files import get_unique_filename

        (tmp_path / "out.jpg").write_bytes(b"x")
        (tmp_path / "out_1.jpg").write_bytes(b"x")
        assert get_unique_filename(tmp_path / "out.jpg") == tmp_path / "out_2.jpg"


class TestProcessingContext:
    """Tests for ProcessingContext."""

    def test_run_switches_only(self):
        """Test that the context holds just the switches the pipeline reads."""
        import dataclasses
        from imgscale.core.base import ProcessingContext

        context = ProcessingContext()
        assert context.verbose is False
        assert context.workers == 1
        assert [f.name for f in dataclasses.fields(context)] == ["verbose", "workers"]


class TestPackage:
    """Tests for package-level imports."""

    def test_package_level_import(self):
        """Test the convenience exports."""
        import imgscale
        assert hasattr(imgscale, 'PixelBuffer')
        assert hasattr(imgscale, 'build_request')
        assert hasattr(imgscale, 'scale_image')
        assert imgscale.__version__ == "0.1.0"
