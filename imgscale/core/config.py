"""
Configuration management for imgscale.

The TransformRequest is the single immutable description of one run. Raw
values from the command line, JSON presets or environment variables go
through ``build_request``, which validates them, substitutes documented
defaults for anything invalid and reports what it replaced.
"""

import json
import math
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any

from imgscale.core.errors import InvalidParameterError


DEFAULT_SCALE = 2.0
DEFAULT_QUALITY = 85
DEFAULT_SATURATION = 1.0
DEFAULT_SHARPEN = 0.0
DEFAULT_BRIGHTNESS = 0.0
DEFAULT_CONTRAST = 0.0

MAX_SCALE = 10.0

# Below this magnitude a stage is a no-op and is skipped entirely
EPSILON = 0.01

REQUEST_KEYS = (
    "scale",
    "quality",
    "saturation",
    "sharpen",
    "brightness",
    "contrast",
    "mirror_horizontal",
    "mirror_vertical",
)


@dataclass(frozen=True)
class TransformRequest:
    """
    Which optional transforms run and with what parameters.

    Example:
        >>> req = TransformRequest(saturation=1.4, mirror_horizontal=True)
        >>> req.saturation_active, req.sharpen_active
        (True, False)
    """
    sharpen: bool = False
    sharpen_strength: float = DEFAULT_SHARPEN
    saturation: float = DEFAULT_SATURATION
    brightness: float = DEFAULT_BRIGHTNESS   # [-1, 1]
    contrast: float = DEFAULT_CONTRAST       # [-1, 1]
    mirror_horizontal: bool = False
    mirror_vertical: bool = False
    scale: float = DEFAULT_SCALE
    quality: int = DEFAULT_QUALITY

    @property
    def sharpen_active(self) -> bool:
        return self.sharpen and abs(self.sharpen_strength) > EPSILON

    @property
    def saturation_active(self) -> bool:
        return abs(self.saturation - 1.0) > EPSILON

    @property
    def brightness_contrast_active(self) -> bool:
        return abs(self.brightness) > EPSILON or abs(self.contrast) > EPSILON

    def to_dict(self) -> dict:
        """Convert to a dictionary suitable for a JSON preset."""
        data = asdict(self)
        data["sharpen"] = self.sharpen_strength if self.sharpen else DEFAULT_SHARPEN
        del data["sharpen_strength"]
        return data


# =============================================================================
# Validators
# =============================================================================

def _to_float(value: Any, label: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"{label} value '{value}' is not a number")
    if not math.isfinite(result):
        raise InvalidParameterError(f"{label} value '{value}' is not finite")
    return result


def validate_scale(value: Any) -> float:
    """Scaling factor, strictly between 0 and 10."""
    scale = _to_float(value, "Scaling factor")
    if scale <= 0 or scale >= MAX_SCALE:
        raise InvalidParameterError(
            f"Scaling factor must be between 0 and {MAX_SCALE:g} (exclusive), got {value}"
        )
    return scale


def validate_quality(value: Any) -> int:
    """JPEG quality, an integer between 1 and 100."""
    try:
        quality = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidParameterError(
            f"JPEG quality must be an integer between 1 and 100, got '{value}'"
        )
    if quality < 1 or quality > 100:
        raise InvalidParameterError(
            f"JPEG quality must be an integer between 1 and 100, got {quality}"
        )
    return quality


def validate_saturation(value: Any) -> float:
    """Saturation multiplier, 0 (greyscale) or more."""
    saturation = _to_float(value, "Saturation")
    if saturation < 0:
        raise InvalidParameterError(f"Saturation must not be negative, got {value}")
    return saturation


def validate_sharpen(value: Any) -> float:
    """Sharpen strength, any finite number."""
    return _to_float(value, "Sharpen")


def validate_unit_range(value: Any, label: str) -> float:
    """A value in [-1, 1] such as brightness or contrast."""
    result = _to_float(value, label)
    if result < -1.0 or result > 1.0:
        raise InvalidParameterError(f"{label} must be between -1 and 1, got {value}")
    return result


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "on")
    return bool(value)


def build_request(
    scale: Any = None,
    quality: Any = None,
    saturation: Any = None,
    sharpen: Any = None,
    brightness: Any = None,
    contrast: Any = None,
    mirror_horizontal: Any = False,
    mirror_vertical: Any = False,
) -> tuple[TransformRequest, list[str]]:
    """
    Build a TransformRequest from raw values.

    ``None`` means "not given" and silently selects the default. Invalid
    values are replaced by their default and described in the returned
    warnings; they never raise.

    Args:
        scale: Scaling factor (default 2.0)
        quality: JPEG quality (default 85)
        saturation: Saturation multiplier (default 1.0)
        sharpen: Sharpen strength; any valid value enables sharpening
        brightness: Brightness offset in [-1, 1]
        contrast: Contrast offset in [-1, 1]
        mirror_horizontal: Mirror left to right
        mirror_vertical: Mirror top to bottom

    Returns:
        (request, warnings)
    """
    warnings: list[str] = []

    def checked(raw, validator, default):
        if raw is None:
            return default, False
        try:
            return validator(raw), True
        except InvalidParameterError as e:
            warnings.append(f"{e}; using {default}")
            return default, False

    scale_value, _ = checked(scale, validate_scale, DEFAULT_SCALE)
    quality_value, _ = checked(quality, validate_quality, DEFAULT_QUALITY)
    saturation_value, _ = checked(saturation, validate_saturation, DEFAULT_SATURATION)
    sharpen_value, sharpen_given = checked(sharpen, validate_sharpen, DEFAULT_SHARPEN)
    brightness_value, _ = checked(
        brightness, lambda v: validate_unit_range(v, "Brightness"), DEFAULT_BRIGHTNESS
    )
    contrast_value, _ = checked(
        contrast, lambda v: validate_unit_range(v, "Contrast"), DEFAULT_CONTRAST
    )

    request = TransformRequest(
        sharpen=sharpen_given,
        sharpen_strength=sharpen_value,
        saturation=saturation_value,
        brightness=brightness_value,
        contrast=contrast_value,
        mirror_horizontal=_to_bool(mirror_horizontal),
        mirror_vertical=_to_bool(mirror_vertical),
        scale=scale_value,
        quality=quality_value,
    )
    return request, warnings


# =============================================================================
# Presets
# =============================================================================

def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load a JSON preset.

    Only keys accepted by ``build_request`` are returned; values are left
    raw so they go through the same validation as command line input.

    Raises:
        FileNotFoundError: If the preset file doesn't exist
        json.JSONDecodeError: If the JSON is invalid
        ValueError: If the top level is not an object
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a JSON object: {path}")
    return {key: data[key] for key in REQUEST_KEYS if key in data}


def save_config(values: TransformRequest | dict, path: str | Path) -> None:
    """Save a request or raw values as a JSON preset."""
    if isinstance(values, TransformRequest):
        values = values.to_dict()
    path = Path(path)
    with open(path, "w") as f:
        json.dump(values, f, indent=2)


def create_example_config(path: str | Path = "imgscale.json") -> TransformRequest:
    """
    Write an example preset file.

    Returns:
        The request the preset describes
    """
    request = TransformRequest(
        sharpen=True,
        sharpen_strength=0.5,
        saturation=1.2,
        brightness=0.05,
        contrast=0.1,
        scale=DEFAULT_SCALE,
        quality=90,
    )
    save_config(request, path)
    print(f"Created example configuration: {path}")
    return request


def get_env_config(prefix: str = "IMGSCALE_") -> dict[str, Any]:
    """
    Get request values from environment variables.

    Variable names are lowercased with the prefix removed; only known
    request keys are kept.

    Example:
        IMGSCALE_QUALITY=92 -> {"quality": "92"}
    """
    config = {}
    for key, value in os.environ.items():
        if key.startswith(prefix):
            config_key = key[len(prefix):].lower()
            if config_key in REQUEST_KEYS:
                config[config_key] = value
    return config
