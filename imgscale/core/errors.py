"""
Exception types raised by imgscale.

Each error also derives from the builtin exception it specialises, so
callers catching ``ValueError`` or ``RuntimeError`` keep working.
"""


class ImgScaleError(Exception):
    """Base class for all imgscale errors."""


class UnsupportedFormatError(ImgScaleError, ValueError):
    """The output file extension does not map to a known codec."""


class DecodeError(ImgScaleError, RuntimeError):
    """The source image could not be read or decoded."""


class EncodeError(ImgScaleError, RuntimeError):
    """The encoder failed or the output file could not be written."""


class InvalidParameterError(ImgScaleError, ValueError):
    """A numeric parameter is missing, unparsable or out of range."""
