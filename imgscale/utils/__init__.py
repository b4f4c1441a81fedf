"""
Utilities module - Shared helper functions.

This module provides:
- Input file checks
- Output filename collision avoidance
"""

from imgscale.utils.files import verify_file_exists, get_unique_filename

__all__ = [
    "verify_file_exists",
    "get_unique_filename",
]
