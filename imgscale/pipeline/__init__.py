"""
Pipeline module - Stage selection and end-to-end processing.
"""

from imgscale.pipeline.orchestrator import (
    build_filter_chain,
    apply_transforms,
    scale_image,
)

__all__ = [
    "build_filter_chain",
    "apply_transforms",
    "scale_image",
]
