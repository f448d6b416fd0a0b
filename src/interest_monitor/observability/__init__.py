"""
Observability Module
====================

Debug artifacts for the interest monitor.

This module provides:
    - MaskDumper: Writes change masks as images (gated)
    - write_mask_image: Single-shot mask writer

DESIGN RULES:
    - Does NOT influence the model
    - Zero cost when dumping is disabled
"""

from interest_monitor.observability.dump import (
    MaskDumper,
    MaskDumpError,
    write_mask_image,
)


__all__ = [
    "MaskDumper",
    "MaskDumpError",
    "write_mask_image",
]
