"""
Frame Data Model
================

Internal frame representation for the capture pipeline.

This module defines the typed CapturedFrame class that is used as the
interface between frame sources and the interest model.

Design Rules:
    - This is the ONLY frame format passed to downstream stages
    - The image is already decoded to channel-first RGB
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class CapturedFrame:
    """
    Decoded frame from a frame source.

    Attributes:
        index: Monotonically increasing index of emitted frames
        timestamp: UNIX timestamp when the frame was read
        image: RGB samples, (3, H, W), dtype=uint8
    """

    index: int
    timestamp: float
    image: np.ndarray

    @property
    def height(self) -> int:
        return int(self.image.shape[1])

    @property
    def width(self) -> int:
        return int(self.image.shape[2])

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the full image."""
        return (
            f"CapturedFrame(index={self.index}, "
            f"timestamp={self.timestamp:.3f}, "
            f"size={self.width}x{self.height})"
        )
