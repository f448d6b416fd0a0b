"""
Temporal Interest Model
=======================

Rolling background model for change detection.

Each incoming frame is compared against the mean of the last `window`
frames. Pixels that brighten by more than a fixed cutoff relative to that
mean are considered "interesting".

Key Design Decisions:
    - The background is the exact mean of a ring buffer of raw frames,
      not an incremental running average, so it never drifts
    - The first frame is copied into every slot, so the mean starts at
      that frame instead of being pulled toward black
    - Only brightening counts; darkening never sets the mask
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from pydantic import BaseModel, Field, model_validator

from interest_monitor.observability.dump import write_mask_image


logger = logging.getLogger(__name__)


CHANNELS = 3
DEFAULT_CUTOFF = 25.0
DEFAULT_MASK_WEIGHT = 10


class Interest(BaseModel):
    """
    A frame paired with the background it was compared against.

    Only valid for the update that produced it. The model does not keep
    a reference to it.

    Attributes:
        original: The frame just observed, (3, H, W) float32
        mean: Temporal mean over the current window, (3, H, W) float32
        cutoff: Brightening that counts as change
        mask_weight: Value written into changed mask cells
    """

    original: np.ndarray = Field(
        ...,
        description="Observed frame (3, H, W) array",
    )

    mean: np.ndarray = Field(
        ...,
        description="Background mean (3, H, W) array",
    )

    cutoff: float = Field(default=DEFAULT_CUTOFF, ge=0)
    mask_weight: int = Field(default=DEFAULT_MASK_WEIGHT, ge=1, le=255)

    class Config:
        """Allow numpy arrays in Pydantic model."""
        arbitrary_types_allowed = True
        frozen = True

    @model_validator(mode="after")
    def _check_shapes(self) -> "Interest":
        """Frame and mean must share one (C, H, W) shape; no broadcasting."""
        if self.original.ndim != 3:
            raise ValueError(f"original must be (C, H, W), got {self.original.shape}")
        if self.original.shape != self.mean.shape:
            raise ValueError(
                f"mean shape {self.mean.shape} does not match "
                f"original shape {self.original.shape}"
            )
        return self

    @property
    def deviation(self) -> np.ndarray:
        """Signed per-element difference between frame and background."""
        return self.original - self.mean

    def _changed(self) -> np.ndarray:
        # Strictly greater, one-sided
        return self.deviation > self.cutoff

    def threshold(self) -> np.ndarray:
        """
        Compute the change mask.

        Returns:
            uint8 array shaped like the frame, `mask_weight` where the
            pixel brightened by more than `cutoff`, 0 elsewhere.
        """
        return np.where(self._changed(), self.mask_weight, 0).astype(np.uint8)

    def overall(self) -> float:
        """
        Fraction of elements that brightened by more than `cutoff`.

        Returns:
            Interest score in [0, 1]
        """
        changed = np.count_nonzero(self._changed())
        return float(changed) / float(self.original.size)

    def dump(
        self,
        directory: Union[str, Path] = ".",
        prefix: str = "original",
    ) -> Path:
        """
        Write the change mask as an image named by the current time.

        Args:
            directory: Destination directory
            prefix: Filename prefix

        Returns:
            Path of the written file

        Raises:
            MaskDumpError: If the image cannot be written
        """
        return write_mask_image(self.threshold(), directory=directory, prefix=prefix)


class InterestModel:
    """
    Ring buffer of recent frames and their temporal mean.

    Not safe for concurrent use: frames must be fed from a single caller
    in capture order.

    Attributes:
        width: Frame width in pixels
        height: Frame height in pixels
        window: Number of frames averaged into the background
        count: Frames seen so far
    """

    def __init__(
        self,
        width: int,
        height: int,
        window: int,
        cutoff: float = DEFAULT_CUTOFF,
        mask_weight: int = DEFAULT_MASK_WEIGHT,
    ) -> None:
        """
        Initialize the model.

        Args:
            width: Frame width in pixels, > 0
            height: Frame height in pixels, > 0
            window: Ring buffer capacity, > 0
            cutoff: Brightening that counts as change
            mask_weight: Value written into changed mask cells

        Raises:
            ValueError: If a dimension or the window is not positive
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame dimensions must be positive, got {width}x{height}")
        if window <= 0:
            raise ValueError(f"window must be > 0, got {window}")

        self._width = width
        self._height = height
        self._window = window
        self._cutoff = cutoff
        self._mask_weight = mask_weight

        self._buffer = np.zeros((window, CHANNELS, height, width), dtype=np.float32)
        self._count: int = 0

        logger.info(
            f"InterestModel initialized: {width}x{height}, "
            f"window={window}, cutoff={cutoff}"
        )

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def window(self) -> int:
        return self._window

    @property
    def count(self) -> int:
        """Frames seen so far."""
        return self._count

    @property
    def frame_shape(self) -> tuple:
        """Expected shape of a single frame, (3, H, W)."""
        return (CHANNELS, self._height, self._width)

    @property
    def is_warm(self) -> bool:
        """Whether every slot holds a distinct observed frame."""
        return self._count >= self._window

    def estimate_interest(self, frame: np.ndarray) -> Interest:
        """
        Add a frame to the ring buffer and compare it to the new mean.

        Args:
            frame: (3, H, W) RGB samples matching the model dimensions

        Returns:
            Interest pairing the frame with the updated mean

        Raises:
            ValueError: If the frame shape does not match the model
        """
        if frame.shape != self.frame_shape:
            raise ValueError(
                f"Frame shape {frame.shape} does not match model shape "
                f"{self.frame_shape}"
            )

        # Always a copy, never an alias of the caller's array
        original = np.array(frame, dtype=np.float32)

        if self._count == 0:
            self._buffer[:] = original
        else:
            self._buffer[self._count % self._window] = original

        self._count += 1

        mean = self._buffer.mean(axis=0, dtype=np.float64).astype(np.float32)

        original.flags.writeable = False
        mean.flags.writeable = False

        return Interest(
            original=original,
            mean=mean,
            cutoff=self._cutoff,
            mask_weight=self._mask_weight,
        )

    def __repr__(self) -> str:
        return (
            f"InterestModel(width={self._width}, height={self._height}, "
            f"window={self._window}, count={self._count})"
        )
