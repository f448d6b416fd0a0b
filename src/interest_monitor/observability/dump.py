"""
Mask Dump
=========

Write change masks to disk as viewable images for debugging.

Dumps are PURELY DESCRIPTIVE. They do not feed back into the model.

GATED BY CONFIG FLAG. Zero cost when disabled.
"""

import logging
import time
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

from interest_monitor.capture.decoder import frame_to_image


logger = logging.getLogger(__name__)


class MaskDumpError(Exception):
    """Raised when a mask image cannot be written."""
    pass


def write_mask_image(
    mask: np.ndarray,
    directory: Union[str, Path] = ".",
    prefix: str = "original",
) -> Path:
    """
    Write a (3, H, W) mask as a JPEG named by wall-clock milliseconds.

    Args:
        mask: Channel-first uint8 mask
        directory: Destination directory (must exist)
        prefix: Filename prefix

    Returns:
        Path of the written file

    Raises:
        MaskDumpError: If the mask cannot be rendered or written
    """
    try:
        rgb = frame_to_image(mask)
    except ValueError as e:
        raise MaskDumpError(f"Cannot render mask: {e}") from e

    now_ms = int(time.time() * 1000)
    path = Path(directory) / f"{prefix}-{now_ms}.jpeg"

    try:
        written = cv2.imwrite(str(path), cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR))
    except cv2.error as e:
        raise MaskDumpError(f"Failed to write {path}: {e}") from e

    if not written:
        raise MaskDumpError(f"Failed to write {path}: cv2.imwrite returned False")

    logger.debug(f"Wrote mask image: {path}")
    return path


class MaskDumper:
    """
    Gated writer for change masks.

    Does nothing when disabled.
    """

    def __init__(
        self,
        directory: Union[str, Path] = ".",
        prefix: str = "original",
        enabled: bool = False,
    ) -> None:
        """
        Initialize mask dumper.

        Args:
            directory: Destination directory, created if missing
            prefix: Filename prefix
            enabled: Whether dumps are written
        """
        self.directory = Path(directory)
        self.prefix = prefix
        self.enabled = enabled
        self.dump_count: int = 0

        if enabled:
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise MaskDumpError(f"Cannot create {self.directory}: {e}") from e
            logger.info(f"MaskDumper enabled: writing to {self.directory.resolve()}")
        else:
            logger.info("MaskDumper disabled (zero cost)")

    def dump(self, interest) -> Optional[Path]:
        """
        Write the threshold mask of an Interest.

        Args:
            interest: Result exposing `threshold()`

        Returns:
            Path written, or None when disabled

        Raises:
            MaskDumpError: If the image cannot be written
        """
        if not self.enabled:
            return None

        path = write_mask_image(
            interest.threshold(),
            directory=self.directory,
            prefix=self.prefix,
        )
        self.dump_count += 1
        return path

    @property
    def is_enabled(self) -> bool:
        """Check if dumping is enabled."""
        return self.enabled
