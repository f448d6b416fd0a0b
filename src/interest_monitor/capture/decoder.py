"""
Image Decoder
=============

Conversion between encoded/OpenCV images and model frames.

Design Rules:
    - This is the ONLY place in the codebase that decodes images
    - Model frames are channel-first RGB: (3, H, W), uint8
    - Validates shape and dtype
    - Fails fast on corrupt frames
"""

import logging
from typing import Optional

import cv2
import numpy as np


logger = logging.getLogger(__name__)


class ImageDecodeError(Exception):
    """Raised when image decoding fails."""
    pass


def bgr_to_frame(
    bgr: np.ndarray,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> np.ndarray:
    """
    Convert an OpenCV BGR image to a channel-first RGB frame.

    Args:
        bgr: Image as np.ndarray (H, W, 3), dtype=uint8
        width: Target width. Resized when both width and height are given.
        height: Target height

    Returns:
        RGB frame as np.ndarray (3, H, W), dtype=uint8

    Raises:
        ImageDecodeError: If the image has an invalid shape or dtype
    """
    if bgr.ndim != 3 or bgr.shape[2] != 3:
        raise ImageDecodeError(f"Invalid image shape: {bgr.shape}")

    if bgr.dtype != np.uint8:
        raise ImageDecodeError(f"Invalid dtype: {bgr.dtype}")

    if width is not None and height is not None and bgr.shape[:2] != (height, width):
        bgr = cv2.resize(bgr, (width, height), interpolation=cv2.INTER_AREA)

    rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
    return np.ascontiguousarray(np.transpose(rgb, (2, 0, 1)))


def decode_jpeg(
    data: bytes,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> np.ndarray:
    """
    Decode JPEG bytes to a channel-first RGB frame.

    Args:
        data: Encoded JPEG image
        width: Optional target width
        height: Optional target height

    Returns:
        RGB frame as np.ndarray (3, H, W), dtype=uint8

    Raises:
        ImageDecodeError: If decoding fails or image is invalid
    """
    if not data:
        raise ImageDecodeError("Empty image buffer")

    nparr = np.frombuffer(data, np.uint8)

    try:
        bgr = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise ImageDecodeError(f"cv2.imdecode failed: {e}") from e

    if bgr is None:
        raise ImageDecodeError("Failed to decode image: cv2.imdecode returned None")

    return bgr_to_frame(bgr, width=width, height=height)


def frame_to_image(frame: np.ndarray) -> np.ndarray:
    """
    Reorder a (3, H, W) frame into a viewable (H, W, 3) uint8 image.

    Values are cast, not rescaled.

    Raises:
        ValueError: If the frame is not channel-first with 3 channels
    """
    if frame.ndim != 3 or frame.shape[0] != 3:
        raise ValueError(f"Expected (3, H, W) frame, got {frame.shape}")

    return np.ascontiguousarray(np.transpose(frame, (1, 2, 0))).astype(np.uint8)
