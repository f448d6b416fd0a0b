"""
Decoder Tests
=============

JPEG decoding and axis/color conversion.
"""

import cv2
import numpy as np
import pytest

from interest_monitor.capture import (
    ImageDecodeError,
    bgr_to_frame,
    decode_jpeg,
    frame_to_image,
)


def _solid_bgr(b: int, g: int, r: int, width: int = 16, height: int = 8) -> np.ndarray:
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:] = (b, g, r)
    return image


class TestBgrToFrame:
    """Tests for OpenCV image conversion."""

    def test_channel_first_rgb(self):
        """BGR (H, W, 3) becomes RGB (3, H, W)."""
        frame = bgr_to_frame(_solid_bgr(10, 20, 30))

        assert frame.shape == (3, 8, 16)
        assert frame.dtype == np.uint8
        assert frame[0, 0, 0] == 30  # R
        assert frame[1, 0, 0] == 20  # G
        assert frame[2, 0, 0] == 10  # B

    def test_resize(self):
        frame = bgr_to_frame(_solid_bgr(0, 0, 0), width=8, height=4)
        assert frame.shape == (3, 4, 8)

    def test_rejects_grayscale(self):
        with pytest.raises(ImageDecodeError):
            bgr_to_frame(np.zeros((8, 16), dtype=np.uint8))

    def test_rejects_float(self):
        with pytest.raises(ImageDecodeError):
            bgr_to_frame(np.zeros((8, 16, 3), dtype=np.float32))


class TestDecodeJpeg:
    """Tests for JPEG decoding."""

    def test_decodes_encoded_image(self):
        ok, encoded = cv2.imencode(".jpg", _solid_bgr(0, 0, 200))
        assert ok

        frame = decode_jpeg(encoded.tobytes())

        assert frame.shape == (3, 8, 16)
        # JPEG is lossy; red dominates
        assert frame[0].mean() > 150
        assert frame[2].mean() < 50

    def test_decode_with_resize(self):
        ok, encoded = cv2.imencode(".jpg", _solid_bgr(50, 50, 50))
        frame = decode_jpeg(encoded.tobytes(), width=4, height=2)
        assert frame.shape == (3, 2, 4)

    def test_corrupt_data(self):
        with pytest.raises(ImageDecodeError):
            decode_jpeg(b"\xff\xd8not really a jpeg")

    def test_empty_data(self):
        with pytest.raises(ImageDecodeError):
            decode_jpeg(b"")


class TestFrameToImage:
    """Tests for rendering frames."""

    def test_reorders_axes(self):
        frame = np.zeros((3, 2, 5), dtype=np.float32)
        frame[0] = 7.0

        image = frame_to_image(frame)

        assert image.shape == (2, 5, 3)
        assert image.dtype == np.uint8
        assert (image[..., 0] == 7).all()
        assert image.flags["C_CONTIGUOUS"]

    def test_rejects_wrong_layout(self):
        with pytest.raises(ValueError):
            frame_to_image(np.zeros((2, 5, 3)))
