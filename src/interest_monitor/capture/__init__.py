"""
Capture Module
==============

Frame acquisition and decoding for the interest monitor.

This module provides the ingestion layer:
    - CapturedFrame: Typed decoded frame (internal representation)
    - CameraFrameSource: OpenCV capture device source
    - JpegDirectorySource: Replay of JPEG files
    - decode_jpeg / bgr_to_frame: Conversion to channel-first RGB frames

Example:
    from interest_monitor.capture import CameraFrameSource

    with CameraFrameSource(device=0, width=1280, height=720) as source:
        for frame in source:
            process(frame.image)
"""

from interest_monitor.capture.frame import CapturedFrame
from interest_monitor.capture.decoder import (
    ImageDecodeError,
    bgr_to_frame,
    decode_jpeg,
    frame_to_image,
)
from interest_monitor.capture.sources import (
    BaseFrameSource,
    CameraFrameSource,
    FrameCaptureError,
    FrameSource,
    FrameSourceMetrics,
    JpegDirectorySource,
)


__all__ = [
    "CapturedFrame",
    "ImageDecodeError",
    "bgr_to_frame",
    "decode_jpeg",
    "frame_to_image",
    "BaseFrameSource",
    "CameraFrameSource",
    "FrameCaptureError",
    "FrameSource",
    "FrameSourceMetrics",
    "JpegDirectorySource",
]
