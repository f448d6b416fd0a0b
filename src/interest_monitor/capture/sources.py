"""
Frame Sources
=============

Producers of decoded frames for the interest model.

This module provides:
    - FrameSource: Protocol implemented by all sources
    - CameraFrameSource: Live capture through OpenCV (V4L2, file or URL)
    - JpegDirectorySource: Replay of captured JPEG files in name order

Design Rules:
    - Sources are lazy; iteration opens the device if needed
    - A closed source can only be restarted by opening it again
    - Frames are emitted in capture order
    - Every `frame_step`-th captured frame is emitted, starting with the first
    - Read/decode failures raise unless `skip_errors` is set
"""

import logging
import time
from collections import deque
from pathlib import Path
from typing import Deque, Iterator, Optional, Protocol, Union

import cv2
import numpy as np

from interest_monitor.capture.decoder import (
    ImageDecodeError,
    bgr_to_frame,
    decode_jpeg,
)
from interest_monitor.capture.frame import CapturedFrame


logger = logging.getLogger(__name__)


JPEG_SUFFIXES = (".jpg", ".jpeg")


class FrameCaptureError(Exception):
    """Raised when a frame cannot be acquired from a source."""
    pass


class FrameSourceMetrics:
    """Metrics for frame source observability."""

    __slots__ = (
        "frames_read",
        "frames_emitted",
        "errors",
    )

    def __init__(self) -> None:
        self.frames_read: int = 0
        self.frames_emitted: int = 0
        self.errors: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "frames_read": self.frames_read,
            "frames_emitted": self.frames_emitted,
            "errors": self.errors,
        }


class FrameSource(Protocol):
    """
    Protocol for frame sources.

    Iterating a source yields CapturedFrame objects whose images have the
    width and height the source was configured with.
    """

    width: int
    height: int

    def open(self) -> None:
        ...

    def close(self) -> None:
        ...

    def __iter__(self) -> Iterator[CapturedFrame]:
        ...


class BaseFrameSource:
    """
    Shared iteration, frame stepping and error policy for sources.

    Subclasses implement `_open`, `_close`, `_skip` and `_next_image`.
    """

    def __init__(
        self,
        width: int,
        height: int,
        frame_step: int = 1,
        resize: bool = True,
        skip_errors: bool = False,
        max_consecutive_errors: int = 10,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame dimensions must be positive, got {width}x{height}")
        if frame_step < 1:
            raise ValueError("frame_step must be >= 1")
        if max_consecutive_errors < 1:
            raise ValueError("max_consecutive_errors must be >= 1")

        self.width = width
        self.height = height
        self.frame_step = frame_step
        self.resize = resize
        self.skip_errors = skip_errors
        self.max_consecutive_errors = max_consecutive_errors

        self._is_open: bool = False
        self.metrics = FrameSourceMetrics()

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> None:
        if self._is_open:
            return
        self._open()
        self._is_open = True

    def close(self) -> None:
        if not self._is_open:
            return
        self._close()
        self._is_open = False

    def __enter__(self) -> "BaseFrameSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[CapturedFrame]:
        self.open()
        consecutive_errors = 0
        first = True

        while self._is_open:
            try:
                if not first:
                    for _ in range(self.frame_step - 1):
                        if not self._skip():
                            return
                        self.metrics.frames_read += 1
                first = False

                image = self._next_image()
                if image is None:
                    return
                self.metrics.frames_read += 1
                self._check_shape(image)

            except (FrameCaptureError, ImageDecodeError) as e:
                self.metrics.errors += 1
                if not self.skip_errors:
                    raise
                consecutive_errors += 1
                logger.warning(
                    f"Skipping frame ({consecutive_errors}/"
                    f"{self.max_consecutive_errors} consecutive): {e}"
                )
                if consecutive_errors >= self.max_consecutive_errors:
                    raise FrameCaptureError(
                        f"Giving up after {consecutive_errors} consecutive errors"
                    ) from e
                continue

            consecutive_errors = 0
            frame = CapturedFrame(
                index=self.metrics.frames_emitted,
                timestamp=time.time(),
                image=image,
            )
            self.metrics.frames_emitted += 1
            yield frame

    def _check_shape(self, image: np.ndarray) -> None:
        expected = (3, self.height, self.width)
        if image.shape != expected:
            raise ImageDecodeError(
                f"Frame shape {image.shape} does not match expected {expected}"
            )

    def _target_size(self) -> dict:
        if self.resize:
            return {"width": self.width, "height": self.height}
        return {}

    # Subclass hooks

    def _open(self) -> None:
        raise NotImplementedError

    def _close(self) -> None:
        raise NotImplementedError

    def _skip(self) -> bool:
        """Advance past one frame without decoding. False at end of stream."""
        raise NotImplementedError

    def _next_image(self) -> Optional[np.ndarray]:
        """Read and decode one frame. None at end of stream."""
        raise NotImplementedError


class CameraFrameSource(BaseFrameSource):
    """
    OpenCV capture source.

    Requests the pixel format, resolution, rate and driver buffer count
    from the device. Devices are free to ignore these requests; frames at
    another resolution are resized when `resize` is set.

    Example:
        with CameraFrameSource(device=0, width=1280, height=720) as source:
            for frame in source:
                process(frame)
    """

    def __init__(
        self,
        device: Union[int, str] = 0,
        width: int = 1280,
        height: int = 720,
        fourcc: str = "MJPG",
        fps: float = 5.0,
        frame_step: int = 5,
        buffer_count: int = 4,
        resize: bool = True,
        skip_errors: bool = False,
        max_consecutive_errors: int = 10,
    ) -> None:
        """
        Initialize camera source.

        Args:
            device: Camera index, device path, or video file/URL
            width: Frame width in pixels
            height: Frame height in pixels
            fourcc: Four-character pixel format code
            fps: Requested capture rate
            frame_step: Emit one frame out of every N captured
            buffer_count: Driver-side capture buffers
            resize: Resize frames delivered at another resolution
            skip_errors: Skip failed frames instead of raising
            max_consecutive_errors: Consecutive skips before giving up
        """
        super().__init__(
            width=width,
            height=height,
            frame_step=frame_step,
            resize=resize,
            skip_errors=skip_errors,
            max_consecutive_errors=max_consecutive_errors,
        )
        if len(fourcc) != 4:
            raise ValueError(f"fourcc must be 4 characters, got {fourcc!r}")

        if isinstance(device, str) and device.isdigit():
            device = int(device)

        self.device = device
        self.fourcc = fourcc
        self.fps = fps
        self.buffer_count = buffer_count

        self._cap: Optional[cv2.VideoCapture] = None

    def _open(self) -> None:
        cap = cv2.VideoCapture(self.device)
        if not cap.isOpened():
            cap.release()
            raise FrameCaptureError(f"Failed to open capture device: {self.device!r}")

        cap.set(cv2.CAP_PROP_FOURCC, cv2.VideoWriter_fourcc(*self.fourcc))
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        cap.set(cv2.CAP_PROP_FPS, self.fps)
        cap.set(cv2.CAP_PROP_BUFFERSIZE, self.buffer_count)

        self._cap = cap

        logger.info(
            f"Opened capture device {self.device!r}: "
            f"{int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))}x"
            f"{int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))} "
            f"@ {cap.get(cv2.CAP_PROP_FPS):.1f} fps, step={self.frame_step}"
        )

    def _close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        logger.info(f"Closed capture device {self.device!r}")

    def _at_end_of_file(self) -> bool:
        # Live cameras report no frame count
        total = self._cap.get(cv2.CAP_PROP_FRAME_COUNT)
        return total > 0 and self._cap.get(cv2.CAP_PROP_POS_FRAMES) >= total

    def _skip(self) -> bool:
        if self._cap.grab():
            return True
        if self._at_end_of_file():
            return False
        raise FrameCaptureError(f"Failed to grab frame from {self.device!r}")

    def _next_image(self) -> Optional[np.ndarray]:
        ok, bgr = self._cap.read()
        if not ok or bgr is None:
            if self._at_end_of_file():
                logger.info(f"End of stream on {self.device!r}")
                return None
            raise FrameCaptureError(f"Failed to read frame from {self.device!r}")
        return bgr_to_frame(bgr, **self._target_size())


class JpegDirectorySource(BaseFrameSource):
    """
    Replay JPEG files from a directory in filename order.

    Filenames are expected to sort in capture order, e.g. frames saved
    by a camera as zero-padded sequence numbers or timestamps.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        width: int,
        height: int,
        frame_step: int = 1,
        resize: bool = True,
        skip_errors: bool = False,
        max_consecutive_errors: int = 10,
    ) -> None:
        super().__init__(
            width=width,
            height=height,
            frame_step=frame_step,
            resize=resize,
            skip_errors=skip_errors,
            max_consecutive_errors=max_consecutive_errors,
        )
        self.directory = Path(directory)
        self._pending: Deque[Path] = deque()

    def _open(self) -> None:
        if not self.directory.is_dir():
            raise FrameCaptureError(f"Not a directory: {self.directory}")

        self._pending = deque(sorted(
            path for path in self.directory.iterdir()
            if path.is_file() and path.suffix.lower() in JPEG_SUFFIXES
        ))
        logger.info(f"Replaying {len(self._pending)} images from {self.directory}")

    def _close(self) -> None:
        self._pending.clear()

    def _skip(self) -> bool:
        if not self._pending:
            return False
        self._pending.popleft()
        return True

    def _next_image(self) -> Optional[np.ndarray]:
        if not self._pending:
            return None

        path = self._pending.popleft()
        try:
            data = path.read_bytes()
        except OSError as e:
            raise FrameCaptureError(f"Failed to read {path}: {e}") from e

        try:
            return decode_jpeg(data, **self._target_size())
        except ImageDecodeError as e:
            raise ImageDecodeError(f"{path.name}: {e}") from e
