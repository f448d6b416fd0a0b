"""
Interest Pipeline
=================

Synchronous pull loop from a frame source through the interest model.

This pipeline:
    - Pulls frames from the source in capture order
    - Feeds each frame to the InterestModel
    - Logs the interest score
    - Optionally dumps the change mask
    - Yields an InterestReading per frame

Key Design Decisions:
    - Single-threaded: the model has exactly one writer
    - Source and dump failures propagate to the caller
    - The caller stops by no longer pulling readings
"""

import logging
from typing import Iterable, Iterator, Optional

from interest_monitor.capture.frame import CapturedFrame
from interest_monitor.model.interest import InterestModel
from interest_monitor.model.reading import InterestReading
from interest_monitor.observability.dump import MaskDumper


logger = logging.getLogger(__name__)


class PipelineMetrics:
    """Metrics for pipeline observability."""

    __slots__ = (
        "frames_processed",
        "last_score",
        "peak_score",
    )

    def __init__(self) -> None:
        self.frames_processed: int = 0
        self.last_score: float = 0.0
        self.peak_score: float = 0.0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "frames_processed": self.frames_processed,
            "last_score": round(self.last_score, 6),
            "peak_score": round(self.peak_score, 6),
        }


class InterestPipeline:
    """
    Drives frames from a source through an InterestModel.

    Attributes:
        source: Iterable of CapturedFrame in capture order
        model: Model receiving every frame
        dumper: Optional gated mask writer
        metrics: Operational metrics

    Example:
        pipeline = InterestPipeline(source, InterestModel(1280, 720, 5))
        for reading in pipeline.run():
            if reading.score > 0.01:
                start_recording()
    """

    def __init__(
        self,
        source: Iterable[CapturedFrame],
        model: InterestModel,
        dumper: Optional[MaskDumper] = None,
        log_every_n_frames: int = 1,
    ) -> None:
        if log_every_n_frames < 1:
            raise ValueError("log_every_n_frames must be >= 1")

        self.source = source
        self.model = model
        self.dumper = dumper
        self.log_every_n_frames = log_every_n_frames
        self.metrics = PipelineMetrics()

    @property
    def masks_dumped(self) -> int:
        """Masks written by the dumper, 0 without one."""
        return self.dumper.dump_count if self.dumper is not None else 0

    def process(self, frame: CapturedFrame) -> InterestReading:
        """
        Apply one frame to the model.

        Args:
            frame: Decoded frame matching the model dimensions

        Returns:
            InterestReading for this frame

        Raises:
            ValueError: If the frame shape does not match the model
            MaskDumpError: If dumping is enabled and the write fails
        """
        interest = self.model.estimate_interest(frame.image)
        score = interest.overall()

        self.metrics.frames_processed += 1
        self.metrics.last_score = score
        self.metrics.peak_score = max(self.metrics.peak_score, score)

        if self.metrics.frames_processed % self.log_every_n_frames == 0:
            logger.debug(f"Interest: {score}")

        if self.dumper is not None and self.dumper.is_enabled:
            self.dumper.dump(interest)

        return InterestReading(
            frame_index=frame.index,
            timestamp=frame.timestamp,
            score=score,
            count=self.model.count,
        )

    def run(self, max_frames: Optional[int] = None) -> Iterator[InterestReading]:
        """
        Process frames until the source ends or `max_frames` is reached.

        Args:
            max_frames: Stop after this many frames. None = run forever.

        Yields:
            InterestReading per processed frame
        """
        if max_frames is not None and max_frames <= 0:
            return

        logger.info("Interest pipeline started")

        try:
            for frame in self.source:
                yield self.process(frame)
                if max_frames is not None and self.metrics.frames_processed >= max_frames:
                    break
        finally:
            logger.info(
                f"Interest pipeline stopped: {self.metrics.to_dict()}, "
                f"masks_dumped={self.masks_dumped}"
            )
