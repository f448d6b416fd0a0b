"""
Interest Reading
================

Per-frame record handed to downstream consumers.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class InterestReading:
    """
    Interest score for one processed frame.

    Attributes:
        frame_index: Index of the frame as emitted by the source
        timestamp: UNIX timestamp when the frame was captured
        score: Fraction of elements above the cutoff, [0, 1]
        count: Model frame counter after this update
    """

    frame_index: int
    timestamp: float
    score: float
    count: int

    def __post_init__(self) -> None:
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"score must be in [0, 1], got {self.score}")

    def __repr__(self) -> str:
        return (
            f"InterestReading(frame={self.frame_index}, "
            f"score={self.score:.4f}, "
            f"t={self.timestamp:.2f})"
        )

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "frame_index": self.frame_index,
            "timestamp": round(self.timestamp, 3),
            "score": round(self.score, 6),
            "count": self.count,
        }
