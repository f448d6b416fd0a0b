"""
Model Module
============

Temporal background model and interest scoring.

Components:
    - InterestModel: Ring buffer of recent frames and their mean
    - Interest: Frame/mean pair with change mask and score
    - InterestReading: Per-frame score record for downstream consumers
"""

from interest_monitor.model.interest import (
    Interest,
    InterestModel,
    DEFAULT_CUTOFF,
    DEFAULT_MASK_WEIGHT,
)
from interest_monitor.model.reading import InterestReading

__all__ = [
    "Interest",
    "InterestModel",
    "InterestReading",
    "DEFAULT_CUTOFF",
    "DEFAULT_MASK_WEIGHT",
]
