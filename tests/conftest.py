"""
Test Configuration
==================

Pytest fixtures and test configuration for interest_monitor.
"""

import numpy as np
import pytest


@pytest.fixture
def make_frame():
    """Build a (3, H, W) uint8 frame filled with a constant value."""

    def _make(value: float = 0, width: int = 4, height: int = 3) -> np.ndarray:
        return np.full((3, height, width), value, dtype=np.uint8)

    return _make


@pytest.fixture
def random_frames():
    """Deterministic sequence of random (3, 3, 4) uint8 frames."""
    rng = np.random.default_rng(seed=7)
    return [
        rng.integers(0, 256, size=(3, 3, 4), dtype=np.uint8)
        for _ in range(12)
    ]


@pytest.fixture
def small_model():
    """InterestModel for 4x3 frames with a window of 3."""
    from interest_monitor.model import InterestModel

    return InterestModel(width=4, height=3, window=3)
