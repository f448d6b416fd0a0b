"""
Interest Tests
==============

Change mask and score derivation from a frame/mean pair.
"""

import re

import cv2
import numpy as np
import pytest

from interest_monitor.model import Interest
from interest_monitor.observability import MaskDumpError


def _interest(original, mean, **kwargs) -> Interest:
    return Interest(
        original=np.asarray(original, dtype=np.float32),
        mean=np.asarray(mean, dtype=np.float32),
        **kwargs,
    )


class TestThreshold:
    """Tests for the change mask."""

    def test_hand_computed_score(self):
        """Two of four pixels above the cutoff give a score of 0.5."""
        interest = _interest(
            original=[[[100.0, 0.0], [60.0, 30.0]]],
            mean=[[[10.0, 0.0], [20.0, 10.0]]],
        )

        mask = interest.threshold()
        np.testing.assert_array_equal(mask, [[[10, 0], [10, 0]]])
        assert interest.overall() == 0.5

    def test_cutoff_is_strict(self):
        """A deviation of exactly the cutoff does not count."""
        interest = _interest(
            original=[[[25.0, 25.5]]],
            mean=[[[0.0, 0.0]]],
        )

        np.testing.assert_array_equal(interest.threshold(), [[[0, 10]]])
        assert interest.overall() == 0.5

    def test_darkening_ignored(self):
        """Pixels darker than the background never set the mask."""
        interest = _interest(
            original=np.zeros((3, 2, 2)),
            mean=np.full((3, 2, 2), 200.0),
        )

        assert not interest.threshold().any()
        assert interest.overall() == 0.0

    def test_mask_dtype_and_shape(self):
        """Mask is uint8 and shaped like the frame."""
        interest = _interest(
            original=np.full((3, 5, 7), 100.0),
            mean=np.zeros((3, 5, 7)),
        )

        mask = interest.threshold()
        assert mask.dtype == np.uint8
        assert mask.shape == (3, 5, 7)
        assert (mask == 10).all()

    def test_custom_cutoff_and_weight(self):
        """Reconfigured cutoff and weight are honored."""
        interest = _interest(
            original=[[[10.0, 3.0]]],
            mean=[[[0.0, 0.0]]],
            cutoff=5.0,
            mask_weight=200,
        )

        np.testing.assert_array_equal(interest.threshold(), [[[200, 0]]])


class TestOverall:
    """Tests for the scalar interest score."""

    def test_matches_mask(self):
        """Score is the fraction of nonzero mask elements."""
        rng = np.random.default_rng(seed=3)
        interest = _interest(
            original=rng.uniform(0, 255, size=(3, 6, 8)),
            mean=rng.uniform(0, 255, size=(3, 6, 8)),
        )

        expected = np.count_nonzero(interest.threshold()) / (3 * 6 * 8)
        assert interest.overall() == pytest.approx(expected)
        assert 0.0 <= interest.overall() <= 1.0

    def test_idempotent(self):
        """Repeated calls return identical results."""
        rng = np.random.default_rng(seed=11)
        interest = _interest(
            original=rng.uniform(0, 255, size=(3, 4, 4)),
            mean=rng.uniform(0, 255, size=(3, 4, 4)),
        )

        first_mask = interest.threshold()
        first_score = interest.overall()
        for _ in range(3):
            np.testing.assert_array_equal(interest.threshold(), first_mask)
            assert interest.overall() == first_score

    def test_rejects_mismatched_shapes(self):
        """A mean that would broadcast against the frame is refused."""
        with pytest.raises(ValueError, match="does not match"):
            _interest(original=np.full((3, 1, 1), 100.0), mean=np.zeros((3, 2, 2)))

    def test_rejects_flat_arrays(self):
        with pytest.raises(ValueError):
            _interest(original=np.zeros(4), mean=np.zeros(4))

    def test_is_float(self):
        interest = _interest(original=np.zeros((3, 1, 1)), mean=np.zeros((3, 1, 1)))
        assert isinstance(interest.overall(), float)


class TestDump:
    """Tests for writing the mask as an image."""

    def test_writes_timestamped_jpeg(self, tmp_path):
        """The mask is written as an (H, W, 3) image named by milliseconds."""
        original = np.zeros((3, 16, 24))
        original[:, :8, :] = 200.0
        interest = _interest(original=original, mean=np.zeros((3, 16, 24)))

        path = interest.dump(directory=tmp_path)

        assert path.parent == tmp_path
        assert re.fullmatch(r"original-\d{13}\.jpeg", path.name)
        image = cv2.imread(str(path))
        assert image.shape == (16, 24, 3)

    def test_custom_prefix(self, tmp_path):
        interest = _interest(original=np.zeros((3, 8, 8)), mean=np.zeros((3, 8, 8)))
        path = interest.dump(directory=tmp_path, prefix="mask")
        assert path.name.startswith("mask-")
        assert path.exists()

    def test_write_failure_surfaces(self, tmp_path):
        """Writing into a missing directory raises instead of passing silently."""
        interest = _interest(original=np.zeros((3, 8, 8)), mean=np.zeros((3, 8, 8)))

        with pytest.raises(MaskDumpError):
            interest.dump(directory=tmp_path / "missing")
