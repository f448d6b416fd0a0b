"""
interest_monitor
================

Change detection for a live video stream against a rolling temporal mean.

Each captured frame is compared with the mean of the last few frames.
Pixels that brighten past a fixed cutoff form an interest mask, and the
fraction of such pixels is the frame's interest score.

Components:
    - model: Ring-buffer background model and interest scoring
    - capture: Camera and file frame sources, image decoding
    - observability: Debug mask dumps
    - pipeline: Synchronous pull loop tying them together

Example:
    from interest_monitor.model import InterestModel

    model = InterestModel(width=1280, height=720, window=5)
    interest = model.estimate_interest(frame)
    print(interest.overall())
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
