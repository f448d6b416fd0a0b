"""
Interest Monitor Main Application
=================================

Command-line entry point: capture frames from a camera, score them
against the rolling background, and log the interest of every frame.

Usage:
    interest-monitor --device 0 --window 5
    interest-monitor --config config.yaml --dump --log-level DEBUG
    python -m interest_monitor.main --device /dev/video2 --max-frames 100
"""

import argparse
import logging
import sys
from typing import List, Optional

import yaml
from pydantic import ValidationError

from interest_monitor.config import Settings, load_config, setup_logging
from interest_monitor.capture import (
    CameraFrameSource,
    FrameCaptureError,
    ImageDecodeError,
)
from interest_monitor.model import InterestModel
from interest_monitor.observability import MaskDumper, MaskDumpError
from interest_monitor.pipeline import InterestPipeline


logger = logging.getLogger(__name__)


EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="interest-monitor",
        description="Detect brightening change in a live video stream",
    )
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--device", help="Camera index, device path, or video file/URL")
    parser.add_argument("--window", type=int, help="Frames averaged into the background")
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Write the change mask of every frame to disk",
    )
    parser.add_argument(
        "--max-frames",
        type=int,
        default=None,
        help="Stop after this many frames (default: run until interrupted)",
    )
    parser.add_argument("--log-level", help="Log level, e.g. DEBUG or INFO")
    return parser


def apply_args(settings: Settings, args: argparse.Namespace) -> Settings:
    """Overlay command-line arguments on loaded settings."""
    update = settings.model_dump()

    if args.device is not None:
        device = args.device
        update["capture"]["device"] = int(device) if device.isdigit() else device
    if args.window is not None:
        update["model"]["window"] = args.window
    if args.dump:
        update["observability"]["dump_enabled"] = True
    if args.log_level is not None:
        update["logging"]["level"] = args.log_level

    return Settings.model_validate(update)


def create_source(settings: Settings) -> CameraFrameSource:
    capture = settings.capture
    return CameraFrameSource(
        device=capture.device,
        width=capture.width,
        height=capture.height,
        fourcc=capture.fourcc,
        fps=capture.fps,
        frame_step=capture.frame_step,
        buffer_count=capture.buffer_count,
        resize=capture.resize,
        skip_errors=capture.skip_errors,
        max_consecutive_errors=capture.max_consecutive_errors,
    )


def create_pipeline(settings: Settings, source) -> InterestPipeline:
    model = InterestModel(
        width=settings.capture.width,
        height=settings.capture.height,
        window=settings.model.window,
        cutoff=settings.model.cutoff,
        mask_weight=settings.model.mask_weight,
    )
    dumper = MaskDumper(
        directory=settings.observability.dump_dir,
        prefix=settings.observability.dump_prefix,
        enabled=settings.observability.dump_enabled,
    )
    return InterestPipeline(
        source=source,
        model=model,
        dumper=dumper,
        log_every_n_frames=settings.observability.log_every_n_frames,
    )


def run(settings: Settings, max_frames: Optional[int] = None, source=None) -> int:
    """
    Run the capture loop.

    Args:
        settings: Loaded configuration
        max_frames: Stop after this many frames
        source: Frame source override. Defaults to the configured camera.

    Returns:
        Process exit code
    """
    logger.info(f"Starting {settings.agent.name} {settings.agent.version}")

    if source is None:
        source = create_source(settings)

    try:
        with source:
            pipeline = create_pipeline(settings, source)
            for _ in pipeline.run(max_frames=max_frames):
                pass
    except (FrameCaptureError, ImageDecodeError) as e:
        logger.error(f"Capture failed: {e}")
        return EXIT_ERROR
    except MaskDumpError as e:
        logger.error(f"Mask dump failed: {e}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return EXIT_INTERRUPTED

    logger.info("Shutdown complete")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = apply_args(load_config(args.config), args)
    except (ValidationError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_ERROR

    setup_logging(settings)
    return run(settings, max_frames=args.max_frames)


if __name__ == "__main__":
    sys.exit(main())
