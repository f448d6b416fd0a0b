"""
Interest Monitor Configuration
==============================

This module handles configuration loading for the interest monitor.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    INTEREST_DEVICE        -> capture.device
    INTEREST_WIDTH         -> capture.width
    INTEREST_HEIGHT        -> capture.height
    INTEREST_FPS           -> capture.fps
    INTEREST_FRAME_STEP    -> capture.frame_step
    INTEREST_WINDOW        -> model.window
    INTEREST_CUTOFF        -> model.cutoff
    INTEREST_DUMP_ENABLED  -> observability.dump_enabled
    INTEREST_DUMP_DIR      -> observability.dump_dir
    INTEREST_LOG_LEVEL     -> logging.level

Example:
    from interest_monitor.config import load_config

    settings = load_config("config.yaml")
    print(settings.capture.device)
    print(settings.model.window)
"""

import os
import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class AgentConfig(BaseModel):
    """Process identification configuration."""

    name: str = Field(default="interest-monitor", description="Process name")
    version: str = Field(default="v0.1.0", description="Release version")


class CaptureConfig(BaseModel):
    """Capture device configuration."""

    device: Union[int, str] = Field(
        default=0,
        description="Camera index, device path, or video file/URL",
    )
    width: int = Field(default=1280, gt=0, description="Frame width in pixels")
    height: int = Field(default=720, gt=0, description="Frame height in pixels")
    fourcc: str = Field(
        default="MJPG",
        min_length=4,
        max_length=4,
        description="Pixel format requested from the device",
    )
    fps: float = Field(default=5.0, gt=0, description="Requested capture rate")
    frame_step: int = Field(
        default=5,
        ge=1,
        description="Keep one captured frame out of every N",
    )
    buffer_count: int = Field(
        default=4,
        ge=1,
        description="Driver-side capture buffers",
    )
    resize: bool = Field(
        default=True,
        description="Resize frames the device delivers at another resolution",
    )
    skip_errors: bool = Field(
        default=False,
        description="Skip frames that fail to read instead of stopping",
    )
    max_consecutive_errors: int = Field(
        default=10,
        ge=1,
        description="Consecutive skipped frames before giving up",
    )


class ModelConfig(BaseModel):
    """Temporal background model configuration."""

    window: int = Field(
        default=5,
        gt=0,
        description="Number of recent frames averaged into the background",
    )
    cutoff: float = Field(
        default=25.0,
        ge=0,
        description="Brightening above the background that counts as change",
    )
    mask_weight: int = Field(
        default=10,
        ge=1,
        le=255,
        description="Value written into changed mask cells",
    )


class ObservabilityConfig(BaseModel):
    """Debug output configuration."""

    dump_enabled: bool = Field(
        default=False,
        description="Write the threshold mask of every frame to disk",
    )
    dump_dir: str = Field(default=".", description="Directory for mask images")
    dump_prefix: str = Field(default="original", description="Mask filename prefix")
    log_every_n_frames: int = Field(
        default=1,
        ge=1,
        description="Interval between interest log lines",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the interest monitor.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    agent: AgentConfig = Field(default_factory=AgentConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/etc/interest_monitor/config.yaml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _parse_device(value: str) -> Union[int, str]:
    """Camera indices are numeric; anything else is a path or URL."""
    return int(value) if value.isdigit() else value


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Capture settings
    if env_device := os.environ.get("INTEREST_DEVICE"):
        config_data.setdefault("capture", {})["device"] = _parse_device(env_device)
    if env_width := os.environ.get("INTEREST_WIDTH"):
        config_data.setdefault("capture", {})["width"] = int(env_width)
    if env_height := os.environ.get("INTEREST_HEIGHT"):
        config_data.setdefault("capture", {})["height"] = int(env_height)
    if env_fps := os.environ.get("INTEREST_FPS"):
        config_data.setdefault("capture", {})["fps"] = float(env_fps)
    if env_step := os.environ.get("INTEREST_FRAME_STEP"):
        config_data.setdefault("capture", {})["frame_step"] = int(env_step)

    # Model settings
    if env_window := os.environ.get("INTEREST_WINDOW"):
        config_data.setdefault("model", {})["window"] = int(env_window)
    if env_cutoff := os.environ.get("INTEREST_CUTOFF"):
        config_data.setdefault("model", {})["cutoff"] = float(env_cutoff)

    # Debug output
    if env_dump := os.environ.get("INTEREST_DUMP_ENABLED"):
        config_data.setdefault("observability", {})["dump_enabled"] = _parse_bool(env_dump)
    if env_dump_dir := os.environ.get("INTEREST_DUMP_DIR"):
        config_data.setdefault("observability", {})["dump_dir"] = env_dump_dir

    # Logging settings
    if env_log := os.environ.get("INTEREST_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        force=True,
    )
