"""Configuration management for the rotation engine.

Per-call processing options are validated pydantic models; application
defaults are loaded from YAML.
"""

import logging
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


class DetectionMethod(StrEnum):
    """Skew angle estimators that can be enabled per call."""

    PROJECTION = "projection"
    TEXT_ORIENTATION = "text-orientation"
    EDGE_DETECTION = "edge-detection"
    HOUGH = "hough"


# Hough is off by default: lowest reliability and it repeats the edge scan.
DEFAULT_METHODS: tuple[DetectionMethod, ...] = (
    DetectionMethod.PROJECTION,
    DetectionMethod.TEXT_ORIENTATION,
    DetectionMethod.EDGE_DETECTION,
)


class ProcessingOptions(BaseModel):
    """Options controlling preprocessing and angle estimation for one call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enable_binarization: bool = True
    threshold_value: int = Field(default=128, ge=0, le=255)
    enable_gaussian_blur: bool = True
    blur_radius: int = Field(default=1, ge=0)
    detection_methods: tuple[DetectionMethod, ...] = DEFAULT_METHODS

    @field_validator("detection_methods")
    @classmethod
    def _drop_duplicate_methods(
        cls, value: tuple[DetectionMethod, ...]
    ) -> tuple[DetectionMethod, ...]:
        return tuple(dict.fromkeys(value))

    def merged(
        self, overrides: "ProcessingOptions | Mapping[str, Any] | None"
    ) -> "ProcessingOptions":
        """Return a copy with ``overrides`` applied on top of these options.

        Args:
            overrides: Partial mapping of option names to values, or another
                options object whose explicitly set fields take precedence.

        Returns:
            A new validated options object.

        Raises:
            pydantic.ValidationError: If an override is unknown or invalid.
        """
        if overrides is None:
            return self
        if isinstance(overrides, ProcessingOptions):
            overrides = overrides.model_dump(exclude_unset=True)
        return ProcessingOptions(**{**self.model_dump(), **dict(overrides)})


class AppConfig(BaseModel):
    """Top-level application configuration."""

    rotation: ProcessingOptions = Field(default_factory=ProcessingOptions)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
