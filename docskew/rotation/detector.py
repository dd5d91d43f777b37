"""Rotation detection and correction entry point.

Wires decoding, preprocessing, the angle estimators, candidate fusion and
the corrective rotation together. The public call never raises: any failure
yields an unrotated result with zero confidence so downstream OCR can still
try the original image.
"""

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from docskew.estimators.base import AngleCandidate, EstimationContext
from docskew.estimators.fusion import NO_METHOD, run_estimators, select_best_rotation
from docskew.imaging.surface import ImageSource, ImageSurface, RawImage
from docskew.preprocessing.pipeline import PreprocessingPipeline
from docskew.utils.config import ProcessingOptions
from docskew.utils.logger import get_logger

from .transform import MIN_ROTATION_DEGREES, rotate_image

logger = get_logger(__name__)

OptionsOverride = ProcessingOptions | Mapping[str, Any] | None


@dataclass
class RotationResult:
    """Outcome of one detection call.

    ``corrected_image`` and ``original_image`` use the caller's
    representation (bytes, base64 or data URL). ``original_image`` is always
    the object that was passed in. ``error`` is set only when the call
    degraded because of a failure.
    """

    angle: float
    confidence: float
    method: str
    corrected_image: ImageSource
    original_image: ImageSource
    processing_time_ms: int
    candidates: list[AngleCandidate] = field(default_factory=list)
    error: str | None = None

    def summary(self) -> dict[str, object]:
        """JSON-friendly diagnostics without the image payloads."""
        return {
            "angle": self.angle,
            "confidence": round(self.confidence, 4),
            "method": self.method,
            "processing_time_ms": self.processing_time_ms,
            "candidates": [
                {
                    "method": str(c.method),
                    "angle": c.angle,
                    "confidence": round(c.confidence, 4),
                }
                for c in self.candidates
            ],
        }


def _elapsed_ms(start: float) -> int:
    return int(round((time.perf_counter() - start) * 1000))


class RotationDetector:
    """Detects document skew and produces a corrected image.

    Holds only immutable default options, so one instance can serve
    concurrent callers; every call acquires its own image surface and
    buffers.

    Args:
        defaults: Options used when a call does not override them.
    """

    def __init__(self, defaults: ProcessingOptions | None = None) -> None:
        self.defaults = defaults or ProcessingOptions()

    def detect_rotation(
        self, image: ImageSource, options: OptionsOverride = None
    ) -> tuple[AngleCandidate | None, list[AngleCandidate]]:
        """Estimate the skew of an image without correcting it.

        Args:
            image: Encoded image as bytes, base64 or a data URL.
            options: Partial overrides of the default options.

        Returns:
            Tuple of (winning candidate or None, all candidates).

        Raises:
            ImageDecodeError: If the image cannot be decoded.
            pydantic.ValidationError: If the options are invalid.
        """
        config = self.defaults.merged(options)
        with ImageSurface(image) as surface:
            return self._estimate(surface.raw, config)

    def detect_and_correct_rotation(
        self, image: ImageSource, options: OptionsOverride = None
    ) -> RotationResult:
        """Detect skew and return the image rotated upright.

        Args:
            image: Encoded image as bytes, base64 or a data URL.
            options: Partial overrides of the default options.

        Returns:
            Rotation result; on any failure angle and confidence are 0,
            method is ``"none"`` and the corrected image is the input.
        """
        start = time.perf_counter()
        try:
            config = self.defaults.merged(options)
            with ImageSurface(image) as surface:
                raw = surface.raw
                best, candidates = self._estimate(raw, config)
                angle = best.angle if best else 0.0
                if abs(angle) < MIN_ROTATION_DEGREES:
                    corrected = image
                else:
                    corrected = surface.encode(rotate_image(raw.pixels, angle))
        except Exception as exc:
            logger.error("Rotation detection failed: %s", exc)
            return RotationResult(
                angle=0.0,
                confidence=0.0,
                method=NO_METHOD,
                corrected_image=image,
                original_image=image,
                processing_time_ms=_elapsed_ms(start),
                error=str(exc) or type(exc).__name__,
            )

        result = RotationResult(
            angle=angle,
            confidence=best.confidence if best else 0.0,
            method=str(best.method) if best else NO_METHOD,
            corrected_image=corrected,
            original_image=image,
            processing_time_ms=_elapsed_ms(start),
            candidates=candidates,
        )
        logger.info(
            "Rotation %.1f degrees via %s (confidence %.3f) in %d ms",
            result.angle,
            result.method,
            result.confidence,
            result.processing_time_ms,
        )
        return result

    def _estimate(
        self, raw: RawImage, config: ProcessingOptions
    ) -> tuple[AngleCandidate | None, list[AngleCandidate]]:
        bitmap = PreprocessingPipeline(config).process(raw.pixels)
        candidates = run_estimators(EstimationContext(bitmap), config.detection_methods)
        return select_best_rotation(candidates), candidates


def detect_and_correct_rotation(
    image: ImageSource, options: OptionsOverride = None
) -> RotationResult:
    """Detect and correct skew with default options and a fresh detector."""
    return RotationDetector().detect_and_correct_rotation(image, options)
